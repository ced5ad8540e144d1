"""Shared fixtures: in-memory database, mock-mode Flow client, app + client."""

import pytest
from fastapi.testclient import TestClient

from flowgenie.config import Settings
from flowgenie.database import create_db_and_tables, make_engine
from flowgenie.main import create_app
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.auth import create_access_token
from flowgenie.services.executor import ActionExecutor
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.services.flow_client import FlowClient
from flowgenie.services.performance import PerformanceTracker
from flowgenie.services.user_store import UserStore

TEST_SECRET = "test-secret"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        jwt_secret=TEST_SECRET,
        flow_mock_mode=True,
        flow_timeout_seconds=5.0,
        interpreter="keyword",
        environment="test",
    )


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def agents(engine) -> AgentRegistry:
    return AgentRegistry(engine)


@pytest.fixture
def users(engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def flow_client() -> FlowClient:
    return FlowClient(access_node="https://mock", mock_mode=True)


@pytest.fixture
def actions(flow_client) -> ActionRegistry:
    return ActionRegistry(flow_client)


@pytest.fixture
def tracker(agents) -> PerformanceTracker:
    return PerformanceTracker(agents)


@pytest.fixture
def executor(agents, actions, tracker) -> ActionExecutor:
    return ActionExecutor(agents, actions, tracker, timeout=5.0)


@pytest.fixture
def agent(agents):
    return agents.create(
        owner_id="user_1",
        name="Top Shot Hunter",
        description="Buys undervalued NBA moments",
        prompt="Only buy common moments under $50",
    )


@pytest.fixture
def app(test_settings, flow_client):
    return create_app(settings=test_settings, flow_client=flow_client)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def bearer(test_settings):
    """Build an Authorization header for an arbitrary user id."""

    def _bearer(user_id: str = "user_1", email: str = "owner@example.com", flow_address: str | None = None) -> dict:
        token = create_access_token(test_settings, user_id=user_id, email=email, flow_address=flow_address)
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def auth_headers(bearer) -> dict:
    return bearer()


@pytest.fixture
def other_headers(bearer) -> dict:
    return bearer("user_2", "other@example.com")
