"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from flowgenie import __version__
from flowgenie.config import Settings, settings as default_settings
from flowgenie.database import create_db_and_tables, make_engine
from flowgenie.errors import ConfigError
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.executor import ActionExecutor
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.services.flow_client import FlowClient
from flowgenie.services.interpreter import CommandInterpreter, CompletionInterpreter, KeywordInterpreter
from flowgenie.services.performance import PerformanceTracker
from flowgenie.services.user_store import UserStore
from flowgenie.utils.logging import setup_logging
from flowgenie.api import agents, flow, marketplace, system, users
from flowgenie.api.errors import register_exception_handlers

logger = logging.getLogger(__name__)


def build_interpreter(settings: Settings, agent_registry: AgentRegistry, actions: ActionRegistry) -> CommandInterpreter:
    if settings.interpreter == "keyword":
        return KeywordInterpreter(agent_registry, actions)
    if settings.interpreter == "completion":
        if not settings.openai_api_key:
            raise ConfigError("FG_OPENAI_API_KEY is required for the completion interpreter")
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.flow_timeout_seconds,
        )
        return CompletionInterpreter(agent_registry, actions, client, settings.openai_model)
    raise ConfigError(f"Unknown interpreter: {settings.interpreter}")


def create_app(settings: Settings | None = None, flow_client: FlowClient | None = None) -> FastAPI:
    """Build the app and every service it uses.

    Stores and services are created here and attached to ``app.state``;
    nothing mutable lives at module level.
    """
    settings = settings or default_settings

    engine = make_engine(settings.database_url)
    create_db_and_tables(engine)

    flow_client = flow_client or FlowClient(
        access_node=settings.flow_access_node,
        network=settings.flow_network,
        mock_mode=settings.flow_mock_mode,
        timeout=settings.flow_timeout_seconds,
    )
    action_registry = ActionRegistry(flow_client)
    agent_registry = AgentRegistry(engine)
    tracker = PerformanceTracker(agent_registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        setup_logging(settings.log_level)
        mode = "mock" if flow_client.mock_mode else "live"
        logger.info(f"FlowGenie {__version__} starting ({settings.environment}, Flow {settings.flow_network}/{mode})")
        if not settings.jwt_secret:
            logger.warning("FG_JWT_SECRET is not set; authenticated routes will fail")

        yield

        await flow_client.close()

    app = FastAPI(
        title="FlowGenie",
        description="AI trading agents for the Flow NFT marketplace",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.flow = flow_client
    app.state.actions = action_registry
    app.state.agents = agent_registry
    app.state.users = UserStore(engine)
    app.state.tracker = tracker
    app.state.executor = ActionExecutor(
        agent_registry, action_registry, tracker, timeout=settings.flow_timeout_seconds
    )
    app.state.interpreter = build_interpreter(settings, agent_registry, action_registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, settings)

    # Mount routers
    app.include_router(system.router)
    app.include_router(users.router)
    app.include_router(agents.router)
    app.include_router(flow.router)
    app.include_router(marketplace.router)

    return app


app = create_app()
