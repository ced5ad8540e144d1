"""Shared API dependencies.

Services live on ``app.state`` (built by ``create_app``); handlers get them
through these functions.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from flowgenie.config import Settings
from flowgenie.models.agent import Agent
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.auth import decode_access_token
from flowgenie.services.executor import ActionExecutor
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.services.flow_client import FlowClient
from flowgenie.services.interpreter import CommandInterpreter
from flowgenie.services.user_store import UserStore

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: str
    email: str
    flow_address: str | None = None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_agent_registry(request: Request) -> AgentRegistry:
    return request.app.state.agents


def get_user_store(request: Request) -> UserStore:
    return request.app.state.users


def get_action_registry(request: Request) -> ActionRegistry:
    return request.app.state.actions


def get_flow_client(request: Request) -> FlowClient:
    return request.app.state.flow


def get_interpreter(request: Request) -> CommandInterpreter:
    return request.app.state.interpreter


def get_executor(request: Request) -> ActionExecutor:
    return request.app.state.executor


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Validate the bearer JWT. Missing token is 401, a bad one 403."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )
    claims = decode_access_token(settings, credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )
    return CurrentUser(id=claims["id"], email=claims.get("email", ""), flow_address=claims.get("flowAddress"))


def get_owned_agent(
    agent_id: str,
    user: CurrentUser = Depends(get_current_user),
    agents: AgentRegistry = Depends(get_agent_registry),
) -> Agent:
    """Load an agent and check it belongs to the caller."""
    agent = agents.get(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    if agent.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return agent
