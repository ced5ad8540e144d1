"""Agent API: CRUD, natural-language commands, execution and performance."""

from fastapi import APIRouter, Depends, HTTPException

from flowgenie.api.deps import (
    CurrentUser,
    get_agent_registry,
    get_current_user,
    get_executor,
    get_interpreter,
    get_owned_agent,
)
from flowgenie.models.agent import Agent
from flowgenie.schemas.agent import AgentCreate, AgentRead, AgentUpdate, PerformanceRead, PublicAgentRead
from flowgenie.schemas.command import CommandRequest, ExecuteRequest
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.executor import ActionExecutor
from flowgenie.services.interpreter import CommandInterpreter

router = APIRouter(prefix="/api/agents", tags=["agents"])


def _require_active(agent: Agent):
    if not agent.is_active:
        raise HTTPException(status_code=400, detail="Agent is not active")


@router.get("/marketplace/public")
def public_agents(agents: AgentRegistry = Depends(get_agent_registry)):
    """Active agents without prompts, owners or settings."""
    listing = [PublicAgentRead.from_agent(a) for a in agents.list_public()]
    return {"success": True, "agents": listing}


@router.get("")
def list_agents(
    user: CurrentUser = Depends(get_current_user),
    agents: AgentRegistry = Depends(get_agent_registry),
):
    return {"success": True, "agents": [AgentRead.from_agent(a) for a in agents.list_by_owner(user.id)]}


@router.post("", status_code=201)
def create_agent(
    data: AgentCreate,
    user: CurrentUser = Depends(get_current_user),
    agents: AgentRegistry = Depends(get_agent_registry),
):
    agent = agents.create(
        owner_id=user.id,
        name=data.name,
        description=data.description,
        prompt=data.prompt,
        settings_overrides=data.settings,
    )
    return {"success": True, "agent": AgentRead.from_agent(agent)}


@router.get("/{agent_id}")
def get_agent(agent: Agent = Depends(get_owned_agent)):
    return {"success": True, "agent": AgentRead.from_agent(agent)}


@router.put("/{agent_id}")
def update_agent(
    data: AgentUpdate,
    agent: Agent = Depends(get_owned_agent),
    agents: AgentRegistry = Depends(get_agent_registry),
):
    fields = data.model_dump(exclude_unset=True, exclude={"settings"})
    if data.settings is not None:
        fields["settings"] = data.settings
    updated = agents.update(agent.id, fields)
    return {"success": True, "agent": AgentRead.from_agent(updated)}


@router.delete("/{agent_id}")
def delete_agent(
    agent: Agent = Depends(get_owned_agent),
    agents: AgentRegistry = Depends(get_agent_registry),
):
    # Logical delete; the record stays readable
    agents.deactivate(agent.id)
    return {"success": True, "message": "Agent deleted successfully"}


@router.post("/{agent_id}/command")
async def interpret_command(
    body: CommandRequest,
    agent: Agent = Depends(get_owned_agent),
    interpreter: CommandInterpreter = Depends(get_interpreter),
):
    """Translate a natural-language command into structured commands."""
    _require_active(agent)
    commands = await interpreter.interpret(agent.id, body.command, body.market_data)
    return {"success": True, "commands": commands}


@router.post("/{agent_id}/execute")
async def execute_command(
    body: ExecuteRequest,
    agent: Agent = Depends(get_owned_agent),
    executor: ActionExecutor = Depends(get_executor),
):
    _require_active(agent)
    result = await executor.execute(agent.id, body.to_command())
    return {"success": True, "result": result}


@router.get("/{agent_id}/performance")
def agent_performance(agent: Agent = Depends(get_owned_agent)):
    return {"success": True, "performance": PerformanceRead.from_agent(agent)}
