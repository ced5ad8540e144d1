"""Validate and run structured agent commands.

A command moves through received -> validated -> dispatched and ends in
completed or failed. Commands that fail validation or the agent's trade
policy never reach dispatch and are not counted as trades; every
dispatched command is recorded by the performance tracker exactly once.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from flowgenie.errors import (
    ExecutionError,
    FlowGenieError,
    NotFoundError,
    PolicyViolationError,
    UnsupportedCommandError,
    ValidationError,
)
from flowgenie.models.agent import Agent
from flowgenie.schemas.command import (
    PARAMETER_MODELS,
    AgentCommand,
    AnalyzeParameters,
    BuyParameters,
    CommandType,
    ScheduleParameters,
    SellParameters,
    StopParameters,
)
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.flow_actions import ActionRegistry, format_validation_error
from flowgenie.services.performance import PerformanceTracker
from flowgenie.utils.ids import generate_id

logger = logging.getLogger(__name__)


class CommandState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CommandExecution:
    agent_id: str
    command: AgentCommand
    state: CommandState = CommandState.RECEIVED
    result: dict[str, Any] | None = None
    error: str | None = None
    transitions: list[CommandState] = field(default_factory=lambda: [CommandState.RECEIVED])


def validate_command(command: AgentCommand):
    """Narrow the open parameter map into the model for the command's type."""
    try:
        command_type = CommandType(command.type)
    except ValueError:
        raise UnsupportedCommandError(command.type) from None

    model = PARAMETER_MODELS[command_type]
    try:
        return model.model_validate(command.parameters)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Missing required parameters for {command_type.value} command: {format_validation_error(e)}"
        ) from e


class ActionExecutor:
    def __init__(
        self,
        agents: AgentRegistry,
        actions: ActionRegistry,
        tracker: PerformanceTracker,
        timeout: float | None = 30.0,
    ):
        self.agents = agents
        self.actions = actions
        self.tracker = tracker
        self.timeout = timeout

    def _advance(self, execution: CommandExecution, state: CommandState):
        logger.debug(f"Agent {execution.agent_id} {execution.command.type}: {execution.state.value} -> {state.value}")
        execution.state = state
        execution.transitions.append(state)

    async def execute(self, agent_id: str, command: AgentCommand) -> dict:
        """Run one command for an agent and return the action's result."""
        execution = await self.run(agent_id, command)
        return execution.result

    async def run(self, agent_id: str, command: AgentCommand) -> CommandExecution:
        """Like ``execute`` but returns the full execution record."""
        execution = CommandExecution(agent_id=agent_id, command=command)
        try:
            agent = self.agents.get(agent_id)
            if agent is None:
                raise NotFoundError(f"Agent {agent_id} not found")

            params = validate_command(command)
            self._advance(execution, CommandState.VALIDATED)

            self._check_policy(agent, params)
            self._advance(execution, CommandState.DISPATCHED)

            execution.result = await self._dispatch(agent, command, params)
        except FlowGenieError as e:
            execution.error = e.message
            self._fail(execution)
            raise
        except Exception as e:
            execution.error = str(e)
            self._fail(execution)
            raise ExecutionError(f"{command.type} command failed: {e}") from e

        self.tracker.record(agent_id, command, execution.result)
        self._advance(execution, CommandState.COMPLETED)
        logger.info(f"Agent {agent_id} {command.type} completed: success={execution.result.get('success')}")
        return execution

    def _fail(self, execution: CommandExecution):
        if execution.state == CommandState.DISPATCHED:
            # Dispatched attempts count as trades even when the action fails
            self.tracker.record(execution.agent_id, execution.command, {"success": False, "error": execution.error})
        self._advance(execution, CommandState.FAILED)
        logger.warning(f"Agent {execution.agent_id} {execution.command.type} failed: {execution.error}")

    @staticmethod
    def _check_policy(agent: Agent, params):
        match params:
            case BuyParameters(price=price) if price > agent.max_trade_amount:
                raise PolicyViolationError(
                    f"Price {price} exceeds max trade amount {agent.max_trade_amount}"
                )

    async def _dispatch(self, agent: Agent, command: AgentCommand, params) -> dict:
        match params:
            case BuyParameters():
                return await self.call_action("nft_purchase", params)
            case SellParameters():
                return await self.call_action("nft_sale", params)
            case AnalyzeParameters():
                return await self.call_action("portfolio_check", params)
            case ScheduleParameters():
                # Nothing is scheduled yet; the id only identifies the request
                return {
                    "success": True,
                    "message": "Scheduled transaction created",
                    "scheduleId": generate_id("schedule"),
                    "parameters": dict(command.parameters),
                }
            case StopParameters():
                self.agents.deactivate(agent.id)
                return {"success": True, "message": "Agent stopped successfully"}
            case _:
                raise UnsupportedCommandError(command.type)

    async def call_action(self, action_id: str, params) -> dict:
        """Run a registered action, bounded by the configured timeout."""
        try:
            return await asyncio.wait_for(
                self.actions.execute_action(action_id, params), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ExecutionError(f"Action {action_id} timed out after {self.timeout}s") from e
