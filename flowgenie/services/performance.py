"""Per-agent trade counters, updated after every dispatched command."""

import logging
from datetime import datetime, timezone

from flowgenie.models.agent import Agent
from flowgenie.schemas.command import AgentCommand
from flowgenie.services.agent_registry import AgentRegistry

logger = logging.getLogger(__name__)


def compute_win_rate(successful: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(max(successful / total, 0.0), 1.0)


class PerformanceTracker:
    def __init__(self, agents: AgentRegistry):
        self.agents = agents

    def record(self, agent_id: str, command: AgentCommand, result: dict | None) -> Agent | None:
        """Count one trade attempt. Best effort: a vanished agent is logged, not raised."""
        succeeded = bool(result and result.get("success"))
        profit = (result or {}).get("profit")

        def _apply(agent: Agent):
            now = datetime.now(timezone.utc)
            agent.total_trades += 1
            agent.last_trade_at = now
            if succeeded:
                agent.successful_trades += 1
                if profit:
                    agent.total_profit += float(profit)
            agent.win_rate = compute_win_rate(agent.successful_trades, agent.total_trades)
            agent.updated_at = now

        agent = self.agents.apply_performance(agent_id, _apply)
        if agent is None:
            logger.warning(f"Agent {agent_id} vanished before {command.type} could be recorded")
            return None

        logger.debug(
            f"Agent {agent_id} performance: {agent.successful_trades}/{agent.total_trades} "
            f"win_rate={agent.win_rate:.2f} profit={agent.total_profit:.2f}"
        )
        return agent
