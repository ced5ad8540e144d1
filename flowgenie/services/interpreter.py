"""Turn free-text commands into structured AgentCommands.

Two interchangeable implementations share the ``CommandInterpreter``
interface: a deterministic keyword matcher (the default) and one backed by
an OpenAI-compatible chat completion endpoint.
"""

import json
import logging
import re
from abc import ABC, abstractmethod

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from flowgenie.errors import ExecutionError, InvalidFormatError, NotFoundError
from flowgenie.models.agent import Agent
from flowgenie.schemas.command import AgentCommand, CommandType, MarketItem
from flowgenie.services.agent_registry import AgentRegistry
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.utils import constants as c

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def build_system_prompt(
    agent: Agent,
    actions: ActionRegistry,
    market_context: list[MarketItem] | None = None,
) -> str:
    available = "\n".join(
        f"- {a.id}: {a.description} (parameters: {json.dumps(a.parameters)})"
        for a in actions.all()
    )
    if market_context:
        market = "Current market data:\n" + "\n".join(
            f"- {item.name} (ID: {item.nft_id}): ${item.price} ({item.rarity}, {item.series})"
            for item in market_context
        )
    else:
        market = "No current market data available"

    return f"""You are FlowGenie, an AI agent for trading NFTs and managing portfolios on the Flow blockchain.

Agent Profile:
- Name: {agent.name}
- Description: {agent.description}
- Risk Tolerance: {agent.risk_tolerance}
- Max Trade Amount: ${agent.max_trade_amount}
- Custom Prompt: {agent.prompt}

Available Flow Actions:
{available}

{market}

Your task is to analyze user commands and generate appropriate trading actions. Always consider:
1. Risk management and position sizing
2. Market conditions and trends
3. Agent's performance history
4. User's risk tolerance

Respond with a JSON array of actions in this format:
[
  {{
    "type": "buy|sell|analyze|schedule|stop",
    "parameters": {{...}},
    "confidence": 0.0-1.0,
    "reasoning": "explanation of decision"
  }}
]

Be conservative with trades and always provide clear reasoning for your decisions."""


def parse_completion(text: str) -> list[AgentCommand]:
    """Extract the JSON command array from free-form completion text."""
    match = _JSON_ARRAY.search(text or "")
    if not match:
        raise InvalidFormatError("No valid JSON found in AI response")

    try:
        raw = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise InvalidFormatError(f"Invalid AI response format: {e}") from e

    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise InvalidFormatError("Invalid AI response format: expected a list of objects")

    try:
        return [
            AgentCommand(
                type=str(item.get("type", "")),
                parameters=item.get("parameters"),
                confidence=item.get("confidence"),
                reasoning=item.get("reasoning"),
            )
            for item in raw
        ]
    except PydanticValidationError as e:
        raise InvalidFormatError(f"Invalid AI response format: {e.error_count()} bad field(s)") from e


class CommandInterpreter(ABC):
    def __init__(self, agents: AgentRegistry, actions: ActionRegistry):
        self.agents = agents
        self.actions = actions

    def _load_agent(self, agent_id: str) -> Agent:
        agent = self.agents.get(agent_id)
        if agent is None:
            raise NotFoundError(f"Agent {agent_id} not found")
        return agent

    @abstractmethod
    async def interpret(
        self,
        agent_id: str,
        command_text: str,
        market_context: list[MarketItem] | None = None,
    ) -> list[AgentCommand]:
        """Map a command to one or more structured commands."""


class KeywordInterpreter(CommandInterpreter):
    """Deterministic keyword matcher. First matching rule wins."""

    async def interpret(
        self,
        agent_id: str,
        command_text: str,
        market_context: list[MarketItem] | None = None,
    ) -> list[AgentCommand]:
        agent = self._load_agent(agent_id)
        prompt = build_system_prompt(agent, self.actions, market_context)
        logger.debug(f"Interpreting for {agent.id} with context:\n{prompt}")

        commands = [self._match(command_text.lower())]
        logger.info(f"Agent {agent.id}: '{command_text}' -> {[cmd.type for cmd in commands]}")
        return commands

    @staticmethod
    def _match(text: str) -> AgentCommand:
        analyze_params = {
            "userAddress": c.DEMO_USER_ADDRESS,
            "collectionAddress": c.DEFAULT_COLLECTION_ADDRESS,
        }

        if "buy" in text and ("nba" in text or "topshot" in text):
            return AgentCommand(
                type=CommandType.BUY.value,
                parameters={
                    "nftId": c.DEMO_BUY_NFT_ID,
                    "price": c.DEMO_BUY_PRICE,
                    "marketplaceAddress": c.TOPSHOT_MARKET_ADDRESS,
                },
                confidence=0.85,
                reasoning="Found undervalued NBA Top Shot moment matching your criteria. "
                          "Current market price is favorable.",
            )
        if "sell" in text and "nft" in text:
            return AgentCommand(
                type=CommandType.SELL.value,
                parameters={
                    "nftId": c.DEMO_SELL_NFT_ID,
                    "price": c.DEMO_SELL_PRICE,
                    "marketplaceAddress": c.TOPSHOT_MARKET_ADDRESS,
                },
                confidence=0.75,
                reasoning="Current market conditions suggest this is a good time to sell for profit.",
            )
        if "analyze" in text or "portfolio" in text:
            return AgentCommand(
                type=CommandType.ANALYZE.value,
                parameters=analyze_params,
                confidence=0.90,
                reasoning="Analyzing your portfolio for optimization opportunities.",
            )
        if "schedule" in text or "recurring" in text:
            return AgentCommand(
                type=CommandType.SCHEDULE.value,
                parameters={
                    "interval": c.DEMO_SCHEDULE_INTERVAL,
                    "action": CommandType.BUY.value,
                    "amount": c.DEMO_SCHEDULE_AMOUNT,
                },
                confidence=0.80,
                reasoning="Setting up automated recurring trades based on your preferences.",
            )
        return AgentCommand(
            type=CommandType.ANALYZE.value,
            parameters=analyze_params,
            confidence=0.70,
            reasoning="Analyzing market conditions and your portfolio to determine best course of action.",
        )


class CompletionInterpreter(CommandInterpreter):
    """Asks a chat completion model for the command list."""

    def __init__(
        self,
        agents: AgentRegistry,
        actions: ActionRegistry,
        client: AsyncOpenAI,
        model: str,
        temperature: float = 0.3,
    ):
        super().__init__(agents, actions)
        self.client = client
        self.model = model
        self.temperature = temperature

    async def interpret(
        self,
        agent_id: str,
        command_text: str,
        market_context: list[MarketItem] | None = None,
    ) -> list[AgentCommand]:
        agent = self._load_agent(agent_id)
        system_prompt = build_system_prompt(agent, self.actions, market_context)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": command_text},
                ],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"Completion request failed for agent {agent.id}: {e}")
            raise ExecutionError(f"Completion request failed: {e}") from e

        content = response.choices[0].message.content or ""
        commands = parse_completion(content)
        if not commands:
            raise InvalidFormatError("AI response contained no commands")
        logger.info(f"Agent {agent.id}: completion -> {[cmd.type for cmd in commands]}")
        return commands
