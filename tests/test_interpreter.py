"""Tests for command interpretation: keyword rules, prompt building, completion parsing."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import APIConnectionError

from flowgenie.errors import ExecutionError, InvalidFormatError, NotFoundError
from flowgenie.schemas.command import MarketItem
from flowgenie.services.interpreter import (
    CompletionInterpreter,
    KeywordInterpreter,
    build_system_prompt,
    parse_completion,
)
from flowgenie.utils.constants import DEFAULT_COLLECTION_ADDRESS, DEFAULT_REASONING, TOPSHOT_MARKET_ADDRESS


@pytest.fixture
def keyword(agents, actions) -> KeywordInterpreter:
    return KeywordInterpreter(agents, actions)


# ---------------------------------------------------------------------------
# 1. Keyword rules
# ---------------------------------------------------------------------------

class TestKeywordRules:
    @pytest.mark.asyncio
    async def test_buy_nba(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "Buy NBA moments under $50")
        assert cmd.type == "buy"
        assert cmd.confidence == 0.85
        assert cmd.parameters == {"nftId": "12345", "price": 45.50, "marketplaceAddress": TOPSHOT_MARKET_ADDRESS}

    @pytest.mark.asyncio
    async def test_buy_topshot(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "buy a topshot moment")
        assert cmd.type == "buy"

    @pytest.mark.asyncio
    async def test_sell_nft(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "SELL my NFT")
        assert cmd.type == "sell"
        assert cmd.confidence == 0.75
        assert cmd.parameters["nftId"] == "67890"
        assert cmd.parameters["price"] == 125.00

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["analyze the market", "how is my portfolio"])
    async def test_analyze(self, keyword, agent, text):
        [cmd] = await keyword.interpret(agent.id, text)
        assert cmd.type == "analyze"
        assert cmd.confidence == 0.90
        assert cmd.parameters["collectionAddress"] == DEFAULT_COLLECTION_ADDRESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["schedule weekly buys", "set up a recurring trade"])
    async def test_schedule(self, keyword, agent, text):
        [cmd] = await keyword.interpret(agent.id, text)
        assert cmd.type == "schedule"
        assert cmd.confidence == 0.80
        assert cmd.parameters == {"interval": "0 9 * * *", "action": "buy", "amount": 50}

    @pytest.mark.asyncio
    async def test_fallback_is_analyze(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "what should I do today?")
        assert cmd.type == "analyze"
        assert cmd.confidence == 0.70

    @pytest.mark.asyncio
    async def test_first_rule_wins(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "buy nba and sell nft then analyze")
        assert cmd.type == "buy"

    @pytest.mark.asyncio
    async def test_buy_without_collection_does_not_match_buy(self, keyword, agent):
        [cmd] = await keyword.interpret(agent.id, "buy something")
        assert cmd.type == "analyze"

    @pytest.mark.asyncio
    async def test_unknown_agent(self, keyword):
        with pytest.raises(NotFoundError):
            await keyword.interpret("agent_missing", "buy nba")


# ---------------------------------------------------------------------------
# 2. System prompt
# ---------------------------------------------------------------------------

class TestSystemPrompt:
    def test_includes_agent_and_actions(self, agent, actions):
        prompt = build_system_prompt(agent, actions)
        assert agent.name in prompt
        assert agent.prompt in prompt
        assert "Max Trade Amount: $100.0" in prompt
        for action_id in ("nft_purchase", "nft_sale", "portfolio_check", "defi_action"):
            assert action_id in prompt
        assert "No current market data available" in prompt

    def test_includes_market_data(self, agent, actions):
        items = [MarketItem.model_validate({
            "nftId": 1, "name": "LeBron James - The King Dunk", "price": 45.5,
            "rarity": "Common", "series": "Series 3", "set": "Base Set",
        })]
        prompt = build_system_prompt(agent, actions, items)
        assert "LeBron James - The King Dunk (ID: 1): $45.5 (Common, Series 3)" in prompt


# ---------------------------------------------------------------------------
# 3. Completion parsing
# ---------------------------------------------------------------------------

class TestParseCompletion:
    def test_extracts_array_from_prose(self):
        text = 'Sure, here you go:\n[{"type": "buy", "parameters": {"nftId": "1"}, "confidence": 0.6, "reasoning": "cheap"}]\nGood luck!'
        [cmd] = parse_completion(text)
        assert cmd.type == "buy"
        assert cmd.parameters == {"nftId": "1"}
        assert cmd.confidence == 0.6
        assert cmd.reasoning == "cheap"

    def test_defaults_and_clamping(self):
        cmds = parse_completion('[{"type": "analyze"}, {"type": "sell", "confidence": 4}, {"type": "stop", "confidence": -1}]')
        assert cmds[0].confidence == 0.5
        assert cmds[0].reasoning == DEFAULT_REASONING
        assert cmds[0].parameters == {}
        assert cmds[1].confidence == 1.0
        assert cmds[2].confidence == 0.0

    def test_explicit_zero_confidence_is_kept(self):
        [cmd] = parse_completion('[{"type": "analyze", "confidence": 0}]')
        assert cmd.confidence == 0.0

    @pytest.mark.parametrize("text", [
        "",
        "I cannot help with that.",
        "[not json]",
        "[1, 2, 3]",
        '[{"type": "buy", "confidence": "very"}]',
    ])
    def test_bad_output(self, text):
        with pytest.raises(InvalidFormatError):
            parse_completion(text)


# ---------------------------------------------------------------------------
# 4. Completion-backed interpreter
# ---------------------------------------------------------------------------

def _completion(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _make_openai(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create
    return client


class TestCompletionInterpreter:
    @pytest.mark.asyncio
    async def test_sends_prompt_and_parses(self, agents, actions, agent):
        create = AsyncMock(return_value=_completion('[{"type": "analyze", "parameters": {}, "confidence": 0.9}]'))
        interpreter = CompletionInterpreter(agents, actions, _make_openai(create), model="gpt-4o-mini")

        [cmd] = await interpreter.interpret(agent.id, "check my portfolio")

        assert cmd.type == "analyze"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"][0]["role"] == "system"
        assert agent.prompt in kwargs["messages"][0]["content"]
        assert kwargs["messages"][1] == {"role": "user", "content": "check my portfolio"}

    @pytest.mark.asyncio
    async def test_empty_array_is_invalid(self, agents, actions, agent):
        create = AsyncMock(return_value=_completion("[]"))
        interpreter = CompletionInterpreter(agents, actions, _make_openai(create), model="m")
        with pytest.raises(InvalidFormatError):
            await interpreter.interpret(agent.id, "anything")

    @pytest.mark.asyncio
    async def test_provider_error_becomes_execution_error(self, agents, actions, agent):
        create = AsyncMock(side_effect=APIConnectionError(request=MagicMock()))
        interpreter = CompletionInterpreter(agents, actions, _make_openai(create), model="m")
        with pytest.raises(ExecutionError):
            await interpreter.interpret(agent.id, "anything")

    @pytest.mark.asyncio
    async def test_unknown_agent_skips_provider(self, agents, actions):
        create = AsyncMock()
        interpreter = CompletionInterpreter(agents, actions, _make_openai(create), model="m")
        with pytest.raises(NotFoundError):
            await interpreter.interpret("agent_missing", "anything")
        create.assert_not_called()
