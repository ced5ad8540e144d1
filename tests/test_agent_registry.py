"""Tests for the agent registry and the agent wire schemas."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from flowgenie.errors import NotFoundError
from flowgenie.schemas.agent import AgentCreate, AgentRead, PerformanceRead, PublicAgentRead
from flowgenie.schemas.command import AgentCommand


# ---------------------------------------------------------------------------
# 1. Creation defaults
# ---------------------------------------------------------------------------

class TestCreate:
    def test_defaults(self, agents):
        agent = agents.create("user_1", "Hunter", "desc", "prompt")
        assert agent.id.startswith("agent_")
        assert agent.is_active is True
        assert agent.max_trade_amount == 100.0
        assert agent.risk_tolerance == "medium"
        assert agent.trading_pairs == []
        assert agent.schedule is None
        assert agent.total_trades == 0
        assert agent.successful_trades == 0
        assert agent.total_profit == 0.0
        assert agent.win_rate == 0.0

    def test_settings_overrides_merge_over_defaults(self, agents):
        agent = agents.create(
            "user_1", "Hunter", "desc", "prompt",
            settings_overrides={"maxTradeAmount": 250, "tradingPairs": ["FLOW/USDC"]},
        )
        assert agent.max_trade_amount == 250
        assert agent.trading_pairs == ["FLOW/USDC"]
        assert agent.risk_tolerance == "medium"

    def test_ids_are_unique(self, agents):
        ids = {agents.create("user_1", f"A{i}", "d", "p").id for i in range(20)}
        assert len(ids) == 20

    def test_roundtrip_through_store(self, agents, agent):
        stored = agents.get(agent.id)
        assert stored.name == agent.name
        assert stored.prompt == agent.prompt


# ---------------------------------------------------------------------------
# 2. Lookup and listing
# ---------------------------------------------------------------------------

class TestLookup:
    def test_get_unknown_returns_none(self, agents):
        assert agents.get("agent_missing") is None

    def test_list_by_owner(self, agents):
        agents.create("user_1", "A", "d", "p")
        agents.create("user_1", "B", "d", "p")
        agents.create("user_2", "C", "d", "p")
        assert sorted(a.name for a in agents.list_by_owner("user_1")) == ["A", "B"]
        assert [a.name for a in agents.list_by_owner("user_2")] == ["C"]
        assert agents.list_by_owner("nobody") == []

    def test_public_listing_skips_inactive(self, agents):
        live = agents.create("user_1", "Live", "d", "p")
        gone = agents.create("user_1", "Gone", "d", "p")
        agents.deactivate(gone.id)
        assert [a.id for a in agents.list_public()] == [live.id]
        assert len(agents.list_all()) == 2


# ---------------------------------------------------------------------------
# 3. Updates
# ---------------------------------------------------------------------------

class TestUpdate:
    def test_partial_update_keeps_other_fields(self, agents, agent):
        updated = agents.update(agent.id, {"name": "Renamed"})
        assert updated.name == "Renamed"
        assert updated.description == agent.description
        assert updated.prompt == agent.prompt
        assert updated.updated_at >= agent.updated_at

    def test_settings_merge(self, agents, agent):
        agents.update(agent.id, {"settings": {"riskTolerance": "high"}})
        updated = agents.update(agent.id, {"settings": {"maxTradeAmount": 20}})
        assert updated.risk_tolerance == "high"
        assert updated.max_trade_amount == 20

    def test_unknown_fields_are_ignored(self, agents, agent):
        updated = agents.update(agent.id, {"user_id": "someone_else", "total_trades": 99})
        assert updated.user_id == "user_1"
        assert updated.total_trades == 0

    def test_update_unknown_raises(self, agents):
        with pytest.raises(NotFoundError):
            agents.update("agent_missing", {"name": "x"})

    def test_deactivate_is_logical(self, agents, agent):
        agents.deactivate(agent.id)
        stored = agents.get(agent.id)
        assert stored is not None
        assert stored.is_active is False


# ---------------------------------------------------------------------------
# 4. Wire schemas
# ---------------------------------------------------------------------------

class TestSchemas:
    def test_create_requires_non_blank_fields(self):
        with pytest.raises(ValidationError):
            AgentCreate(name="  ", description="d", prompt="p")
        with pytest.raises(ValidationError):
            AgentCreate.model_validate({"name": "n", "description": "d"})

    def test_create_rejects_non_positive_max_trade(self):
        with pytest.raises(ValidationError):
            AgentCreate.model_validate({"name": "n", "description": "d", "prompt": "p",
                                        "settings": {"maxTradeAmount": 0}})

    def test_read_nests_settings_and_performance(self, agent):
        data = AgentRead.from_agent(agent).model_dump(by_alias=True)
        assert data["userId"] == "user_1"
        assert data["settings"]["maxTradeAmount"] == 100.0
        assert data["performance"]["totalTrades"] == 0

    def test_public_read_hides_private_fields(self, agent):
        data = PublicAgentRead.from_agent(agent).model_dump(by_alias=True)
        assert set(data) == {"id", "name", "description", "performance", "createdAt"}

    def test_performance_win_rate_is_derived(self, agent):
        agent.total_trades = 4
        agent.successful_trades = 3
        agent.win_rate = 7.0
        assert PerformanceRead.from_agent(agent).win_rate == 0.75


# ---------------------------------------------------------------------------
# 5. Concurrent access from worker threads
# ---------------------------------------------------------------------------

class TestConcurrency:
    def test_parallel_creates_are_all_stored(self, agents):
        def _create_batch(worker: int):
            return [agents.create(f"user_{worker}", f"A{worker}-{i}", "d", "p").id for i in range(40)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            batches = list(pool.map(_create_batch, range(8)))

        ids = {agent_id for batch in batches for agent_id in batch}
        assert len(ids) == 320
        assert len(agents.list_all()) == 320
        assert len(agents.list_by_owner("user_3")) == 40

    def test_parallel_records_are_all_counted(self, agents, tracker, agent):
        def _record_batch(_):
            for i in range(50):
                tracker.record(agent.id, AgentCommand(type="buy"), {"success": i % 2 == 0})

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(_record_batch, range(8)))

        stored = agents.get(agent.id)
        assert stored.total_trades == 400
        assert stored.successful_trades == 200
        assert stored.win_rate == 0.5
