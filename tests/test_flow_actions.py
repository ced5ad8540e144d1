"""Tests for the Flow action catalog and transaction history."""

from unittest.mock import AsyncMock

import pytest

from flowgenie.errors import ConfigError, ExecutionError, NotFoundError, ValidationError
from flowgenie.services import cadence
from flowgenie.services.flow_actions import ActionRegistry, FlowAction
from flowgenie.services.flow_client import FlowClient, TransactionResult
from flowgenie.utils.constants import CONTRACT_ADDRESSES, TOPSHOT_MARKET_ADDRESS

TRADE = {"nftId": "12345", "price": 45.5, "marketplaceAddress": TOPSHOT_MARKET_ADDRESS}


class TestCatalog:
    def test_builtin_actions(self, actions):
        assert [a["id"] for a in actions.catalog()] == ["nft_purchase", "nft_sale", "portfolio_check", "defi_action"]

    def test_describe_has_parameter_kinds(self, actions):
        purchase = actions.get("nft_purchase").describe()
        assert purchase["parameters"] == {"marketplaceAddress": "string", "nftId": "string", "price": "number"}

    def test_duplicate_registration_rejected(self, actions):
        existing = actions.get("nft_sale")
        with pytest.raises(ValueError):
            actions.register(FlowAction(
                id=existing.id, name="x", description="x", parameters={},
                params_model=existing.params_model, execute=existing.execute,
            ))


class TestExecuteAction:
    @pytest.mark.asyncio
    async def test_unknown_action_checked_first(self, actions, flow_client):
        flow_client.submit_transaction = AsyncMock()
        with pytest.raises(NotFoundError):
            await actions.execute_action("nft_burn", {"nonsense": True})
        flow_client.submit_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_parameters(self, actions, flow_client):
        flow_client.submit_transaction = AsyncMock()
        with pytest.raises(ValidationError):
            await actions.execute_action("nft_purchase", {"nftId": "12345"})
        flow_client.submit_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_purchase_submits_encoded_arguments(self, actions, flow_client):
        flow_client.submit_transaction = AsyncMock(
            return_value=TransactionResult(success=True, transaction_id="abc", status="SEALED")
        )
        result = await actions.execute_action("nft_purchase", TRADE)

        assert result["transactionId"] == "abc"
        _, args = flow_client.submit_transaction.call_args.args
        assert args == [
            {"type": "Address", "value": TOPSHOT_MARKET_ADDRESS},
            {"type": "UInt64", "value": "12345"},
            {"type": "UFix64", "value": "45.50000000"},
        ]

    @pytest.mark.asyncio
    async def test_failed_transaction(self, actions, flow_client):
        flow_client.submit_transaction = AsyncMock(return_value=TransactionResult(success=False, error="rejected"))
        with pytest.raises(ExecutionError):
            await actions.execute_action("nft_sale", TRADE)
        assert actions.transactions() == ([], 0)

    @pytest.mark.asyncio
    async def test_portfolio_returns_moments(self, actions, flow_client):
        flow_client.run_query = AsyncMock(return_value=[{"id": 1}])
        result = await actions.execute_action("portfolio_check", {"userAddress": "0x01"})
        assert result["portfolio"] == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_defi_makes_no_external_call(self, actions, flow_client):
        flow_client.submit_transaction = AsyncMock()
        flow_client.run_query = AsyncMock()
        result = await actions.execute_action(
            "defi_action", {"strategy": "yield", "amount": 10, "tokenAddress": "0x02"}
        )
        assert result["success"] is True
        assert result["strategy"] == "yield"
        flow_client.submit_transaction.assert_not_called()
        flow_client.run_query.assert_not_called()


class TestTransactionHistory:
    @pytest.mark.asyncio
    async def test_newest_first_with_paging(self, actions):
        await actions.execute_action("nft_purchase", TRADE)
        await actions.execute_action("nft_sale", {**TRADE, "nftId": "67890", "price": 125})
        await actions.execute_action("portfolio_check", {"userAddress": "0x01"})

        page, total = actions.transactions()
        assert total == 2
        assert [t["type"] for t in page] == ["nft_sale", "nft_purchase"]
        assert page[0]["nftId"] == "67890"
        assert page[0]["amount"] == 125

        page, total = actions.transactions(limit=1, offset=1)
        assert total == 2
        assert [t["type"] for t in page] == ["nft_purchase"]


class TestContractAddresses:
    @pytest.mark.parametrize("network", ["testnet", "mainnet"])
    def test_render_uses_network_addresses(self, network):
        script = cadence.render(cadence.FLOW_BALANCE, network)
        addresses = CONTRACT_ADDRESSES[network]
        assert f"import FungibleToken from {addresses['FungibleToken']}" in script
        assert f"import FlowToken from {addresses['FlowToken']}" in script
        assert "$" not in script

    @pytest.mark.asyncio
    @pytest.mark.parametrize("network", ["testnet", "mainnet"])
    async def test_purchase_imports_match_client_network(self, network):
        flow = FlowClient(access_node="https://mock", network=network, mock_mode=True)
        flow.submit_transaction = AsyncMock(return_value=TransactionResult(success=True, transaction_id="abc"))
        await ActionRegistry(flow).execute_action("nft_purchase", TRADE)

        template, _ = flow.submit_transaction.call_args.args
        addresses = CONTRACT_ADDRESSES[network]
        assert f"import TopShot from {addresses['TopShot']}" in template
        assert f"import NonFungibleToken from {addresses['NonFungibleToken']}" in template

    @pytest.mark.asyncio
    async def test_portfolio_script_matches_client_network(self):
        flow = FlowClient(access_node="https://mock", network="testnet", mock_mode=True)
        flow.run_query = AsyncMock(return_value=None)
        await ActionRegistry(flow).execute_action("portfolio_check", {"userAddress": "0x01"})

        script, _ = flow.run_query.call_args.args
        assert f"import TopShot from {CONTRACT_ADDRESSES['testnet']['TopShot']}" in script

    def test_unknown_network_fails_at_construction(self):
        flow = FlowClient(access_node="https://mock", network="emulator", mock_mode=True)
        with pytest.raises(ConfigError):
            ActionRegistry(flow)
