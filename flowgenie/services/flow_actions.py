"""Registry of Flow actions the agents can invoke.

The catalog is fixed at construction. Each action validates its own
parameters and performs at most one call on the Flow client.
"""

import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError

from flowgenie.errors import ExecutionError, NotFoundError, ValidationError
from flowgenie.schemas.command import AnalyzeParameters, DefiParameters, TradeParameters
from flowgenie.services import cadence
from flowgenie.services.flow_client import FlowClient, cadence_arg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowAction:
    id: str
    name: str
    description: str
    parameters: dict[str, str]  # parameter name -> primitive kind
    params_model: type[BaseModel]
    execute: Callable[[Any], Awaitable[dict]]

    def describe(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_validation_error(e: PydanticValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "parameters"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class ActionRegistry:
    """Fixed catalog of Flow actions plus the history of submitted transactions."""

    def __init__(self, flow_client: FlowClient, history_limit: int = 500):
        self.flow = flow_client
        self._actions: dict[str, FlowAction] = {}
        self._history: deque[dict] = deque(maxlen=history_limit)
        # Rendered once so an unknown network fails at startup
        self._cadence = {
            "nft_purchase": cadence.render(cadence.PURCHASE_NFT, flow_client.network),
            "nft_sale": cadence.render(cadence.LIST_NFT_FOR_SALE, flow_client.network),
            "portfolio_check": cadence.render(cadence.PORTFOLIO_MOMENTS, flow_client.network),
        }
        self._register_builtin_actions()

    def _register_builtin_actions(self):
        self.register(FlowAction(
            id="nft_purchase",
            name="Purchase NFT",
            description="Purchase an NFT from a marketplace",
            parameters={"marketplaceAddress": "string", "nftId": "string", "price": "number"},
            params_model=TradeParameters,
            execute=self._purchase_nft,
        ))
        self.register(FlowAction(
            id="nft_sale",
            name="List NFT for Sale",
            description="List an NFT for sale on a marketplace",
            parameters={"nftId": "string", "price": "number", "marketplaceAddress": "string"},
            params_model=TradeParameters,
            execute=self._list_nft,
        ))
        self.register(FlowAction(
            id="portfolio_check",
            name="Check Portfolio",
            description="Check current portfolio holdings",
            parameters={"userAddress": "string", "collectionAddress": "string"},
            params_model=AnalyzeParameters,
            execute=self._check_portfolio,
        ))
        self.register(FlowAction(
            id="defi_action",
            name="Execute DeFi Strategy",
            description="Execute a DeFi trading strategy",
            parameters={"strategy": "string", "amount": "number", "tokenAddress": "string"},
            params_model=DefiParameters,
            execute=self._defi_placeholder,
        ))

    def register(self, action: FlowAction):
        if action.id in self._actions:
            raise ValueError(f"Action {action.id} already registered")
        self._actions[action.id] = action

    def get(self, action_id: str) -> FlowAction | None:
        return self._actions.get(action_id)

    def all(self) -> list[FlowAction]:
        return list(self._actions.values())

    def catalog(self) -> list[dict]:
        return [a.describe() for a in self._actions.values()]

    async def execute_action(self, action_id: str, params: dict | BaseModel) -> dict:
        """Validate params against the action's schema and run it."""
        action = self.get(action_id)
        if action is None:
            raise NotFoundError(f"Action {action_id} not found")

        if not isinstance(params, action.params_model):
            raw = params.model_dump() if isinstance(params, BaseModel) else params
            try:
                params = action.params_model.model_validate(raw)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid parameters for {action_id}: {format_validation_error(e)}"
                ) from e

        logger.info(f"Executing action {action_id}")
        return await action.execute(params)

    def transactions(self, limit: int = 20, offset: int = 0) -> tuple[list[dict], int]:
        """Newest-first page of submitted transactions and the total count."""
        items = list(self._history)
        return items[offset:offset + limit], len(items)

    def _record(self, tx_id: str, action_id: str, params: TradeParameters):
        self._history.appendleft({
            "id": tx_id,
            "type": action_id,
            "status": "completed",
            "amount": params.price,
            "nftId": params.nft_id,
            "timestamp": _now(),
        })

    async def _submit_trade(self, action_id: str, p: TradeParameters, label: str) -> dict:
        args = [
            cadence_arg(p.marketplace_address, "Address"),
            cadence_arg(p.nft_id, "UInt64"),
            cadence_arg(p.price, "UFix64"),
        ]
        tx = await self.flow.submit_transaction(self._cadence[action_id], args)
        if not tx.success:
            logger.error(f"{label} failed: {tx.error}")
            raise ExecutionError(f"{label} failed: {tx.error}")

        self._record(tx.transaction_id, action_id, p)
        return {
            "success": True,
            "transactionId": tx.transaction_id,
            "nftId": p.nft_id,
            "price": p.price,
            "timestamp": _now(),
        }

    async def _purchase_nft(self, p: TradeParameters) -> dict:
        return await self._submit_trade("nft_purchase", p, "NFT purchase")

    async def _list_nft(self, p: TradeParameters) -> dict:
        return await self._submit_trade("nft_sale", p, "NFT sale")

    async def _check_portfolio(self, p: AnalyzeParameters) -> dict:
        moments = await self.flow.run_query(
            self._cadence["portfolio_check"], [cadence_arg(p.user_address, "Address")]
        )
        return {
            "success": True,
            "portfolio": moments or [],
            "userAddress": p.user_address,
            "collectionAddress": p.collection_address,
            "timestamp": _now(),
        }

    async def _defi_placeholder(self, p: DefiParameters) -> dict:
        # No strategy engine behind this action yet
        return {
            "success": True,
            "strategy": p.strategy,
            "amount": p.amount,
            "tokenAddress": p.token_address,
            "timestamp": _now(),
            "message": "DeFi action executed successfully",
        }
