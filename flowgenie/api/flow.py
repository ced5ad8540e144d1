"""Flow blockchain API: action catalog, action execution and wallet info."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from flowgenie.api.deps import (
    CurrentUser,
    get_action_registry,
    get_current_user,
    get_executor,
    get_flow_client,
    get_settings,
    get_user_store,
)
from flowgenie.config import Settings
from flowgenie.errors import ExecutionError
from flowgenie.schemas.command import ActionExecuteRequest
from flowgenie.schemas.user import ConnectWalletRequest
from flowgenie.services import cadence
from flowgenie.services.executor import ActionExecutor
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.services.flow_client import FlowClient, cadence_arg
from flowgenie.services.user_store import UserStore
from flowgenie.utils.constants import SUPPORTED_CONTRACTS

router = APIRouter(prefix="/api/flow", tags=["flow"])


def _flow_address(current: CurrentUser, users: UserStore) -> str | None:
    user = users.get(current.id)
    if user is not None:
        return user.flow_address
    return current.flow_address


@router.get("/actions", dependencies=[Depends(get_current_user)])
def list_actions(actions: ActionRegistry = Depends(get_action_registry)):
    return {"success": True, "actions": actions.catalog()}


@router.post("/actions/{action_id}/execute")
async def execute_action(
    action_id: str,
    body: ActionExecuteRequest,
    current: CurrentUser = Depends(get_current_user),
    executor: ActionExecutor = Depends(get_executor),
):
    """Run a single Flow action directly, outside any agent."""
    result = await executor.call_action(action_id, body.parameters)
    return {
        "success": True,
        "result": result,
        "executedBy": current.id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/account")
def account(
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    flow_address = _flow_address(current, users)
    return {
        "success": True,
        "account": {
            "userId": current.id,
            "flowAddress": flow_address,
            "isConnected": bool(flow_address),
        },
    }


@router.post("/connect")
def connect_wallet(
    body: ConnectWalletRequest,
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    # TODO: verify address ownership with an FCL account-proof signature before storing it
    users.update(current.id, flow_address=body.flow_address)
    return {
        "success": True,
        "message": "Flow wallet connected successfully",
        "flowAddress": body.flow_address,
        "userId": current.id,
    }


@router.get("/network")
async def network_status(
    settings: Settings = Depends(get_settings),
    flow: FlowClient = Depends(get_flow_client),
):
    try:
        latest_block = await flow.latest_block()
        status = "connected"
    except ExecutionError:
        latest_block = None
        status = "unreachable"

    return {
        "success": True,
        "network": {
            "network": settings.flow_network,
            "accessNode": settings.flow_access_node,
            "discoveryWallet": settings.flow_discovery_wallet,
            "status": status,
            "mockMode": flow.mock_mode,
            "latestBlock": latest_block,
            "supportedContracts": SUPPORTED_CONTRACTS,
        },
    }


@router.get("/transactions", dependencies=[Depends(get_current_user)])
def transactions(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actions: ActionRegistry = Depends(get_action_registry),
):
    page, total = actions.transactions(limit=limit, offset=offset)
    return {
        "success": True,
        "transactions": page,
        "total": total,
        "pagination": {"limit": limit, "offset": offset, "hasMore": offset + limit < total},
    }


@router.get("/balance")
async def balance(
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    flow: FlowClient = Depends(get_flow_client),
):
    flow_address = _flow_address(current, users)
    if not flow_address:
        return {"success": True, "balance": {"flowAddress": "Not connected", "flow": "0.00000000"}}

    script = cadence.render(cadence.FLOW_BALANCE, flow.network)
    amount = await flow.run_query(script, [cadence_arg(flow_address, "Address")])
    return {
        "success": True,
        "balance": {"flowAddress": flow_address, "flow": amount or "0.00000000"},
    }
