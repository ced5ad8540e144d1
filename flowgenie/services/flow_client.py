"""Flow blockchain client.

Talks to a Flow Access node over its REST API. Read-only scripts and block
lookups work against any access node; transaction submission needs a
signer and is only available in mock mode.
"""

import base64
import itertools
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from flowgenie.errors import ExecutionError

logger = logging.getLogger(__name__)

_MOCK_BLOCK_BASE = 12345678


@dataclass
class TransactionResult:
    success: bool
    transaction_id: str | None = None
    status: str | None = None
    error: str | None = None


def cadence_arg(value: Any, cadence_type: str) -> dict:
    """Encode a Python value as a JSON-Cadence argument."""
    if cadence_type == "UFix64":
        return {"type": cadence_type, "value": f"{float(value):.8f}"}
    if cadence_type in ("UInt64", "UInt32", "UInt8", "Int", "Int64", "UInt"):
        return {"type": cadence_type, "value": str(int(value))}
    if cadence_type == "Bool":
        return {"type": cadence_type, "value": bool(value)}
    return {"type": cadence_type, "value": str(value)}


def decode_cadence(node: Any) -> Any:
    """Unwrap a JSON-Cadence value into plain Python data.

    Fixed-point numbers stay strings so no precision is lost.
    """
    if not isinstance(node, dict) or "type" not in node:
        return node

    kind = node["type"]
    value = node.get("value")

    if kind == "Optional":
        return decode_cadence(value) if value is not None else None
    if kind in ("Array", "Set"):
        return [decode_cadence(v) for v in value or []]
    if kind == "Dictionary":
        return {decode_cadence(e["key"]): decode_cadence(e["value"]) for e in value or []}
    if kind in ("Struct", "Resource", "Event", "Contract", "Enum"):
        return {f["name"]: decode_cadence(f["value"]) for f in (value or {}).get("fields", [])}
    if kind in ("Int", "UInt", "Int8", "Int16", "Int32", "Int64", "UInt8", "UInt16", "UInt32", "UInt64"):
        return int(value)
    if kind == "Void":
        return None
    return value


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class FlowClient:
    """Wrapper around the Flow Access REST API."""

    def __init__(
        self,
        access_node: str,
        network: str = "testnet",
        mock_mode: bool = True,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.access_node = access_node.rstrip("/")
        self.network = network
        self.mock_mode = mock_mode
        self.timeout = timeout
        self._http = http_client
        self._mock_counter = itertools.count(1)

    def _client(self) -> httpx.AsyncClient:
        """Lazily create the HTTP client."""
        if self._http is None:
            self._http = httpx.AsyncClient(base_url=self.access_node, timeout=self.timeout)
        return self._http

    async def submit_transaction(self, template: str, args: list[dict]) -> TransactionResult:
        """Submit a templated Cadence transaction and wait for it to seal."""
        if self.mock_mode:
            tx_id = f"mock-tx-{next(self._mock_counter)}"
            logger.info(f"MOCK transaction {tx_id}: args={[a['value'] for a in args]}")
            return TransactionResult(success=True, transaction_id=tx_id, status="SEALED")

        # Signing and sealing belong to a wallet/SDK integration that this service does not carry.
        raise ExecutionError("Transaction signing is not configured; enable FG_FLOW_MOCK_MODE")

    async def run_query(self, script: str, args: list[dict]) -> Any:
        """Execute a read-only Cadence script against the latest sealed block."""
        if self.mock_mode:
            logger.info(f"MOCK script: args={[a['value'] for a in args]}")
            return None

        body = {
            "script": _b64(script),
            "arguments": [_b64(json.dumps(arg)) for arg in args],
        }
        try:
            resp = await self._client().post("/v1/scripts", params={"block_height": "sealed"}, json=body)
            resp.raise_for_status()
            encoded = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Script rejected by access node: {e.response.status_code} {e.response.text}")
            raise ExecutionError(f"Script execution failed: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Access node unreachable: {e}")
            raise ExecutionError(f"Script execution failed: {e}") from e

        return decode_cadence(json.loads(base64.b64decode(encoded)))

    async def latest_block(self) -> dict:
        """Height and timestamp of the latest sealed block."""
        if self.mock_mode:
            return {
                "height": _MOCK_BLOCK_BASE,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

        try:
            resp = await self._client().get("/v1/blocks", params={"height": "sealed"})
            resp.raise_for_status()
            header = resp.json()[0]["header"]
        except (httpx.HTTPError, KeyError, IndexError) as e:
            logger.error(f"Failed to fetch latest block: {e}")
            raise ExecutionError(f"Failed to fetch latest block: {e}") from e

        return {"height": int(header["height"]), "timestamp": header["timestamp"]}

    async def close(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None
