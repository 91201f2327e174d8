"""
EVM JSON-RPC client with ordered endpoint failover.

Each call walks the configured endpoints in priority order. A transport
error or timeout, a non-2xx status, a non-JSON body, a JSON-RPC error
object, a missing result, or a result the caller cannot parse counts as a
failure for that endpoint only; the next endpoint is tried. When every
endpoint failed the call raises UpstreamExhaustedError.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Sequence

import httpx
import structlog

from backend_walletcheck.config.env import mask_url
from backend_walletcheck.core.exceptions import EndpointError, UpstreamExhaustedError
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)

BLOCK_TAG = "latest"
# keccak("balanceOf(address)")[:4]
BALANCE_OF_SELECTOR = "0x70a08231"
EMPTY_CODE = "0x"


def parse_hex_quantity(value: Any) -> int:
    """Parse a JSON-RPC hex quantity or 32-byte word; empty "0x" is 0."""
    if value is None:
        return 0
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"not a hex quantity: {value!r}")
    digits = value[2:]
    return int(digits, 16) if digits else 0


def parse_code(value: Any) -> bool:
    """Return True when eth_getCode returned non-empty bytecode."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"not hex bytecode: {value!r}")
    return value != EMPTY_CODE


def encode_balance_of(address: str) -> str:
    """ABI-encode balanceOf(address): selector + address left-padded to 32 bytes."""
    return BALANCE_OF_SELECTOR + address[2:].lower().rjust(64, "0")


class RpcClient:
    """
    JSON-RPC 2.0 client bound to one request.

    The httpx.AsyncClient is owned by the caller (one per incoming request)
    and carries the timeout; endpoints are tried sequentially within a call.
    """

    def __init__(
        self,
        endpoints: Sequence[str],
        client: httpx.AsyncClient,
        *,
        log: structlog.BoundLogger | None = None,
    ) -> None:
        if not endpoints:
            raise ValueError("endpoints must be non-empty")
        self._endpoints = list(endpoints)
        self._client = client
        self._log = log if log is not None else logger
        self._ids = itertools.count(1)

    async def call(
        self,
        method: str,
        params: list[Any],
        parse: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Run one JSON-RPC method with failover; return the (parsed) result."""
        for endpoint in self._endpoints:
            try:
                result = await self._post(endpoint, method, params)
                if parse is None:
                    return result
                try:
                    return parse(result)
                except (TypeError, ValueError) as e:
                    raise EndpointError(mask_url(endpoint), method, f"unparseable result: {e}") from e
            except EndpointError as e:
                self._log.warning(
                    "rpc_endpoint_failed",
                    endpoint=e.endpoint,
                    operation=method,
                    reason=e.reason,
                )
        self._log.error(
            "rpc_exhausted",
            operation=method,
            attempts=len(self._endpoints),
        )
        raise UpstreamExhaustedError(method, len(self._endpoints))

    async def _post(self, endpoint: str, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC POST; raise EndpointError on any failure."""
        host = mask_url(endpoint)
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._client.post(endpoint, json=body)
        except httpx.HTTPError as e:
            # exception text can echo the URL; keep only the type
            raise EndpointError(host, method, type(e).__name__) from e
        if not resp.is_success:
            raise EndpointError(host, method, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise EndpointError(host, method, "non-JSON body") from e
        if not isinstance(data, dict):
            raise EndpointError(host, method, "unexpected JSON-RPC envelope")
        err = data.get("error")
        if err is not None:
            msg = err.get("message", err) if isinstance(err, dict) else err
            code = err.get("code") if isinstance(err, dict) else None
            raise EndpointError(host, method, f"RPC error: {msg} (code={code})")
        if data.get("result") is None:
            raise EndpointError(host, method, "no result")
        return data["result"]

    async def get_transaction_count(self, address: str) -> int:
        return await self.call("eth_getTransactionCount", [address, BLOCK_TAG], parse_hex_quantity)

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        return await self.call("eth_getBalance", [address, BLOCK_TAG], parse_hex_quantity)

    async def get_token_balance(self, token: str, address: str) -> int:
        """ERC-20 balanceOf(address) in token base units."""
        call = {"to": token, "data": encode_balance_of(address)}
        return await self.call("eth_call", [call, BLOCK_TAG], parse_hex_quantity)

    async def has_code(self, address: str) -> bool:
        return await self.call("eth_getCode", [address, BLOCK_TAG], parse_code)
