"""
Pytest fixtures for WalletCheck tests.

Upstreams are replaced by an httpx.MockTransport serving JSON-RPC and
explorer responses per endpoint host, so no test touches the network.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from backend_walletcheck.config.settings import Settings

RPC_A = "https://rpc-a.example"
RPC_B = "https://rpc-b.example"
RPC_C = "https://rpc-c.example"
EXPLORER_A = "https://explorer-a.example/api"
EXPLORER_B = "https://explorer-b.example/api"
STABLECOIN = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"

VALID_ADDRESS = "0x1db87acbd835b4c905652d100c2dc65bde18fc36"
ZERO_ADDRESS = "0x" + "0" * 40

DEFAULT_RPC_RESULTS = {
    "eth_getTransactionCount": "0x0",
    "eth_getBalance": "0x0",
    "eth_call": "0x" + "0" * 64,
    "eth_getCode": "0x",
}


class ChainStub:
    """
    Callable httpx handler: JSON-RPC on POST, explorer account API on GET.

    Results are configurable per host; failures can be injected per host and
    optionally per method (method names for RPC, "account.<action>" for explorer).
    """

    def __init__(self) -> None:
        self.rpc_results: dict[str, dict[str, Any]] = {}
        self.explorer_rows: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.failures: dict[str, tuple[str, set[str] | None]] = {}
        self.calls: list[tuple[str, str]] = []
        self.requests: list[httpx.Request] = []

    def set_rpc(
        self,
        *,
        host: str = "*",
        tx_count: int | None = None,
        balance_wei: int | None = None,
        stablecoin: int | None = None,
        code: str | None = None,
    ) -> None:
        results = self.rpc_results.setdefault(host, {})
        if tx_count is not None:
            results["eth_getTransactionCount"] = hex(tx_count)
        if balance_wei is not None:
            results["eth_getBalance"] = hex(balance_wei)
        if stablecoin is not None:
            results["eth_call"] = "0x" + format(stablecoin, "064x")
        if code is not None:
            results["eth_getCode"] = code

    def set_explorer(self, *, host: str = "*", txlist=None, tokentx=None) -> None:
        rows = self.explorer_rows.setdefault(host, {})
        if txlist is not None:
            rows["txlist"] = txlist
        if tokentx is not None:
            rows["tokentx"] = tokentx

    def fail(self, url: str, mode: str = "status", methods: set[str] | None = None) -> None:
        self.failures[httpx.URL(url).host] = (mode, methods)

    def _failure(self, request: httpx.Request, host: str, method: str, req_id: Any) -> httpx.Response | None:
        if host not in self.failures:
            return None
        mode, methods = self.failures[host]
        if methods is not None and method not in methods:
            return None
        if mode == "status":
            return httpx.Response(502, text="bad gateway")
        if mode == "nonjson":
            return httpx.Response(200, text="<html>upstream error</html>")
        if mode == "rpc_error":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req_id, "error": {"code": -32000, "message": "header not found"}})
        if mode == "null_result":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req_id, "result": None})
        if mode == "garbage_result":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req_id, "result": "not-hex"})
        if mode == "explorer_notok":
            return httpx.Response(200, json={"status": "0", "message": "NOTOK", "result": "Invalid API Key"})
        if mode == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if mode == "connect":
            raise httpx.ConnectError("connection refused", request=request)
        raise AssertionError(f"unknown failure mode {mode}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if request.method == "POST":
            body = json.loads(request.content)
            method, req_id = body["method"], body["id"]
        else:
            method, req_id = "account." + request.url.params["action"], None
        self.calls.append((host, method))

        failed = self._failure(request, host, method, req_id)
        if failed is not None:
            return failed

        if request.method == "POST":
            results = {**DEFAULT_RPC_RESULTS, **self.rpc_results.get("*", {}), **self.rpc_results.get(host, {})}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req_id, "result": results[method]})

        params = request.url.params
        rows = {**self.explorer_rows.get("*", {}), **self.explorer_rows.get(host, {})}.get(params["action"], [])
        # explorers filter by startblock and cap one response at offset rows
        start_block = int(params.get("startblock", 0))
        limit = int(params.get("offset", 0)) or None
        rows = [r for r in rows if int(r.get("blockNumber", 0)) >= start_block][:limit]
        if not rows:
            return httpx.Response(200, json={"status": "0", "message": "No transactions found", "result": []})
        return httpx.Response(200, json={"status": "1", "message": "OK", "result": rows})


@pytest.fixture
def chain_stub() -> ChainStub:
    return ChainStub()


@pytest.fixture
def rpc_settings() -> Settings:
    return Settings(rpc_urls=(RPC_A, RPC_B, RPC_C), upstream_timeout_sec=1.0)


@pytest.fixture
def explorer_settings() -> Settings:
    return Settings(
        rpc_urls=(RPC_A, RPC_B),
        data_source="explorer",
        explorer_api_urls=(EXPLORER_A, EXPLORER_B),
        explorer_api_key="test-secret-key",
        upstream_timeout_sec=1.0,
    )


@pytest.fixture
def make_fetcher(chain_stub):
    """Factory: ChainDataFetcher for the given settings, wired to chain_stub."""
    from backend_walletcheck.chain.fetcher import ChainDataFetcher

    def _make(settings: Settings) -> ChainDataFetcher:
        return ChainDataFetcher(settings, transport=httpx.MockTransport(chain_stub))

    return _make


@pytest.fixture
def make_client(make_fetcher):
    """Factory: FastAPI TestClient whose fetcher dependency uses chain_stub."""
    from fastapi.testclient import TestClient

    from backend_walletcheck.api_server.server import app, get_fetcher

    def _make(settings: Settings) -> TestClient:
        fetcher = make_fetcher(settings)
        app.dependency_overrides[get_fetcher] = lambda: fetcher
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, rpc_settings):
    """TestClient in RPC-only (estimate) mode."""
    return make_client(rpc_settings)


def explorer_tx(
    *,
    ts: int,
    value_wei: int = 0,
    frm: str = VALID_ADDRESS,
    to: str = "0x000000000000000000000000000000000000dead",
    contract_address: str = "",
    is_error: str = "0",
    tx_hash: str | None = None,
    block: int | None = None,
) -> dict[str, Any]:
    """txlist row in Etherscan format (all values are strings); block defaults to ts."""
    return {
        "blockNumber": str(ts if block is None else block),
        "hash": tx_hash or f"0x{ts:064x}",
        "from": frm,
        "to": to,
        "value": str(value_wei),
        "timeStamp": str(ts),
        "contractAddress": contract_address,
        "isError": is_error,
    }


def explorer_token_tx(
    *,
    ts: int,
    value: int,
    contract: str = STABLECOIN,
    decimals: int = 6,
    frm: str = VALID_ADDRESS,
    to: str = "0x000000000000000000000000000000000000beef",
    block: int | None = None,
) -> dict[str, Any]:
    """tokentx row in Etherscan format."""
    return {
        "blockNumber": str(ts if block is None else block),
        "hash": f"0x{ts:064x}",
        "from": frm,
        "to": to,
        "contractAddress": contract,
        "value": str(value),
        "tokenDecimal": str(decimals),
        "timeStamp": str(ts),
    }
