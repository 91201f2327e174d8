"""
ChainDataFetcher and ExplorerClient: required vs optional facts, explorer
history mode, failover across explorers, secret handling.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

from backend_walletcheck.analytics.activity import derive_stats
from backend_walletcheck.chain.explorer import ExplorerClient
from backend_walletcheck.chain.models import ExplorerTransaction
from backend_walletcheck.core.exceptions import UpstreamExhaustedError
from conftest import (
    EXPLORER_A,
    EXPLORER_B,
    RPC_A,
    RPC_B,
    RPC_C,
    STABLECOIN,
    VALID_ADDRESS,
    explorer_token_tx,
    explorer_tx,
)

T0 = 1_700_000_000
DAY = 86400


def _fetch(fetcher, address=VALID_ADDRESS):
    return asyncio.run(fetcher.fetch_snapshot(address))


# --- RPC-only mode ---


def test_snapshot_from_rpc(make_fetcher, rpc_settings, chain_stub):
    chain_stub.set_rpc(tx_count=12, balance_wei=2 * 10**18, stablecoin=5_000_000, code="0x6080")
    snap = _fetch(make_fetcher(rpc_settings))
    assert snap.address == VALID_ADDRESS
    assert snap.tx_count == 12
    assert snap.balance_wei == 2 * 10**18
    assert snap.stablecoin_balance == 5_000_000
    assert snap.stablecoin_decimals == 6
    assert snap.has_code is True
    assert snap.has_history is False
    assert snap.token_transfers is None
    methods = sorted(m for _, m in chain_stub.calls)
    assert methods == ["eth_call", "eth_getBalance", "eth_getCode", "eth_getTransactionCount"]


def test_required_fact_exhausted_raises(make_fetcher, rpc_settings, chain_stub):
    for url in (RPC_A, RPC_B, RPC_C):
        chain_stub.fail(url, "status", methods={"eth_getTransactionCount"})
    with pytest.raises(UpstreamExhaustedError) as exc_info:
        _fetch(make_fetcher(rpc_settings))
    assert exc_info.value.operation == "eth_getTransactionCount"


def test_optional_facts_default_on_exhaustion(make_fetcher, rpc_settings, chain_stub):
    chain_stub.set_rpc(tx_count=5, balance_wei=10, stablecoin=99_000_000, code="0x60")
    for url in (RPC_A, RPC_B, RPC_C):
        chain_stub.fail(url, "rpc_error", methods={"eth_call", "eth_getCode"})
    snap = _fetch(make_fetcher(rpc_settings))
    assert snap.tx_count == 5
    assert snap.balance_wei == 10
    assert snap.stablecoin_balance == 0
    assert snap.has_code is False


def test_each_fact_falls_back_independently(make_fetcher, rpc_settings, chain_stub):
    chain_stub.fail(RPC_A, "status", methods={"eth_getBalance"})
    chain_stub.set_rpc(host="rpc-a.example", tx_count=1, balance_wei=111)
    chain_stub.set_rpc(host="rpc-b.example", tx_count=2, balance_wei=222)
    snap = _fetch(make_fetcher(rpc_settings))
    assert snap.tx_count == 1
    assert snap.balance_wei == 222


def test_fetcher_uses_configured_timeout(make_fetcher, rpc_settings):
    fetcher = make_fetcher(rpc_settings)
    client = fetcher._new_client()
    try:
        assert client.timeout.read == rpc_settings.upstream_timeout_sec
        assert client.timeout.connect == rpc_settings.upstream_timeout_sec
    finally:
        asyncio.run(client.aclose())


# --- explorer mode ---


def test_snapshot_with_history(make_fetcher, explorer_settings, chain_stub):
    chain_stub.set_rpc(tx_count=2)
    chain_stub.set_explorer(
        txlist=[explorer_tx(ts=T0, value_wei=10**18), explorer_tx(ts=T0 + 5 * 86400)],
        tokentx=[
            explorer_token_tx(ts=T0, value=1_000_000),
            explorer_token_tx(ts=T0 + 1, value=9, contract="0x00000000000000000000000000000000deadbeef"),
        ],
    )
    snap = _fetch(make_fetcher(explorer_settings))
    assert snap.has_history is True
    assert len(snap.history) == 2
    assert snap.history[0].value_wei == 10**18
    assert snap.history[1].timestamp == T0 + 5 * 86400
    # only the configured stablecoin is kept
    assert len(snap.token_transfers) == 1
    assert snap.token_transfers[0].contract_address == STABLECOIN.lower()


def test_explorer_no_transactions_is_empty_history(make_fetcher, explorer_settings, chain_stub):
    snap = _fetch(make_fetcher(explorer_settings))
    assert snap.history == ()
    assert snap.token_transfers == ()
    # answered by the first explorer, no fallback needed
    explorer_hosts = {h for h, m in chain_stub.calls if m.startswith("account.")}
    assert explorer_hosts == {"explorer-a.example"}


def test_explorer_error_falls_back(make_fetcher, explorer_settings, chain_stub):
    chain_stub.fail(EXPLORER_A, "explorer_notok")
    chain_stub.set_explorer(host="explorer-b.example", txlist=[explorer_tx(ts=T0)])
    snap = _fetch(make_fetcher(explorer_settings))
    assert len(snap.history) == 1


def test_explorer_history_required_in_explorer_mode(make_fetcher, explorer_settings, chain_stub):
    chain_stub.fail(EXPLORER_A, "status", methods={"account.txlist"})
    chain_stub.fail(EXPLORER_B, "nonjson", methods={"account.txlist"})
    with pytest.raises(UpstreamExhaustedError) as exc_info:
        _fetch(make_fetcher(explorer_settings))
    assert exc_info.value.operation == "account.txlist"
    assert exc_info.value.attempts == 2


def test_explorer_malformed_rows_fall_back(make_fetcher, explorer_settings, chain_stub):
    chain_stub.set_explorer(host="explorer-a.example", txlist=[{"hash": "0x1", "value": "abc", "timeStamp": "1"}])
    chain_stub.set_explorer(host="explorer-b.example", txlist=[explorer_tx(ts=T0, value_wei=7)])
    snap = _fetch(make_fetcher(explorer_settings))
    assert [tx.value_wei for tx in snap.history] == [7]


def test_explorer_sends_api_key_and_query(chain_stub):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(chain_stub)) as client:
            explorer = ExplorerClient([EXPLORER_A], client, api_key="k-123")
            return await explorer.account_rows("txlist", VALID_ADDRESS)

    assert asyncio.run(_go()) == []
    params = chain_stub.requests[0].url.params
    assert params["module"] == "account"
    assert params["action"] == "txlist"
    assert params["address"] == VALID_ADDRESS
    assert params["sort"] == "asc"
    assert params["startblock"] == "0"
    assert params["page"] == "1"
    assert params["offset"] == "10000"
    assert params["apikey"] == "k-123"


def test_explorer_exhaustion_error_omits_api_key(make_fetcher, explorer_settings, chain_stub):
    chain_stub.fail(EXPLORER_A, "status")
    chain_stub.fail(EXPLORER_B, "status")
    with pytest.raises(UpstreamExhaustedError) as exc_info:
        _fetch(make_fetcher(explorer_settings))
    message = str(exc_info.value)
    assert explorer_settings.explorer_api_key not in message
    assert "explorer-a.example" not in message


# --- explorer paging ---


def _explorer_rows(chain_stub, action="txlist", **kwargs):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(chain_stub)) as client:
            explorer = ExplorerClient([EXPLORER_A, EXPLORER_B], client, **kwargs)
            return await explorer.account_rows(action, VALID_ADDRESS, ExplorerTransaction.from_explorer_item)

    return asyncio.run(_go())


def _txlist_starts(chain_stub):
    return [
        int(r.url.params["startblock"])
        for r in chain_stub.requests
        if r.method == "GET" and r.url.params["action"] == "txlist"
    ]


def test_history_longer_than_one_explorer_page(make_fetcher, explorer_settings, chain_stub):
    # 10,001 daily transactions; one explorer response holds at most 10,000 rows
    rows = [explorer_tx(ts=T0 + i * DAY, value_wei=1, block=1_000 + i) for i in range(10_001)]
    chain_stub.set_explorer(txlist=rows)
    snap = _fetch(make_fetcher(explorer_settings))
    assert len(snap.history) == 10_001
    assert len({tx.hash for tx in snap.history}) == 10_001
    stats = derive_stats(snap)
    assert stats.days_active == 10_000
    assert stats.eth_transactions == 10_001
    assert _txlist_starts(chain_stub) == [0, 1_000 + 9_999]


def test_page_cut_inside_a_block_is_read_once(chain_stub):
    blocks = [1, 2, 2, 3, 4]
    chain_stub.set_explorer(
        txlist=[explorer_tx(ts=T0 + i, block=b, tx_hash=f"0x{i:02x}") for i, b in enumerate(blocks)]
    )
    history = _explorer_rows(chain_stub, page_size=3)
    assert [tx.hash for tx in history] == ["0x00", "0x01", "0x02", "0x03", "0x04"]
    assert _txlist_starts(chain_stub) == [0, 2, 3]


def test_block_larger_than_page_is_kept_and_logged(chain_stub):
    blocks = [5, 5, 5, 6]
    chain_stub.set_explorer(
        txlist=[explorer_tx(ts=T0 + i, block=b, tx_hash=f"0x{i:02x}") for i, b in enumerate(blocks)]
    )
    with capture_logs() as logs:
        history = _explorer_rows(chain_stub, page_size=3)
    assert [tx.hash for tx in history] == ["0x00", "0x01", "0x02", "0x03"]
    truncated = [e for e in logs if e["event"] == "explorer_history_truncated"]
    assert truncated and truncated[0]["reason"] == "block_exceeds_page_size"


def test_page_limit_stops_and_logs(chain_stub):
    chain_stub.set_explorer(txlist=[explorer_tx(ts=T0 + b, block=b) for b in (1, 2, 3, 4, 5)])
    with capture_logs() as logs:
        history = _explorer_rows(chain_stub, page_size=2, max_pages=2)
    assert [tx.timestamp for tx in history] == [T0 + 1, T0 + 2]
    truncated = [e for e in logs if e["event"] == "explorer_history_truncated"]
    assert truncated[-1]["reason"] == "max_pages_reached"


def test_token_transfers_paged_then_filtered(chain_stub):
    other = "0x00000000000000000000000000000000deadbeef"
    chain_stub.set_explorer(
        tokentx=[
            explorer_token_tx(ts=T0 + 1, value=1, block=1),
            explorer_token_tx(ts=T0 + 2, value=2, block=2, contract=other),
            explorer_token_tx(ts=T0 + 3, value=3, block=3),
        ]
    )

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(chain_stub)) as client:
            explorer = ExplorerClient([EXPLORER_A], client, page_size=2)
            return await explorer.get_token_transfers(VALID_ADDRESS, STABLECOIN, 6)

    assert [t.value for t in asyncio.run(_go())] == [1, 3]
