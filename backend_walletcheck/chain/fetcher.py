"""
Chain data fetcher: one ActivitySnapshot per request.

Independent reads (tx count, balance, stablecoin balance, contract code and,
in explorer mode, tx history) run concurrently; each read walks its own
endpoint list sequentially. Tx count and balance are required. Stablecoin
balance and contract code default to 0 / False when every endpoint fails.
In explorer mode the history is required too, so a deployment never mixes
history-derived and estimated statistics.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable

import httpx
import structlog

from backend_walletcheck.chain.explorer import ExplorerClient
from backend_walletcheck.chain.models import ActivitySnapshot
from backend_walletcheck.chain.rpc import RpcClient
from backend_walletcheck.config.settings import Settings
from backend_walletcheck.core.exceptions import UpstreamExhaustedError
from backend_walletcheck.walletcheck_logging import bind_address


class ChainDataFetcher:
    """
    Fetches on-chain facts for validated addresses.

    Endpoint lists come from Settings at construction. transport lets tests
    substitute an httpx.MockTransport for the network.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def settings(self) -> Settings:
        return self._settings

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.upstream_timeout_sec),
            transport=self._transport,
        )

    async def fetch_snapshot(self, address: str) -> ActivitySnapshot:
        """
        Fetch tx count, balances, code and (explorer mode) history for address.

        Raises UpstreamExhaustedError naming the first required operation whose
        endpoints all failed.
        """
        s = self._settings
        log = bind_address(address, __name__)
        async with self._new_client() as client:
            rpc = RpcClient(s.rpc_urls, client, log=log)
            reads: list[Awaitable[Any]] = [
                rpc.get_transaction_count(address),
                rpc.get_balance(address),
                self._optional(
                    rpc.get_token_balance(s.stablecoin_contract, address),
                    default=0,
                    fact="stablecoin_balance",
                    log=log,
                ),
                self._optional(rpc.has_code(address), default=False, fact="contract_code", log=log),
            ]
            if s.uses_history:
                explorer = ExplorerClient(
                    s.explorer_api_urls,
                    client,
                    api_key=s.explorer_api_key,
                    log=log,
                )
                reads.append(explorer.get_transactions(address))
                reads.append(
                    explorer.get_token_transfers(address, s.stablecoin_contract, s.stablecoin_decimals)
                )
            # wait for every read so no request outlives the shared client
            results = await asyncio.gather(*reads, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException):
                raise result

        tx_count, balance_wei, stablecoin_balance, has_code = results[:4]
        history = tuple(results[4]) if s.uses_history else None
        transfers = tuple(results[5]) if s.uses_history else None
        return ActivitySnapshot(
            address=address,
            tx_count=tx_count,
            balance_wei=balance_wei,
            stablecoin_balance=stablecoin_balance,
            stablecoin_decimals=s.stablecoin_decimals,
            has_code=has_code,
            history=history,
            token_transfers=transfers,
        )

    async def _optional(
        self,
        read: Awaitable[Any],
        *,
        default: Any,
        fact: str,
        log: structlog.BoundLogger,
    ) -> Any:
        try:
            return await read
        except UpstreamExhaustedError as e:
            log.warning(
                "optional_fact_defaulted",
                fact=fact,
                operation=e.operation,
                default=default,
            )
            return default
