"""
Etherscan-compatible block explorer client (txlist, tokentx).

Same failover contract as the RPC client. Explorer APIs answer HTTP 200
with status "0" for their own errors (bad key, rate limit); those count as
endpoint failures, except "No transactions found" which is an empty history.
The API key is passed as a query parameter and never logged.

One query returns at most page_size rows (10,000 on Etherscan and its
forks), so history is read in block ranges: after a full page the next query
starts at the highest block seen, and that block's rows are read again there
instead of being kept from the cut-off page.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

import httpx
import structlog

from backend_walletcheck.chain.models import ExplorerTransaction, TokenTransfer
from backend_walletcheck.config.env import mask_url
from backend_walletcheck.core.exceptions import EndpointError, UpstreamExhaustedError
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)

NO_TRANSACTIONS_MESSAGE = "No transactions found"
START_BLOCK = 0
END_BLOCK = 99999999
DEFAULT_PAGE_SIZE = 10_000
DEFAULT_MAX_PAGES = 50


def _block_number(row: dict[str, Any]) -> int:
    return int(row["blockNumber"])


class ExplorerClient:
    """Explorer account API client bound to one request."""

    def __init__(
        self,
        endpoints: Sequence[str],
        client: httpx.AsyncClient,
        *,
        api_key: str = "",
        log: structlog.BoundLogger | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        if not endpoints:
            raise ValueError("endpoints must be non-empty")
        if page_size < 1 or max_pages < 1:
            raise ValueError("page_size and max_pages must be positive")
        self._endpoints = list(endpoints)
        self._client = client
        self._api_key = api_key
        self._log = log if log is not None else logger
        self._page_size = page_size
        self._max_pages = max_pages

    async def account_rows(
        self,
        action: str,
        address: str,
        parse_row: Callable[[dict[str, Any]], Any] | None = None,
    ) -> list[Any]:
        """
        Fetch all rows for module=account&action=<action>, oldest first.

        Each page is fetched with endpoint failover. Raises
        UpstreamExhaustedError when any page fails on every endpoint.
        """
        operation = f"account.{action}"
        collected: list[Any] = []
        start_block = START_BLOCK
        for _ in range(self._max_pages):
            page = await self._page(action, address, start_block, parse_row)
            if len(page) < self._page_size:
                collected.extend(item for _, item in page)
                return collected
            last_block = page[-1][0]
            complete = [item for block, item in page if block < last_block]
            if complete:
                collected.extend(complete)
                start_block = last_block
                continue
            # a single block holds a full page; keep what we got and move past it
            self._log.warning(
                "explorer_history_truncated",
                operation=operation,
                reason="block_exceeds_page_size",
                block=last_block,
                page_size=self._page_size,
            )
            collected.extend(item for _, item in page)
            start_block = last_block + 1
        self._log.warning(
            "explorer_history_truncated",
            operation=operation,
            reason="max_pages_reached",
            max_pages=self._max_pages,
            rows=len(collected),
            next_block=start_block,
        )
        return collected

    async def _page(
        self,
        action: str,
        address: str,
        start_block: int,
        parse_row: Callable[[dict[str, Any]], Any] | None,
    ) -> list[tuple[int, Any]]:
        """One block-range query with failover; returns (blockNumber, item) pairs."""
        operation = f"account.{action}"
        params: dict[str, Any] = {
            "module": "account",
            "action": action,
            "address": address,
            "startblock": start_block,
            "endblock": END_BLOCK,
            "page": 1,
            "offset": self._page_size,
            "sort": "asc",
        }
        if self._api_key:
            params["apikey"] = self._api_key
        for endpoint in self._endpoints:
            try:
                rows = await self._get(endpoint, operation, params)
                try:
                    return [(_block_number(r), parse_row(r) if parse_row else r) for r in rows]
                except (KeyError, TypeError, ValueError) as e:
                    raise EndpointError(mask_url(endpoint), operation, f"unparseable rows: {e}") from e
            except EndpointError as e:
                self._log.warning(
                    "explorer_endpoint_failed",
                    endpoint=e.endpoint,
                    operation=operation,
                    start_block=start_block,
                    reason=e.reason,
                )
        self._log.error(
            "explorer_exhausted",
            operation=operation,
            start_block=start_block,
            attempts=len(self._endpoints),
        )
        raise UpstreamExhaustedError(operation, len(self._endpoints))

    async def _get(self, endpoint: str, operation: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        host = mask_url(endpoint)
        try:
            resp = await self._client.get(endpoint, params=params)
        except httpx.HTTPError as e:
            raise EndpointError(host, operation, type(e).__name__) from e
        if not resp.is_success:
            raise EndpointError(host, operation, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise EndpointError(host, operation, "non-JSON body") from e
        if not isinstance(data, dict):
            raise EndpointError(host, operation, "unexpected response envelope")
        result = data.get("result")
        if str(data.get("status")) == "1" and isinstance(result, list):
            return result
        message = str(data.get("message") or "")
        if message.startswith(NO_TRANSACTIONS_MESSAGE):
            return []
        # result holds the explorer's error text on failure, e.g. "Invalid API Key"
        detail = result if isinstance(result, str) else message
        raise EndpointError(host, operation, f"explorer error: {detail or 'unknown'}")

    async def get_transactions(self, address: str) -> list[ExplorerTransaction]:
        return await self.account_rows("txlist", address, ExplorerTransaction.from_explorer_item)

    async def get_token_transfers(
        self,
        address: str,
        contract: str,
        default_decimals: int,
    ) -> list[TokenTransfer]:
        """tokentx rows for address, restricted to one token contract."""
        wanted = contract.lower()
        transfers = await self.account_rows(
            "tokentx",
            address,
            lambda row: TokenTransfer.from_explorer_item(row, default_decimals),
        )
        return [t for t in transfers if t.contract_address == wanted]
