"""
Data models for fetched chain data.

Explorer rows are normalized into frozen dataclasses; ActivitySnapshot is the
per-request bundle handed to the analytics layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _int_field(item: dict[str, Any], key: str, default: int = 0) -> int:
    raw = item.get(key)
    if raw in (None, ""):
        return default
    return int(raw)


@dataclass(frozen=True)
class ExplorerTransaction:
    """
    Normal transaction row from an Etherscan-compatible `txlist` call.

    Values are kept in wei; contract_address is set only for contract creations.
    """

    hash: str
    from_address: str
    to_address: str
    value_wei: int
    timestamp: int  # Unix seconds
    contract_address: str
    is_error: bool

    @classmethod
    def from_explorer_item(cls, item: dict[str, Any]) -> "ExplorerTransaction":
        """Build from a single txlist result item."""
        return cls(
            hash=item["hash"],
            from_address=(item.get("from") or "").lower(),
            to_address=(item.get("to") or "").lower(),
            value_wei=_int_field(item, "value"),
            timestamp=_int_field(item, "timeStamp"),
            contract_address=(item.get("contractAddress") or "").lower(),
            is_error=str(item.get("isError", "0")) == "1",
        )


@dataclass(frozen=True)
class TokenTransfer:
    """ERC-20 transfer row from a `tokentx` call, value in token base units."""

    hash: str
    from_address: str
    to_address: str
    contract_address: str
    value: int
    token_decimals: int
    timestamp: int

    @classmethod
    def from_explorer_item(cls, item: dict[str, Any], default_decimals: int) -> "TokenTransfer":
        """Build from a single tokentx result item."""
        return cls(
            hash=item["hash"],
            from_address=(item.get("from") or "").lower(),
            to_address=(item.get("to") or "").lower(),
            contract_address=(item.get("contractAddress") or "").lower(),
            value=_int_field(item, "value"),
            token_decimals=_int_field(item, "tokenDecimal", default_decimals),
            timestamp=_int_field(item, "timeStamp"),
        )


@dataclass(frozen=True)
class ActivitySnapshot:
    """
    On-chain facts for one address, fetched for one request and never stored.

    history and token_transfers are None in RPC-only mode; an empty tuple means
    the explorer answered and the address has no rows.
    """

    address: str
    tx_count: int
    balance_wei: int
    stablecoin_balance: int = 0
    stablecoin_decimals: int = 6
    has_code: bool = False
    history: tuple[ExplorerTransaction, ...] | None = None
    token_transfers: tuple[TokenTransfer, ...] | None = field(default=None)

    @property
    def has_history(self) -> bool:
        return self.history is not None
