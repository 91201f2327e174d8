"""
Activity statistics from an ActivitySnapshot.

Two modes, chosen by what the snapshot carries and never mixed:
- history: explorer tx history is present; days active is the span between
  the first and last transaction in whole days, volumes are summed values.
- estimate: RPC facts only; days active, volumes and stablecoin tx count are
  derived from the transaction count with the weight table's estimate
  coefficients.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from backend_walletcheck.analytics.weights import DEFAULT_WEIGHTS, WeightTable
from backend_walletcheck.chain.models import ActivitySnapshot

SECONDS_PER_DAY = 86400
ETH_DECIMALS = 18

DAYS_SOURCE_HISTORY = "history"
DAYS_SOURCE_ESTIMATE = "estimate"


def to_units(base_units: int, decimals: int) -> Decimal:
    """Fixed-point integer amount to a Decimal in whole units."""
    return Decimal(base_units).scaleb(-decimals)


@dataclass(frozen=True)
class WalletStats:
    """Derived per-address statistics; amounts in whole ETH / stablecoin units."""

    total_transactions: int
    eth_transactions: int
    stablecoin_transactions: int
    eth_volume: Decimal
    stablecoin_volume: Decimal
    stablecoin_balance: Decimal
    contracts_deployed: int
    days_active: int
    days_active_source: str
    current_balance: Decimal


def history_days_active(timestamps: list[int]) -> int:
    """Whole days between the earliest and latest timestamp; 0 with fewer than two."""
    if len(timestamps) < 2:
        return 0
    return (max(timestamps) - min(timestamps)) // SECONDS_PER_DAY


def estimate_days_active(tx_count: int, weights: WeightTable = DEFAULT_WEIGHTS) -> int:
    """ceil(tx / tx_per_day), capped; 0 for an address with no transactions."""
    if tx_count <= 0:
        return 0
    days = (Decimal(tx_count) / weights.estimate_tx_per_active_day).to_integral_value(rounding=ROUND_CEILING)
    return min(int(days), weights.estimate_max_days_active)


def derive_stats(snapshot: ActivitySnapshot, weights: WeightTable = DEFAULT_WEIGHTS) -> WalletStats:
    """Compute WalletStats in history mode when the snapshot has history, else estimate mode."""
    tx_count = snapshot.tx_count
    stablecoin_balance = to_units(snapshot.stablecoin_balance, snapshot.stablecoin_decimals)
    current_balance = to_units(snapshot.balance_wei, ETH_DECIMALS)

    if snapshot.has_history:
        history = snapshot.history or ()
        transfers = snapshot.token_transfers or ()
        owner = snapshot.address.lower()
        eth_wei = sum(tx.value_wei for tx in history if not tx.is_error)
        stablecoin_volume = sum(
            (to_units(t.value, t.token_decimals) for t in transfers),
            Decimal(0),
        )
        contracts = sum(
            1
            for tx in history
            if tx.contract_address and tx.from_address == owner and not tx.is_error
        )
        return WalletStats(
            total_transactions=tx_count,
            eth_transactions=len(history),
            stablecoin_transactions=len(transfers),
            eth_volume=to_units(eth_wei, ETH_DECIMALS),
            stablecoin_volume=stablecoin_volume,
            stablecoin_balance=stablecoin_balance,
            contracts_deployed=contracts,
            days_active=history_days_active([tx.timestamp for tx in history]),
            days_active_source=DAYS_SOURCE_HISTORY,
            current_balance=current_balance,
        )

    stablecoin_txs = (Decimal(tx_count) * weights.estimate_stablecoin_tx_ratio).to_integral_value(rounding=ROUND_FLOOR)
    return WalletStats(
        total_transactions=tx_count,
        eth_transactions=tx_count,
        stablecoin_transactions=int(stablecoin_txs),
        eth_volume=Decimal(tx_count) * weights.estimate_eth_per_transaction,
        stablecoin_volume=stablecoin_balance * weights.estimate_stablecoin_volume_multiplier,
        stablecoin_balance=stablecoin_balance,
        contracts_deployed=1 if snapshot.has_code else 0,
        days_active=estimate_days_active(tx_count, weights),
        days_active_source=DAYS_SOURCE_ESTIMATE,
        current_balance=current_balance,
    )
