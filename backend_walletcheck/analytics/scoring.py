"""
Engagement score and token allocation.

Pure function of an ActivitySnapshot and a WeightTable:

    points = tx * points_per_transaction
           + eth_volume * points_per_eth_volume
           + (stablecoin_holder_bonus if stablecoin_balance > stablecoin_holder_threshold else 0)
           + days_active * points_per_active_day
           + contracts_deployed * points_per_contract

    tokens = floor(min(points, points_for_max_allocation)
                   * max_allocation_per_user / points_for_max_allocation)

With DEFAULT_WEIGHTS, tx=100 in estimate mode (no balance, no code) gives
67 days active, 1.5 ETH volume, 276.50 points and 6,912,500 tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from backend_walletcheck.analytics.activity import WalletStats, derive_stats
from backend_walletcheck.analytics.weights import DEFAULT_WEIGHTS, WeightTable
from backend_walletcheck.chain.models import ActivitySnapshot
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)

SUMMARY_SEPARATOR = " • "


def format_fixed(value: Decimal, places: int) -> str:
    """Round half-up to a fixed number of decimal places."""
    return str(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def format_tokens(tokens: int) -> str:
    """Integer with en-US thousands separators."""
    return f"{tokens:,}"


@dataclass(frozen=True)
class ScoreResult:
    """Points, allocation and one-line summary for one address."""

    points: Decimal
    tokens: int
    summary: str
    stats: WalletStats
    weights_version: str


def calculate_points(stats: WalletStats, weights: WeightTable = DEFAULT_WEIGHTS) -> Decimal:
    holder_bonus = (
        weights.stablecoin_holder_bonus
        if stats.stablecoin_balance > weights.stablecoin_holder_threshold
        else Decimal(0)
    )
    return (
        stats.total_transactions * weights.points_per_transaction
        + stats.eth_volume * weights.points_per_eth_volume
        + holder_bonus
        + stats.days_active * weights.points_per_active_day
        + stats.contracts_deployed * weights.points_per_contract
    )


def calculate_allocation(points: Decimal, weights: WeightTable = DEFAULT_WEIGHTS) -> int:
    """Linear in points up to points_for_max_allocation, then capped at max_allocation_per_user."""
    capped = min(max(points, Decimal(0)), weights.points_for_max_allocation)
    tokens = (capped * weights.max_allocation_per_user / weights.points_for_max_allocation).to_integral_value(
        rounding=ROUND_FLOOR
    )
    return int(tokens)


def build_summary(stats: WalletStats) -> str:
    parts = [
        f"{stats.total_transactions} transactions",
        f"{format_fixed(stats.eth_volume, 2)} ETH",
        f"{format_fixed(stats.stablecoin_volume, 2)} USDC",
        f"{stats.contracts_deployed} contracts",
        f"{stats.days_active} days active",
    ]
    return SUMMARY_SEPARATOR.join(parts)


def compute_score(snapshot: ActivitySnapshot, weights: WeightTable = DEFAULT_WEIGHTS) -> ScoreResult:
    """Derive stats from snapshot, then points, tokens and summary."""
    stats = derive_stats(snapshot, weights)
    points = calculate_points(stats, weights)
    tokens = calculate_allocation(points, weights)
    logger.debug(
        "score_computed",
        address=snapshot.address,
        points=str(points),
        tokens=tokens,
        days_active_source=stats.days_active_source,
        weights_version=weights.version,
    )
    return ScoreResult(
        points=points,
        tokens=tokens,
        summary=build_summary(stats),
        stats=stats,
        weights_version=weights.version,
    )
