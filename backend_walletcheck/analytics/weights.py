"""
Versioned weight table for the engagement score and allocation.

Every coefficient the score or the estimate mode uses lives here, so a
formula change is a new table with a new version instead of edits scattered
through the code. Bump `version` whenever a value changes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class WeightTable:
    """Named scoring coefficients. Decimal so hand-derived values match exactly."""

    version: str

    # points
    points_per_transaction: Decimal
    points_per_eth_volume: Decimal
    stablecoin_holder_threshold: Decimal
    stablecoin_holder_bonus: Decimal
    points_per_active_day: Decimal
    points_per_contract: Decimal

    # allocation: linear up to points_for_max_allocation, flat above
    points_for_max_allocation: Decimal
    max_allocation_per_user: int

    # estimate mode (no tx history available)
    estimate_tx_per_active_day: Decimal
    estimate_max_days_active: int
    estimate_eth_per_transaction: Decimal
    estimate_stablecoin_volume_multiplier: Decimal
    estimate_stablecoin_tx_ratio: Decimal

    def __post_init__(self) -> None:
        if self.points_for_max_allocation <= 0:
            raise ValueError("points_for_max_allocation must be positive")
        if self.max_allocation_per_user < 0:
            raise ValueError("max_allocation_per_user must be >= 0")
        if self.estimate_tx_per_active_day <= 0:
            raise ValueError("estimate_tx_per_active_day must be positive")

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable view (Decimals as strings)."""
        return {k: str(v) if isinstance(v, Decimal) else v for k, v in asdict(self).items()}


DEFAULT_WEIGHTS = WeightTable(
    version="2024-base-v1",
    points_per_transaction=Decimal("1.2"),
    points_per_eth_volume=Decimal("15"),
    stablecoin_holder_threshold=Decimal("50"),
    stablecoin_holder_bonus=Decimal("50"),
    points_per_active_day=Decimal("2"),
    points_per_contract=Decimal("100"),
    points_for_max_allocation=Decimal("1000"),
    max_allocation_per_user=25_000_000,
    estimate_tx_per_active_day=Decimal("1.5"),
    estimate_max_days_active=365,
    estimate_eth_per_transaction=Decimal("0.015"),
    estimate_stablecoin_volume_multiplier=Decimal("2.5"),
    estimate_stablecoin_tx_ratio=Decimal("0.3"),
)
