"""
WalletCheck analytics engine.

Turns an ActivitySnapshot into stats, points and a token allocation.
Modules: weights, activity, scoring, pipeline.
"""

from backend_walletcheck.analytics.activity import WalletStats, derive_stats
from backend_walletcheck.analytics.pipeline import render_check_result, run_wallet_check
from backend_walletcheck.analytics.scoring import ScoreResult, compute_score
from backend_walletcheck.analytics.weights import DEFAULT_WEIGHTS, WeightTable

__all__ = [
    "DEFAULT_WEIGHTS",
    "ScoreResult",
    "WalletStats",
    "WeightTable",
    "compute_score",
    "derive_stats",
    "render_check_result",
    "run_wallet_check",
]
