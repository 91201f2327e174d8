"""
Wallet check pipeline: validate -> fetch -> score -> render.

Single entrypoint for the API and the operator CLI; returns the JSON body
served by GET /check-wallet.
"""

from __future__ import annotations

from typing import Any

from backend_walletcheck.analytics.scoring import ScoreResult, compute_score, format_fixed, format_tokens
from backend_walletcheck.analytics.weights import DEFAULT_WEIGHTS, WeightTable
from backend_walletcheck.chain.fetcher import ChainDataFetcher
from backend_walletcheck.utils.wallet_utils import validate_address
from backend_walletcheck.walletcheck_logging import bind_address


def render_check_result(address: str, result: ScoreResult) -> dict[str, Any]:
    """Response body for a scored address; key order is stable."""
    stats = result.stats
    return {
        "address": address,
        "stats": {
            "totalTransactions": stats.total_transactions,
            "ethTransactions": stats.eth_transactions,
            "usdcTransactions": stats.stablecoin_transactions,
            "ethVolume": format_fixed(stats.eth_volume, 4),
            "usdcVolume": format_fixed(stats.stablecoin_volume, 2),
            "contractsDeployed": stats.contracts_deployed,
            "daysActive": stats.days_active,
            "daysActiveSource": stats.days_active_source,
            "currentBalance": format_fixed(stats.current_balance, 4),
        },
        "allocation": {
            "tokens": format_tokens(result.tokens),
            "points": format_fixed(result.points, 2),
        },
        "summary": result.summary,
    }


async def run_wallet_check(
    raw_address: str | None,
    fetcher: ChainDataFetcher,
    weights: WeightTable = DEFAULT_WEIGHTS,
) -> dict[str, Any]:
    """
    Run the full check for one raw address string.

    Raises InvalidAddressError for bad input and UpstreamExhaustedError when a
    required fact could not be fetched from any endpoint.
    """
    address = validate_address(raw_address)
    log = bind_address(address, __name__)
    log.info("check_wallet_request", data_source=fetcher.settings.data_source)

    snapshot = await fetcher.fetch_snapshot(address)
    result = compute_score(snapshot, weights)

    log.info(
        "check_wallet_scored",
        total_transactions=result.stats.total_transactions,
        days_active=result.stats.days_active,
        days_active_source=result.stats.days_active_source,
        points=format_fixed(result.points, 2),
        tokens=result.tokens,
        weights_version=result.weights_version,
    )
    return render_check_result(address, result)
