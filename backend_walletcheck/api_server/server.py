"""
FastAPI server: wallet engagement check.

Exposes GET /check-wallet?address=... returning activity stats, points and a
token allocation computed live from chain data. Nothing is stored; every
request is recomputed. Config via env (see backend_walletcheck.config).
"""

from __future__ import annotations

import functools

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from backend_walletcheck import __version__
from backend_walletcheck.analytics.pipeline import run_wallet_check
from backend_walletcheck.api_server.middleware import CORS_HEADERS, cors_and_request_logging
from backend_walletcheck.api_server.schemas import (
    CheckWalletResponse,
    ErrorResponse,
    UpstreamErrorResponse,
)
from backend_walletcheck.chain.fetcher import ChainDataFetcher
from backend_walletcheck.config.settings import Settings, get_settings
from backend_walletcheck.core.exceptions import InvalidAddressError, UpstreamExhaustedError
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)

UPSTREAM_ERROR_MESSAGE = "Unable to fetch blockchain data"


# -----------------------------------------------------------------------------
# Config and dependency
# -----------------------------------------------------------------------------

@functools.lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return get_settings()


def get_fetcher(settings: Settings = Depends(get_app_settings)) -> ChainDataFetcher:
    """Dependency: chain fetcher built from configured endpoint lists (overridden in tests)."""
    return ChainDataFetcher(settings)


# -----------------------------------------------------------------------------
# App and error handlers
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Backend WalletCheck API",
    description="On-chain engagement score and token allocation for an EVM address.",
    version=__version__,
)

app.middleware("http")(cors_and_request_logging)


@app.exception_handler(InvalidAddressError)
async def invalid_address_handler(request: Request, exc: InvalidAddressError) -> JSONResponse:
    logger.info(
        "check_wallet_invalid_address",
        path=request.url.path,
        reason=exc.message,
        raw_address=request.query_params.get("address"),
    )
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(UpstreamExhaustedError)
async def upstream_exhausted_handler(request: Request, exc: UpstreamExhaustedError) -> JSONResponse:
    logger.error(
        "check_wallet_upstream_failed",
        path=request.url.path,
        operation=exc.operation,
        attempts=exc.attempts,
    )
    return JSONResponse(
        status_code=500,
        content={"error": UPSTREAM_ERROR_MESSAGE, "details": str(exc)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Anything else still gets the JSON 500 shape. Runs outside the HTTP
    middleware, so CORS headers are set here. Details carry the exception type
    only; messages can embed upstream URLs.
    """
    logger.exception("check_wallet_unexpected_error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={"error": UPSTREAM_ERROR_MESSAGE, "details": f"Unexpected error: {type(exc).__name__}"},
        headers=CORS_HEADERS,
    )


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@app.options("/check-wallet")
def check_wallet_preflight() -> Response:
    """CORS preflight: 200 with an empty body; headers come from the middleware."""
    return Response(status_code=200)


@app.get(
    "/check-wallet",
    response_model=CheckWalletResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": UpstreamErrorResponse}},
)
async def check_wallet(
    address: str | None = Query(None, description="EVM address, with or without 0x"),
    fetcher: ChainDataFetcher = Depends(get_fetcher),
) -> JSONResponse:
    """
    Score one address.

    400 when the address is missing or malformed; 500 when a required fact
    (tx count, balance, or history in explorer mode) failed on every endpoint.
    """
    body = await run_wallet_check(address, fetcher)
    return JSONResponse(status_code=200, content=body)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness check: API is up."""
    return {"status": "ok"}
