"""
HTTP middleware: permissive CORS headers and request logging with timing.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

from fastapi import Request, Response

from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}


async def cors_and_request_logging(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Attach CORS headers to every response and log method, path, status and latency."""
    start = time.perf_counter()
    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response
