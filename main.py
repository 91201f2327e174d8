"""
Main entrypoint: run the WalletCheck FastAPI server under uvicorn.

Env: RPC_URLS, DATA_SOURCE, EXPLORER_API_URLS, EXPLORER_API_KEY, API_HOST, API_PORT, LOG_LEVEL, etc.

Equivalent: uvicorn backend_walletcheck.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Validate configuration, then serve the API in the main thread."""
    from backend_walletcheck.analytics.weights import DEFAULT_WEIGHTS
    from backend_walletcheck.config import get_settings

    settings = get_settings()
    logger.info(
        "main_config_loaded",
        data_source=settings.data_source,
        rpc_endpoint_count=len(settings.rpc_urls),
        explorer_endpoint_count=len(settings.explorer_api_urls) if settings.uses_history else 0,
        upstream_timeout_sec=settings.upstream_timeout_sec,
    )
    logger.info("main_weights_loaded", weights=DEFAULT_WEIGHTS.to_dict())

    from backend_walletcheck.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
