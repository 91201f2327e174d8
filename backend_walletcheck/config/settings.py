"""
Application settings and environment configuration.

Loads configuration from environment variables and the project .env file,
validates it, and exposes a frozen Settings object for the fetcher, the API
server and the operator tools.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from backend_walletcheck.config.env import (
    DATA_SOURCE_EXPLORER,
    DEFAULT_STABLECOIN_CONTRACT,
    DEFAULT_STABLECOIN_DECIMALS,
    get_data_source,
    get_explorer_api_urls,
    get_rpc_urls,
    load_walletcheck_env,
)

DEFAULT_UPSTREAM_TIMEOUT_SEC = 5.0


@dataclass(frozen=True)
class Settings:
    """Typed service configuration. Endpoint lists are ordered by priority."""

    rpc_urls: tuple[str, ...]
    data_source: str = "rpc"
    explorer_api_urls: tuple[str, ...] = ()
    explorer_api_key: str = field(default="", repr=False)
    stablecoin_contract: str = DEFAULT_STABLECOIN_CONTRACT
    stablecoin_decimals: int = DEFAULT_STABLECOIN_DECIMALS
    upstream_timeout_sec: float = DEFAULT_UPSTREAM_TIMEOUT_SEC
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    def __post_init__(self) -> None:
        if not self.rpc_urls:
            raise ValueError("rpc_urls must be non-empty")
        if self.upstream_timeout_sec <= 0:
            raise ValueError("upstream_timeout_sec must be positive")
        if self.stablecoin_decimals < 0:
            raise ValueError("stablecoin_decimals must be >= 0")
        if self.uses_history and not self.explorer_api_urls:
            raise ValueError("explorer_api_urls must be non-empty when data_source=explorer")

    @property
    def uses_history(self) -> bool:
        """True when days active and volumes come from explorer history."""
        return self.data_source == DATA_SOURCE_EXPLORER


def get_settings() -> Settings:
    """Build Settings from the current environment (RPC_URLS, DATA_SOURCE, ...)."""
    load_walletcheck_env()
    return Settings(
        rpc_urls=tuple(get_rpc_urls()),
        data_source=get_data_source(),
        explorer_api_urls=tuple(get_explorer_api_urls()),
        explorer_api_key=(os.getenv("EXPLORER_API_KEY") or "").strip(),
        stablecoin_contract=(os.getenv("STABLECOIN_CONTRACT") or DEFAULT_STABLECOIN_CONTRACT).strip(),
        stablecoin_decimals=int(os.getenv("STABLECOIN_DECIMALS", str(DEFAULT_STABLECOIN_DECIMALS)).strip()),
        upstream_timeout_sec=float(os.getenv("UPSTREAM_TIMEOUT_SEC", str(DEFAULT_UPSTREAM_TIMEOUT_SEC)).strip()),
        api_host=os.getenv("API_HOST", "0.0.0.0").strip(),
        api_port=int(os.getenv("API_PORT", "8000").strip() or "8000"),
    )
