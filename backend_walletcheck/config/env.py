"""
Environment variable loading for WalletCheck.

- RPC_URLS: comma-separated JSON-RPC endpoints, tried in order
- DATA_SOURCE: rpc | explorer (default: rpc)
- EXPLORER_API_URLS / EXPLORER_API_KEY: Etherscan-compatible explorer
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit

from dotenv import load_dotenv

# Project root: config is backend_walletcheck/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

# Public Base mainnet endpoints, in priority order
DEFAULT_RPC_URLS = (
    "https://mainnet.base.org",
    "https://base.llamarpc.com",
    "https://base-rpc.publicnode.com",
)
DEFAULT_EXPLORER_API_URLS = ("https://api.basescan.org/api",)

# Native USDC on Base
DEFAULT_STABLECOIN_CONTRACT = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
DEFAULT_STABLECOIN_DECIMALS = 6

DATA_SOURCE_RPC = "rpc"
DATA_SOURCE_EXPLORER = "explorer"
DATA_SOURCES = (DATA_SOURCE_RPC, DATA_SOURCE_EXPLORER)


def load_walletcheck_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def split_urls(raw: str | None) -> list[str]:
    """Split a comma-separated URL list; drop blanks and trailing slashes."""
    if not raw:
        return []
    return [u.strip().rstrip("/") for u in raw.split(",") if u.strip()]


def get_rpc_urls() -> list[str]:
    load_walletcheck_env()
    return split_urls(os.getenv("RPC_URLS")) or list(DEFAULT_RPC_URLS)


def get_explorer_api_urls() -> list[str]:
    load_walletcheck_env()
    return split_urls(os.getenv("EXPLORER_API_URLS")) or list(DEFAULT_EXPLORER_API_URLS)


def get_data_source() -> str:
    """
    Return DATA_SOURCE from env: rpc | explorer.
    Default: rpc. Raises ValueError on anything else.
    """
    load_walletcheck_env()
    raw = (os.getenv("DATA_SOURCE") or DATA_SOURCE_RPC).strip().lower()
    if raw not in DATA_SOURCES:
        raise ValueError(f"DATA_SOURCE must be one of {', '.join(DATA_SOURCES)}, got {raw!r}")
    return raw


def mask_url(url: str) -> str:
    """
    Reduce an endpoint URL to scheme://host for logs.

    Providers embed API keys in the path (/v2/<key>) or query (?apikey=), so
    both are dropped.
    """
    parts = urlsplit(url)
    if not parts.netloc:
        return "<invalid-url>"
    return f"{parts.scheme}://{parts.netloc}"
