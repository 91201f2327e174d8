#!/usr/bin/env python3
"""
Run one wallet check from the command line and print the JSON body.

Uses the same fetch and score pipeline as GET /check-wallet, with endpoints
from the environment (.env). Exit code 2 on invalid address, 1 on upstream
failure.

Usage:
  py -m backend_walletcheck.tools.check_wallet 0x1db87acbd835b4c905652d100c2dc65bde18fc36
  py -m backend_walletcheck.tools.check_wallet --data-source explorer <address>
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

from backend_walletcheck.analytics.pipeline import run_wallet_check
from backend_walletcheck.chain.fetcher import ChainDataFetcher
from backend_walletcheck.config.env import DATA_SOURCES, split_urls
from backend_walletcheck.config.settings import get_settings
from backend_walletcheck.core.exceptions import InvalidAddressError, UpstreamExhaustedError
from backend_walletcheck.walletcheck_logging import get_logger

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Check one address and print the allocation JSON")
    ap.add_argument("address", help="EVM address, with or without 0x")
    ap.add_argument("--data-source", choices=DATA_SOURCES, default=None, help="override DATA_SOURCE")
    ap.add_argument("--rpc-urls", default=None, help="override RPC_URLS (comma-separated)")
    ap.add_argument("--timeout", type=float, default=None, help="override UPSTREAM_TIMEOUT_SEC")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    overrides: dict = {}
    if args.data_source:
        overrides["data_source"] = args.data_source
    if args.rpc_urls:
        overrides["rpc_urls"] = tuple(split_urls(args.rpc_urls))
    if args.timeout is not None:
        overrides["upstream_timeout_sec"] = args.timeout
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    fetcher = ChainDataFetcher(settings)
    try:
        body = asyncio.run(run_wallet_check(args.address, fetcher))
    except InvalidAddressError as e:
        print(json.dumps({"error": e.message}), file=sys.stderr)
        return 2
    except UpstreamExhaustedError as e:
        logger.error("check_wallet_cli_failed", operation=e.operation, attempts=e.attempts)
        print(json.dumps({"error": "Unable to fetch blockchain data", "details": str(e)}), file=sys.stderr)
        return 1
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
