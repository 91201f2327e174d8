"""
Structured logging for WalletCheck requests.

Every line is one JSON object carrying event_type, level, timestamp and the
emitting module; request-scoped lines also carry the checked address. Upstream
failures log the endpoint as scheme://host only, and any field that looks like
a credential is dropped before rendering.

    log = bind_address(address, __name__)
    log.warning("rpc_endpoint_failed", endpoint="https://mainnet.base.org", operation="eth_getBalance")
    {"address": "0x…", "endpoint": "https://mainnet.base.org", "operation": "eth_getBalance",
     "event_type": "rpc_endpoint_failed", "level": "warning", "logger": "backend_walletcheck.chain.rpc", ...}

No backend_walletcheck imports here: every other module imports this one.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

ROOT_LOGGER_NAME = "backend_walletcheck"

# Never rendered, whatever a caller passes
SECRET_FIELDS = frozenset({"api_key", "apikey", "explorer_api_key", "authorization"})


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """ISO 8601 UTC timestamp unless the caller set one."""
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type (mirrored into message)."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _drop_secrets(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key in SECRET_FIELDS.intersection(event_dict):
        del event_dict[key]
    return event_dict


def _renderer(log_format: str) -> Any:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    (Re)configure structlog. Defaults come from LOG_LEVEL (INFO) and
    LOG_FORMAT (json | console).
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    fmt = (log_format or os.getenv("LOG_FORMAT") or "json").strip().lower()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            _drop_secrets,
            _add_timestamp,
            _normalize_event,
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """Module logger; pass event_type as the first argument to every call."""
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str, name: str = ROOT_LOGGER_NAME) -> structlog.BoundLogger:
    """Logger for one wallet check: address is attached to every line."""
    return get_logger(name).bind(address=address)
