"""
Structured logging for Backend WalletCheck.

JSON logs with timestamp, event_type, address and upstream context.
Use get_logger() in every module, bind_address() for per-check loggers.
"""

from backend_walletcheck.walletcheck_logging.logger import bind_address, get_logger

__all__ = ["bind_address", "get_logger"]
