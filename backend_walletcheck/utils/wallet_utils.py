"""Wallet address validation utilities."""

from __future__ import annotations

import re

from backend_walletcheck.core.exceptions import InvalidAddressError

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(raw: str) -> str:
    """Trim whitespace and prepend 0x when missing. Hex casing is preserved."""
    value = raw.strip()
    return value if value.startswith("0x") else "0x" + value


def is_valid_address(value: str) -> bool:
    """Return True if value is a canonical 0x-prefixed 40-hex-digit address."""
    return ADDRESS_RE.fullmatch(value) is not None


def validate_address(raw: str | None) -> str:
    """
    Normalize and validate a raw address from a query string.

    Raises InvalidAddressError("Address required") when missing or blank and
    InvalidAddressError("Invalid address format") when the normalized value
    is not a 42-character hex address.
    """
    if raw is None or not raw.strip():
        raise InvalidAddressError("Address required")
    address = normalize_address(raw)
    if not is_valid_address(address):
        raise InvalidAddressError("Invalid address format")
    return address
