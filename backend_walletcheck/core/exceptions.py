"""
Application-level exceptions.

Client input errors map to HTTP 400, exhausted upstreams to HTTP 500.
EndpointError describes one failed upstream attempt and never reaches a client.
"""

from __future__ import annotations


class WalletCheckError(Exception):
    """Base class for WalletCheck errors."""


class InvalidAddressError(WalletCheckError):
    """Missing or malformed address in the request."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EndpointError(WalletCheckError):
    """A single upstream endpoint failed for one operation."""

    def __init__(self, endpoint: str, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed on {endpoint}: {reason}")
        self.endpoint = endpoint
        self.operation = operation
        self.reason = reason


class UpstreamExhaustedError(WalletCheckError):
    """Every configured endpoint failed for a required operation."""

    def __init__(self, operation: str, attempts: int) -> None:
        super().__init__(f"{operation} failed on all {attempts} configured endpoint(s)")
        self.operation = operation
        self.attempts = attempts
