"""
Response models for the WalletCheck API (OpenAPI documentation).

Field names follow the camelCase JSON contract the frontend expects.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class WalletStatsResponse(BaseModel):
    totalTransactions: int = Field(..., ge=0, description="Transaction count (nonce) from RPC")
    ethTransactions: int = Field(..., ge=0, description="Native-currency transactions (history rows or tx count)")
    usdcTransactions: int = Field(..., ge=0, description="Stablecoin transfers (history) or estimate")
    ethVolume: str = Field(..., description="ETH volume, 4 decimal places")
    usdcVolume: str = Field(..., description="Stablecoin volume, 2 decimal places")
    contractsDeployed: int = Field(..., ge=0)
    daysActive: int = Field(..., ge=0)
    daysActiveSource: str = Field(..., description="history | estimate")
    currentBalance: str = Field(..., description="Native balance, 4 decimal places")


class AllocationResponse(BaseModel):
    tokens: str = Field(..., description="Token allocation with thousands separators, e.g. 6,912,500")
    points: str = Field(..., description="Engagement points, 2 decimal places")


class CheckWalletResponse(BaseModel):
    """GET /check-wallet 200 response."""

    address: str = Field(..., description="Normalized 0x address")
    stats: WalletStatsResponse
    allocation: AllocationResponse
    summary: str = Field(..., description="Human-readable one-liner")


class ErrorResponse(BaseModel):
    """400 response: missing or malformed address."""

    error: str


class UpstreamErrorResponse(BaseModel):
    """500 response: a required upstream fact could not be fetched."""

    error: str
    details: str
