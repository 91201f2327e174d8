"""
Chain data package.

Talks to EVM JSON-RPC nodes and Etherscan-compatible explorers with ordered
endpoint failover, and bundles the results into an ActivitySnapshot for the
analytics layer.
"""

from backend_walletcheck.chain.fetcher import ChainDataFetcher
from backend_walletcheck.chain.models import ActivitySnapshot, ExplorerTransaction, TokenTransfer

__all__ = [
    "ActivitySnapshot",
    "ChainDataFetcher",
    "ExplorerTransaction",
    "TokenTransfer",
]
