"""
Backend WalletCheck: on-chain engagement scoring for airdrop allocation.

Looks up an EVM address on public JSON-RPC nodes (and optionally a block
explorer), derives activity statistics, and maps them to a point score and
a capped token allocation. Stateless: every request is recomputed.
"""

__version__ = "0.1.0"
