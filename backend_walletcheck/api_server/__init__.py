"""
API server package: HTTP interface.

Exposes the wallet engagement check to browser clients (CORS enabled) and
delegates to the analytics pipeline for the actual work.
"""
