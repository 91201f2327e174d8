"""
Core utilities: shared exceptions and cross-cutting concerns used by the
chain fetcher, the analytics layer and the API server.
"""
