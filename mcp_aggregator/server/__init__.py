"""HTTP serving of the aggregator endpoint."""

from .app import CORS_HEADERS, create_app

__all__ = ["CORS_HEADERS", "create_app"]
