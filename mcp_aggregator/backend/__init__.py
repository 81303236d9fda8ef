"""Transport to the backend MCP servers."""

from .client import BackendClient

__all__ = ["BackendClient"]
