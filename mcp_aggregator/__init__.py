"""Aggregating router that fronts several MCP servers with one endpoint."""

__version__ = "1.0.0"
