"""Core MCP Aggregator application."""

from .manager import MCPAggregator

__all__ = ["MCPAggregator"]
