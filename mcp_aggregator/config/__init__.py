"""Configuration system for the MCP aggregator."""

from .manager import ConfigManager, default_config
from .models import (
    AggregatorConfig,
    BackendConfig,
    ManagerConfig,
    RoutingConfig,
    RuntimeConfig,
)

__all__ = [
    "AggregatorConfig",
    "BackendConfig",
    "ConfigManager",
    "ManagerConfig",
    "RoutingConfig",
    "RuntimeConfig",
    "default_config",
]
