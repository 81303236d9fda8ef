"""Request routing and aggregation engine."""

from .aggregator import ToolCatalogAggregator
from .classifier import ToolClassifier
from .router import AggregatorRouter

__all__ = ["AggregatorRouter", "ToolCatalogAggregator", "ToolClassifier"]
