"""Application services root exports."""
from .aggregation import AggregationEngine, ComboDiscovery
from .ingestion import IngestionOptions, IngestionOrchestrator

__all__ = [
    "AggregationEngine",
    "ComboDiscovery",
    "IngestionOptions",
    "IngestionOrchestrator",
]
