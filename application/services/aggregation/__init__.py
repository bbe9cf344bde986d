"""Aggregation: raw matches to processed statistics and item combos."""
from .aggregation_engine import AggregationEngine, clamp_placement, clamp_rate, composition_id
from .combos import ComboDiscovery

__all__ = [
    "AggregationEngine",
    "ComboDiscovery",
    "clamp_placement",
    "clamp_rate",
    "composition_id",
]
