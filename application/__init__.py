"""Application layer - Services and use cases."""
from .services import AggregationEngine, ComboDiscovery, IngestionOrchestrator
from .use_cases import RefreshReport, RefreshStatsUseCase

__all__ = [
    'AggregationEngine',
    'ComboDiscovery',
    'IngestionOrchestrator',
    'RefreshReport',
    'RefreshStatsUseCase',
]
