"""Use cases."""
from .refresh_stats import RefreshReport, RefreshStatsUseCase

__all__ = ['RefreshReport', 'RefreshStatsUseCase']
