"""Infrastructure layer - API client, rate limiting, storage and reference data."""
from .api import PartitionRateLimiter, ResilientFetcher, TFTApiClient
from .catalog import ReferenceCatalog
from .repositories import SQLiteStore

__all__ = [
    'TFTApiClient',
    'ResilientFetcher',
    'PartitionRateLimiter',
    'ReferenceCatalog',
    'SQLiteStore',
]
