"""Infrastructure API module."""
from .fetcher import ResilientFetcher, partition_for
from .rate_limiter import DualWindowLimiter, PartitionRateLimiter, SlidingWindowLimiter
from .retry_policy import BackoffPolicy, FetchOptions
from .riot_client import TFTApiClient

__all__ = [
    'TFTApiClient',
    'ResilientFetcher',
    'partition_for',
    'SlidingWindowLimiter',
    'DualWindowLimiter',
    'PartitionRateLimiter',
    'BackoffPolicy',
    'FetchOptions',
]
