"""Domain enumerations."""
from .region import Region
from .partition_status import PartitionStatus

__all__ = [
    'Region',
    'PartitionStatus',
]
