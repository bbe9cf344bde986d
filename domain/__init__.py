"""Domain layer - Match records, derived statistics, enums and interfaces."""
from .entities import Composition, EntityStat, ItemCombo, Partition, ProcessedStats, RawMatch
from .enums import PartitionStatus, Region
from .interfaces import IMatchStore

__all__ = [
    # Entities
    'RawMatch',
    'Partition',
    'Composition',
    'EntityStat',
    'ItemCombo',
    'ProcessedStats',
    # Enums
    'Region',
    'PartitionStatus',
    # Interfaces
    'IMatchStore',
]
