"""Domain entities."""
from .match import MatchParticipant, RawMatch, TraitActivation, UnitSlot
from .partition import Partition
from .stats import (
    BestItem,
    Composition,
    CompositionItem,
    CompositionTrait,
    CompositionUnit,
    EntityStat,
    ItemCombo,
    ItemRef,
    PlacementBucket,
    ProcessedStats,
    StatsSummary,
    UnitWithItem,
)

__all__ = [
    'RawMatch',
    'MatchParticipant',
    'UnitSlot',
    'TraitActivation',
    'Partition',
    'BestItem',
    'Composition',
    'CompositionItem',
    'CompositionTrait',
    'CompositionUnit',
    'EntityStat',
    'ItemCombo',
    'ItemRef',
    'PlacementBucket',
    'ProcessedStats',
    'StatsSummary',
    'UnitWithItem',
]
