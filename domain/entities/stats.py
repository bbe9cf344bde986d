"""Derived statistics produced by the aggregation engine.

Everything here is frozen and rebuilt from scratch on every aggregation run.
``to_dict`` emits the camelCase blobs stored as processed stats.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlacementBucket:
    placement: int
    count: int

    def to_dict(self) -> dict:
        return {'placement': self.placement, 'count': self.count}


@dataclass(frozen=True)
class ItemRef:
    id: str
    name: str
    icon: str
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'icon': self.icon, 'category': self.category}


@dataclass(frozen=True)
class BestItem:
    """An item ranked for one unit across the whole corpus."""

    item: ItemRef
    count: int
    win_rate: float
    top4_rate: float
    avg_placement: float

    def to_dict(self) -> dict:
        return {
            **self.item.to_dict(),
            'stats': {
                'count': self.count,
                'winRate': self.win_rate,
                'top4Rate': self.top4_rate,
                'avgPlacement': self.avg_placement,
            },
        }


@dataclass(frozen=True)
class UnitWithItem:
    """How one unit performs while carrying a given item."""

    id: str
    name: str
    icon: str
    cost: int
    count: int
    win_rate: float
    top4_rate: float
    avg_placement: float
    related_comps: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'cost': self.cost,
            'count': self.count,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'avgPlacement': self.avg_placement,
            'relatedComps': list(self.related_comps),
        }


@dataclass(frozen=True)
class CompositionItem:
    item: ItemRef
    units_with_item: tuple[UnitWithItem, ...] = ()

    @property
    def id(self) -> str:
        return self.item.id

    def to_dict(self) -> dict:
        return {**self.item.to_dict(), 'unitsWithItem': [u.to_dict() for u in self.units_with_item]}


@dataclass(frozen=True)
class CompositionUnit:
    id: str
    name: str
    icon: str
    cost: int
    count: int
    items: tuple[CompositionItem, ...] = ()
    best_items: tuple[BestItem, ...] = ()

    def item_ids(self) -> list[str]:
        return [i.id for i in self.items]

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'cost': self.cost,
            'count': self.count,
            'items': [i.to_dict() for i in self.items],
            'bestItems': [b.to_dict() for b in self.best_items],
        }


@dataclass(frozen=True)
class CompositionTrait:
    id: str
    name: str
    icon: str
    tier: int
    num_units: int

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'tier': self.tier,
            'numUnits': self.num_units,
        }


@dataclass(frozen=True)
class Composition:
    """A named archetype built from at least two participants."""

    id: str
    name: str
    icon: str
    count: int
    avg_placement: float
    win_rate: float
    top4_rate: float
    play_rate: float
    placement_data: tuple[PlacementBucket, ...]
    units: tuple[CompositionUnit, ...]
    traits: tuple[CompositionTrait, ...]
    regions: tuple[tuple[str, int], ...] = ()

    def unit(self, unit_id: str) -> Optional[CompositionUnit]:
        return next((u for u in self.units if u.id == unit_id), None)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'count': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'playRate': self.play_rate,
            'placementData': [b.to_dict() for b in self.placement_data],
            'units': [u.to_dict() for u in self.units],
            'traits': [t.to_dict() for t in self.traits],
            'regions': dict(self.regions),
        }


@dataclass(frozen=True)
class EntityStat:
    """Per-unit, per-item or per-trait performance over all participants."""

    kind: str
    id: str
    name: str
    icon: str
    count: int
    avg_placement: float
    win_rate: float
    top4_rate: float
    play_rate: float

    def to_dict(self) -> dict:
        return {
            'type': self.kind,
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'count': self.count,
            'avgPlacement': self.avg_placement,
            'winRate': self.win_rate,
            'top4Rate': self.top4_rate,
            'playRate': self.play_rate,
        }


@dataclass(frozen=True)
class ItemCombo:
    main_item: ItemRef
    items: tuple[ItemRef, ...]
    win_rate: float
    frequency: int

    def to_dict(self) -> dict:
        return {
            'mainItem': self.main_item.to_dict(),
            'items': [i.to_dict() for i in self.items],
            'winRate': self.win_rate,
            'frequency': self.frequency,
        }


@dataclass(frozen=True)
class StatsSummary:
    total_games: int
    avg_placement: float
    top_comps: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            'totalGames': self.total_games,
            'avgPlacement': self.avg_placement,
            'topComps': list(self.top_comps),
        }


@dataclass(frozen=True)
class ProcessedStats:
    region: Optional[str]
    compositions: tuple[Composition, ...]
    units: tuple[EntityStat, ...]
    items: tuple[EntityStat, ...]
    traits: tuple[EntityStat, ...]
    summary: StatsSummary

    @classmethod
    def empty(cls, region: Optional[str] = None) -> 'ProcessedStats':
        return cls(
            region=region,
            compositions=(),
            units=(),
            items=(),
            traits=(),
            summary=StatsSummary(total_games=0, avg_placement=0.0),
        )

    @property
    def is_empty(self) -> bool:
        return self.summary.total_games == 0

    def composition(self, comp_id: str) -> Optional[Composition]:
        return next((c for c in self.compositions if c.id == comp_id), None)

    def entities(self, kind: str) -> tuple[EntityStat, ...]:
        """Entity table by store type name (``units``, ``items`` or ``traits``)."""
        return {'units': self.units, 'items': self.items, 'traits': self.traits}[kind]

    def to_dict(self) -> dict:
        return {
            'region': self.region,
            'compositions': [c.to_dict() for c in self.compositions],
            'summary': self.summary.to_dict(),
        }

    def entities_to_dict(self, kind: str) -> dict:
        return {'region': self.region, 'entities': [e.to_dict() for e in self.entities(kind)]}
