"""Raw matches -> compositions, entity tables and item rankings.

The engine is a pure function of its input. Each pass reads the frozen output
of the previous one and builds new values; nothing is patched in place, so two
runs over the same corpus serialize to the same bytes.
"""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.logging import get_logger, timed
from domain.entities import (
    BestItem,
    Composition,
    CompositionItem,
    CompositionTrait,
    CompositionUnit,
    EntityStat,
    ItemRef,
    PlacementBucket,
    ProcessedStats,
    RawMatch,
    StatsSummary,
    UnitWithItem,
)
from infrastructure.catalog import ReferenceCatalog

logger = get_logger(__name__, service="aggregation")

OTHER = "Other"
MIN_GROUP_SIZE = 2
BEST_ITEMS_PER_UNIT = 3
TOP_COMPS = 5


def clamp_rate(value: float) -> float:
    return round(min(max(value, 0.0), 100.0), 1)


def clamp_placement(value: float) -> float:
    return round(min(max(value, 1.0), 8.0), 2)


def composition_id(name: str) -> str:
    return re.sub(r"\s+", "-", name).lower()


@dataclass
class _Tally:
    """Running placement totals for one key. Zero value is an empty tally."""

    count: int = 0
    placement_sum: int = 0
    wins: int = 0
    top4: int = 0

    def add(self, placement: int) -> None:
        self.count += 1
        self.placement_sum += placement
        self.wins += placement == 1
        self.top4 += placement <= 4

    @property
    def avg_placement(self) -> float:
        return clamp_placement(self.placement_sum / self.count) if self.count else 8.0

    @property
    def win_rate(self) -> float:
        return clamp_rate(self.wins / self.count * 100) if self.count else 0.0

    @property
    def top4_rate(self) -> float:
        return clamp_rate(self.top4 / self.count * 100) if self.count else 0.0


@dataclass
class _UnitItemTally(_Tally):
    comps: set = field(default_factory=set)


@dataclass(frozen=True)
class _Candidate:
    """One participant's board, resolved against the catalog."""

    id: str
    region: str
    placement: int
    traits: Tuple[CompositionTrait, ...]
    units: Tuple[Tuple[str, Tuple[str, ...]], ...]

    def unit_ids(self) -> List[str]:
        return list(dict.fromkeys(unit_id for unit_id, _ in self.units))


class AggregationEngine:
    """
    Builds ``ProcessedStats`` from a corpus of ``RawMatch`` values.

    Passes, in order:
      1. flatten participants into candidates
      2. name each candidate from its two biggest significant traits
      3. group by name, drop ``Other`` and groups below the noise floor
      4. per-group statistics and unit union
      5. best items per unit (whole corpus)
      6. units carrying each item (whole corpus) with related compositions
      7. unit, item and trait entity tables plus the summary

    Missing traits, items or costs never raise; they default to empty or zero.
    """

    def __init__(self, catalog: Optional[ReferenceCatalog] = None, *, zero_fill_placements: bool = False):
        self.catalog = catalog or ReferenceCatalog.empty()
        self.zero_fill_placements = zero_fill_placements

    @timed
    def aggregate(self, matches: Iterable[RawMatch], region: Optional[str] = None) -> ProcessedStats:
        selected = [m for m in matches if _in_region(m, region)]
        candidates = tuple(c for m in selected for c in self._flatten(m))
        if not candidates:
            logger.info(f"nothing to aggregate for region={region or 'all'}")
            return ProcessedStats.empty(region)

        names = tuple(self._name(c) for c in candidates)
        groups = self._group(candidates, names)
        compositions = tuple(self._composition(name, members, len(candidates)) for name, members in groups)

        comp_of = {
            c: composition_id(name)
            for name, members in groups
            for c in members
        }
        best_items = self._best_items(candidates)
        units_with_item = self._units_with_item(candidates, comp_of)
        compositions = tuple(self._attach(comp, best_items, units_with_item) for comp in compositions)

        summary = StatsSummary(
            total_games=len(selected),
            avg_placement=clamp_placement(sum(c.placement for c in candidates) / len(candidates)),
            top_comps=tuple(c.id for c in compositions[:TOP_COMPS]),
        )
        logger.debug(
            f"aggregated {len(selected)} matches / {len(candidates)} boards into "
            f"{len(compositions)} compositions (region={region or 'all'})"
        )
        return ProcessedStats(
            region=region,
            compositions=compositions,
            units=self._entity_table("unit", candidates, lambda c: c.unit_ids()),
            items=self._entity_table("item", candidates, lambda c: [i for _, items in c.units for i in items]),
            traits=self._entity_table("trait", candidates, lambda c: [t.id for t in c.traits]),
            summary=summary,
        )

    # ------------------------------------------------------------------ #
    # Pass 1-3: candidates, names, groups
    # ------------------------------------------------------------------ #

    def _flatten(self, match: RawMatch) -> Iterable[_Candidate]:
        for participant in match.participants:
            placement = min(max(participant.placement, 1), 8)
            traits = sorted(
                (
                    CompositionTrait(
                        id=t.trait_id,
                        name=self.catalog.display_name(t.trait_id, "trait"),
                        icon=self.catalog.icon(t.trait_id, "trait"),
                        tier=t.tier,
                        num_units=t.unit_count,
                    )
                    for t in participant.traits
                    if t.trait_id and t.tier >= 1
                ),
                key=lambda t: (-t.tier, t.name, t.id),
            )
            units = tuple((u.unit_id, u.item_ids) for u in participant.units if u.unit_id)
            yield _Candidate(
                id=f"{match.id}-{placement}",
                region=match.region,
                placement=placement,
                traits=tuple(traits),
                units=units,
            )

    @staticmethod
    def _name(candidate: _Candidate) -> str:
        significant = sorted(
            (t for t in candidate.traits if t.tier > 1 and t.num_units > 1),
            key=lambda t: (-t.num_units, t.name),
        )[:2]
        return " & ".join(f"{t.num_units} {t.name}" for t in significant) or OTHER

    @staticmethod
    def _group(candidates: Sequence[_Candidate], names: Sequence[str]) -> List[Tuple[str, Tuple[_Candidate, ...]]]:
        buckets: Dict[str, List[_Candidate]] = {}
        for name, candidate in zip(names, candidates):
            buckets.setdefault(name, []).append(candidate)

        groups = [
            (name, tuple(members))
            for name, members in buckets.items()
            if name != OTHER and len(members) >= MIN_GROUP_SIZE
        ]
        dropped = sum(1 for name, m in buckets.items() if name != OTHER and len(m) < MIN_GROUP_SIZE)
        if dropped:
            logger.trace(lambda: f"{dropped} single-board groups below the noise floor")
        groups.sort(key=lambda g: (-len(g[1]), composition_id(g[0])))
        return groups

    # ------------------------------------------------------------------ #
    # Pass 4: per-group statistics
    # ------------------------------------------------------------------ #

    def _composition(self, name: str, members: Sequence[_Candidate], total: int) -> Composition:
        tally = _Tally()
        for member in members:
            tally.add(member.placement)

        placements = Counter(m.placement for m in members)
        span = range(1, 9) if self.zero_fill_placements else sorted(placements)
        placement_data = tuple(PlacementBucket(p, placements.get(p, 0)) for p in span)

        traits: Dict[str, CompositionTrait] = {}
        for member in members:
            for trait in member.traits:
                traits.setdefault(trait.id, trait)
        ordered_traits = tuple(sorted(traits.values(), key=lambda t: (-t.tier, t.name, t.id)))
        significant = [t for t in ordered_traits if t.tier > 1]
        icon_trait = significant[0] if significant else (ordered_traits[0] if ordered_traits else None)

        regions = Counter(m.region for m in members)
        return Composition(
            id=composition_id(name),
            name=name,
            icon=icon_trait.icon if icon_trait else "",
            count=len(members),
            avg_placement=tally.avg_placement,
            win_rate=tally.win_rate,
            top4_rate=tally.top4_rate,
            play_rate=clamp_rate(len(members) / total * 100),
            placement_data=placement_data,
            units=self._member_units(members),
            traits=ordered_traits,
            regions=tuple(sorted(regions.items())),
        )

    def _member_units(self, members: Sequence[_Candidate]) -> Tuple[CompositionUnit, ...]:
        counts: Counter = Counter()
        loadouts: Dict[str, Tuple[str, ...]] = {}
        for member in members:
            for unit_id, item_ids in member.units:
                counts[unit_id] += 1
                loadouts.setdefault(unit_id, item_ids)

        units = [
            CompositionUnit(
                id=unit_id,
                name=self.catalog.display_name(unit_id, "unit"),
                icon=self.catalog.icon(unit_id, "unit"),
                cost=self.catalog.unit_cost(unit_id),
                count=count,
                items=tuple(CompositionItem(self._item_ref(i)) for i in dict.fromkeys(loadouts[unit_id])),
            )
            for unit_id, count in counts.items()
        ]
        units.sort(key=lambda u: (-u.count, -u.cost, u.id))
        return tuple(units)

    # ------------------------------------------------------------------ #
    # Pass 5-6: corpus-wide unit/item rankings
    # ------------------------------------------------------------------ #

    def _best_items(self, candidates: Sequence[_Candidate]) -> Dict[str, Tuple[BestItem, ...]]:
        per_unit: Dict[str, Dict[str, _Tally]] = {}
        for candidate in candidates:
            for unit_id, item_ids in candidate.units:
                slots = per_unit.setdefault(unit_id, {})
                for item_id in dict.fromkeys(item_ids):
                    slots.setdefault(item_id, _Tally()).add(candidate.placement)

        ranked: Dict[str, Tuple[BestItem, ...]] = {}
        for unit_id, slots in per_unit.items():
            entries = sorted(slots.items(), key=lambda kv: (-kv[1].win_rate, -kv[1].count, kv[0]))
            ranked[unit_id] = tuple(
                BestItem(
                    item=self._item_ref(item_id),
                    count=t.count,
                    win_rate=t.win_rate,
                    top4_rate=t.top4_rate,
                    avg_placement=t.avg_placement,
                )
                for item_id, t in entries[:BEST_ITEMS_PER_UNIT]
            )
        return ranked

    def _units_with_item(
        self,
        candidates: Sequence[_Candidate],
        comp_of: Dict[_Candidate, str],
    ) -> Dict[str, Tuple[UnitWithItem, ...]]:
        per_item: Dict[str, Dict[str, _UnitItemTally]] = {}
        for candidate in candidates:
            comp = comp_of.get(candidate)
            for unit_id, item_ids in candidate.units:
                for item_id in dict.fromkeys(item_ids):
                    tally = per_item.setdefault(item_id, {}).setdefault(unit_id, _UnitItemTally())
                    tally.add(candidate.placement)
                    if comp:
                        tally.comps.add(comp)

        table: Dict[str, Tuple[UnitWithItem, ...]] = {}
        for item_id, units in per_item.items():
            rows = [
                UnitWithItem(
                    id=unit_id,
                    name=self.catalog.display_name(unit_id, "unit"),
                    icon=self.catalog.icon(unit_id, "unit"),
                    cost=self.catalog.unit_cost(unit_id),
                    count=t.count,
                    win_rate=t.win_rate,
                    top4_rate=t.top4_rate,
                    avg_placement=t.avg_placement,
                    related_comps=tuple(sorted(t.comps)),
                )
                for unit_id, t in units.items()
            ]
            rows.sort(key=lambda u: (-u.win_rate, -u.count, u.id))
            table[item_id] = tuple(rows)
        return table

    @staticmethod
    def _attach(
        comp: Composition,
        best_items: Dict[str, Tuple[BestItem, ...]],
        units_with_item: Dict[str, Tuple[UnitWithItem, ...]],
    ) -> Composition:
        units = tuple(
            replace(
                unit,
                best_items=best_items.get(unit.id, ()),
                items=tuple(
                    replace(item, units_with_item=units_with_item.get(item.id, ()))
                    for item in unit.items
                ),
            )
            for unit in comp.units
        )
        return replace(comp, units=units)

    # ------------------------------------------------------------------ #
    # Pass 7: entity tables
    # ------------------------------------------------------------------ #

    def _entity_table(self, kind, candidates, keys_of) -> Tuple[EntityStat, ...]:
        tallies: Dict[str, _Tally] = {}
        for candidate in candidates:
            for key in keys_of(candidate):
                tallies.setdefault(key, _Tally()).add(candidate.placement)

        total = len(candidates)
        stats = [
            EntityStat(
                kind=kind,
                id=entity_id,
                name=self.catalog.display_name(entity_id, kind),
                icon=self.catalog.icon(entity_id, kind),
                count=t.count,
                avg_placement=t.avg_placement,
                win_rate=t.win_rate,
                top4_rate=t.top4_rate,
                play_rate=clamp_rate(t.count / total * 100),
            )
            for entity_id, t in tallies.items()
        ]
        stats.sort(key=lambda e: (-e.count, e.id))
        return tuple(stats)

    def _item_ref(self, item_id: str) -> ItemRef:
        return ItemRef(
            id=item_id,
            name=self.catalog.display_name(item_id, "item"),
            icon=self.catalog.icon(item_id, "item"),
            category=self.catalog.item_category(item_id),
        )


def _in_region(match: RawMatch, region: Optional[str]) -> bool:
    if not region or region.lower() == "all":
        return True
    return match.region.lower() == region.lower()
