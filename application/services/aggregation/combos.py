"""Complementary item pairs for a main item."""
from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List

from core.logging import get_logger
from domain.entities import CompositionItem, ItemCombo, ItemRef, ProcessedStats

logger = get_logger(__name__, service="combos")

PAIR_CANDIDATES = 5


@dataclass
class _Pairing:
    item: ItemRef
    count: int = 0
    total_win_rate: float = 0.0

    @property
    def avg_win_rate(self) -> float:
        return self.total_win_rate / self.count if self.count else 0.0


class ComboDiscovery:
    """
    Walks the units-using-item graph of an aggregation result.

    For a main item: every unit that carried it, every composition that unit
    was seen in, that unit's loadout there. Items sharing the loadout are
    tallied; the five most frequent are paired up and each pair becomes a
    three-item combo scored by the mean of the two average composition win
    rates.
    """

    def __init__(self, stats: ProcessedStats):
        self.stats = stats
        self._items: Dict[str, CompositionItem] = {}
        for comp in stats.compositions:
            for unit in comp.units:
                for item in unit.items:
                    self._items.setdefault(item.id, item)

    def item_ids(self) -> List[str]:
        return sorted(self._items)

    def combos_for(self, item_id: str) -> List[ItemCombo]:
        main = self._items.get(item_id)
        if main is None or not main.units_with_item:
            return []

        pairings: Dict[str, _Pairing] = {}
        for usage in main.units_with_item:
            for comp_id in usage.related_comps:
                comp = self.stats.composition(comp_id)
                unit = comp.unit(usage.id) if comp else None
                if unit is None or item_id not in unit.item_ids():
                    continue
                for other in unit.items:
                    if other.id == item_id:
                        continue
                    pairing = pairings.setdefault(other.id, _Pairing(other.item))
                    pairing.count += 1
                    pairing.total_win_rate += comp.win_rate

        # stable sort keeps first-seen order among equal counts
        top = sorted(pairings.values(), key=lambda p: -p.count)[:PAIR_CANDIDATES]
        scored = []
        for first, second in combinations(top, 2):
            win_rate = (first.avg_win_rate + second.avg_win_rate) / 2
            if win_rate > 0:
                scored.append((win_rate, first, second))
        # rank on the unrounded rate; round only for output
        scored.sort(key=lambda s: -s[0])
        combos = [
            ItemCombo(
                main_item=main.item,
                items=(main.item, first.item, second.item),
                win_rate=round(win_rate, 1),
                frequency=first.count + second.count,
            )
            for win_rate, first, second in scored
        ]
        logger.trace(lambda: f"{item_id}: {len(pairings)} pairing items, {len(combos)} combos")
        return combos

    def all_combos(self) -> Dict[str, List[ItemCombo]]:
        return {item_id: self.combos_for(item_id) for item_id in self.item_ids()}
