from __future__ import annotations

from typing import List

from application.services.aggregation import AggregationEngine, ComboDiscovery
from config import settings
from core.logging.logger import get_logger
from domain.entities import RawMatch
from infrastructure import ReferenceCatalog, SQLiteStore
from .style import bold, cyan, rule, yellow


class StatsCommand:
    """Read-side commands over the local database."""

    def __init__(self, region: str = "all", limit: int = 10) -> None:
        self.region = region
        self.limit = max(1, limit)
        self._log = get_logger(__name__, service="stats-cli")

    async def comps(self) -> int:
        store = SQLiteStore(settings.db_path())
        try:
            blob = await store.get_processed_stats("compositions", self.region)
        finally:
            store.close()
        if not blob:
            print(yellow(f"No composition stats for region '{self.region}'. Run 'refresh' or 'rebuild' first."))
            return 1

        summary = blob.get("summary") or {}
        print(rule())
        print(bold(f"TOP COMPOSITIONS - {self.region}"))
        print(f"Games: {summary.get('totalGames', 0)}  avg placement: {summary.get('avgPlacement', 0)}")
        print(rule())
        print(f"  {'Composition':<40} {'Count':>6} {'Avg':>6} {'Win%':>6} {'Top4%':>6}")
        for comp in (blob.get("compositions") or [])[: self.limit]:
            print(
                f"  {comp['name'][:40]:<40} {comp['count']:>6} {comp['avgPlacement']:>6.2f} "
                f"{comp['winRate']:>6.1f} {comp['top4Rate']:>6.1f}"
            )
        return 0

    async def combos(self, item_id: str) -> int:
        catalog = ReferenceCatalog.from_directory(settings.MAPPING_DIR)
        store = SQLiteStore(settings.db_path())
        try:
            payloads = await store.get_cached_matches(self.region)
        finally:
            store.close()
        matches: List[RawMatch] = [m for m in (RawMatch.from_api(p, self.region) for p in payloads) if m]
        stats = AggregationEngine(catalog, zero_fill_placements=settings.PLACEMENT_ZERO_FILL).aggregate(
            matches, self.region
        )
        combos = ComboDiscovery(stats).combos_for(item_id)
        self._log.debug(f"{len(combos)} combos for {item_id} over {len(matches)} cached matches")

        name = catalog.display_name(item_id, "item")
        print(rule())
        print(bold(f"ITEM COMBOS - {name} ({self.region})"))
        print(rule())
        if not combos:
            print(yellow("  No combos found."))
            return 1
        for combo in combos[: self.limit]:
            others = " + ".join(i.name for i in combo.items[1:])
            print(f"  {cyan(name)} + {others:<50} win {combo.win_rate:>5.1f}%  seen {combo.frequency}")
        return 0
