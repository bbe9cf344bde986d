"""Use case for refreshing processed stats - ingest, aggregate, persist, prune."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from application.services.aggregation import AggregationEngine
from application.services.ingestion import IngestionOptions, IngestionOrchestrator
from config import settings
from core.logging import get_logger, log_context
from domain.entities import ProcessedStats, RawMatch
from domain.enums import PartitionStatus, Region
from domain.interfaces import IMatchStore
from infrastructure import ReferenceCatalog, TFTApiClient

logger = get_logger(__name__, service="refresh")

STAT_TYPES = ("compositions", "units", "items", "traits")
GLOBAL_REGION = "all"


@dataclass
class RefreshReport:
    matches_by_region: Dict[str, int] = field(default_factory=dict)
    status_by_region: Dict[str, str] = field(default_factory=dict)
    saved: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return sum(self.matches_by_region.values())

    def to_dict(self) -> dict:
        return {
            "totalMatches": self.total_matches,
            "matchesByRegion": dict(self.matches_by_region),
            "statusByRegion": dict(self.status_by_region),
            "saved": list(self.saved),
            "skipped": list(self.skipped),
        }


class RefreshStatsUseCase:
    """
    One refresh cycle over a set of regions.

    Regions run one after another; each region's corpus is aggregated on its
    own when it is big enough, and the union of all regions feeds the global
    ``all`` stats. Stats are recomputed from scratch every cycle.
    """

    def __init__(
        self,
        api: Optional[TFTApiClient],
        store: IMatchStore,
        catalog: Optional[ReferenceCatalog] = None,
        *,
        options: Optional[IngestionOptions] = None,
        engine: Optional[AggregationEngine] = None,
    ):
        self.store = store
        self.engine = engine or AggregationEngine(catalog, zero_fill_placements=settings.PLACEMENT_ZERO_FILL)
        self.orchestrator = IngestionOrchestrator(api, store, options) if api is not None else None

    async def execute(self, regions: Optional[List[Region]] = None, matches_per_region: int = 30) -> RefreshReport:
        if self.orchestrator is None:
            raise RuntimeError("refresh needs an API client; use rebuild_from_cache for offline runs")
        regions = regions or Region.all_regions()
        report = RefreshReport()
        corpus: List[RawMatch] = []

        with log_context(job="refresh"):
            for region in regions:
                if region.value.upper() in settings.DISABLED_REGIONS:
                    logger.info(f"region {region.value} disabled, skipping")
                    report.skipped.append(region.value)
                    continue

                matches = await self.orchestrator.process_region(region, matches_per_region)
                partition = self.orchestrator.partition(region)
                report.matches_by_region[region.value] = len(matches)
                report.status_by_region[region.value] = partition.status.value
                corpus.extend(matches)
                await self._save_region(region.value, matches, report)

            await self._save_global(corpus, report)
            await self.store.cleanup_old_data(settings.STATS_RETENTION_DAYS)

        logger.success(f"refresh done: {report.total_matches} matches, {len(report.saved)} stats blobs")
        return report

    async def rebuild_from_cache(self, regions: Optional[List[Region]] = None) -> RefreshReport:
        """Re-aggregate cached matches without touching the network."""
        regions = regions or Region.all_regions()
        report = RefreshReport()
        corpus: List[RawMatch] = []

        with log_context(job="rebuild"):
            for region in regions:
                payloads = await self.store.get_cached_matches(region.value)
                matches = list(_parse(payloads, region.value))
                report.matches_by_region[region.value] = len(matches)
                report.status_by_region[region.value] = PartitionStatus.ACTIVE.value if matches else "empty"
                corpus.extend(matches)
                await self._save_region(region.value, matches, report)
            await self._save_global(corpus, report)

        logger.success(f"rebuild done: {report.total_matches} cached matches")
        return report

    async def _save_region(self, region: str, matches: List[RawMatch], report: RefreshReport) -> None:
        if len(matches) < settings.MIN_REGION_MATCHES:
            logger.warning(f"only {len(matches)} matches for {region}, region stats not updated")
            report.skipped.append(region)
            return
        await self._save(self.engine.aggregate(matches, region), region, report)

    async def _save_global(self, corpus: List[RawMatch], report: RefreshReport) -> None:
        if len(corpus) < settings.MIN_GLOBAL_MATCHES:
            logger.warning(f"only {len(corpus)} matches overall, global stats not updated")
            report.skipped.append(GLOBAL_REGION)
            return
        await self._save(self.engine.aggregate(corpus, GLOBAL_REGION), GLOBAL_REGION, report)

    async def _save(self, stats: ProcessedStats, region: str, report: RefreshReport) -> None:
        for stats_type in STAT_TYPES:
            payload = stats.to_dict() if stats_type == "compositions" else stats.entities_to_dict(stats_type)
            if await self.store.save_processed_stats(stats_type, region, payload):
                report.saved.append(f"{stats_type}/{region}")
            else:
                logger.error(f"could not save {stats_type} stats for {region}")


def _parse(payloads: Iterable[dict], region: str) -> Iterable[RawMatch]:
    for payload in payloads:
        match = RawMatch.from_api(payload, region)
        if match is not None:
            yield match
