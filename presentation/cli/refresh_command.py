from __future__ import annotations

from typing import List, Optional

from application.use_cases import RefreshReport, RefreshStatsUseCase
from config import settings
from core.logging.logger import get_logger
from domain.enums import Region
from infrastructure import ReferenceCatalog, SQLiteStore, TFTApiClient
from .style import bold, cyan, green, rule, yellow


class RefreshCommand:
    """Runs one ingest-and-aggregate cycle (or an offline rebuild) and prints a report."""

    def __init__(self, regions: Optional[List[Region]] = None, matches_per_region: Optional[int] = None) -> None:
        self.regions = regions or Region.all_regions()
        self.matches_per_region = matches_per_region or settings.MATCHES_PER_REGION
        self._log = get_logger(__name__, service="refresh-cli")

    def _print_summary(self, offline: bool) -> None:
        print(rule())
        print(bold("REFRESH" if not offline else "REBUILD FROM CACHE"))
        print(rule())
        print(f"Regions: {', '.join(r.friendly for r in self.regions)}")
        if not offline:
            print(f"Matches per region: {self.matches_per_region}")
        print(f"Database: {settings.db_path()}")
        print(rule())

    async def run(self) -> int:
        settings.validate()
        settings.create_directories()
        self._print_summary(offline=False)
        store = SQLiteStore(settings.db_path())
        try:
            async with TFTApiClient(settings.RIOT_API_KEY) as api:
                use_case = RefreshStatsUseCase(api, store, ReferenceCatalog.from_directory(settings.MAPPING_DIR))
                report = await use_case.execute(self.regions, self.matches_per_region)
        finally:
            store.close()
        self._print_report(report)
        return 0 if report.total_matches else 1

    async def rebuild(self) -> int:
        settings.create_directories()
        self._print_summary(offline=True)
        store = SQLiteStore(settings.db_path())
        try:
            use_case = RefreshStatsUseCase(None, store, ReferenceCatalog.from_directory(settings.MAPPING_DIR))
            report = await use_case.rebuild_from_cache(self.regions)
        finally:
            store.close()
        self._print_report(report)
        return 0

    def _print_report(self, report: RefreshReport) -> None:
        print("")
        for region, count in report.matches_by_region.items():
            status = report.status_by_region.get(region, "?")
            label = green(status) if status == "active" else yellow(status)
            print(f"  {cyan(region):<20} {count:>4} matches  [{label}]")
        print(rule("─"))
        print(f"  Total matches: {bold(str(report.total_matches))}")
        print(f"  Stats saved:   {len(report.saved)}")
        if report.skipped:
            print(f"  Skipped:       {', '.join(report.skipped)}")
        self._log.info(lambda: f"report {report.to_dict()}")
