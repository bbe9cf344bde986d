"""Per-region ingestion: leaderboard -> players -> match ids -> match details."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from config import settings
from core.logging import get_logger, log_context
from domain.entities import Partition, RawMatch
from domain.enums import PartitionStatus, Region
from domain.interfaces import IMatchStore
from infrastructure.api import TFTApiClient

logger = get_logger(__name__, service="ingestion")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class IngestionOptions:
    leaderboard_sample_size: int = 4
    match_list_circuit_limit: int = 2
    ids_per_player: int = 20
    match_batch_size: int = 4
    inter_batch_delay_ms: int = 150

    @classmethod
    def from_settings(cls) -> 'IngestionOptions':
        return cls(
            leaderboard_sample_size=settings.LEADERBOARD_SAMPLE_SIZE,
            match_list_circuit_limit=settings.MATCH_LIST_CIRCUIT_LIMIT,
            ids_per_player=settings.IDS_PER_PLAYER,
            match_batch_size=settings.MATCH_BATCH_SIZE,
            inter_batch_delay_ms=settings.INTER_BATCH_DELAY_MS,
        )


class _Degraded(Exception):
    """Internal signal: stop the run and record DEGRADED with this reason."""


class IngestionOrchestrator:
    """
    Collects a bounded, de-duplicated batch of matches for one region.

    Run state machine: processing -> active | degraded | error.
    - degraded: an upstream stage returned nothing usable (not an error).
    - error: an unexpected exception (including AuthError); whatever was
      collected before it is still returned.
    process_region never raises; the outcome lives in ``partitions``.
    """

    def __init__(
        self,
        api: TFTApiClient,
        store: IMatchStore,
        options: Optional[IngestionOptions] = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ):
        self.api = api
        self.store = store
        self.options = options or IngestionOptions.from_settings()
        self._sleep = sleep
        self.partitions: Dict[Region, Partition] = {}

    def partition(self, region: Region) -> Partition:
        if region not in self.partitions:
            self.partitions[region] = Partition(region=region)
        return self.partitions[region]

    async def process_region(self, region: Region, matches_per_region: int = 50) -> List[RawMatch]:
        collected: List[RawMatch] = []
        with log_context(region=region.value, job="ingest"):
            logger.info(f"Processing region {region.value}...")
            try:
                await self._set_status(region, PartitionStatus.PROCESSING)

                puuids = await self._discover_players(region)
                match_ids = await self._collect_match_ids(region, puuids, matches_per_region)
                logger.info(f"Fetching {len(match_ids)} matches for {region.value}...")
                await self._fetch_details(region, match_ids, collected)

                await self._set_status(region, PartitionStatus.ACTIVE)
                logger.success(f"region {region.value} done: {len(collected)} matches")
            except _Degraded as reason:
                logger.warning(f"{region.value} degraded: {reason}")
                await self._record_failure(region, PartitionStatus.DEGRADED, str(reason))
            except Exception as exc:
                logger.exception(f"Error processing region {region.value}: {exc}")
                await self._record_failure(region, PartitionStatus.ERROR, str(exc) or exc.__class__.__name__)
        return collected

    # ------------------------------------------------------------------ #
    # Stages
    # ------------------------------------------------------------------ #

    async def _discover_players(self, region: Region) -> List[str]:
        league = await self.api.get_master_league(region)
        entries = [e for e in (league or {}).get("entries") or [] if isinstance(e, dict)]
        if not entries:
            raise _Degraded("No league data available")

        top = sorted(entries, key=lambda e: e.get("leaguePoints") or 0, reverse=True)
        top = top[: self.options.leaderboard_sample_size]
        summoner_ids = [e.get("summonerId") for e in top if e.get("summonerId")]
        if not summoner_ids:
            raise _Degraded("No players found")

        summoners, failures = _settled(await asyncio.gather(
            *[self.api.get_summoner(region, sid) for sid in summoner_ids],
            return_exceptions=True,
        ))
        if failures:
            raise failures[0]
        puuids = [s["puuid"] for s in summoners if s and s.get("puuid")]
        if not puuids:
            raise _Degraded("No summoner data available")
        logger.debug(f"{len(puuids)}/{len(summoner_ids)} summoners resolved")
        return puuids

    async def _collect_match_ids(self, region: Region, puuids: List[str], limit: int) -> List[str]:
        # Stop once enough players produced a history.
        lists: List[List[str]] = []
        for puuid in puuids:
            if len(lists) >= self.options.match_list_circuit_limit:
                break
            ids = await self.api.get_match_ids(region, puuid, count=self.options.ids_per_player)
            if ids:
                lists.append(ids)

        unique = list(dict.fromkeys(mid for ids in lists for mid in ids))[: max(0, limit)]
        if not unique:
            raise _Degraded("No matches found")
        return unique

    async def _fetch_details(self, region: Region, match_ids: List[str], out: List[RawMatch]) -> None:
        size = max(1, self.options.match_batch_size)
        for start in range(0, len(match_ids), size):
            batch = match_ids[start:start + size]
            # every request in the batch settles before the batch is judged
            payloads, failures = _settled(await asyncio.gather(
                *[self.api.get_match(region, mid) for mid in batch],
                return_exceptions=True,
            ))

            for payload in payloads:
                if not payload:
                    continue
                match = RawMatch.from_api(payload, region.value)
                if match is None:
                    logger.warning("match payload without id skipped")
                    continue
                # persist now so a later failure in this run keeps earlier progress
                await self.store.save_match(match.id, region.value, payload)
                out.append(match)

            if failures:
                logger.warning(f"{len(failures)}/{len(batch)} match requests failed in this batch")
                raise failures[0]

            if start + size < len(match_ids):
                await self._sleep(self.options.inter_batch_delay_ms / 1000.0)

    async def _set_status(self, region: Region, status: PartitionStatus, error: Optional[str] = None) -> None:
        self.partition(region).mark(status, error)
        await self.store.update_partition_status(region.value, status, error)

    async def _record_failure(self, region: Region, status: PartitionStatus, error: str) -> None:
        try:
            await self._set_status(region, status, error)
        except Exception as exc:
            # the run outcome is already on self.partitions; a store outage must not escape
            logger.error(f"could not persist {status.value} status for {region.value}: {exc}")


def _settled(results: List[Any]) -> Tuple[List[Any], List[BaseException]]:
    """Split ``gather(..., return_exceptions=True)`` output into values and failures."""
    values = [r for r in results if not isinstance(r, BaseException)]
    failures = [r for r in results if isinstance(r, BaseException)]
    return values, failures
