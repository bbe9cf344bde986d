"""Riot Games TFT API client."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import settings
from domain.enums import Region
from .fetcher import ResilientFetcher, Sleep
from .rate_limiter import PartitionRateLimiter
from .retry_policy import FetchOptions

logger = logging.getLogger(__name__)


class TFTApiClient:
    """Asynchronous TFT API client; every call goes through the resilient fetcher."""

    def __init__(
        self,
        api_key: str,
        *,
        rate_limiter: Optional[PartitionRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
        options: Optional[FetchOptions] = None,
    ):
        # injected limiters belong to the caller
        self._owns_limiter = rate_limiter is None
        self.rate_limiter = rate_limiter or PartitionRateLimiter.from_settings()
        self.fetcher = ResilientFetcher(api_key, self.rate_limiter, sleep=sleep, options=options)
        self._transport = transport
        self.session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.session = httpx.AsyncClient(transport=self._transport)
        self.fetcher.client = self.session
        return self

    async def __aexit__(self, *_):
        if self.session:
            await self.session.aclose()
            self.session = None
        self.fetcher.client = None
        if self._owns_limiter:
            self.rate_limiter.close()

    @property
    def last_status_code(self) -> Optional[int]:
        return self.fetcher.last_status_code

    def _get_platform_url(self, region: Region) -> str:
        return f"https://{region.platform_route}.api.riotgames.com"

    def _get_regional_url(self, region: Region) -> str:
        return f"https://{region.regional_route}.api.riotgames.com"

    async def _get(self, url: str, *, max_retries: int, timeout_ms: int) -> Optional[Any]:
        opts = self.fetcher.options.with_overrides(max_retries=max_retries, timeout_ms=timeout_ms)
        return await self.fetcher.fetch(url, opts)

    # ── League API ─────────────────────────────────────────────────────

    async def get_master_league(self, region: Region) -> Optional[Dict]:
        url = f"{self._get_platform_url(region)}/tft/league/v1/master"
        data = await self._get(url, max_retries=settings.MAX_RETRIES, timeout_ms=settings.LEAGUE_TIMEOUT_MS)
        return data if isinstance(data, dict) else None

    # ── Summoner API ───────────────────────────────────────────────────

    async def get_summoner(self, region: Region, summoner_id: str) -> Optional[Dict]:
        url = f"{self._get_platform_url(region)}/tft/summoner/v1/summoners/{summoner_id}"
        data = await self._get(url, max_retries=settings.SUMMONER_RETRIES, timeout_ms=settings.SUMMONER_TIMEOUT_MS)
        return data if isinstance(data, dict) else None

    # ── Match API ──────────────────────────────────────────────────────

    async def get_match_ids(self, region: Region, puuid: str, count: int = 20) -> List[str]:
        url = (
            f"{self._get_regional_url(region)}/tft/match/v1/matches/by-puuid/{puuid}/ids"
            f"?count={min(count, 200)}"
        )
        data = await self._get(url, max_retries=settings.MATCH_RETRIES, timeout_ms=settings.REQUEST_TIMEOUT_MS)
        return [str(m) for m in data] if isinstance(data, list) else []

    async def get_match(self, region: Region, match_id: str) -> Optional[Dict]:
        url = f"{self._get_regional_url(region)}/tft/match/v1/matches/{match_id}"
        data = await self._get(url, max_retries=settings.MATCH_RETRIES, timeout_ms=settings.MATCH_TIMEOUT_MS)
        return data if isinstance(data, dict) else None
