"""Rate-limited GET with timeout, retry and typed failure handling."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from config import settings
from core.errors import AuthError, ConfigError, RequestError, TransientNetworkError
from .rate_limiter import PartitionRateLimiter
from .retry_policy import BackoffPolicy, FetchOptions, parse_retry_after

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def partition_for(url: str) -> str:
    """Routing host label of a Riot URL (``https://euw1.api...`` -> ``euw1``)."""
    try:
        host = httpx.URL(url).host
    except httpx.InvalidURL:
        return settings.DEFAULT_PARTITION
    return host.split(".", 1)[0] if host else settings.DEFAULT_PARTITION


class ResilientFetcher:
    """
    The only place where throttling, timeouts and backoff are applied.

    Each attempt goes through the partition limiter first (retries too).
    Outcomes:
      2xx              -> decoded JSON
      429              -> wait Retry-After (or backoff), retry
      5xx / timeout    -> backoff, retry
      401 / 403        -> AuthError, raised immediately
      anything else    -> None (logged as RequestError)
      retries used up  -> None
    """

    def __init__(
        self,
        api_key: str,
        rate_limiter: PartitionRateLimiter,
        *,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
        options: Optional[FetchOptions] = None,
    ) -> None:
        if not api_key:
            raise ConfigError("RIOT_API_KEY is not set")
        self.api_key = api_key
        self.rate_limiter = rate_limiter
        self.client = client
        self.options = options or FetchOptions.from_settings()
        self._sleep = sleep
        self.last_status_code: Optional[int] = None
        self.attempts = 0

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> Optional[Any]:
        if not self.api_key:
            raise ConfigError("RIOT_API_KEY is not set")
        if self.client is None:
            raise RuntimeError("ResilientFetcher used without an HTTP client")

        opts = options or self.options
        backoff = BackoffPolicy(opts.base_delay_ms, settings.RETRY_BACKOFF)
        partition = partition_for(url)

        attempt = 0
        while attempt < opts.max_retries:
            await self.rate_limiter.acquire(partition)
            try:
                return await self._attempt(url, opts.timeout_ms)
            except TransientNetworkError as exc:
                attempt += 1
                if attempt >= opts.max_retries:
                    logger.warning(f"{exc} for {url}, giving up after {attempt} attempts")
                    break
                delay_ms = backoff.delay_ms(attempt - 1, exc.retry_after_ms)
                logger.warning(f"{exc} for {url}, retry {attempt}/{opts.max_retries} in {delay_ms}ms")
                await self._sleep(delay_ms / 1000.0)
            except RequestError as exc:
                logger.error(f"Error fetching {url}: {exc.status_code}")
                return None

        logger.error(f"Max retries ({opts.max_retries}) exceeded for {url}")
        return None

    async def _attempt(self, url: str, timeout_ms: int) -> Any:
        self.attempts += 1
        # httpx timeouts are per phase; wait_for bounds the whole attempt, body included
        try:
            response = await asyncio.wait_for(
                self.client.get(
                    url,
                    headers={"X-Riot-Token": self.api_key},
                    timeout=timeout_ms / 1000.0,
                ),
                timeout_ms / 1000.0,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise TransientNetworkError(f"timeout after {timeout_ms}ms") from exc
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"network error: {exc}") from exc

        status = response.status_code
        self.last_status_code = status

        if 200 <= status < 300:
            try:
                return response.json()
            except ValueError:
                logger.error(f"Undecodable body from {url}")
                return None

        if status == 429:
            raise TransientNetworkError(
                "rate limited (429)",
                status_code=status,
                retry_after_ms=parse_retry_after(response.headers.get("Retry-After")),
            )

        if status >= 500:
            # 504 is common on EUW under load
            raise TransientNetworkError(f"server error {status}", status_code=status)

        if status in (401, 403):
            logger.error(f"API key error ({status}) for {url}")
            raise AuthError(status, url)

        raise RequestError(status, url)
