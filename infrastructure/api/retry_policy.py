from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

from config import settings


@dataclass(frozen=True, slots=True)
class FetchOptions:
    """Per-call limits for one logical GET."""
    max_retries: int = 3
    base_delay_ms: int = 1000
    timeout_ms: int = 10_000

    @classmethod
    def from_settings(cls) -> "FetchOptions":
        return cls(
            max_retries=settings.MAX_RETRIES,
            base_delay_ms=settings.RETRY_BASE_DELAY_MS,
            timeout_ms=settings.REQUEST_TIMEOUT_MS,
        )

    def with_overrides(
        self,
        *,
        max_retries: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> "FetchOptions":
        return replace(
            self,
            max_retries=self.max_retries if max_retries is None else max_retries,
            timeout_ms=self.timeout_ms if timeout_ms is None else timeout_ms,
        )


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    base_delay_ms: int
    factor: float = 2.0

    def delay_ms(self, attempt: int, retry_after_ms: Optional[int] = None) -> int:
        """Delay before the retry that follows ``attempt`` (0-based).

        A server-provided Retry-After always wins over the computed backoff.
        """
        if retry_after_ms is not None and retry_after_ms >= 0:
            return retry_after_ms
        return int(self.base_delay_ms * math.pow(self.factor, attempt))


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Retry-After in seconds (as Riot sends it) to milliseconds."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return max(0, int(seconds * 1000))
