"""Error taxonomy for the ingestion path.

Only ``ConfigError`` and ``AuthError`` ever escape the fetcher. The other two
are raised and handled inside its retry loop and end up as "no data".
"""
from __future__ import annotations

from typing import Optional


class TFTStatsError(Exception):
    """Base class for all errors raised by this project."""


class ConfigError(TFTStatsError):
    """Required configuration (the API key) is missing."""


class AuthError(TFTStatsError):
    """Upstream rejected the credential (401/403). Never retried."""

    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"Invalid Riot API key ({status_code}) for {url}")
        self.status_code = status_code
        self.url = url


class TransientNetworkError(TFTStatsError):
    """Timeout, 5xx or 429. Retried with backoff."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after_ms: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after_ms = retry_after_ms


class RequestError(TFTStatsError):
    """Any other non-2xx response. Not retried."""

    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url
