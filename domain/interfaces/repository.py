"""Storage interface consumed by ingestion and the refresh job."""
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..enums import PartitionStatus


class IMatchStore(ABC):
    """Key-value store of JSON blobs: raw matches, processed stats, region health."""

    @abstractmethod
    async def save_match(self, match_id: str, region: str, payload: dict) -> bool:
        """Upsert a raw match. Saving an existing id again is a no-op."""
        pass

    @abstractmethod
    async def get_cached_matches(self, region: Optional[str] = None) -> List[dict]:
        """Raw payloads for one region, or for all when region is None/'all'."""
        pass

    @abstractmethod
    async def save_processed_stats(self, stats_type: str, region: str, payload: Any) -> bool:
        pass

    @abstractmethod
    async def get_processed_stats(self, stats_type: str, region: str = 'all') -> Optional[Any]:
        """Latest payload for (type, region), or None."""
        pass

    @abstractmethod
    async def update_partition_status(
        self,
        region: str,
        status: PartitionStatus,
        error_message: Optional[str] = None,
    ) -> bool:
        pass

    async def cleanup_old_data(self, days_to_keep: int = 7) -> bool:
        """Optional housekeeping; stores without retention simply keep everything."""
        return True
