"""Partition entity: a region's ingestion health."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..enums import PartitionStatus, Region


@dataclass
class Partition:
    """Health record for one region, mutated after every ingestion run."""

    region: Region
    status: PartitionStatus = PartitionStatus.ACTIVE
    error_count: int = 0
    last_error: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def id(self) -> str:
        return self.region.value

    @property
    def routing(self) -> str:
        return self.region.platform_route

    @property
    def continental(self) -> str:
        return self.region.regional_route

    def mark(self, status: PartitionStatus, error: Optional[str] = None) -> None:
        """Move to ``status``; entering ERROR bumps the error counter."""
        self.status = status
        self.updated_at = datetime.now(timezone.utc)
        if status is PartitionStatus.ERROR:
            self.error_count += 1
        if error is not None:
            self.last_error = error

    def to_dict(self) -> dict:
        return {
            'region': self.id,
            'routing': self.routing,
            'continental': self.continental,
            'status': self.status.value,
            'error_count': self.error_count,
            'last_error': self.last_error,
            'updated_at': self.updated_at.isoformat(),
        }
