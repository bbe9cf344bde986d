"""Health states a region can be in after an ingestion run."""
from enum import Enum


class PartitionStatus(Enum):
    ACTIVE = "active"
    PROCESSING = "processing"
    DEGRADED = "degraded"
    ERROR = "error"

    @property
    def is_healthy(self) -> bool:
        return self is PartitionStatus.ACTIVE
