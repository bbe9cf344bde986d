"""Ingestion: per-region match collection."""
from .ingestion_service import IngestionOptions, IngestionOrchestrator

__all__ = ["IngestionOptions", "IngestionOrchestrator"]
