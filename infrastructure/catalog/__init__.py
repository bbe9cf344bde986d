"""Static reference data (units, items, traits)."""
from .reference_catalog import ReferenceCatalog

__all__ = [
    'ReferenceCatalog',
]
