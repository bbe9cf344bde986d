"""Domain interfaces."""
from .repository import IMatchStore

__all__ = [
    'IMatchStore',
]
