"""Presentation layer - command line interface."""
from .cli import RefreshCommand, StatsCommand

__all__ = [
    "RefreshCommand",
    "StatsCommand",
]
