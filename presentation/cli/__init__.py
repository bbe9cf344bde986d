"""Presentation CLI exports."""
from .refresh_command import RefreshCommand
from .stats_command import StatsCommand

__all__ = [
    "RefreshCommand",
    "StatsCommand",
]
