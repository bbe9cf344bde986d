"""Structured logging: bootstrap, levels, context and formatters."""
from .config import bootstrap_logging, shutdown_logging
from .context import bind, get_context, log_context, unbind
from .logger import StructuredLogger, get_logger, timed

__all__ = [
    "bootstrap_logging",
    "shutdown_logging",
    "bind",
    "unbind",
    "get_context",
    "log_context",
    "StructuredLogger",
    "get_logger",
    "timed",
]
