from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable, Optional, Protocol, Union

from .context import bind as bind_ctx
from .levels import LogLevel


class SupportsStr(Protocol):
    def __str__(self) -> str: ...


Message = Union[SupportsStr, Callable[[], SupportsStr]]


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` with lazy messages and a service tag."""

    def __init__(self, logger: logging.Logger, service: Optional[str] = None) -> None:
        self._logger = logger
        self._service = service

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **values: Any) -> "StructuredLogger":
        bind_ctx(**values)
        return self

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, msg: Message, *args: Any, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        message = msg() if callable(msg) else msg
        extra = dict(kwargs.pop("extra", None) or {})
        if self._service and "service" not in extra:
            extra["service"] = self._service
        kwargs.setdefault("stacklevel", 3)
        self._logger.log(level, str(message), *args, extra=extra, **kwargs)

    def trace(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(int(LogLevel.TRACE), msg, *args, **kwargs)

    def debug(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def success(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(int(LogLevel.SUCCESS), msg, *args, **kwargs)

    def warning(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str, *, service: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name), service=service)


def timed(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Log the wall time of a synchronous call at TRACE level."""
    logger = get_logger(fn.__module__, service="timing")

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start = time.perf_counter()
        try:
            return fn(*args, **kwargs)
        finally:
            dur_ms = round((time.perf_counter() - start) * 1000.0, 2)
            logger.trace(lambda: f"{fn.__qualname__} done", extra={"execution_time_ms": dur_ms})

    return wrapper
