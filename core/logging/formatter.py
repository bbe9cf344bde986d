from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from .context import get_context

_LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[37m",
    "INFO": "\033[36m",
    "SUCCESS": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

# Promoted out of the context dict so log consumers can filter on them directly.
_TOP_LEVEL_KEYS = ("region", "match_id", "job")


def _record_metadata(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.created)),
        "level": record.levelname,
        "service": getattr(record, "service", None),
        "logger": record.name,
        "function": record.funcName,
        "line_number": record.lineno,
    }


def _split_context(record: logging.LogRecord) -> tuple[Dict[str, Any], Dict[str, Any]]:
    ctx = dict(getattr(record, "log_context", None) or get_context())
    top = {k: ctx.pop(k) for k in _TOP_LEVEL_KEYS if k in ctx}
    return top, ctx


class ConsoleFormatter(logging.Formatter):
    def __init__(self, *, colors: bool = True) -> None:
        super().__init__()
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        md = _record_metadata(record)
        top, rest = _split_context(record)
        parts = [
            md["timestamp"],
            f"{md['level']:<8}",
            md["service"] or "-",
        ]
        if "region" in top:
            parts.append(f"[{top['region']}]")
        parts.append(record.getMessage())
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            parts.append(f"t={exec_ms}ms")
        extras = {k: v for k, v in top.items() if k != "region"}
        extras.update(rest)
        if extras:
            parts.append(" ".join(f"{k}={v}" for k, v in extras.items()))
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        line = " | ".join(parts)
        if not self.colors:
            return line
        return f"{_LEVEL_COLORS.get(md['level'], '')}{line}{_RESET}"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = _record_metadata(record)
        payload["message"] = record.getMessage()
        top, rest = _split_context(record)
        payload.update(top)
        if rest:
            payload["context"] = rest
        exec_ms = getattr(record, "execution_time_ms", None)
        if exec_ms is not None:
            payload["execution_time_ms"] = exec_ms
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))
