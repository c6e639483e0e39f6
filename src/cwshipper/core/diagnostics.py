"""
Structured internal diagnostics.

Diagnostics are plain dict payloads handed to a writer. The default writer
forwards them to the stdlib ``logging`` logger ``cwshipper`` so host
applications control sinks and levels; tests swap the writer with
``set_writer_for_tests``.

Warnings (skipped destinations, benign create races, sequence token resets)
are always emitted. Debug payloads are emitted only when
``core.internal_logging_enabled`` is set; the ingestor passes the flag to
:func:`configure` when it is built.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

_logger = logging.getLogger("cwshipper")

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
}

# Cached on first debug() call; reset by tests
_internal_logging_enabled: bool | None = None


def _default_writer(payload: dict[str, Any]) -> None:
    level = _LEVELS.get(str(payload.get("level")), logging.WARNING)
    fields = {
        k: v
        for k, v in payload.items()
        if k not in {"level", "component", "message", "timestamp"}
    }
    suffix = " ".join(f"{k}={v!r}" for k, v in fields.items())
    text = f"[{payload.get('component')}] {payload.get('message')}"
    _logger.log(level, f"{text} {suffix}" if suffix else text, extra={"diag": payload})


_writer: Callable[[dict[str, Any]], None] = _default_writer


def set_writer_for_tests(writer: Callable[[dict[str, Any]], None]) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _writer, _internal_logging_enabled
    _writer = _default_writer
    _internal_logging_enabled = None


def configure(*, enabled: bool) -> None:
    """Turn debug diagnostics on or off; the ingestor calls this from its settings."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def _debug_enabled() -> bool:
    return bool(_internal_logging_enabled)


def emit(level: str, component: str, message: str, **fields: Any) -> None:
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    _writer(payload)


def warn(component: str, message: str, **fields: Any) -> None:
    emit("WARNING", component, message, **fields)


def info(component: str, message: str, **fields: Any) -> None:
    emit("INFO", component, message, **fields)


def debug(component: str, message: str, **fields: Any) -> None:
    if not _debug_enabled():
        return
    emit("DEBUG", component, message, **fields)
