"""
Internal diagnostics sink.

Non-fatal problems inside the library (failed deliveries, dropped records,
missing configuration) are reported here instead of being raised to the
caller. Each diagnostic is a single JSON line handed to the stdlib logger
``logbatch.diagnostics``, which writes to stderr and does not propagate
to the root logger.

Whether diagnostics are emitted is read once from
``Settings().core.internal_logging_enabled`` and cached in
``_internal_logging_enabled``. Tests reset the cache to ``None``.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import orjson

_logger = logging.getLogger("logbatch.diagnostics")
# Local sink only: diagnostics never reach application handlers, which may
# themselves ship through logbatch.
_logger.propagate = False
if not _logger.handlers:
    _stderr_handler = logging.StreamHandler()
    _stderr_handler.setFormatter(logging.Formatter("%(message)s"))
    _logger.addHandler(_stderr_handler)

_internal_logging_enabled: bool | None = None

_RATE_LIMIT_SECONDS = 5.0
_last_emitted: dict[str, float] = {}
_rate_lock = threading.Lock()


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().core.internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = True
    return _internal_logging_enabled


def _rate_limited(key: str | None) -> bool:
    if key is None:
        return False
    now = time.monotonic()
    with _rate_lock:
        last = _last_emitted.get(key)
        if last is not None and now - last < _RATE_LIMIT_SECONDS:
            return True
        _last_emitted[key] = now
    return False


def _emit(level: int, component: str, message: str, fields: dict[str, Any]) -> None:
    try:
        if not _is_enabled():
            return
        if _rate_limited(fields.pop("_rate_limit_key", None)):
            return
        payload: dict[str, Any] = {
            "ts": time.time(),
            "level": logging.getLevelName(level),
            "component": component,
            "message": message,
        }
        payload.update(fields)
        line = orjson.dumps(payload, default=str).decode("utf-8")
        _logger.log(level, line)
    except Exception:
        # Diagnostics must never break the caller
        return None


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a WARNING diagnostic for *component*."""
    _emit(logging.WARNING, component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    """Emit a DEBUG diagnostic for *component*."""
    _emit(logging.DEBUG, component, message, fields)


def _reset() -> None:
    """Clear cached enablement and rate-limit state (for testing only)."""
    global _internal_logging_enabled
    _internal_logging_enabled = None
    with _rate_lock:
        _last_emitted.clear()
