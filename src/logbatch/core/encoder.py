"""
Canonical JSON encoding of log records.

The receiving ingestion endpoint expects a fixed key order and omission
(never ``null``) for absent fields:

1. ``host``     only when hostname inclusion is on and a hostname is set
2. ``level``    only when the record level is non-empty
3. ``datetime`` always, rendered with the configured date format
4. ``message``  always

Example::

    {"level": "WARN", "datetime": "2024-01-02 03:04:05.006+0000", "message": "He said \\"hi\\""}
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from .config import ResolvedConfig
from .record import LogRecord

# %L (milliseconds) is not a strftime directive and glibc does not zero-pad
# %Y below year 1000; both are expanded first. %% is matched too so that a
# literal "%%L" stays literal.
_DIRECTIVES = re.compile(r"%%|%L|%Y")

# Lone surrogates (e.g. from surrogateescape-decoded paths) have no UTF-8
# form; they are written as JSON \uXXXX escapes.
_SURROGATES = re.compile("[\ud800-\udfff]")


def format_timestamp(
    timestamp: datetime,
    date_format: str,
    tz: str | None = None,
) -> str:
    """Render *timestamp* with a strftime pattern extended with ``%L``.

    ``%Y`` is always four digits, zero-padded.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if tz:
        timestamp = timestamp.astimezone(ZoneInfo(tz))
    expanded = {
        "%%": "%%",
        "%L": f"{timestamp.microsecond // 1000:03d}",
        "%Y": f"{timestamp.year:04d}",
    }
    pattern = _DIRECTIVES.sub(lambda m: expanded[m.group(0)], date_format)
    return timestamp.strftime(pattern)


class Encoder:
    """Encodes ``LogRecord`` instances using one resolved configuration."""

    def __init__(self, config: ResolvedConfig) -> None:
        self._config = config

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def to_mapping(self, record: LogRecord) -> dict[str, Any]:
        """Return the ordered field mapping for *record*."""
        cfg = self._config
        obj: dict[str, Any] = {}
        host = cfg.host_field
        if host:
            obj["host"] = host
        if record.level:
            obj["level"] = record.level
        obj["datetime"] = format_timestamp(
            record.timestamp, cfg.date_format, cfg.display_timezone
        )
        obj["message"] = record.message
        return obj

    def encode(self, record: LogRecord) -> str:
        """Return the canonical JSON object string for *record*."""
        text = json.dumps(self.to_mapping(record), ensure_ascii=False)
        return _SURROGATES.sub(lambda m: f"\\u{ord(m.group(0)):04x}", text)
