"""
Log record value type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .settings import DEFAULT_LEVEL


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogRecord:
    """One log entry: message, timestamp and level.

    ``timestamp`` is always populated and timezone aware: ``None`` means
    "now" and a naive datetime is taken to be UTC. ``level=None`` falls back
    to INFO while an explicit empty string is kept, which makes the encoder
    omit the level field.
    """

    message: str
    timestamp: datetime = field(default_factory=_utcnow)
    level: str = DEFAULT_LEVEL

    def __post_init__(self) -> None:
        if not isinstance(self.message, str):
            object.__setattr__(self, "message", str(self.message))
        ts = self.timestamp
        if ts is None:
            ts = _utcnow()
        elif not isinstance(ts, datetime):
            raise TypeError("timestamp must be a datetime")
        elif ts.tzinfo is None or ts.utcoffset() is None:
            ts = ts.replace(tzinfo=timezone.utc)
        object.__setattr__(self, "timestamp", ts)
        if self.level is None:
            object.__setattr__(self, "level", DEFAULT_LEVEL)

    @classmethod
    def create(
        cls,
        message: str,
        timestamp: datetime | None = None,
        level: str | None = None,
        *,
        default_level: str = DEFAULT_LEVEL,
    ) -> LogRecord:
        """Build a record, applying *default_level* when *level* is None."""
        return cls(
            message=message,
            timestamp=timestamp if timestamp is not None else _utcnow(),
            level=default_level if level is None else level,
        )
