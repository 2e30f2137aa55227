"""
In-memory batch of pending log records.

``flush`` encodes every held record, collapses byte-identical encodings
into one, hands the result to the dispatcher as a single send and always
empties the batch, whatever happens downstream.
"""

from __future__ import annotations

import threading
from typing import Iterator, Protocol

from . import diagnostics
from .encoder import Encoder
from .record import LogRecord


class SendsLogs(Protocol):
    def send_logs(self, payloads: list[str]) -> None:  # pragma: no cover
        ...


def dedupe(encoded: list[str]) -> list[str]:
    """Set semantics over encoded payloads, keeping first-seen order."""
    return list(dict.fromkeys(encoded))


class LogBatch:
    """Ordered, unbounded collection of records awaiting one combined delivery.

    ``add`` and ``flush`` are serialized by a lock so a batch may be shared
    between threads; a flush takes the entries under the lock and encodes
    and dispatches them outside it.
    """

    def __init__(self, encoder: Encoder, dispatcher: SendsLogs) -> None:
        self._encoder = encoder
        self._dispatcher = dispatcher
        self._entries: list[LogRecord] = []
        self._lock = threading.Lock()

    @property
    def entries(self) -> tuple[LogRecord, ...]:
        """Snapshot of held records in insertion order."""
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self.entries)

    def add(self, record: LogRecord) -> None:
        with self._lock:
            self._entries.append(record)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def flush(self) -> None:
        """Encode, de-duplicate, dispatch and clear. Never raises."""
        with self._lock:
            pending = self._entries
            self._entries = []
        if not pending:
            return
        try:
            payloads = dedupe([self._encoder.encode(r) for r in pending])
            if payloads:
                self._dispatcher.send_logs(payloads)
        except Exception as exc:
            diagnostics.warn(
                "batch",
                "flush failed; records dropped",
                records=len(pending),
                error=str(exc),
            )
