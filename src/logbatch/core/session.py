"""
Caller-facing batching handle and the single-record convenience path.
"""

from __future__ import annotations

from datetime import datetime
from typing import Union

from . import diagnostics
from .batch import LogBatch, SendsLogs
from .config import ResolvedConfig
from .encoder import Encoder
from .record import LogRecord


class Session:
    """Owns one ``LogBatch`` for sequential use by one logical caller.

    Used as a context manager the session flushes on exit::

        with shipper.new_session() as session:
            session.add("boot complete")
            session.add("cache warmed", level="DEBUG")
    """

    def __init__(self, batch: LogBatch, *, default_level: str = "INFO") -> None:
        self._batch = batch
        self._default_level = default_level

    @property
    def batch(self) -> LogBatch:
        return self._batch

    def __len__(self) -> int:
        return len(self._batch)

    def add(
        self,
        message: str,
        timestamp: datetime | None = None,
        level: str | None = None,
    ) -> LogRecord:
        record = LogRecord.create(
            message, timestamp, level, default_level=self._default_level
        )
        self._batch.add(record)
        return record

    def flush(self) -> None:
        self._batch.flush()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.flush()


BatchTarget = Union[LogBatch, Session]


def single_log(
    message: str,
    timestamp: datetime | None = None,
    level: str | None = None,
    batch: BatchTarget | None = None,
    *,
    config: ResolvedConfig,
    dispatcher: SendsLogs,
) -> None:
    """Log one record immediately, or fold it into *batch* in batch mode.

    With batch mode off the record is sent at once as a one-element payload
    and *batch* is ignored. With batch mode on it is appended to *batch*;
    without a batch it is dropped (a debug diagnostic is emitted, nothing
    is raised).
    """
    record = LogRecord.create(
        message, timestamp, level, default_level=config.default_level
    )
    if not config.batch_mode_enabled:
        dispatcher.send_logs([Encoder(config).encode(record)])
        return
    if batch is None:
        diagnostics.debug(
            "session",
            "batch mode enabled but no batch supplied; record dropped",
            profile=config.profile,
        )
        return
    target = batch.batch if isinstance(batch, Session) else batch
    target.add(record)
