"""
Bridge from the stdlib ``logging`` module.

Example::

    import logging
    from logbatch import get_shipper
    from logbatch.integrations.logging_handler import LogBatchHandler

    shipper = get_shipper()
    handler = LogBatchHandler(shipper, session=shipper.new_session())
    logging.getLogger("app").addHandler(handler)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..core.session import Session
from ..core.shipper import LogShipper


class LogBatchHandler(logging.Handler):
    """Forwards stdlib log records through ``LogShipper.single_log``.

    With batch mode on, records accumulate in *session* until ``flush()``
    (called by ``logging.shutdown`` via ``close``). Without a session and
    with batch mode on, records are dropped, as for any ``single_log`` call.
    Records from ``logbatch`` loggers are ignored.
    """

    def __init__(
        self,
        shipper: LogShipper,
        session: Session | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self._shipper = shipper
        self._session = session

    @property
    def session(self) -> Session | None:
        return self._session

    def emit(self, record: logging.LogRecord) -> None:
        # Library-internal records would feed failed deliveries back into sends
        if record.name == "logbatch" or record.name.startswith("logbatch."):
            return
        try:
            message = self.format(record)
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            self._shipper.single_log(
                message, timestamp, record.levelname, batch=self._session
            )
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        if self._session is not None:
            self._session.flush()

    def close(self) -> None:
        try:
            self.flush()
        finally:
            super().close()
