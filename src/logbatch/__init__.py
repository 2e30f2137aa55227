"""
Public entrypoints for logbatch.

Provides zero-config ``get_shipper()`` and the ``runtime()`` context manager.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import httpx

from ._version import __version__
from .core.batch import LogBatch
from .core.config import (
    ConfigProvider,
    ConfigResolver,
    ResolvedConfig,
    SettingsConfigProvider,
    StaticConfigProvider,
)
from .core.dispatcher import Dispatcher
from .core.encoder import Encoder, format_timestamp
from .core.errors import (
    ConfigurationMissingError,
    InjectedFailureError,
    LogBatchError,
    TransportError,
)
from .core.faults import AlwaysFail, FailNext, FaultInjector, NoFaults
from .core.record import LogRecord
from .core.session import Session, single_log
from .core.settings import ProfileSettings, Settings
from .core.shipper import LogShipper, new_session
from .metrics.metrics import MetricsCollector

__all__ = [
    "get_shipper",
    "runtime",
    "LogShipper",
    "Session",
    "LogBatch",
    "LogRecord",
    "Encoder",
    "Dispatcher",
    "format_timestamp",
    "new_session",
    "single_log",
    "Settings",
    "ProfileSettings",
    "ResolvedConfig",
    "ConfigProvider",
    "ConfigResolver",
    "SettingsConfigProvider",
    "StaticConfigProvider",
    "FaultInjector",
    "NoFaults",
    "AlwaysFail",
    "FailNext",
    "MetricsCollector",
    "LogBatchError",
    "ConfigurationMissingError",
    "TransportError",
    "InjectedFailureError",
    "__version__",
    "VERSION",
]


def get_shipper(
    profile: str | None = None,
    *,
    settings: Settings | None = None,
    provider: ConfigProvider | None = None,
    faults: FaultInjector | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LogShipper:
    """Return a ``LogShipper`` for *profile* with configuration resolved once.

    Zero-config by default: settings come from ``LOGBATCH_*`` environment
    variables and the profile named by ``LOGBATCH_PROFILE`` (``default``).

    Example::

        from logbatch import get_shipper

        shipper = get_shipper()
        shipper.single_log("worker started")

        with shipper.new_session() as session:
            session.add("step 1 done")
            session.add("step 2 done", level="DEBUG")

        shipper.close()

    Each shipper is isolated: it owns its dispatcher thread and HTTP client
    and shares no state with other shippers.
    """
    resolver = ConfigResolver(provider, profile=profile, settings=settings)
    return LogShipper(resolver.get(), faults=faults, transport=transport)


@contextmanager
def runtime(
    profile: str | None = None,
    *,
    settings: Settings | None = None,
    provider: ConfigProvider | None = None,
    faults: FaultInjector | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Iterator[LogShipper]:
    """Context manager yielding a shipper that is drained and closed on exit."""
    shipper = get_shipper(
        profile,
        settings=settings,
        provider=provider,
        faults=faults,
        transport=transport,
    )
    try:
        yield shipper
    finally:
        shipper.close()


VERSION = __version__
