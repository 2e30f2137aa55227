"""
LogShipper: the runtime object tying resolved configuration, encoder,
dispatcher and metrics together.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import httpx

from ..metrics.metrics import MetricsCollector
from .batch import LogBatch, SendsLogs
from .config import ResolvedConfig
from .dispatcher import Dispatcher
from .encoder import Encoder
from .faults import FaultInjector
from .session import BatchTarget, Session, single_log


class LogShipper:
    """Factory for sessions and entry point for ``single_log``.

    The configuration is fixed at construction. Only the batch-mode flag
    can be switched afterwards, and the switch affects later ``single_log``
    calls only; records already held in a batch are left alone.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        *,
        dispatcher: SendsLogs | None = None,
        faults: FaultInjector | None = None,
        metrics: MetricsCollector | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        if metrics is None and config.enable_metrics:
            metrics = MetricsCollector(enabled=True)
        self._metrics = metrics
        self._owns_dispatcher = dispatcher is None
        if dispatcher is None:
            dispatcher = Dispatcher(
                config, faults=faults, metrics=metrics, transport=transport
            )
        self._dispatcher = dispatcher
        self._encoder = Encoder(config)
        self._batch_mode_enabled = config.batch_mode_enabled

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def dispatcher(self) -> SendsLogs:
        return self._dispatcher

    @property
    def encoder(self) -> Encoder:
        return self._encoder

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    @property
    def batch_mode_enabled(self) -> bool:
        return self._batch_mode_enabled

    @batch_mode_enabled.setter
    def batch_mode_enabled(self, value: bool) -> None:
        self._batch_mode_enabled = bool(value)

    def new_batch(self) -> LogBatch:
        return LogBatch(self._encoder, self._dispatcher)

    def new_session(self) -> Session:
        return Session(self.new_batch(), default_level=self._config.default_level)

    def single_log(
        self,
        message: str,
        timestamp: datetime | None = None,
        level: str | None = None,
        batch: BatchTarget | None = None,
    ) -> None:
        config = self._config
        if config.batch_mode_enabled != self._batch_mode_enabled:
            config = replace(config, batch_mode_enabled=self._batch_mode_enabled)
        single_log(
            message,
            timestamp,
            level,
            batch,
            config=config,
            dispatcher=self._dispatcher,
        )

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight deliveries of the owned dispatcher."""
        if isinstance(self._dispatcher, Dispatcher):
            return self._dispatcher.drain(timeout)
        return True

    def close(self, timeout: float | None = 5.0) -> None:
        if self._owns_dispatcher and isinstance(self._dispatcher, Dispatcher):
            self._dispatcher.close(timeout)

    def __enter__(self) -> LogShipper:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()


def new_session(shipper: LogShipper) -> Session:
    """Return a fresh ``Session`` bound to *shipper*."""
    return shipper.new_session()
