"""
Delivery metrics for logbatch.

Implements minimal Prometheus-compatible counters for dispatches, records
sent and send failures.

Design goals:
- Zero global state; every collector owns an isolated registry
- Safe no-op behavior when metrics are disabled by settings, while still
  tracking in-memory counters for tests
- Thread-safe: counters are written from the dispatcher's loop thread and
  read from caller threads
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class DeliveryMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    dispatches: int = 0
    records_sent: int = 0
    send_failures: int = 0
    failures_by_reason: dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Collector used by the dispatcher.

    If metrics are disabled, the Prometheus side is skipped entirely and
    only the in-memory ``DeliveryMetrics`` counters are updated.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = DeliveryMetrics()

        self._c_dispatches: Any | None = None
        self._c_records: Any | None = None
        self._c_failures: Any | None = None
        self._h_send_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_dispatches = Counter(
                "logbatch_dispatches_total",
                "Total number of HTTP deliveries attempted",
                registry=self._registry,
            )
            self._c_records = Counter(
                "logbatch_records_sent_total",
                "Total number of encoded records delivered successfully",
                registry=self._registry,
            )
            self._c_failures = Counter(
                "logbatch_send_failures_total",
                "Total number of failed deliveries",
                ["reason"],
                registry=self._registry,
            )
            self._h_send_latency = Histogram(
                "logbatch_send_seconds",
                "Latency of a single HTTP delivery",
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_dispatch(self) -> None:
        with self._lock:
            self._state.dispatches += 1
        if self._c_dispatches is not None:
            self._c_dispatches.inc()

    def record_records_sent(
        self, count: int, *, duration_seconds: float | None = None
    ) -> None:
        with self._lock:
            self._state.records_sent += count
        if self._c_records is not None:
            self._c_records.inc(count)
        if duration_seconds is not None and self._h_send_latency is not None:
            self._h_send_latency.observe(duration_seconds)

    def record_send_failure(self, reason: str | None = None) -> None:
        label = reason or "unknown"
        with self._lock:
            self._state.send_failures += 1
            by_reason = self._state.failures_by_reason
            by_reason[label] = by_reason.get(label, 0) + 1
        if self._c_failures is not None:
            self._c_failures.labels(reason=label).inc()

    def snapshot(self) -> DeliveryMetrics:
        with self._lock:
            return DeliveryMetrics(
                dispatches=self._state.dispatches,
                records_sent=self._state.records_sent,
                send_failures=self._state.send_failures,
                failures_by_reason=dict(self._state.failures_by_reason),
            )
