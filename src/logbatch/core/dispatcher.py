"""
Fire-and-forget HTTP delivery of encoded log records.

``Dispatcher.send_logs`` joins already-encoded JSON objects into a single
JSON array body and schedules one POST on a background event loop. The
caller is never blocked and receives no completion signal: failures
(missing endpoint, network errors, HTTP status >= 400, injected faults) are
reported through diagnostics and metrics, then dropped. There is no retry.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
import time
from typing import Iterable, Sequence

import httpx

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .config import ResolvedConfig
from .errors import (
    ConfigurationMissingError,
    ErrorCategory,
    LogBatchError,
    TransportError,
)
from .faults import FaultInjector, NoFaults

__all__ = ["Dispatcher", "build_payload", "JSON_HEADERS"]

JSON_HEADERS = {"content-type": "application/json"}


def build_payload(items: Sequence[str]) -> str:
    """Join encoded JSON objects into a JSON array literal.

    Plain text concatenation: the items are already valid JSON objects and
    their order is kept exactly as given.
    """
    return "[" + ",".join(items) + "]"


class Dispatcher:
    """Sends batches of encoded records to the configured endpoint.

    Delivery runs on a private daemon thread hosting an asyncio loop and a
    lazily created ``httpx.AsyncClient``. ``transport`` may be any
    ``httpx.AsyncBaseTransport`` (``httpx.MockTransport`` in tests).
    """

    name = "http-dispatcher"

    def __init__(
        self,
        config: ResolvedConfig,
        *,
        faults: FaultInjector | None = None,
        metrics: MetricsCollector | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._faults: FaultInjector = faults if faults is not None else NoFaults()
        self._metrics = metrics
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._pending: set[concurrent.futures.Future[None]] = set()
        self._lock = threading.Lock()
        self._closed = False
        self._last_status: int | None = None
        self._last_error: str | None = None

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> asyncio.AbstractEventLoop:
        """Start the background loop thread and return its loop.

        Called lazily on first send; later calls return the running loop.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Dispatcher is closed")
            if self._loop is not None:
                return self._loop
            loop = asyncio.new_event_loop()
            ready = threading.Event()

            def _run() -> None:
                asyncio.set_event_loop(loop)
                loop.call_soon(ready.set)
                loop.run_forever()

            thread = threading.Thread(
                target=_run, name="logbatch-dispatcher", daemon=True
            )
            thread.start()
            ready.wait()
            self._loop = loop
            self._thread = thread
            return loop

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight deliveries; True when none remain."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def close(self, timeout: float | None = 5.0) -> None:
        """Drain pending deliveries, close the HTTP client and stop the loop."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            loop, thread = self._loop, self._thread
        if loop is None or thread is None:
            return
        if not self.drain(timeout):
            diagnostics.warn(
                "dispatcher",
                "closing with deliveries still in flight",
                pending=len(self._pending),
            )
        if self._client is not None:
            fut = asyncio.run_coroutine_threadsafe(self._client.aclose(), loop)
            try:
                fut.result(timeout)
            except Exception as exc:
                diagnostics.warn(
                    "dispatcher", "error closing http client", error=str(exc)
                )
            self._client = None
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)
        if not thread.is_alive():
            loop.close()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send_logs(self, payloads: Iterable[str]) -> None:
        """Schedule one POST carrying every payload; never blocks or raises."""
        items = list(payloads)
        body = build_payload(items)
        try:
            loop = self.start()
            coro = self._deliver(body, len(items))
            try:
                future = asyncio.run_coroutine_threadsafe(coro, loop)
            except Exception:
                coro.close()
                raise
        except Exception as exc:
            diagnostics.warn(
                "dispatcher",
                "failed to schedule log delivery",
                records=len(items),
                error=str(exc),
            )
            if self._metrics is not None:
                self._metrics.record_send_failure("schedule")
            return
        with self._lock:
            if not future.done():
                self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: concurrent.futures.Future[None]) -> None:
        with self._lock:
            self._pending.discard(future)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _deliver(self, body: str, count: int) -> None:
        if self._metrics is not None:
            self._metrics.record_dispatch()
        started = time.perf_counter()
        try:
            self._faults.before_send()
            endpoint = self._config.endpoint_url
            if not endpoint:
                raise ConfigurationMissingError(
                    f"no endpoint_url configured for profile '{self._config.profile}'"
                )
            try:
                content = body.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise LogBatchError(
                    "payload is not encodable as UTF-8",
                    category=ErrorCategory.SERIALIZATION,
                    cause=exc,
                ) from exc
            client = self._get_client()
            resp = await client.post(endpoint, content=content, headers=JSON_HEADERS)
            self._last_status = resp.status_code
            if resp.status_code >= 400:
                snippet = None
                try:
                    snippet = resp.text[:256]
                except Exception:
                    snippet = None
                raise TransportError(
                    f"endpoint returned HTTP {resp.status_code}",
                    status_code=resp.status_code,
                    body=snippet,
                )
        except LogBatchError as exc:
            self._report_failure(exc, count, reason=exc.category.value)
            return
        except Exception as exc:
            self._report_failure(exc, count, reason="transport")
            return
        self._last_error = None
        if self._metrics is not None:
            self._metrics.record_records_sent(
                count, duration_seconds=time.perf_counter() - started
            )

    def _report_failure(self, exc: BaseException, count: int, *, reason: str) -> None:
        self._last_error = str(exc)
        fields: dict[str, object] = {
            "endpoint": self._config.endpoint_url,
            "records": count,
            "reason": reason,
            "error": str(exc),
        }
        if isinstance(exc, TransportError):
            if exc.status_code is not None:
                fields["status_code"] = exc.status_code
            if exc.body is not None:
                fields["body"] = exc.body
        diagnostics.warn("dispatcher", "failed to deliver logs", **fields)
        if self._metrics is not None:
            self._metrics.record_send_failure(reason)
