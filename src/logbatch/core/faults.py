"""
Fault injection strategies for the dispatcher.

The dispatcher calls ``before_send()`` right before network I/O. The
default ``NoFaults`` does nothing; tests pass ``AlwaysFail`` or
``FailNext`` to exercise the swallow-and-report failure path without a
network.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from .errors import InjectedFailureError


@runtime_checkable
class FaultInjector(Protocol):
    def before_send(self) -> None:  # pragma: no cover - structural protocol
        ...


class NoFaults:
    """Default injector; never fails."""

    def before_send(self) -> None:
        return None


class AlwaysFail:
    """Fails every send."""

    def __init__(self, message: str = "injected test failure") -> None:
        self._message = message

    def before_send(self) -> None:
        raise InjectedFailureError(self._message)


class FailNext:
    """Fails the next *count* sends, then lets sends through."""

    def __init__(self, count: int = 1) -> None:
        if count < 0:
            raise ValueError("count must be >= 0")
        self._remaining = count
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    def before_send(self) -> None:
        with self._lock:
            if self._remaining <= 0:
                return
            self._remaining -= 1
        raise InjectedFailureError("injected test failure")
