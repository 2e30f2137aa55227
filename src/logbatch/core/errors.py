"""
Error taxonomy for log delivery.

None of these errors cross the dispatcher boundary: they are raised inside
the delivery coroutine, reported through diagnostics and swallowed there.
They exist so that diagnostics and metrics can name *why* a send failed.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    INJECTED = "injected"
    SERIALIZATION = "serialization"


class LogBatchError(Exception):
    """Base error carrying a category and optional cause."""

    category: ErrorCategory = ErrorCategory.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        self.cause = cause


class ConfigurationMissingError(LogBatchError):
    """Endpoint URL or settings profile is absent."""

    category = ErrorCategory.CONFIGURATION


class TransportError(LogBatchError):
    """Network failure or non-success HTTP status."""

    category = ErrorCategory.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.body = body


class InjectedFailureError(LogBatchError):
    """Failure forced by a fault injector before any network I/O."""

    category = ErrorCategory.INJECTED
