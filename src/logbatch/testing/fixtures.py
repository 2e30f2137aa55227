"""
Pytest fixtures for logbatch.

Register from a ``conftest.py``::

    pytest_plugins = ("logbatch.testing.fixtures",)
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from ..core import diagnostics
from ..core.config import ResolvedConfig
from ..core.encoder import Encoder
from ..core.shipper import LogShipper
from .mocks import RecordingDispatcher


@pytest.fixture
def recording_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def resolved_config() -> ResolvedConfig:
    return ResolvedConfig(endpoint_url="https://logs.example.com/inputs/test")


@pytest.fixture
def encoder(resolved_config: ResolvedConfig) -> Encoder:
    return Encoder(resolved_config)


@pytest.fixture
def recording_shipper(
    resolved_config: ResolvedConfig, recording_dispatcher: RecordingDispatcher
) -> Generator[LogShipper, None, None]:
    shipper = LogShipper(resolved_config, dispatcher=recording_dispatcher)
    yield shipper
    shipper.close()


@pytest.fixture
def captured_diagnostics(
    monkeypatch: pytest.MonkeyPatch,
) -> list[dict[str, object]]:
    """Capture ``diagnostics.warn`` and ``diagnostics.debug`` calls."""
    captured: list[dict[str, object]] = []

    def _capture(level: str):
        def _record(component: str, message: str, **fields: object) -> None:
            captured.append(
                {"level": level, "component": component, "message": message, **fields}
            )

        return _record

    monkeypatch.setattr(diagnostics, "warn", _capture("WARN"))
    monkeypatch.setattr(diagnostics, "debug", _capture("DEBUG"))
    return captured
