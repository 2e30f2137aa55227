from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest

from logbatch.core import diagnostics

LOGGER = "logbatch.diagnostics"


@pytest.fixture(autouse=True)
def _attach_caplog(caplog: pytest.LogCaptureFixture) -> Generator[None, None, None]:
    # the diagnostics logger does not propagate to the root logger
    diagnostics._logger.addHandler(caplog.handler)
    yield
    diagnostics._logger.removeHandler(caplog.handler)


def _lines(caplog: pytest.LogCaptureFixture) -> list[dict[str, object]]:
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == LOGGER]


def test_warn_emits_single_json_line(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger=LOGGER)

    diagnostics.warn("dispatcher", "failed to deliver logs", status_code=500)

    lines = _lines(caplog)
    assert len(lines) == 1
    assert lines[0]["level"] == "WARNING"
    assert lines[0]["component"] == "dispatcher"
    assert lines[0]["message"] == "failed to deliver logs"
    assert lines[0]["status_code"] == 500
    assert isinstance(lines[0]["ts"], float)


def test_debug_emits_at_debug_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger=LOGGER)

    diagnostics.debug("session", "record dropped")

    records = [r for r in caplog.records if r.name == LOGGER]
    assert records[0].levelno == logging.DEBUG


def test_non_json_fields_are_stringified(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger=LOGGER)

    diagnostics.warn("x", "y", error=ValueError("bad"))

    assert _lines(caplog)[0]["error"] == "bad"


def test_disabled_by_settings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    monkeypatch.setenv("LOGBATCH_CORE__INTERNAL_LOGGING_ENABLED", "false")

    diagnostics.warn("dispatcher", "failed")

    assert _lines(caplog) == []
    assert diagnostics._internal_logging_enabled is False


def test_enablement_is_cached(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger=LOGGER)
    diagnostics.warn("a", "first")

    monkeypatch.setenv("LOGBATCH_CORE__INTERNAL_LOGGING_ENABLED", "false")
    diagnostics.warn("a", "second")

    assert [line["message"] for line in _lines(caplog)] == ["first", "second"]


def test_rate_limit_key_suppresses_repeats(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger=LOGGER)

    diagnostics.warn("config", "same", _rate_limit_key="k")
    diagnostics.warn("config", "same", _rate_limit_key="k")
    diagnostics.warn("config", "other", _rate_limit_key="k2")

    lines = _lines(caplog)
    assert [line["message"] for line in lines] == ["same", "other"]
    assert "_rate_limit_key" not in lines[0]


def test_warn_never_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def _explode(*args: object, **kwargs: object) -> None:
        raise RuntimeError("handler broken")

    monkeypatch.setattr(diagnostics._logger, "log", _explode)

    diagnostics.warn("x", "y")


def test_diagnostics_stay_off_the_root_logger() -> None:
    seen: list[logging.LogRecord] = []

    class _Collect(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            seen.append(record)

    root = logging.getLogger()
    handler = _Collect(logging.DEBUG)
    root.addHandler(handler)
    try:
        diagnostics.warn("dispatcher", "failed to deliver logs")
    finally:
        root.removeHandler(handler)

    assert diagnostics._logger.propagate is False
    assert diagnostics._logger.handlers
    assert [r for r in seen if r.name == LOGGER] == []
