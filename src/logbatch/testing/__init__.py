"""
Testing utilities for logbatch.

``RecordingDispatcher`` is always available. Pytest fixtures live in
``logbatch.testing.fixtures`` and require the testing extra:
``pip install logbatch[testing]``.

Example:
    from logbatch import ResolvedConfig, LogShipper
    from logbatch.testing import RecordingDispatcher

    def test_sends_once():
        dispatcher = RecordingDispatcher()
        shipper = LogShipper(ResolvedConfig(), dispatcher=dispatcher)
        shipper.single_log("hello")
        assert dispatcher.call_count == 1
"""

from .mocks import RecordingDispatcher

__all__ = ["RecordingDispatcher"]
