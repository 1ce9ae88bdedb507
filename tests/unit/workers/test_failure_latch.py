"""Tests for FailureLatch."""

from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from scanpdf.exceptions import ConversionError, ScannerNotFoundError
from scanpdf.latch import FailureLatch


class TestFailureLatch:
    """First error wins, callbacks run once."""

    def test_no_failure(self, latch: FailureLatch):
        assert not latch.failed
        assert latch.error is None
        latch.raise_if_failed()

    def test_first_error_wins(self, latch: FailureLatch):
        first = ConversionError("out2.pnm")
        assert latch.fail(first) is True
        assert latch.fail(ScannerNotFoundError("later")) is False

        assert latch.error is first
        with pytest.raises(ConversionError):
            latch.raise_if_failed()

    def test_callbacks_run_once(self, latch: FailureLatch):
        callback = Mock()
        latch.on_fail(callback)
        error = ConversionError("x")

        latch.fail(error)
        latch.fail(ConversionError("y"))

        callback.assert_called_once_with(error)

    def test_failing_callback_does_not_hide_error(self, latch: FailureLatch):
        latch.on_fail(Mock(side_effect=OSError("kill failed")))
        later = Mock()
        latch.on_fail(later)

        latch.fail(ConversionError("x"))

        later.assert_called_once()
        assert isinstance(latch.error, ConversionError)

    def test_concurrent_failures(self, latch: FailureLatch):
        """Exactly one of many racing threads records its error."""
        results: list[bool] = []
        lock = threading.Lock()

        def fail(n: int) -> None:
            recorded = latch.fail(ConversionError(str(n)))
            with lock:
                results.append(recorded)

        threads = [threading.Thread(target=fail, args=(n,)) for n in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
