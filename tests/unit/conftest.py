"""Pytest fixtures specific to unit tests.

Unit tests should be fast and isolated. These fixtures ensure tests never
touch the real ramdisk, LED or network.
"""

from __future__ import annotations

import pytest

from scanpdf.latch import FailureLatch
from scanpdf.status import StatusReporter


@pytest.fixture
def latch() -> FailureLatch:
    return FailureLatch()


@pytest.fixture
def silent_reporter() -> StatusReporter:
    """Reporter with every side channel disabled."""
    return StatusReporter(led_path=None, notify_socket=None, sleep=lambda _seconds: None)
