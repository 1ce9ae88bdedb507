"""Process exit status codes."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit status of a scan run.

    The value doubles as the number of status LED pulses emitted on exit.
    """

    SUCCESS = 0
    SYSTEM_ERROR = 1
    NETWORK_ERROR = 2
    NO_SCANNER = 3
    ZERO_PAGES = 4
