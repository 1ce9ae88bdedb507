"""Termination signal handling for a scan run."""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType

from .exceptions import InterruptedRunError

logger = logging.getLogger(__name__)

EXIT_SIGNALS = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM)


def _raise_interrupted(signum: int, frame: FrameType | None) -> None:
    logger.debug("Received %s", signal.Signals(signum).name)
    raise InterruptedRunError("Caught exit signal, cleaning up")


@contextmanager
def exit_signals_raise() -> Iterator[None]:
    """Turn SIGHUP, SIGINT and SIGTERM into InterruptedRunError in the main thread.

    Previous handlers are restored on exit.

    Example:
        >>> with exit_signals_raise():
        ...     pipeline.run()
    """
    previous = {signum: signal.signal(signum, _raise_interrupted) for signum in EXIT_SIGNALS}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
