"""FailureLatch - first fatal error from any thread wins."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .exceptions import ScanPipelineError

logger = logging.getLogger(__name__)


class FailureLatch:
    """Collects the first fatal error raised on a helper thread.

    Reader and worker threads never terminate the process themselves. They
    call :meth:`fail`, which records the error once and runs the abort
    callbacks (kill the scanner, close the handshake). The main flow calls
    :meth:`raise_if_failed` after everything has been joined.

    Example:
        >>> latch = FailureLatch()
        >>> latch.fail(ConversionError("gm exited with status 1"))
        True
        >>> latch.raise_if_failed()
        Traceback (most recent call last):
        ...
        ConversionError: gm exited with status 1
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._error: ScanPipelineError | None = None
        self._callbacks: list[Callable[[ScanPipelineError], None]] = []

    def on_fail(self, callback: Callable[[ScanPipelineError], None]) -> None:
        """Register a callback run once, with the first error."""
        with self._lock:
            self._callbacks.append(callback)

    def fail(self, error: ScanPipelineError) -> bool:
        """Record ``error`` unless an earlier one was already recorded.

        Returns:
            True if this call recorded the error
        """
        with self._lock:
            if self._error is not None:
                logger.debug("Ignoring follow-up error: %s", error)
                return False
            self._error = error
            callbacks = list(self._callbacks)

        logger.error("%s", error)
        for callback in callbacks:
            try:
                callback(error)
            except Exception:  # noqa: BLE001
                logger.exception("Abort callback failed")
        return True

    @property
    def failed(self) -> bool:
        with self._lock:
            return self._error is not None

    @property
    def error(self) -> ScanPipelineError | None:
        with self._lock:
            return self._error

    def raise_if_failed(self) -> None:
        error = self.error
        if error is not None:
            raise error
