"""Handshake - pacing protocol between the scanner's two output streams.

The scanner pauses after every page and waits for an acknowledgement on its
stdin. The status reader sends that acknowledgement, but must not let the
scanner continue until the results reader has recorded the page and a worker
has accepted it. This module holds the single-slot "advance" signal that ties
the two readers together, as an explicit state machine:

    IDLE --prompt_seen--> AWAITING_ACK --ack_sent--> AWAITING_ADVANCE
    AWAITING_ADVANCE --wait_for_advance--> IDLE
    any state --close--> CLOSED

At most one page is in flight between the results reader's hand-off and the
status reader consuming the matching advance signal.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum

logger = logging.getLogger(__name__)


class HandshakeState(Enum):
    IDLE = "idle"
    AWAITING_ACK = "awaiting_ack"
    AWAITING_ADVANCE = "awaiting_advance"
    CLOSED = "closed"


class Handshake:
    """Single-slot advance channel shared by the two reader threads.

    Results reader, per page::

        handshake.begin_page()   # wait until the previous page was consumed
        queue.submit(page)       # rendezvous with a worker
        handshake.advance()      # let the scanner go on

    Status reader, per pause prompt::

        handshake.prompt_seen()
        process.stdin.write("\\n")
        handshake.ack_sent()
        handshake.wait_for_advance()

    ``close()`` disables pacing and releases every waiter; it is called when
    the scanner exits, when its status stream ends and when the run aborts.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._state = HandshakeState.IDLE
        self._pending = 0
        self._in_flight = 0
        self._max_in_flight = 0
        self._pages = 0

    # ==================== Results reader ====================

    def begin_page(self) -> None:
        """Block until no earlier page is in flight or the handshake is closed.

        Pages printed after close are still recorded and processed; only the
        pacing stops.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._in_flight == 0 or self._state is HandshakeState.CLOSED)

    def advance(self) -> None:
        """Publish the advance signal for the page just handed to a worker."""
        with self._cond:
            self._pages += 1
            if self._state is HandshakeState.CLOSED:
                return
            self._pending += 1
            self._in_flight += 1
            self._max_in_flight = max(self._max_in_flight, self._in_flight)
            self._cond.notify_all()

    # ==================== Status reader ====================

    def prompt_seen(self) -> None:
        with self._cond:
            if self._state is HandshakeState.IDLE:
                self._state = HandshakeState.AWAITING_ACK

    def ack_sent(self) -> None:
        with self._cond:
            if self._state is HandshakeState.AWAITING_ACK:
                self._state = HandshakeState.AWAITING_ADVANCE

    def wait_for_advance(self, timeout: float | None = None) -> bool:
        """Block until the results reader publishes the advance signal.

        Args:
            timeout: Optional timeout in seconds

        Returns:
            True if a signal was consumed, False on close or timeout
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending > 0 or self._state is HandshakeState.CLOSED,
                timeout=timeout,
            )
            if not ready or self._state is HandshakeState.CLOSED:
                return False
            self._pending -= 1
            self._in_flight -= 1
            self._state = HandshakeState.IDLE
            self._cond.notify_all()
            return True

    # ==================== Shutdown ====================

    def close(self) -> None:
        with self._cond:
            if self._state is not HandshakeState.CLOSED:
                logger.debug("Handshake closed after %d pages", self._pages)
            self._state = HandshakeState.CLOSED
            self._cond.notify_all()

    # ==================== Introspection ====================

    @property
    def state(self) -> HandshakeState:
        with self._cond:
            return self._state

    @property
    def closed(self) -> bool:
        return self.state is HandshakeState.CLOSED

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def max_in_flight(self) -> int:
        """Highest number of unconsumed pages ever observed."""
        with self._cond:
            return self._max_in_flight

    @property
    def pages(self) -> int:
        """Pages handed off so far."""
        with self._cond:
            return self._pages

    def __repr__(self) -> str:
        return f"Handshake(state={self.state.value}, in_flight={self.in_flight}, pages={self.pages})"
