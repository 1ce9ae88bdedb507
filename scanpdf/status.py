"""Run status signalling and cleanup.

The scanner host usually runs headless, so the outcome of a run is reported
three ways: the log, a message on a local unix socket (for a display or
notification daemon, if one listens) and a number of LED pulses equal to the
exit code. Both side channels are best-effort.
"""

from __future__ import annotations

import logging
import shutil
import socket
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from .constants import DEFAULT_RAMDISK, LED_PULSE_SECONDS
from .types import ExitCode

logger = logging.getLogger(__name__)


class StatusReporter:
    """Best-effort LED and socket notifications.

    Args:
        led_path: sysfs LED directory (``trigger`` and ``brightness`` files), None to disable
        notify_socket: Unix stream socket path, None to disable
        pulse_seconds: Duration of each on and off phase
        sleep: Sleep function (replaced in tests)
    """

    def __init__(
        self,
        led_path: Path | None = None,
        notify_socket: Path | None = None,
        pulse_seconds: float = LED_PULSE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.led_path = led_path
        self.notify_socket = notify_socket
        self.pulse_seconds = pulse_seconds
        self.sleep = sleep

    def notify(self, message: str) -> bool:
        """Send ``message`` to the notification socket; False if nobody listens."""
        if self.notify_socket is None:
            return False
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(1.0)
                sock.connect(str(self.notify_socket))
                sock.sendall(message.encode("utf-8"))
        except OSError as e:
            logger.debug("Status socket %s unavailable: %s", self.notify_socket, e)
            return False
        return True

    def _write_led(self, name: str, value: str) -> None:
        assert self.led_path is not None
        (self.led_path / name).write_text(f"{value}\n", encoding="utf-8")

    def pulse(self, count: int) -> bool:
        """Take over the LED and blink it ``count`` times; False if the LED is unavailable."""
        if self.led_path is None:
            return False
        try:
            self._write_led("trigger", "none")
            self._write_led("brightness", "0")
            for _ in range(count):
                self.sleep(self.pulse_seconds)
                self._write_led("brightness", "255")
                self.sleep(self.pulse_seconds)
                self._write_led("brightness", "0")
        except OSError as e:
            logger.debug("Status LED %s unavailable: %s", self.led_path, e)
            return False
        return True


def remove_workspace(workspace: Path, ramdisk: Path = Path(DEFAULT_RAMDISK), preserve: Iterable[Path] = ()) -> None:
    """Delete the session workspace, keeping ``preserve`` paths.

    Directories outside ``ramdisk`` are never touched.
    """
    workspace = workspace.resolve()
    ramdisk = ramdisk.resolve()
    if workspace == ramdisk or not workspace.is_relative_to(ramdisk):
        logger.warning("Refusing to remove %s: not inside %s", workspace, ramdisk)
        return
    if not workspace.exists():
        return

    kept = {path.resolve() for path in preserve}
    if not kept:
        shutil.rmtree(workspace, ignore_errors=True)
        return

    for child in workspace.iterdir():
        if child.resolve() in kept:
            logger.info("Keeping %s", child)
        elif child.is_dir():
            shutil.rmtree(child, ignore_errors=True)
        else:
            child.unlink(missing_ok=True)


def clean_exit(
    message: str,
    code: ExitCode,
    workspace: Path | None = None,
    ramdisk: Path = Path(DEFAULT_RAMDISK),
    reporter: StatusReporter | None = None,
    preserve: Iterable[Path] = (),
) -> int:
    """Single cleanup routine for every outcome of a run.

    Removes the workspace, logs ``message``, notifies the socket and pulses
    the LED ``code`` times.

    Returns:
        Process exit status
    """
    if workspace is not None:
        remove_workspace(workspace, ramdisk, preserve)

    if code in (ExitCode.SUCCESS, ExitCode.ZERO_PAGES):
        logger.info("%s", message)
    else:
        logger.error("%s", message)

    if reporter is not None:
        reporter.notify(message)
        reporter.pulse(int(code))
    return int(code)
