"""ScanDriver - runs the interactive scanner and feeds the worker pool.

The scanner is started with three pipes:

- stdout: one raw page path per line (``--batch-print``)
- stderr: status lines, including the pause prompt (``--batch-prompt``)
- stdin: acknowledgement token that lets the scanner feed the next sheet

Two reader threads consume stdout and stderr. They are paced by a
:class:`~scanpdf.handshake.Handshake` so that the scanner only continues once
the previous page has been recorded and accepted by a worker.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from .constants import ACK_TOKEN, DEFAULT_ACK_DELAY, NO_DEVICE_PHRASE, PAUSE_PROMPT
from .exceptions import ScannerNotFoundError, ScanPipelineError, ScanProcessError
from .handshake import Handshake
from .latch import FailureLatch
from .types import PageDescriptor, PageRecordStore
from .workers import HandoffQueue

logger = logging.getLogger(__name__)


class ScanDriver:
    """Drives one scanner session.

    Args:
        command: Scanner command line
        store: Page record store, appended to in scan order
        jobs: Hand-off queue of a started worker pool
        latch: Failure latch shared with the workers
        handshake: Pacing state machine (a fresh one by default)
        ack_delay: Seconds to wait after a pause prompt before acknowledging

    Example:
        >>> driver = ScanDriver(build_scan_command(...), store, pool.jobs, latch)
        >>> returncode = driver.run()
    """

    def __init__(
        self,
        command: Sequence[str],
        store: PageRecordStore,
        jobs: HandoffQueue,
        latch: FailureLatch,
        handshake: Handshake | None = None,
        ack_delay: float = DEFAULT_ACK_DELAY,
    ):
        self.command = list(command)
        self.store = store
        self.jobs = jobs
        self.latch = latch
        self.handshake = handshake or Handshake()
        self.ack_delay = ack_delay
        self._process: subprocess.Popen[str] | None = None
        self.latch.on_fail(lambda _error: self.abort())

    def run(self) -> int:
        """Run the scanner until it exits and both streams are drained.

        Returns:
            Scanner exit status (non-zero is normal when the feeder runs empty)

        Raises:
            ScanProcessError: If the scanner cannot be started
        """
        logger.debug("Starting scanner: %s", " ".join(self.command))
        try:
            process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ScanProcessError(f"Error starting {self.command[0]}: {e}") from e

        with process:
            self._process = process
            readers = [
                threading.Thread(target=self._read_status, name="scanpdf-status", daemon=True),
                threading.Thread(target=self._read_results, name="scanpdf-results", daemon=True),
            ]
            try:
                for reader in readers:
                    reader.start()
                returncode = process.wait()
                self.handshake.close()
                for reader in readers:
                    reader.join()
            finally:
                if process.poll() is None:
                    process.kill()
                self.handshake.close()

        logger.info("Scanner exited with status %d after %d pages", returncode, len(self.store))
        return returncode

    def abort(self) -> None:
        """Stop the scanner and release both readers."""
        process = self._process
        if process is not None and process.poll() is None:
            logger.debug("Killing scanner")
            process.kill()
        self.handshake.close()

    # ==================== Reader threads ====================

    def _read_status(self) -> None:
        process = self._process
        assert process is not None and process.stderr is not None

        try:
            for raw_line in process.stderr:
                line = raw_line.rstrip("\n")
                logger.info("%s", line)

                if NO_DEVICE_PHRASE in line:
                    self.latch.fail(ScannerNotFoundError("No SANE devices found"))
                    return

                if PAUSE_PROMPT in line:
                    self._acknowledge(process)
        except ScanPipelineError as e:
            self.latch.fail(e)
        except (OSError, ValueError) as e:
            if not self.handshake.closed:
                self.latch.fail(ScanProcessError(f"Error reading scanner status: {e}"))
        finally:
            self.handshake.close()

    def _acknowledge(self, process: subprocess.Popen[str]) -> None:
        self.handshake.prompt_seen()
        time.sleep(self.ack_delay)

        assert process.stdin is not None
        try:
            process.stdin.write(ACK_TOKEN)
            process.stdin.flush()
        except BrokenPipeError:
            logger.debug("Scanner closed stdin before acknowledgement")
            return
        self.handshake.ack_sent()

        self.handshake.wait_for_advance()

    def _read_results(self) -> None:
        process = self._process
        assert process is not None and process.stdout is not None

        try:
            for raw_line in process.stdout:
                name = raw_line.strip()
                if not name:
                    continue

                page = PageDescriptor(Path(name))
                self.store.append(page)
                logger.info("Scanned page %d: %s", page.index, page.source_path.name)

                self.handshake.begin_page()
                if self.latch.failed:
                    continue
                self.jobs.submit(page)
                self.handshake.advance()
        except ScanPipelineError as e:
            self.latch.fail(e)
        except (OSError, RuntimeError, ValueError) as e:
            self.latch.fail(ScanProcessError(f"Error reading scanned pages: {e}"))
