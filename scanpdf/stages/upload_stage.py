"""UploadStage: push the merged document to the remote inbox with rsync."""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Any

from scanpdf.constants import DEFAULT_UPLOAD_ATTEMPTS, DEFAULT_UPLOAD_DIR, DEFAULT_UPLOAD_TARGET
from scanpdf.exceptions import UploadError

from .base import BaseStage, describe_failure, run_command

logger = logging.getLogger(__name__)


class UploadStage(BaseStage[Path, int]):
    """Upload a document with ``rsync -e "ssh -o BatchMode=yes"``.

    The transfer is retried up to ``attempts`` times. ``process`` returns the
    number of attempts the successful transfer took; when every attempt fails
    an UploadError carrying the document path is raised.

    Attributes:
        target: SSH host alias of the destination
        remote_dir: Remote directory, relative to the login directory
        attempts: Maximum number of transfer attempts
        retry_delay: Seconds to wait between attempts
    """

    name = "upload"
    error_class = UploadError

    def __init__(
        self,
        target: str = DEFAULT_UPLOAD_TARGET,
        remote_dir: str = DEFAULT_UPLOAD_DIR,
        attempts: int = DEFAULT_UPLOAD_ATTEMPTS,
        retry_delay: float = 0.0,
        program: str = "rsync",
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.target = target
        self.remote_dir = remote_dir
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.program = program

    @property
    def destination(self) -> str:
        return f"{self.target}:{self.remote_dir}"

    def build_command(self, document: Path) -> list[str]:
        return [self.program, "-e", "ssh -o BatchMode=yes", str(document), self.destination]

    def _process_impl(self, input_data: Path, **context: Any) -> int:
        command = self.build_command(input_data)
        last_error = ""

        for attempt in range(1, self.attempts + 1):
            try:
                run_command(command)
            except (OSError, subprocess.SubprocessError) as e:
                last_error = describe_failure(e)
                logger.warning("Upload attempt %d/%d failed: %s", attempt, self.attempts, last_error)
                if attempt < self.attempts and self.retry_delay:
                    time.sleep(self.retry_delay)
                continue

            logger.info("Uploaded %s to %s", input_data.name, self.destination)
            return attempt

        raise UploadError(
            f"Error uploading: {last_error}",
            document=input_data,
            attempts=self.attempts,
        )
