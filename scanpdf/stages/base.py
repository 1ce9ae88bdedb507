"""Base stage class for external pipeline steps.

This module defines the abstract base class for every step that delegates to
an external program (compressor, merger, uploader), providing a consistent
interface, timing, logging and translation of failures into the pipeline's
exception hierarchy.
"""

from __future__ import annotations

import logging
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from scanpdf.exceptions import ProcessingError, ScanPipelineError

logger = logging.getLogger(__name__)

__all__ = ["BaseStage", "run_command"]

# Type variables for generic stage input/output
InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


def run_command(command: Sequence[str], *, timeout: float | None = None) -> subprocess.CompletedProcess[str]:
    """Run an external program to completion.

    Args:
        command: Program and arguments
        timeout: Optional timeout in seconds

    Returns:
        The completed process

    Raises:
        subprocess.CalledProcessError: On a non-zero exit status
        FileNotFoundError: If the program does not exist
    """
    logger.debug("Running: %s", " ".join(command))
    completed = subprocess.run(
        list(command),
        check=True,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    if completed.stderr:
        logger.debug("%s: %s", command[0], completed.stderr.strip())
    return completed


def describe_failure(exc: Exception) -> str:
    """Human-readable failure description, including the program's stderr."""
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip()
        message = f"{exc.cmd[0]} exited with status {exc.returncode}"
        return f"{message}: {stderr}" if stderr else message
    return str(exc)


class BaseStage(ABC, Generic[InputT, OutputT]):
    """Abstract base class for all external steps.

    Subclasses implement `_process_impl` and set `error_class`. This base
    class provides:

    - Consistent interface (process)
    - Timing and logging
    - Error translation with stage context

    Attributes:
        name: Stage name for logging and identification
        error_class: Pipeline exception raised when the step fails

    Example:
        >>> class EchoStage(BaseStage[str, str]):
        ...     name = "echo"
        ...
        ...     def _process_impl(self, input_data, **context):
        ...         run_command(["echo", input_data])
        ...         return input_data
    """

    # Subclasses should override these
    name: str = "base-stage"
    error_class: type[ScanPipelineError] = ProcessingError

    @abstractmethod
    def _process_impl(self, input_data: InputT, **context: Any) -> OutputT:
        """Internal processing implementation.

        Args:
            input_data: Input of the step
            **context: Additional keyword arguments (destination, etc.)

        Returns:
            Output of the step
        """

    def process(self, input_data: InputT, **context: Any) -> OutputT:
        """Run the step.

        This method wraps _process_impl with timing, logging, and error handling.
        Pipeline errors raised by the implementation pass through unchanged;
        anything else is wrapped in `error_class`.

        Args:
            input_data: Input of the step
            **context: Additional context

        Returns:
            Output of the step

        Raises:
            ScanPipelineError: If the step fails
        """
        start_time = time.perf_counter()

        try:
            result = self._process_impl(input_data, **context)
        except ScanPipelineError:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error("%s failed after %.2fms", self.name, elapsed_ms)
            raise
        except (OSError, subprocess.SubprocessError) as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            message = describe_failure(e)
            logger.error("%s failed after %.2fms: %s", self.name, elapsed_ms, message)
            raise self.error_class(f"[{self.name}] {message}") from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("%s completed in %.2fms", self.name, elapsed_ms)
        return result

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(name={self.name!r})"
