"""Custom exception classes for the scan pipeline.

Every fatal condition of a scan run is expressed as one of these exceptions.
Each class carries the process exit code it maps to, so the single cleanup
routine in :mod:`scanpdf.status` can terminate with the right status no matter
where the failure was raised.

Exception Hierarchy:
    ScanPipelineError (base, exit 1)
    ├── ConfigurationError
    ├── PreflightError
    │   ├── WorkspaceError
    │   └── DependencyError
    ├── NetworkError (exit 2)
    │   ├── DestinationUnreachableError
    │   └── UploadError
    ├── ScannerNotFoundError (exit 3)
    ├── ProcessingError
    │   ├── PageProcessingError
    │   ├── ConversionError
    │   ├── MergeError
    │   └── ScanProcessError
    ├── NoPagesError (exit 4)
    └── InterruptedRunError

Usage:
    try:
        document = pipeline.run()
    except NoPagesError as e:
        # Operator fed only separator sheets
        logger.info("%s", e)
    except ScanPipelineError as e:
        clean_exit(str(e), e.exit_code, workspace)
"""

from __future__ import annotations

from pathlib import Path

from .types.status import ExitCode


class ScanPipelineError(Exception):
    """Base exception for all scan pipeline errors.

    Attributes:
        exit_code: Process exit status this error terminates the run with
    """

    exit_code: ExitCode = ExitCode.SYSTEM_ERROR


# ============================================================================
# Setup Errors
# ============================================================================


class ConfigurationError(ScanPipelineError):
    """Raised when configuration values are invalid or malformed.

    Examples:
        - Malformed YAML settings
        - Non-numeric DPI in the environment
        - Zero upload attempts
    """


class PreflightError(ScanPipelineError):
    """Raised when a check before scanning fails.

    No page has been fed to the scanner when this is raised.
    """


class WorkspaceError(PreflightError):
    """Raised when the session workspace cannot be prepared.

    Examples:
        - Ramdisk is not mounted
        - Temporary directory cannot be created
    """


class DependencyError(PreflightError):
    """Raised when a required external program is missing.

    Examples:
        - GraphicsMagick (gm) not installed
        - pdfunite not on PATH
    """


# ============================================================================
# Network Errors
# ============================================================================


class NetworkError(ScanPipelineError):
    """Base exception for upload destination problems."""

    exit_code = ExitCode.NETWORK_ERROR


class DestinationUnreachableError(NetworkError):
    """Raised when the upload destination does not accept connections."""


class UploadError(NetworkError):
    """Raised when every upload attempt failed.

    The assembled document is left in place for manual recovery.

    Attributes:
        document: Path of the merged document that could not be uploaded
        attempts: Number of attempts made
    """

    def __init__(self, message: str, document: Path | None = None, attempts: int = 0):
        self.document = document
        self.attempts = attempts
        super().__init__(message)


# ============================================================================
# Scanner Errors
# ============================================================================


class ScannerNotFoundError(ScanPipelineError):
    """Raised when no scanning device is attached or detected."""

    exit_code = ExitCode.NO_SCANNER


# ============================================================================
# Processing Errors
# ============================================================================


class ProcessingError(ScanPipelineError):
    """Base exception for failures while the pipeline is running.

    Processing errors are fatal: no partial document is produced.
    """


class PageProcessingError(ProcessingError):
    """Raised when a scanned page cannot be opened or decoded."""


class ConversionError(ProcessingError):
    """Raised when the compressor fails to convert a page."""


class MergeError(ProcessingError):
    """Raised when the document merger fails."""


class ScanProcessError(ProcessingError):
    """Raised when the scanning process cannot be started or driven."""


# ============================================================================
# Run Outcomes
# ============================================================================


class NoPagesError(ScanPipelineError):
    """Raised when no page survived blank-page filtering.

    This is an expected outcome (only separator sheets were fed), not a fault.
    """

    exit_code = ExitCode.ZERO_PAGES


class InterruptedRunError(ScanPipelineError):
    """Raised when the run is terminated by a signal."""
