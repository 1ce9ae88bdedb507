"""Unattended scan-to-PDF pipeline coordinator."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import ScanConfig
from .driver import ScanDriver
from .finalize import FinalizationGate
from .handshake import Handshake
from .latch import FailureLatch
from .preflight import check_dependencies, check_destination, check_ramdisk, create_workspace
from .scanimage import build_scan_command, probe_capabilities
from .stages import CompressStage, MergeStage, UploadStage
from .types import Compressor, ExitCode, Merger, PageDescriptor, PageRecordStore, Uploader
from .workers import WorkerPool

logger = logging.getLogger(__name__)

__all__ = [
    "ScanPipeline",
    "ScanConfig",
    "ExitCode",
    "PageDescriptor",
    "PageRecordStore",
]


class ScanPipeline:
    """Scan, filter, compress, merge and upload one batch of sheets.

    This pipeline runs four phases:
    1. Preflight: ramdisk, workspace, required programs, upload destination, scanner options
    2. Scan: the scanner is driven interactively while workers score and compress pages
    3. Finalize: kept pages are merged in scan order
    4. Upload: the document is pushed to the remote inbox

    External programs are reached through the compressor, merger and uploader
    components; any object following the matching protocol can replace them.

    Example:
        >>> config = ScanConfig(dpi=300, prefix="invoices")
        >>> pipeline = ScanPipeline(config)
        >>> document = pipeline.run()
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        compressor: Compressor | None = None,
        merger: Merger | None = None,
        uploader: Uploader | None = None,
    ):
        self.config = config if config is not None else ScanConfig()
        self.config.validate()

        self.compressor: Compressor = compressor or CompressStage(
            dpi=self.config.dpi,
            quality=self.config.jpeg_quality,
        )
        self.merger: Merger = merger or MergeStage()
        self.uploader: Uploader = uploader or UploadStage(
            target=self.config.upload_target,
            remote_dir=f"{self.config.prefix}{self.config.upload_dir}",
            attempts=self.config.upload_attempts,
        )

        self.workspace: Path | None = None
        self.document: Path | None = None
        self.store = PageRecordStore()
        self.latch = FailureLatch()
        self.handshake = Handshake()

        logger.info(
            "Using %d dpi, %d convert workers and PDF prefix '%s'",
            self.config.dpi,
            self.config.workers,
            self.config.prefix,
        )

    # ==================== Phases ====================

    def prepare(self) -> list[str]:
        """Run the preflight checks and build the scanner command.

        Sets ``self.workspace`` as soon as it exists, so callers can clean it
        up even when a later check fails.

        Returns:
            Scanner command line
        """
        check_ramdisk(self.config.ramdisk)
        self.workspace = create_workspace(self.config.ramdisk)

        check_dependencies()
        check_destination(self.config.upload_target, self.config.probe_timeout)

        capabilities = probe_capabilities(self.config.scanner_command)
        return build_scan_command(
            self.workspace,
            capabilities,
            dpi=self.config.dpi,
            options=self.config.scan_options,
            program=self.config.scanner_command,
        )

    def scan(self, command: list[str]) -> tuple[PageDescriptor, ...]:
        """Drive the scanner until it exits and every page has been processed.

        Returns:
            Frozen pages in scan order

        Raises:
            ScanPipelineError: The first fatal error of any reader or worker
        """
        pool = WorkerPool(self.compressor, self.latch, count=self.config.workers)
        driver = ScanDriver(
            command,
            self.store,
            pool.jobs,
            self.latch,
            handshake=self.handshake,
            ack_delay=self.config.ack_delay,
        )

        pool.start()
        # On an exception the daemon workers are abandoned, not drained
        driver.run()
        pool.shutdown()

        self.latch.raise_if_failed()
        return self.store.freeze()

    def finalize(self, pages: tuple[PageDescriptor, ...]) -> Path:
        """Merge kept pages and upload the document."""
        if self.workspace is None:
            raise RuntimeError("No workspace; call prepare() first")

        gate = FinalizationGate(self.merger, self.uploader, self.workspace, prefix=self.config.prefix)
        self.document = gate.finalize(pages)
        return self.document

    def run(self) -> Path:
        """Run every phase; returns the uploaded document path."""
        command = self.prepare()
        pages = self.scan(command)
        return self.finalize(pages)
