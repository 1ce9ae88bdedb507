"""FinalizationGate - decide whether a run produced a document, then ship it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from .exceptions import NoPagesError
from .misc import document_filename, tz_now
from .types import Merger, PageDescriptor, Uploader

logger = logging.getLogger(__name__)


class FinalizationGate:
    """Merge the kept pages of a drained run and hand the result to the uploader.

    Must only be called once the scanner has exited and every worker has
    returned; the page sequence is read without synchronisation.

    Args:
        merger: Merges page PDFs into one document
        uploader: Uploads the merged document
        workspace: Directory the document is created in
        prefix: Document name prefix
        clock: Time source for the document name
    """

    def __init__(
        self,
        merger: Merger,
        uploader: Uploader,
        workspace: Path,
        prefix: str = "",
        clock: Callable[[], datetime] = tz_now,
    ):
        self.merger = merger
        self.uploader = uploader
        self.workspace = workspace
        self.prefix = prefix
        self.clock = clock

    def kept_outputs(self, pages: Sequence[PageDescriptor]) -> list[Path]:
        """Output paths of kept pages, in scan order."""
        return [page.output_path for page in pages if page.keep]

    def assemble(self, pages: Sequence[PageDescriptor]) -> Path:
        """Merge kept pages into ``<workspace>/<prefix><timestamp>.pdf``.

        Per-page PDFs are removed after a successful merge.

        Raises:
            NoPagesError: If every page was blank
            MergeError: If the merger fails
        """
        outputs = self.kept_outputs(pages)
        if not outputs:
            raise NoPagesError("Zero pages scanned, cancelling")

        document = self.workspace / document_filename(self.prefix, self.clock())
        self.merger.process(outputs, destination=document)
        logger.info("%d pages scanned to %s", len(outputs), document)

        for path in outputs:
            try:
                path.unlink()
            except OSError as e:
                logger.debug("Could not remove %s: %s", path, e)
        return document

    def finalize(self, pages: Sequence[PageDescriptor]) -> Path:
        """Assemble and upload; returns the uploaded document path.

        Raises:
            NoPagesError: If every page was blank
            MergeError: If the merger fails
            UploadError: If every upload attempt fails
        """
        document = self.assemble(pages)
        self.uploader.process(document)
        return document
