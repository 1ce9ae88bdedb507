"""Component interface definitions for the scan pipeline.

This module defines Protocol interfaces for the external programs the
coordinator delegates to:
- Compressor: Raw page to single-page PDF
- Merger: Ordered single-page PDFs to one document
- Uploader: Document to the upload destination

The production implementations live in :mod:`scanpdf.stages`; tests pass any
object with a matching ``process`` method.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .page import PageDescriptor


@runtime_checkable
class Compressor(Protocol):
    """Page compression interface.

    Example:
        >>> compressor = CompressStage(dpi=200)
        >>> compressor.process(page)
        PosixPath('/dev/shm/tmp.abc/out1.pdf')
    """

    name: str

    def process(self, page: PageDescriptor) -> Path:
        """Write ``page.output_path`` from ``page.source_path``.

        Args:
            page: Page whose raw artifact should be converted

        Returns:
            Path of the produced page PDF

        Raises:
            ConversionError: If the conversion fails
        """
        ...


@runtime_checkable
class Merger(Protocol):
    """Document assembly interface."""

    name: str

    def process(self, pages: Sequence[Path], *, destination: Path) -> Path:
        """Merge ``pages`` in the given order into ``destination``.

        Raises:
            MergeError: If the merge fails
        """
        ...


@runtime_checkable
class Uploader(Protocol):
    """Document upload interface."""

    name: str

    def process(self, document: Path) -> int:
        """Upload ``document`` and return the number of attempts it took.

        Raises:
            UploadError: If every attempt failed
        """
        ...
