"""CompressStage: raw page to single-page PDF with GraphicsMagick."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from scanpdf.constants import DEFAULT_DPI, DEFAULT_JPEG_QUALITY
from scanpdf.exceptions import ConversionError
from scanpdf.types import PageDescriptor

from .base import BaseStage, run_command

logger = logging.getLogger(__name__)


class CompressStage(BaseStage[PageDescriptor, Path]):
    """Convert a raw scanned page into a JPEG-compressed PDF page.

    Runs ``gm convert -set units PixelsPerInch -density <dpi> <pnm>
    -compress jpeg -quality <q> <pdf>``, writing ``page.output_path``.
    The raw artifact is left alone; deleting it is the worker's job.
    """

    name = "compress"
    error_class = ConversionError

    def __init__(self, dpi: int = DEFAULT_DPI, quality: int = DEFAULT_JPEG_QUALITY, program: str = "gm"):
        self.dpi = dpi
        self.quality = quality
        self.program = program

    def build_command(self, page: PageDescriptor) -> list[str]:
        return [
            self.program,
            "convert",
            "-set",
            "units",
            "PixelsPerInch",
            "-density",
            str(self.dpi),
            str(page.source_path),
            "-compress",
            "jpeg",
            "-quality",
            str(self.quality),
            str(page.output_path),
        ]

    def _process_impl(self, input_data: PageDescriptor, **context: Any) -> Path:
        run_command(self.build_command(input_data))
        logger.debug("Compressed %s -> %s", input_data.source_path.name, input_data.output_path.name)
        return input_data.output_path
