"""MergeStage: ordered page PDFs to one document with pdfunite."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from scanpdf.exceptions import MergeError

from .base import BaseStage, run_command


class MergeStage(BaseStage[Sequence[Path], Path]):
    """Concatenate page PDFs, in the given order, into ``destination``.

    Example:
        >>> MergeStage().process([Path("out1.pdf"), Path("out3.pdf")], destination=Path("doc.pdf"))
        PosixPath('doc.pdf')
    """

    name = "merge"
    error_class = MergeError

    def __init__(self, program: str = "pdfunite"):
        self.program = program

    def _process_impl(self, input_data: Sequence[Path], **context: Any) -> Path:
        destination: Path | None = context.get("destination")
        if destination is None:
            raise MergeError("[merge] No destination given")
        if not input_data:
            raise MergeError("[merge] No pages to merge")

        run_command([self.program, *(str(path) for path in input_data), str(destination)])
        return destination
