"""PageDescriptor dataclass - one scanned page and its keep/discard decision."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..constants import OUTPUT_PAGE_SUFFIX


@dataclass
class PageDescriptor:
    """Single scanned page.

    Created by the scan driver when the scanner reports a freshly written raw
    artifact, mutated only by the worker that processes it, and read by the
    finalization gate once every worker has returned.

    Core fields:
    - source_path: Raw artifact written by the scanner (owned by this page)
    - keep: Whether the page goes into the merged document

    Optional metadata fields:
    - index: 1-based scan position, assigned by the record store
    - dark_ratio: Blank-page score computed by the worker
    """

    source_path: Path
    keep: bool = True

    index: int | None = None
    dark_ratio: float | None = None
    _decided: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.source_path, str):
            self.source_path = Path(self.source_path)

    @property
    def output_path(self) -> Path:
        """Compressed page path: same directory and base name, ``.pdf`` extension."""
        return self.source_path.with_suffix(OUTPUT_PAGE_SUFFIX)

    @property
    def decided(self) -> bool:
        """Whether a worker has already made the keep/discard decision."""
        return self._decided

    def record_decision(self, dark_ratio: float, keep: bool) -> None:
        """Store the worker's decision for this page.

        Args:
            dark_ratio: Blank-page score of the page
            keep: False to exclude the page from the document

        Raises:
            RuntimeError: If the page was already decided
        """
        if self._decided:
            raise RuntimeError(f"Page {self.source_path} was already processed")
        self._decided = True
        self.dark_ratio = dark_ratio
        self.keep = keep
