"""PageRecordStore - the append-only, scan-ordered list of pages."""

from __future__ import annotations

from collections.abc import Iterator

from .page import PageDescriptor


class PageRecordStore:
    """Ordered sequence of page descriptors, the single source of document order.

    During the scan the store is owned by the driver's results reader, which is
    the only writer. Once the scanner and every worker have finished, the
    coordinator calls :meth:`freeze` and hands the frozen pages to the
    finalization gate; no synchronisation is needed on either side.

    Example:
        >>> store = PageRecordStore()
        >>> store.append(PageDescriptor(Path("out1.pnm")))
        >>> store.append(PageDescriptor(Path("out2.pnm"), keep=False))
        >>> [p.index for p in store.freeze()]
        [1, 2]
    """

    def __init__(self) -> None:
        self._pages: list[PageDescriptor] = []
        self._frozen = False

    def append(self, page: PageDescriptor) -> None:
        """Append a page in scan order and assign its 1-based index.

        Raises:
            RuntimeError: If the store was already handed off
        """
        if self._frozen:
            raise RuntimeError("Page record store is frozen")
        page.index = len(self._pages) + 1
        self._pages.append(page)

    def freeze(self) -> tuple[PageDescriptor, ...]:
        """Hand the pages off to finalization; later appends are rejected."""
        self._frozen = True
        return tuple(self._pages)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[PageDescriptor]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, index: int) -> PageDescriptor:
        return self._pages[index]

    def __repr__(self) -> str:
        kept = sum(1 for page in self._pages if page.keep)
        return f"PageRecordStore(pages={len(self._pages)}, kept={kept}, frozen={self._frozen})"
