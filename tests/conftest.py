"""Pytest configuration and shared fixtures for scanpdf tests.

This module provides:
- Raw page writers (PNM images with a controlled number of dark pixels)
- Fake external steps (compressor, merger, uploader) recording their calls
- Test configuration and path setup
"""

from __future__ import annotations

import random
import sys
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np
import pytest

# Ensure project root is importable when running tests via python -m pytest
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from scanpdf.exceptions import ConversionError  # noqa: E402
from scanpdf.types import PageDescriptor  # noqa: E402

# 106x106 pages have a 3 pixel border and a 100x100 sampled window
PAGE_SIZE = 106


def write_pnm(path: Path, image: np.ndarray) -> Path:
    """Write an 8-bit RGB (HxWx3) or gray (HxW) image as binary PNM."""
    height, width = image.shape[:2]
    magic = b"P6" if image.ndim == 3 else b"P5"
    path.write_bytes(magic + b"\n%d %d\n255\n" % (width, height) + image.astype(np.uint8).tobytes())
    return path


def page_image(dark_pixels: int = 0, size: int = PAGE_SIZE) -> np.ndarray:
    """White RGB page with ``dark_pixels`` black pixels inside the sampled window."""
    image = np.full((size, size, 3), 255, dtype=np.uint8)
    border = int(0.03 * size)
    start = border + 1
    width = size - 2 * border
    for n in range(dark_pixels):
        y, x = start + n // width, start + n % width
        image[y, x] = 0
    return image


# ==================== Sample Data Fixtures ====================


@pytest.fixture
def write_page(tmp_path: Path) -> Callable[..., PageDescriptor]:
    """Factory writing ``out<n>.pnm`` pages into tmp_path.

    Example:
        >>> page = write_page(1, dark_pixels=4)
    """

    def _write(number: int, dark_pixels: int = 0, size: int = PAGE_SIZE) -> PageDescriptor:
        path = write_pnm(tmp_path / f"out{number}.pnm", page_image(dark_pixels, size))
        return PageDescriptor(path)

    return _write


@pytest.fixture
def fake_scanner() -> Path:
    """Path of the scriptable scanimage stand-in."""
    return PROJECT_ROOT / "tests" / "fixtures" / "fake_scanimage.py"


# ==================== Fake External Steps ====================


class FakeCompressor:
    """Writes a placeholder PDF per page, optionally failing or dawdling."""

    name = "fake-compress"

    def __init__(self, fail_on: set[str] | None = None, max_delay: float = 0.0, seed: int = 7):
        self.fail_on = fail_on or set()
        self.max_delay = max_delay
        self.random = random.Random(seed)
        self.completed: list[str] = []
        self._lock = threading.Lock()

    def process(self, page: PageDescriptor) -> Path:
        with self._lock:
            delay = self.random.uniform(0, self.max_delay)
        time.sleep(delay)
        if page.source_path.name in self.fail_on:
            raise ConversionError(f"[fake-compress] cannot convert {page.source_path.name}")
        page.output_path.write_bytes(b"%PDF-1.4 " + page.source_path.stem.encode())
        with self._lock:
            self.completed.append(page.source_path.stem)
        return page.output_path


class FakeMerger:
    name = "fake-merge"

    def __init__(self) -> None:
        self.calls: list[tuple[list[Path], Path]] = []

    def process(self, pages: Sequence[Path], *, destination: Path) -> Path:
        self.calls.append((list(pages), destination))
        destination.write_bytes(b"".join(path.read_bytes() for path in pages))
        return destination


class FakeUploader:
    name = "fake-upload"

    def __init__(self) -> None:
        self.documents: list[Path] = []

    def process(self, document: Path) -> int:
        self.documents.append(document)
        return 1


@pytest.fixture
def fake_compressor() -> FakeCompressor:
    return FakeCompressor()


@pytest.fixture
def fake_merger() -> FakeMerger:
    return FakeMerger()


@pytest.fixture
def fake_uploader() -> FakeUploader:
    return FakeUploader()


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Drive a real subprocess")
