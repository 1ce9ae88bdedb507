"""Blank-page heuristic.

A page is scored by the share of dark pixels inside an interior window that
ignores a border of 3% of the shorter side (scanner edges and shadows). Pixel
brightness is the integer mean of the R, G and B samples on a 16-bit scale;
a pixel is bright above 32768 and dark otherwise. Pages whose dark ratio is
not strictly above 0.0003 are treated as blank separator sheets.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from .constants import (
    BORDER_FRACTION,
    BRIGHTNESS_THRESHOLD,
    DARK_RATIO_THRESHOLD,
    EIGHT_BIT_TO_SIXTEEN_BIT,
)
from .exceptions import PageProcessingError

logger = logging.getLogger(__name__)

__all__ = [
    "load_page",
    "interior_window",
    "dark_pixel_ratio",
    "should_keep",
    "score_page",
]


def load_page(path: Path) -> np.ndarray:
    """Decode a raw scanned page, keeping its native bit depth.

    Args:
        path: PNM (or any OpenCV-readable) image

    Returns:
        Image array: HxW for grayscale, HxWxC (BGR order) for color

    Raises:
        PageProcessingError: If the file is missing or cannot be decoded
    """
    if not path.exists():
        raise PageProcessingError(f"Scanned page not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise PageProcessingError(f"Failed to decode scanned page: {path}")
    return image


def interior_window(width: int, height: int, border_fraction: float = BORDER_FRACTION) -> tuple[slice, slice]:
    """Rows and columns sampled by the heuristic.

    Columns ``border+1 .. width-border`` and rows ``border+1 .. height-border``
    (both inclusive) are sampled, clipped to the image.

    Note: the last index ``size-border`` is itself sampled, so the window is
    not the open interval ``(border, size-border)``.

    Returns:
        (row slice, column slice)

    Example:
        >>> interior_window(106, 106)
        (slice(4, 104, None), slice(4, 104, None))
    """
    border = int(border_fraction * min(width, height))
    rows = slice(border + 1, min(height - border + 1, height))
    cols = slice(border + 1, min(width - border + 1, width))
    return rows, cols


def _intensity(image: np.ndarray) -> np.ndarray:
    """Per-pixel mean of R, G and B on the 16-bit scale."""
    samples = image.astype(np.int64)
    if image.dtype == np.uint8:
        samples *= EIGHT_BIT_TO_SIXTEEN_BIT

    if samples.ndim == 2:
        return samples
    if samples.shape[2] == 1:
        return samples[:, :, 0]
    # Alpha, if present, is ignored
    return samples[:, :, :3].sum(axis=2) // 3


def dark_pixel_ratio(
    image: np.ndarray,
    border_fraction: float = BORDER_FRACTION,
    brightness_threshold: int = BRIGHTNESS_THRESHOLD,
) -> float:
    """Compute ``dark / (dark + bright)`` over the interior window.

    Returns:
        Dark pixel ratio in [0, 1]; 0.0 when the window is empty
    """
    height, width = image.shape[:2]
    rows, cols = interior_window(width, height, border_fraction)
    window = _intensity(image[rows, cols])

    total = window.size
    if total == 0:
        return 0.0
    bright = int(np.count_nonzero(window > brightness_threshold))
    return (total - bright) / total


def should_keep(dark_ratio: float, threshold: float = DARK_RATIO_THRESHOLD) -> bool:
    """Keep pages strictly above the threshold.

    Example:
        >>> should_keep(0.0003), should_keep(0.00031)
        (False, True)
    """
    return dark_ratio > threshold


def score_page(path: Path) -> float:
    """Load ``path`` and return its dark pixel ratio."""
    image = load_page(path)
    ratio = dark_pixel_ratio(image)
    logger.info("Dark pixel ratio: %f (%s)", ratio, path.name)
    return ratio
