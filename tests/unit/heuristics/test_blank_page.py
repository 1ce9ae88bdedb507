"""Tests for the blank-page heuristic."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from scanpdf.blank_page import (
    dark_pixel_ratio,
    interior_window,
    load_page,
    score_page,
    should_keep,
)
from scanpdf.exceptions import PageProcessingError
from tests.conftest import page_image, write_pnm


class TestInteriorWindow:
    """Tests for the sampled window geometry."""

    def test_border_is_three_percent_of_shorter_side(self):
        """106 px -> 3 px border, samples 4..103 inclusive."""
        rows, cols = interior_window(106, 106)
        assert (rows.start, rows.stop) == (4, 104)
        assert (cols.start, cols.stop) == (4, 104)

    def test_non_square_uses_shorter_side(self):
        """Border is derived from min(width, height)."""
        rows, cols = interior_window(1000, 150)
        # border = int(0.03 * 150) = 4
        assert (cols.start, cols.stop) == (5, 997)
        assert (rows.start, rows.stop) == (5, 147)

    def test_tiny_image_is_clipped(self):
        """Without a border the inclusive bound is clipped to the image."""
        rows, cols = interior_window(10, 10)
        assert (cols.start, cols.stop) == (1, 10)


class TestDarkPixelRatio:
    """Tests for dark pixel counting."""

    def test_white_page(self):
        """A white page has no dark pixels."""
        assert dark_pixel_ratio(page_image(0)) == 0.0

    def test_black_page(self):
        """A black page is entirely dark."""
        image = np.zeros((106, 106, 3), dtype=np.uint8)
        assert dark_pixel_ratio(image) == 1.0

    def test_border_pixels_are_ignored(self):
        """Dark pixels on the border do not count."""
        image = page_image(0)
        image[:3, :] = 0
        image[:, :4] = 0
        image[104:, :] = 0
        assert dark_pixel_ratio(image) == 0.0

    def test_last_interior_index_is_sampled(self):
        """Row and column size-border (103 of 106) belong to the window."""
        image = page_image(0)
        image[103, 103] = 0
        assert dark_pixel_ratio(image) == pytest.approx(1 / 10000)

    def test_counts_window_pixels(self):
        """Four dark pixels in a 10000 pixel window."""
        assert dark_pixel_ratio(page_image(4)) == pytest.approx(0.0004)

    def test_threshold_is_on_sixteen_bit_scale(self):
        """Mid-gray 128 (32896) is bright, 127 (32639) is dark."""
        bright = np.full((106, 106, 3), 128, dtype=np.uint8)
        dark = np.full((106, 106, 3), 127, dtype=np.uint8)
        assert dark_pixel_ratio(bright) == 0.0
        assert dark_pixel_ratio(dark) == 1.0

    def test_channel_mean_uses_all_three_channels(self):
        """A pure red pixel averages to a third of full scale, so it is dark."""
        image = page_image(0)
        image[50, 50] = (0, 0, 255)
        assert dark_pixel_ratio(image) == pytest.approx(0.0001)

    def test_sixteen_bit_samples_are_not_rescaled(self):
        """16-bit images are compared directly against 32768."""
        image = np.full((106, 106), 32768, dtype=np.uint16)
        assert dark_pixel_ratio(image) == 1.0
        image[:] = 32769
        assert dark_pixel_ratio(image) == 0.0

    def test_grayscale_page(self):
        """Gray images use the gray value for every channel."""
        image = np.full((106, 106), 255, dtype=np.uint8)
        image[10, 10] = 0
        assert dark_pixel_ratio(image) == pytest.approx(0.0001)

    def test_empty_window(self):
        """A degenerate image yields 0.0 instead of dividing by zero."""
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        assert dark_pixel_ratio(image) == 0.0


class TestShouldKeep:
    """Tests for the keep/discard threshold."""

    @pytest.mark.parametrize(
        ("ratio", "expected"),
        [
            (0.0, False),
            (0.0003, False),
            (0.00031, True),
            (0.0008, True),
        ],
    )
    def test_threshold_is_strict(self, ratio: float, expected: bool):
        """Pages exactly at the threshold are discarded."""
        assert should_keep(ratio) is expected

    def test_three_dark_pixels_discard_four_keep(self):
        """0.0003 on a real page is discarded, 0.0004 kept."""
        assert not should_keep(dark_pixel_ratio(page_image(3)))
        assert should_keep(dark_pixel_ratio(page_image(4)))


class TestLoadPage:
    """Tests for decoding raw pages."""

    def test_loads_binary_pnm(self, tmp_path: Path):
        """Binary PPM pages decode at 8-bit depth."""
        path = write_pnm(tmp_path / "out1.pnm", page_image(10))
        image = load_page(path)
        assert image.shape == (106, 106, 3)
        assert image.dtype == np.uint8

    def test_missing_file(self, tmp_path: Path):
        """A missing page is a processing error."""
        with pytest.raises(PageProcessingError, match="not found"):
            load_page(tmp_path / "missing.pnm")

    def test_corrupt_file(self, tmp_path: Path):
        """Undecodable data is a processing error."""
        path = tmp_path / "out1.pnm"
        path.write_bytes(b"not an image")
        with pytest.raises(PageProcessingError, match="decode"):
            load_page(path)

    def test_score_page(self, tmp_path: Path):
        """score_page loads and scores in one step."""
        path = write_pnm(tmp_path / "out1.pnm", page_image(25))
        assert score_page(path) == pytest.approx(0.0025)
