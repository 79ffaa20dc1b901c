"""
Tests for histogram analysis.
"""

import pytest
import numpy as np

from studiotone.models import ImageBuffer
from studiotone.analysis import HistogramAnalyzer


def solid(width, height, rgb, alpha=255):
    return ImageBuffer.filled(width, height, (*rgb, alpha))


class TestUniformImages:
    """Statistics of images with a single color."""

    def test_gray_4x4_scenario(self):
        """A uniformly gray image has no spread and both percentiles at its value."""
        stats = HistogramAnalyzer().analyze(solid(4, 4, (128, 128, 128)))

        assert stats.pixel_count == 16
        assert stats.mean_luminance == 128
        assert stats.std_luminance == 0
        assert stats.p2 == 128
        assert stats.p98 == 128
        assert stats.min_luminance == stats.max_luminance == 128
        assert stats.histogram[128] == 16
        assert sum(stats.histogram) == 16

    def test_channel_means(self):
        stats = HistogramAnalyzer().analyze(solid(8, 8, (10, 20, 30)))

        assert stats.mean_red == pytest.approx(10)
        assert stats.mean_green == pytest.approx(20)
        assert stats.mean_blue == pytest.approx(30)
        # 0.299*10 + 0.587*20 + 0.114*30 = 18.15
        assert stats.mean_luminance == 18

    def test_alpha_is_ignored(self):
        opaque = HistogramAnalyzer().analyze(solid(5, 5, (200, 100, 50)))
        transparent = HistogramAnalyzer().analyze(solid(5, 5, (200, 100, 50), alpha=0))
        assert opaque == transparent


class TestDistribution:
    """Statistics of images with spread."""

    def test_two_level_image(self):
        data = np.zeros((10, 10, 4), dtype=np.uint8)
        data[:, 5:, :3] = 255
        data[:, :, 3] = 255
        stats = HistogramAnalyzer().analyze(ImageBuffer(10, 10, data))

        assert stats.mean_luminance == pytest.approx(127.5)
        assert stats.std_luminance == pytest.approx(127.5)
        assert stats.p2 == 0
        assert stats.p98 == 255
        assert stats.luminance_range == 255
        assert stats.histogram[0] == 50
        assert stats.histogram[255] == 50

    def test_percentiles_skip_outliers(self):
        """A single extreme pixel in 100 does not move the 2% percentiles."""
        data = np.full((10, 10, 4), 100, dtype=np.uint8)
        data[0, 0, :3] = 0
        data[9, 9, :3] = 255
        stats = HistogramAnalyzer().analyze(ImageBuffer(10, 10, data))

        assert stats.min_luminance == 0
        assert stats.max_luminance == 255
        assert stats.p2 == 100
        assert stats.p98 == 100

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_percentile_monotonicity(self, seed):
        rng = np.random.default_rng(seed)
        low, high = sorted(rng.integers(0, 256, size=2))
        rgb = rng.integers(low, high + 1, size=(23, 31, 3), dtype=np.uint8)
        stats = HistogramAnalyzer().analyze(ImageBuffer.from_array(rgb))

        assert 0 <= stats.p2 <= stats.p98 <= 255
        assert stats.min_luminance <= stats.p2
        assert stats.p98 <= stats.max_luminance

    def test_variance_never_negative(self):
        """Near-constant images must not produce NaN from rounding."""
        stats = HistogramAnalyzer().analyze(solid(7, 3, (77, 77, 77)))
        assert stats.std_luminance == 0.0
        assert not np.isnan(stats.std_luminance)


class TestDownscaling:
    """Analysis works on a bounded copy."""

    def test_large_image_is_downscaled(self):
        stats = HistogramAnalyzer(max_edge=300).analyze(solid(600, 400, (90, 90, 90)))
        assert stats.pixel_count == 300 * 200
        assert stats.mean_luminance == 90

    def test_small_image_is_not_upscaled(self):
        stats = HistogramAnalyzer(max_edge=300).analyze(solid(10, 5, (90, 90, 90)))
        assert stats.pixel_count == 50

    def test_source_not_modified(self):
        rng = np.random.default_rng(7)
        image = ImageBuffer.from_array(rng.integers(0, 256, size=(400, 320, 4), dtype=np.uint8))
        before = image.copy()
        HistogramAnalyzer().analyze(image)
        assert image == before

    def test_deterministic(self):
        rng = np.random.default_rng(11)
        image = ImageBuffer.from_array(rng.integers(0, 256, size=(50, 70, 3), dtype=np.uint8))
        analyzer = HistogramAnalyzer()
        assert analyzer.analyze(image) == analyzer.analyze(image)

    def test_invalid_max_edge(self):
        with pytest.raises(ValueError):
            HistogramAnalyzer(max_edge=0)
