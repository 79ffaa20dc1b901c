"""
Tests for edge-aware sharpening.
"""

import pytest
import numpy as np

from studiotone.models import ImageBuffer
from studiotone.processing import EdgeAwareSharpener, SharpeningSettings


def gray_image(width, height, value=100):
    return ImageBuffer.filled(width, height, (value, value, value, 255))


def with_pixel(image, x, y, value):
    data = image.data.copy()
    data[y, x, :3] = value
    return ImageBuffer(image.width, image.height, data)


class TestFlatRegions:
    """Sharpening must not touch regions without edges."""

    @pytest.mark.parametrize("strength, threshold", [(0.3, 12.0), (1.0, 0.0), (5.0, 0.0)])
    def test_flat_image_unchanged(self, strength, threshold):
        image = gray_image(16, 12, 137)
        result = EdgeAwareSharpener().apply(image, strength=strength, threshold=threshold)
        assert result == image

    def test_below_threshold_unchanged(self):
        """A bump of 2 gives a Laplacian of 8, which is not above 12."""
        image = with_pixel(gray_image(5, 5, 0), 2, 2, 2)
        result = EdgeAwareSharpener().apply(image)
        assert result == image

    def test_tiny_image_is_copied(self):
        image = ImageBuffer.from_array(np.array([[[0, 255, 0], [255, 0, 255]]], dtype=np.uint8))
        result = EdgeAwareSharpener().apply(image)
        assert result == image
        assert result.data is not image.data


class TestEdges:
    """Sharpening of isolated details."""

    def test_bright_point_is_boosted(self):
        image = with_pixel(gray_image(5, 5, 0), 2, 2, 100)
        result = EdgeAwareSharpener().apply(image)

        # Laplacian 400 at the center: 100 + 400 * 0.3
        assert tuple(result.data[2, 2, :3]) == (220, 220, 220)
        # Neighbors see -100 and clamp at 0
        assert tuple(result.data[2, 3, :3]) == (0, 0, 0)

    def test_neighbors_read_source_values(self):
        """Each output pixel is computed from unsharpened neighbors."""
        image = with_pixel(gray_image(7, 7, 100), 3, 3, 150)
        result = EdgeAwareSharpener().apply(image)

        # Center: Laplacian 200 -> 150 + 60
        assert result.data[3, 3, 0] == 210
        # Right neighbor: Laplacian -50 -> 100 - 15, not computed from 210
        assert result.data[3, 4, 0] == 85
        assert result.data[2, 3, 0] == 85

    def test_strength_override(self):
        image = with_pixel(gray_image(5, 5, 100), 2, 2, 120)
        result = EdgeAwareSharpener().apply(image, strength=0.5)
        # Laplacian 80 -> 120 + 40
        assert result.data[2, 2, 0] == 160

    def test_settings_used_by_default(self):
        image = with_pixel(gray_image(5, 5, 100), 2, 2, 120)
        sharpener = EdgeAwareSharpener(SharpeningSettings(strength=0.3, threshold=100.0))
        assert sharpener.apply(image) == image


class TestPassthrough:
    """Border pixels and alpha are never modified."""

    @pytest.fixture
    def noisy_image(self):
        rng = np.random.default_rng(5)
        return ImageBuffer.from_array(rng.integers(0, 256, size=(10, 10, 4), dtype=np.uint8))

    def test_border_pixels_unchanged(self, noisy_image):
        result = EdgeAwareSharpener().apply(noisy_image, strength=1.0, threshold=0.0)

        assert np.array_equal(result.data[0], noisy_image.data[0])
        assert np.array_equal(result.data[-1], noisy_image.data[-1])
        assert np.array_equal(result.data[:, 0], noisy_image.data[:, 0])
        assert np.array_equal(result.data[:, -1], noisy_image.data[:, -1])
        # Interior of random noise does change
        assert not np.array_equal(result.data[1:-1, 1:-1], noisy_image.data[1:-1, 1:-1])

    def test_alpha_unchanged(self, noisy_image):
        result = EdgeAwareSharpener().apply(noisy_image, strength=1.0, threshold=0.0)
        assert np.array_equal(result.alpha, noisy_image.alpha)

    def test_source_not_modified(self, noisy_image):
        before = noisy_image.copy()
        EdgeAwareSharpener().apply(noisy_image, strength=1.0, threshold=0.0)
        assert noisy_image == before
