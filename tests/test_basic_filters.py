"""
Tests for brightness, contrast, saturation and warmth filters.
"""

import pytest
import numpy as np

from studiotone.models import ImageBuffer, FilterParameters
from studiotone.processing import BasicColorFilter


def solid(rgb, alpha=255):
    return ImageBuffer.filled(4, 4, (*rgb, alpha))


class TestBasicColorFilter:
    """CSS-style color filter chain."""

    def test_identity_returns_copy(self):
        image = solid((10, 200, 90))
        result = BasicColorFilter().apply(image, FilterParameters.identity())
        assert result == image
        assert result.data is not image.data

    def test_brightness(self):
        result = BasicColorFilter().apply(solid((100, 200, 0)), FilterParameters(brightness=150))
        assert tuple(result.data[0, 0, :3]) == (150, 255, 0)

    def test_contrast(self):
        result = BasicColorFilter().apply(solid((200, 127, 50)), FilterParameters(contrast=50))
        # (v - 127.5) * 0.5 + 127.5
        assert tuple(result.data[0, 0, :3]) == (164, 127, 89)

    def test_zero_saturation_is_gray(self):
        result = BasicColorFilter().apply(solid((220, 40, 90)), FilterParameters(saturation=0))
        r, g, b = result.data[0, 0, :3]
        assert r == g == b

    def test_saturation_keeps_gray(self):
        result = BasicColorFilter().apply(solid((128, 128, 128)), FilterParameters(saturation=200))
        assert tuple(result.data[0, 0, :3]) == (128, 128, 128)

    def test_warmth_tints_toward_sepia(self):
        result = BasicColorFilter().apply(solid((100, 100, 100)), FilterParameters(warmth=100))
        assert tuple(result.data[0, 0, :3]) == (135, 120, 94)

    def test_alpha_preserved(self):
        image = solid((50, 60, 70), alpha=33)
        result = BasicColorFilter().apply(image, FilterParameters(brightness=120, warmth=30))
        assert np.all(result.alpha == 33)


class TestFilterParameters:
    """Range clamping of filter settings."""

    def test_clamping(self):
        params = FilterParameters(brightness=10, contrast=500, saturation=-5, warmth=101)
        assert params.brightness == 50
        assert params.contrast == 150
        assert params.saturation == 0
        assert params.warmth == 100

    def test_identity(self):
        assert FilterParameters().is_identity
        assert not FilterParameters(warmth=1).is_identity
