"""
Tests for the parametric tone curve.
"""

import pytest
import numpy as np

from studiotone.models import ImageBuffer, ToneCurveConfig
from studiotone.processing import ToneCurveMapper


@pytest.fixture
def random_image():
    rng = np.random.default_rng(3)
    return ImageBuffer.from_array(rng.integers(0, 256, size=(20, 30, 4), dtype=np.uint8))


class TestLookupTable:
    """Evaluation of the curve over all 8-bit inputs."""

    def test_identity_lut(self):
        lut = ToneCurveMapper().build_lut(ToneCurveConfig.identity())
        assert lut.dtype == np.uint8
        assert np.array_equal(lut, np.arange(256, dtype=np.uint8))

    def test_black_and_white_points(self):
        lut = ToneCurveMapper().build_lut(ToneCurveConfig(black_point=50, white_point=150))

        assert lut[0] == 0
        assert lut[50] == 0
        assert lut[100] == 128
        assert lut[150] == 255
        assert lut[255] == 255

    def test_gamma_below_one_brightens_midtones(self):
        lut = ToneCurveMapper().build_lut(ToneCurveConfig(gamma=0.5))
        assert lut[64] > 64
        assert lut[0] == 0
        assert lut[255] == 255

    def test_stage_order(self):
        """Shadow lift is applied before highlight roll-off."""
        cfg = ToneCurveConfig(shadow_lift=0.5, highlight_rolloff=0.5)
        lut = ToneCurveMapper().build_lut(cfg)

        n = 64 / 255.0
        lifted = n + (1 - n) * 0.5 * (1 - n)
        expected = lifted - 0.5 * lifted * lifted

        rolled = n - 0.5 * n * n
        reversed_order = rolled + (1 - rolled) * 0.5 * (1 - rolled)

        assert lut[64] == int(round(expected * 255))
        assert int(round(expected * 255)) != int(round(reversed_order * 255))

    def test_estimated_curve_is_monotonic(self):
        cfg = ToneCurveConfig(black_point=12, white_point=240, gamma=0.88,
                              shadow_lift=0.15, highlight_rolloff=0.08)
        lut = ToneCurveMapper().build_lut(cfg).astype(int)
        assert np.all(np.diff(lut) >= 0)

    def test_config_clamping(self):
        cfg = ToneCurveConfig(black_point=200, white_point=100, gamma=0, shadow_lift=2)
        assert cfg.black_point == 200
        assert cfg.white_point == 201
        assert cfg.gamma == 0.01
        assert cfg.shadow_lift == 1.0


class TestApply:
    """Applying the curve to image buffers."""

    def test_identity_leaves_image_unchanged(self, random_image):
        result = ToneCurveMapper().apply(random_image, ToneCurveConfig.identity())
        assert result == random_image
        assert result.data is not random_image.data

    def test_alpha_untouched(self, random_image):
        cfg = ToneCurveConfig(black_point=40, white_point=200, gamma=0.8)
        result = ToneCurveMapper().apply(random_image, cfg)
        assert np.array_equal(result.alpha, random_image.alpha)

    def test_matches_lut(self, random_image):
        mapper = ToneCurveMapper()
        cfg = ToneCurveConfig(black_point=20, white_point=230, gamma=1.08, highlight_rolloff=0.15)
        result = mapper.apply(random_image, cfg)
        assert np.array_equal(result.rgb, mapper.build_lut(cfg)[random_image.rgb])

    def test_source_not_modified(self, random_image):
        before = random_image.copy()
        ToneCurveMapper().apply(random_image, ToneCurveConfig(gamma=2.0))
        assert random_image == before
