"""
Automatic enhancement estimation for StudioTone

Maps histogram statistics to a concrete set of color filter, tone curve
and feature settings through fixed heuristics. Pure arithmetic, so equal
statistics always produce bit-identical parameters.
"""

import logging
from typing import Tuple

from ..models import (
    HistogramStatistics, FilterParameters, ToneCurveConfig,
    FeatureToggles, EnhancementParameters
)

logger = logging.getLogger(__name__)

# Mean luminance the brightness correction pulls towards
TARGET_MEAN_LUMINANCE = 115.0
MAX_WARMTH = 30.0


class AutoEnhanceEstimator:
    """Heuristic parameter estimation from HistogramStatistics."""

    def estimate(self, stats: HistogramStatistics
                 ) -> Tuple[FilterParameters, ToneCurveConfig, FeatureToggles]:
        """
        Derive enhancement settings from image statistics.

        Args:
            stats: Statistics produced by HistogramAnalyzer

        Returns:
            Tuple of (filters, tone curve, toggles); toggles are always all enabled
        """
        filters = FilterParameters(
            brightness=self._estimate_brightness(stats),
            contrast=self._estimate_contrast(stats),
            saturation=self._estimate_saturation(stats),
            warmth=self._estimate_warmth(stats),
        )
        tone_curve = self._estimate_tone_curve(stats)
        toggles = FeatureToggles.all_enabled()

        logger.info(
            f"Auto-enhance: brightness={filters.brightness:.1f} contrast={filters.contrast:.1f} "
            f"saturation={filters.saturation:.0f} warmth={filters.warmth:.1f} "
            f"black={tone_curve.black_point:.0f} white={tone_curve.white_point:.0f} "
            f"gamma={tone_curve.gamma:.2f}"
        )
        return filters, tone_curve, toggles

    def estimate_parameters(self, stats: HistogramStatistics) -> EnhancementParameters:
        """Same as estimate() but bundled into a single snapshot."""
        filters, tone_curve, toggles = self.estimate(stats)
        return EnhancementParameters(filters=filters, tone_curve=tone_curve, toggles=toggles)

    def _estimate_brightness(self, stats: HistogramStatistics) -> float:
        brightness = 100.0 + (TARGET_MEAN_LUMINANCE - stats.mean_luminance) * 0.7
        return max(90.0, min(140.0, brightness))

    def _estimate_contrast(self, stats: HistogramStatistics) -> float:
        lum_range = stats.luminance_range
        if lum_range < 120:
            # Flat images get more contrast the flatter they are (at most 138)
            return 120.0 + (120 - lum_range) * 0.15
        if lum_range > 220:
            return 105.0
        return 112.0

    def _estimate_saturation(self, stats: HistogramStatistics) -> float:
        if stats.std_luminance < 42:
            return 132.0
        if stats.std_luminance > 68:
            return 112.0
        return 120.0

    def _estimate_warmth(self, stats: HistogramStatistics) -> float:
        warmth = 0.0
        if stats.mean_blue > stats.mean_red + 10:
            # Cool cast
            warmth = min(MAX_WARMTH, max(0.0, (stats.mean_blue - stats.mean_red) * 0.6))

        green_cast = stats.mean_green - (stats.mean_red + stats.mean_blue) / 2
        if green_cast > 8:
            warmth += 4.0

        return min(MAX_WARMTH, warmth)

    def _estimate_tone_curve(self, stats: HistogramStatistics) -> ToneCurveConfig:
        mean = stats.mean_luminance

        black_point = max(0, stats.p2 - 6)
        white_point = min(255, stats.p2 + max(20, stats.p98 - stats.p2) + 8)

        if mean < 110:
            gamma = 0.88
        elif mean > 165:
            gamma = 1.08
        else:
            gamma = 0.96

        return ToneCurveConfig(
            black_point=black_point,
            white_point=white_point,
            gamma=gamma,
            shadow_lift=0.15 if mean < 120 else 0.08,
            highlight_rolloff=0.15 if mean > 150 else 0.08,
        )
