"""
Histogram analysis for automatic enhancement.

Computes global luminance and channel statistics on a downscaled copy of
the image. Only the distribution shape is needed by the estimator, so the
analysis never touches the full-resolution pixels.
"""

import logging
from typing import Tuple
import numpy as np
import cv2

from ..models import ImageBuffer, HistogramStatistics

logger = logging.getLogger(__name__)

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


class HistogramAnalyzer:
    """
    Builds HistogramStatistics from an ImageBuffer.

    Features:
    - Area-averaged downscale to a bounded working size
    - 256-bucket luminance histogram
    - Mean, standard deviation and extremes of luminance
    - Per-channel means for color cast detection
    - 2nd / 98th luminance percentiles
    """

    def __init__(self, max_edge: int = 300, percentile: float = 0.02):
        """
        Initialize histogram analyzer

        Args:
            max_edge: Longest edge of the working copy in pixels
            percentile: Tail fraction used for the low/high percentiles
        """
        if max_edge < 1:
            raise ValueError(f"max_edge must be positive, got {max_edge}")
        self.max_edge = max_edge
        self.percentile = percentile

    def analyze(self, image: ImageBuffer) -> HistogramStatistics:
        """
        Analyze the luminance distribution of an image.

        Args:
            image: Source image (not modified)

        Returns:
            Fresh HistogramStatistics for the downscaled copy
        """
        rgb = self._downscale(image.rgb).astype(np.float64)
        n = rgb.shape[0] * rgb.shape[1]

        red = rgb[:, :, 0]
        green = rgb[:, :, 1]
        blue = rgb[:, :, 2]

        weighted = LUMA_WEIGHTS[0] * red + LUMA_WEIGHTS[1] * green + LUMA_WEIGHTS[2] * blue
        # Round half up so that exact .5 values do not flip with banker's rounding
        luminance = np.clip(np.floor(weighted + 0.5), 0, 255).astype(np.int64)

        hist = np.bincount(luminance.ravel(), minlength=256)

        lum_sum = float(luminance.sum())
        lum_sq_sum = float(np.square(luminance).sum())
        mean = lum_sum / n
        # Guard against a tiny negative variance from floating point rounding
        variance = max(0.0, lum_sq_sum / n - mean * mean)

        p2, p98 = self._percentiles(hist, n)

        stats = HistogramStatistics(
            histogram=tuple(int(count) for count in hist),
            pixel_count=int(n),
            min_luminance=int(luminance.min()),
            max_luminance=int(luminance.max()),
            mean_luminance=mean,
            std_luminance=float(np.sqrt(variance)),
            mean_red=float(red.sum()) / n,
            mean_green=float(green.sum()) / n,
            mean_blue=float(blue.sum()) / n,
            p2=p2,
            p98=p98,
        )

        logger.debug(
            f"Analyzed {image.width}x{image.height} image on {rgb.shape[1]}x{rgb.shape[0]} copy: "
            f"mean={stats.mean_luminance:.1f} std={stats.std_luminance:.1f} "
            f"p2={stats.p2} p98={stats.p98}"
        )
        return stats

    def _downscale(self, rgb: np.ndarray) -> np.ndarray:
        """Shrink so the longest edge is at most max_edge; never upscale."""
        height, width = rgb.shape[:2]
        longest = max(width, height)
        if longest <= self.max_edge:
            return rgb

        scale = self.max_edge / longest
        new_w = max(1, int(round(width * scale)))
        new_h = max(1, int(round(height * scale)))
        return cv2.resize(np.ascontiguousarray(rgb), (new_w, new_h), interpolation=cv2.INTER_AREA)

    def _percentiles(self, hist: np.ndarray, n: int) -> Tuple[int, int]:
        """Walk the histogram inwards from both ends until the tail fraction is reached."""
        target = self.percentile * n

        p2 = 0
        cumulative = 0
        for bucket in range(256):
            cumulative += int(hist[bucket])
            if cumulative >= target:
                p2 = bucket
                break

        p98 = 255
        cumulative = 0
        for bucket in range(255, -1, -1):
            cumulative += int(hist[bucket])
            if cumulative >= target:
                p98 = bucket
                break

        return p2, p98
