"""
Basic color filters for StudioTone

Brightness, contrast, saturation and warmth follow the CSS filter
functions brightness(), contrast(), saturate() and sepia(), applied in
that order with clamping between steps, the way a browser evaluates a
filter chain.
"""

import logging
import numpy as np

from ...models import ImageBuffer, FilterParameters

logger = logging.getLogger(__name__)


def saturation_matrix(amount: float) -> np.ndarray:
    """CSS saturate() color matrix; amount 1.0 is identity."""
    s = amount
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ])


def sepia_matrix(amount: float) -> np.ndarray:
    """CSS sepia() color matrix; amount 0.0 is identity, 1.0 full sepia."""
    k = 1.0 - amount
    return np.array([
        [0.393 + 0.607 * k, 0.769 - 0.769 * k, 0.189 - 0.189 * k],
        [0.349 - 0.349 * k, 0.686 + 0.314 * k, 0.168 - 0.168 * k],
        [0.272 - 0.272 * k, 0.534 - 0.534 * k, 0.131 + 0.869 * k],
    ])


class BasicColorFilter:
    """Multiplicative color filter stage applied before the tone curve."""

    def apply(self, image: ImageBuffer, params: FilterParameters) -> ImageBuffer:
        """
        Apply brightness, contrast, saturation and warmth.

        Args:
            image: Source image (not modified)
            params: Clamped filter parameters

        Returns:
            New ImageBuffer; alpha is copied
        """
        if params.is_identity:
            return image.copy()

        rgb = image.rgb.astype(np.float64)

        if params.brightness != 100:
            rgb = np.clip(rgb * (params.brightness / 100.0), 0, 255)

        if params.contrast != 100:
            rgb = np.clip((rgb - 127.5) * (params.contrast / 100.0) + 127.5, 0, 255)

        if params.saturation != 100:
            rgb = np.clip(rgb @ saturation_matrix(params.saturation / 100.0).T, 0, 255)

        if params.warmth > 0:
            rgb = np.clip(rgb @ sepia_matrix(params.warmth / 100.0).T, 0, 255)

        logger.debug(
            f"Basic filters brightness={params.brightness:.1f} contrast={params.contrast:.1f} "
            f"saturation={params.saturation:.1f} warmth={params.warmth:.1f}"
        )
        return image.with_rgb(np.rint(rgb).astype(np.uint8))
