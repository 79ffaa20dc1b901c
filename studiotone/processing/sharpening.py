"""
Edge-aware sharpening for StudioTone.

Implements a thresholded Laplacian unsharp mask:
1. High-pass - 4-neighbor discrete Laplacian per color channel
2. Threshold - responses at or below the threshold are dropped so that
   sensor noise in near-flat regions is not amplified
3. Add back - the surviving high-pass signal is scaled and added to the source

Border pixels are passed through unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np
from scipy import ndimage

from ..models import ImageBuffer

logger = logging.getLogger(__name__)

# 4*center - top - bottom - left - right
LAPLACIAN_KERNEL = np.array([
    [0, -1, 0],
    [-1, 4, -1],
    [0, -1, 0],
], dtype=np.int32)


@dataclass(frozen=True)
class SharpeningSettings:
    """Settings for edge-aware sharpening."""
    strength: float = 0.3   # Fraction of the Laplacian added back
    threshold: float = 12.0  # Minimum |Laplacian| that gets sharpened


class EdgeAwareSharpener:
    """Thresholded Laplacian sharpening that never reads its own output."""

    def __init__(self, settings: SharpeningSettings = SharpeningSettings()):
        self.settings = settings

    def apply(self, image: ImageBuffer, strength: Optional[float] = None,
              threshold: Optional[float] = None) -> ImageBuffer:
        """
        Sharpen the color channels of an image.

        Args:
            image: Source image (not modified)
            strength: Override for settings.strength
            threshold: Override for settings.threshold

        Returns:
            New ImageBuffer; alpha and border pixels are copied verbatim
        """
        strength = self.settings.strength if strength is None else strength
        threshold = self.settings.threshold if threshold is None else threshold

        # Separate source and destination so neighbor reads never see sharpened values
        source = image.data
        result = source.copy()

        if image.width < 3 or image.height < 3:
            # No interior pixels
            return ImageBuffer(image.width, image.height, result)

        sharpened_count = 0
        for c in range(3):
            channel = source[:, :, c].astype(np.int32)
            laplacian = ndimage.convolve(channel, LAPLACIAN_KERNEL, mode='nearest')

            # Interior only; edge handling of convolve never reaches the output
            interior_lap = laplacian[1:-1, 1:-1]
            interior_src = channel[1:-1, 1:-1]

            edge_mask = np.abs(interior_lap) > threshold
            boosted = np.clip(np.rint(interior_src + interior_lap * strength), 0, 255)

            result[1:-1, 1:-1, c] = np.where(edge_mask, boosted, interior_src).astype(np.uint8)
            sharpened_count += int(edge_mask.sum())

        logger.debug(
            f"Sharpened {sharpened_count} channel samples "
            f"(strength={strength}, threshold={threshold})"
        )
        return ImageBuffer(image.width, image.height, result)
