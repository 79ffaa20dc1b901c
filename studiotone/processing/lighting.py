"""
Studio lighting composite for StudioTone

Simulates key-light falloff by compositing a radial gradient over the
image: a faint white tint brightens the optical center and a black tint
darkens the periphery.
"""

import logging
from dataclasses import dataclass
from typing import Tuple
import numpy as np

from ..models import ImageBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradientStop:
    """Gradient color stop; color is straight (not premultiplied) RGB."""
    offset: float
    color: Tuple[float, float, float]
    opacity: float


DEFAULT_STOPS = (
    GradientStop(0.0, (255.0, 255.0, 255.0), 0.08),
    GradientStop(0.5, (255.0, 255.0, 255.0), 0.0),
    GradientStop(1.0, (0.0, 0.0, 0.0), 0.35),
)


class StudioLightingCompositor:
    """
    Composites a centered radial gradient onto an image with "over".

    Radii are fractions of the image width. Inside the inner radius the
    first stop applies, beyond the outer radius the last one.
    """

    def __init__(self, inner_radius: float = 0.15, outer_radius: float = 0.85,
                 stops: Tuple[GradientStop, ...] = DEFAULT_STOPS):
        if outer_radius <= inner_radius:
            raise ValueError(
                f"outer_radius ({outer_radius}) must exceed inner_radius ({inner_radius})"
            )
        self.inner_radius = inner_radius
        self.outer_radius = outer_radius
        self.stops = stops

    def gradient(self, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Render the gradient layer.

        Args:
            width: Layer width in pixels
            height: Layer height in pixels

        Returns:
            (premultiplied RGB float array HxWx3, opacity float array HxW)
        """
        r0 = self.inner_radius * width
        r1 = self.outer_radius * width

        # Sample at pixel centers
        y, x = np.ogrid[:height, :width]
        dist = np.sqrt((x + 0.5 - width / 2.0) ** 2 + (y + 0.5 - height / 2.0) ** 2)
        t = np.clip((dist - r0) / (r1 - r0), 0.0, 1.0)

        offsets = np.array([s.offset for s in self.stops])
        opacity = np.interp(t, offsets, [s.opacity for s in self.stops])

        # Interpolate in premultiplied space so fading stops carry no color
        premultiplied = np.empty((height, width, 3), dtype=np.float64)
        for c in range(3):
            premultiplied[:, :, c] = np.interp(
                t, offsets, [s.color[c] * s.opacity for s in self.stops]
            )

        return premultiplied, opacity

    def apply(self, image: ImageBuffer) -> ImageBuffer:
        """
        Composite the lighting gradient over an image.

        Args:
            image: Destination image (not modified)

        Returns:
            New ImageBuffer with the gradient composited on top
        """
        src_premul, src_alpha = self.gradient(image.width, image.height)

        dst_alpha = image.alpha.astype(np.float64) / 255.0
        dst_rgb = image.rgb.astype(np.float64)

        keep = (1.0 - src_alpha) * dst_alpha
        out_alpha = src_alpha + keep

        out_premul = src_premul + dst_rgb * keep[:, :, np.newaxis]
        with np.errstate(divide='ignore', invalid='ignore'):
            out_rgb = np.where(
                out_alpha[:, :, np.newaxis] > 0,
                out_premul / out_alpha[:, :, np.newaxis],
                0.0,
            )

        data = np.empty_like(image.data)
        data[:, :, :3] = np.clip(np.rint(out_rgb), 0, 255)
        data[:, :, 3] = np.clip(np.rint(out_alpha * 255.0), 0, 255)

        logger.debug(f"Studio lighting composited on {image.width}x{image.height} image")
        return ImageBuffer(image.width, image.height, data)
