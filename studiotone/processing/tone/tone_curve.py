"""
Parametric tone curve for StudioTone

Remaps each RGB channel through black/white point normalization, gamma,
shadow lift and highlight roll-off. Since the curve depends only on the
input value, it is evaluated once into a 256-entry lookup table.
"""

import logging
import numpy as np
import cv2

from ...models import ImageBuffer, ToneCurveConfig

logger = logging.getLogger(__name__)


class ToneCurveMapper:
    """Applies a ToneCurveConfig to the color channels of an image."""

    def build_lut(self, cfg: ToneCurveConfig) -> np.ndarray:
        """
        Evaluate the tone curve for every 8-bit input value.

        The stages run strictly in the order normalize, gamma, shadow lift,
        highlight roll-off.

        Args:
            cfg: Tone curve parameters

        Returns:
            uint8 array of length 256
        """
        values = np.arange(256, dtype=np.float64)
        span = max(1.0, cfg.white_point - cfg.black_point)

        toned = np.clip((values - cfg.black_point) / span, 0.0, 1.0)
        toned = np.power(toned, cfg.gamma)

        if cfg.shadow_lift > 0:
            toned = toned + (1.0 - toned) * cfg.shadow_lift * (1.0 - toned)

        if cfg.highlight_rolloff > 0:
            toned = toned - cfg.highlight_rolloff * toned * toned

        return np.round(np.clip(toned * 255.0, 0, 255)).astype(np.uint8)

    def apply(self, image: ImageBuffer, cfg: ToneCurveConfig) -> ImageBuffer:
        """
        Apply the tone curve to RGB, leaving alpha untouched.

        Args:
            image: Source image (not modified)
            cfg: Tone curve parameters

        Returns:
            New ImageBuffer with the curve applied
        """
        lut = self.build_lut(cfg)
        rgb = cv2.LUT(np.ascontiguousarray(image.rgb), lut)
        logger.debug(
            f"Tone curve black={cfg.black_point:.0f} white={cfg.white_point:.0f} "
            f"gamma={cfg.gamma:.2f} lift={cfg.shadow_lift:.2f} rolloff={cfg.highlight_rolloff:.2f}"
        )
        return image.with_rgb(rgb)
