"""
Ordered enhancement pipeline for StudioTone.

The order is fixed: basic color filters, tone curve, sharpening, studio
lighting. Sharpening runs after tone correction so curve banding is not
amplified, and lighting runs last so it composites over the final tones.
"""

import logging
import time
from typing import Dict, Any, Optional, List, Tuple, Callable

from ..models import ImageBuffer, EnhancementParameters
from ..exceptions import RenderContextUnavailable
from ..config import get_config_value
from .color import BasicColorFilter
from .tone import ToneCurveMapper
from .sharpening import EdgeAwareSharpener, SharpeningSettings
from .lighting import StudioLightingCompositor

logger = logging.getLogger(__name__)


class FilterChain:
    """
    Runs every enabled stage on a source image for one parameter snapshot.

    Each stage receives the previous stage's buffer and returns a new one;
    the caller's source buffer is never modified.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the filter chain

        Args:
            config: Configuration dictionary (see studiotone.config)
        """
        config = config or {}
        self.basic_filter = BasicColorFilter()
        self.tone_mapper = ToneCurveMapper()
        self.sharpener = EdgeAwareSharpener(SharpeningSettings(
            strength=get_config_value(config, 'sharpening.strength', 0.3),
            threshold=get_config_value(config, 'sharpening.threshold', 12.0),
        ))
        self.lighting = StudioLightingCompositor(
            inner_radius=get_config_value(config, 'lighting.inner_radius', 0.15),
            outer_radius=get_config_value(config, 'lighting.outer_radius', 0.85),
        )

    def stages(self, params: EnhancementParameters
               ) -> List[Tuple[str, Callable[[ImageBuffer], ImageBuffer]]]:
        """List the (name, stage) pairs enabled for a snapshot, in run order."""
        stages = [('basic', lambda img: self.basic_filter.apply(img, params.filters))]
        if params.toggles.smart_tone:
            stages.append(('tone', lambda img: self.tone_mapper.apply(img, params.tone_curve)))
        if params.toggles.sharpen:
            stages.append(('sharpen', self.sharpener.apply))
        if params.toggles.studio_lighting:
            stages.append(('lighting', self.lighting.apply))
        return stages

    def run(self, source: Optional[ImageBuffer],
            params: EnhancementParameters) -> ImageBuffer:
        """
        Render a source image with a parameter snapshot.

        Args:
            source: Decoded source image
            params: Immutable parameter snapshot

        Returns:
            Newly rendered ImageBuffer

        Raises:
            RenderContextUnavailable: No source image, or a working buffer
                could not be allocated
        """
        if source is None:
            raise RenderContextUnavailable("No decoded source image to render")

        start_time = time.time()
        image = source
        names = []
        try:
            for name, stage in self.stages(params):
                image = stage(image)
                names.append(name)
        except MemoryError as e:
            raise RenderContextUnavailable(
                f"Could not allocate {source.width}x{source.height} working buffer"
            ) from e

        duration = time.time() - start_time
        logger.debug(f"Pipeline [{' -> '.join(names)}] completed in {duration:.3f}s")
        return image
