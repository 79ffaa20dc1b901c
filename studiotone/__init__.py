"""
StudioTone: adaptive image enhancement pipeline

Deterministic, local photo enhancement: histogram analysis, automatic
parameter estimation, color / tone / sharpening / lighting stages and a
debounced re-render orchestrator for interactive editing.
"""

__version__ = "0.1.0"

from .config import load_config
from .models import (
    ImageBuffer,
    HistogramStatistics,
    FilterParameters,
    ToneCurveConfig,
    FeatureToggles,
    EnhancementParameters,
)
from .exceptions import (
    EnhancementError,
    DecodeFailure,
    RenderContextUnavailable,
    StaleResultDiscarded,
)

__all__ = [
    "load_config",
    "ImageBuffer",
    "HistogramStatistics",
    "FilterParameters",
    "ToneCurveConfig",
    "FeatureToggles",
    "EnhancementParameters",
    "EnhancementError",
    "DecodeFailure",
    "RenderContextUnavailable",
    "StaleResultDiscarded",
]
