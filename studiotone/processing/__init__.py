"""
Pixel processing modules for StudioTone

Includes the basic color filters, tone curve, sharpening, studio lighting
and the ordered pipeline that chains them.
"""

from .auto_enhance import AutoEnhanceEstimator
from .color import BasicColorFilter
from .tone import ToneCurveMapper
from .sharpening import EdgeAwareSharpener, SharpeningSettings
from .lighting import StudioLightingCompositor, GradientStop
from .pipeline import FilterChain

__all__ = [
    "AutoEnhanceEstimator",
    "BasicColorFilter",
    "ToneCurveMapper",
    "EdgeAwareSharpener",
    "SharpeningSettings",
    "StudioLightingCompositor",
    "GradientStop",
    "FilterChain",
]
