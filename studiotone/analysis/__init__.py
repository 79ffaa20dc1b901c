"""
Image analysis modules for StudioTone
"""

from .histogram import HistogramAnalyzer, LUMA_WEIGHTS

__all__ = [
    'HistogramAnalyzer',
    'LUMA_WEIGHTS',
]
