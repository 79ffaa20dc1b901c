"""
Color adjustment modules for StudioTone
"""

from .basic_filters import BasicColorFilter, saturation_matrix, sepia_matrix

__all__ = [
    'BasicColorFilter',
    'saturation_matrix',
    'sepia_matrix',
]
