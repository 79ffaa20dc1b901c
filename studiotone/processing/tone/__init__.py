"""
Tone adjustment modules for StudioTone
"""

from .tone_curve import ToneCurveMapper

__all__ = ['ToneCurveMapper']
