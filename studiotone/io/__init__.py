"""
Image input/output for StudioTone
"""

from .codec import (
    decode_image,
    encode_image,
    load_image_file,
    save_image_file,
    format_for_path,
)

__all__ = [
    'decode_image',
    'encode_image',
    'load_image_file',
    'save_image_file',
    'format_for_path',
]
