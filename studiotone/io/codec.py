"""
Image decoding and encoding for StudioTone
Converts between encoded bytes / files and RGBA ImageBuffers
"""

import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ..models import ImageBuffer
from ..exceptions import DecodeFailure

logger = logging.getLogger(__name__)

MIME_FORMATS = {
    'image/jpeg': 'JPEG',
    'image/jpg': 'JPEG',
    'image/png': 'PNG',
    'image/webp': 'WEBP',
    'image/gif': 'GIF',
    'image/bmp': 'BMP',
    'image/tiff': 'TIFF',
}

FORMAT_EXTENSIONS = {
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
    '.png': 'PNG',
    '.webp': 'WEBP',
    '.bmp': 'BMP',
    '.tif': 'TIFF',
    '.tiff': 'TIFF',
}

# Formats without an alpha channel; transparent pixels are flattened onto white
OPAQUE_FORMATS = {'JPEG', 'BMP'}


def decode_image(data: bytes, mime_type: Optional[str] = None) -> ImageBuffer:
    """
    Decode encoded image bytes into an RGBA buffer

    Args:
        data: Encoded image bytes
        mime_type: Declared MIME type, used only for a consistency check

    Returns:
        Decoded ImageBuffer

    Raises:
        DecodeFailure: If the data is empty, unreadable or corrupt
    """
    if not data:
        raise DecodeFailure("Image data is empty")

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            detected = image.format
            # Camera photos store rotation in EXIF; bake it into the pixels
            buffer = ImageBuffer.from_pil(ImageOps.exif_transpose(image))
    except Image.DecompressionBombError as e:
        raise DecodeFailure(
            f"Image exceeds the decode limit of {Image.MAX_IMAGE_PIXELS} pixels: {e}"
        ) from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image ({mime_type or 'unknown type'}): {e}") from e

    declared = MIME_FORMATS.get((mime_type or '').lower())
    if declared and detected and declared != detected:
        logger.warning(f"Declared type {mime_type} does not match detected format {detected}")

    logger.debug(f"Decoded {detected} image {buffer.width}x{buffer.height}")
    return buffer


def encode_image(image: ImageBuffer, format: str = "JPEG", quality: int = 95) -> bytes:
    """
    Encode an ImageBuffer

    Args:
        image: Image to encode
        format: Pillow format name (JPEG, PNG, WEBP, ...)
        quality: Quality for lossy formats (1-100)

    Returns:
        Encoded bytes
    """
    format = format.upper()
    if format == 'JPG':
        format = 'JPEG'

    pil_image = image.to_pil()
    if format in OPAQUE_FORMATS:
        background = Image.new("RGB", pil_image.size, (255, 255, 255))
        background.paste(pil_image, mask=pil_image.getchannel("A"))
        pil_image = background

    output = io.BytesIO()
    save_kwargs = {}
    if format in ('JPEG', 'WEBP'):
        save_kwargs['quality'] = int(max(1, min(100, quality)))
    if format == 'JPEG':
        # Full chroma resolution keeps color edges intact at high quality
        save_kwargs['subsampling'] = 0

    pil_image.save(output, format=format, **save_kwargs)
    return output.getvalue()


def format_for_path(path: Union[str, Path]) -> str:
    """Pick an encoder format from a file extension (JPEG when unknown)."""
    return FORMAT_EXTENSIONS.get(Path(path).suffix.lower(), 'JPEG')


def load_image_file(path: Union[str, Path]) -> ImageBuffer:
    """
    Load and decode an image file

    Raises:
        FileNotFoundError: If the path does not point to a file
        DecodeFailure: If the file is not a decodable image
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")
    return decode_image(path.read_bytes())


def save_image_file(image: ImageBuffer, path: Union[str, Path], quality: int = 95,
                    format: Optional[str] = None) -> Path:
    """
    Encode and write an image file

    Args:
        image: Image to save
        path: Destination path; the format follows its extension unless given
        quality: Quality for lossy formats
        format: Explicit encoder format

    Returns:
        The written path
    """
    path = Path(path)
    data = encode_image(image, format or format_for_path(path), quality)
    path.write_bytes(data)
    logger.info(f"Saved {image.width}x{image.height} image to {path}")
    return path
