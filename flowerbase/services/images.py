"""Helpers for photos submitted inline as data URLs.

The flower form sends new photos as ``data:image/...;base64,...`` strings.
Before upload they are decoded, checked against known image signatures and
re-encoded as a downscaled JPEG.
"""

import base64
import binascii
import io
import logging

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

MAX_IMAGE_WIDTH = 800
JPEG_QUALITY = 70

# Magic bytes for image format detection
# Maps magic byte signatures to (extension_set, mime_type)
IMAGE_SIGNATURES = [
    (b'\x89PNG\r\n\x1a\n', {'png'}, 'image/png'),
    (b'\xff\xd8\xff', {'jpg', 'jpeg'}, 'image/jpeg'),
    (b'GIF87a', {'gif'}, 'image/gif'),
    (b'GIF89a', {'gif'}, 'image/gif'),
    (b'RIFF', {'webp'}, 'image/webp'),  # WebP starts with RIFF....WEBP
]


def is_data_url(value) -> bool:
    """True for inline images that still need uploading."""
    return isinstance(value, str) and value.startswith('data:')


def strip_data_url(value: str) -> str:
    """Return the base64 payload of a data URL (or the value unchanged)."""
    if 'base64,' in value:
        return value.split('base64,', 1)[1]
    return value


def detect_image_type(file_data: bytes):
    """Detect image type from magic bytes.

    Returns:
        Tuple of (extension_set, mime_type) or (None, None) if unknown.
    """
    if len(file_data) < 12:
        return None, None

    for signature, exts, mime in IMAGE_SIGNATURES:
        if file_data[:len(signature)] == signature:
            # Extra check for WebP: bytes 8-12 must be 'WEBP'
            if 'webp' in exts:
                if file_data[8:12] != b'WEBP':
                    continue
            return exts, mime

    return None, None


def decode_data_url(value: str) -> bytes:
    """Decode a base64 data URL into raw image bytes.

    Raises:
        ValueError: if the payload is not base64 or not a known image format
    """
    try:
        data = base64.b64decode(strip_data_url(value), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f'Image is not valid base64: {e}') from e

    exts, _ = detect_image_type(data)
    if exts is None:
        raise ValueError('Data does not appear to be a valid image')
    return data


def compress_image(file_data: bytes, max_width: int = MAX_IMAGE_WIDTH, quality: int = JPEG_QUALITY) -> bytes:
    """Downscale to ``max_width`` (keeping aspect ratio) and re-encode as JPEG."""
    with Image.open(io.BytesIO(file_data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode not in ('RGB', 'L'):
            img = img.convert('RGB')

        width, height = img.size
        if width > max_width:
            height = round(height * max_width / width)
            width = max_width
            img = img.resize((width, height), Image.LANCZOS)

        out = io.BytesIO()
        img.save(out, format='JPEG', quality=quality, optimize=True)
        return out.getvalue()
