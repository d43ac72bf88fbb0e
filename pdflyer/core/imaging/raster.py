"""
Helpers for self-contained raster images stored as data URIs.
"""
import base64
import binascii
import logging
from typing import Optional, Tuple

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

PNG_MEDIA_TYPE = "image/png"
JPEG_MEDIA_TYPE = "image/jpeg"

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_JPEG_SIGNATURE = b"\xff\xd8\xff"


def encode_data_uri(data: bytes, media_type: str = PNG_MEDIA_TYPE) -> str:
    """Encode raw image bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def decode_data_uri(uri: str) -> Tuple[Optional[str], bytes]:
    """
    Split a base64 data URI into its media type and raw bytes.

    Raises:
        ValueError: if the string is not a base64 data URI
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")
    header, payload = uri[5:].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        raise ValueError("Only base64 data URIs are supported")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return (parts[0] or None), data


def sniff_media_type(data: bytes) -> Optional[str]:
    """Guess the media type of PNG or JPEG bytes from their signature."""
    if data.startswith(_PNG_SIGNATURE):
        return PNG_MEDIA_TYPE
    if data.startswith(_JPEG_SIGNATURE):
        return JPEG_MEDIA_TYPE
    return None


def _candidate_types(media_type: Optional[str]) -> Tuple[str, str]:
    # Declared format first, the other common format second
    if media_type == JPEG_MEDIA_TYPE:
        return ("jpeg", "png")
    return ("png", "jpeg")


def decode_raster(data: bytes, media_type: Optional[str] = None) -> fitz.Pixmap:
    """
    Decode PNG or JPEG bytes into a pixmap.

    The image decoder is tried first. If it rejects the data, the bytes
    are opened as an image document, first as the declared format and then
    as the alternate one.

    Raises:
        ValueError: if no decoder accepts the data
    """
    try:
        return fitz.Pixmap(data)
    except Exception as first_error:
        last_error = first_error

    for filetype in _candidate_types(media_type):
        try:
            with fitz.open(stream=data, filetype=filetype) as img_doc:
                return img_doc[0].get_pixmap(alpha=True)
        except Exception as e:
            logger.debug("Decoding raster as %s failed: %s", filetype, e)
            last_error = e

    raise ValueError(f"Unsupported or corrupt image data: {last_error}")


def image_size(data: bytes, media_type: Optional[str] = None) -> Tuple[int, int]:
    """Return the intrinsic (width, height) of an image in pixels."""
    pix = decode_raster(data, media_type)
    return pix.width, pix.height


def fit_width(width: float, height: float, max_width: float) -> Tuple[float, float]:
    """
    Cap a width while preserving the aspect ratio.

    Images narrower than ``max_width`` keep their intrinsic size.
    """
    if width <= 0 or height <= 0:
        raise ValueError("Image has no area")
    aspect_ratio = width / height
    placed_width = min(max_width, width)
    return placed_width, placed_width / aspect_ratio


def has_visible_pixels(pix: fitz.Pixmap) -> bool:
    """True if any pixel of an alpha pixmap has non-zero alpha."""
    if not pix.alpha:
        return pix.width > 0 and pix.height > 0
    return any(pix.samples[pix.n - 1::pix.n])
