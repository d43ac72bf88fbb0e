"""
Background removal for uploaded signature photos and scans.

This is a luminance chroma-key, not real segmentation: the background
colour is estimated from the four corner pixels and everything brighter
than a threshold derived from it becomes transparent. Light ink strokes
and anti-aliased edges can be cut away, and photos with uneven lighting
may keep parts of the background.
"""
import logging
from typing import Optional, Tuple

import fitz  # PyMuPDF

from .raster import decode_raster

logger = logging.getLogger(__name__)

# Background luminance above which the background counts as light
LIGHT_BACKGROUND_LUMINANCE = 100.0
THRESHOLD_MARGIN = 40.0
DARK_BACKGROUND_THRESHOLD = 200.0


def luminance(r: float, g: float, b: float) -> float:
    return 0.299 * r + 0.587 * g + 0.114 * b


def removal_threshold(background_luminance: float) -> float:
    """Luminance above which a pixel is treated as background."""
    if background_luminance > LIGHT_BACKGROUND_LUMINANCE:
        return background_luminance - THRESHOLD_MARGIN
    return DARK_BACKGROUND_THRESHOLD


def _to_rgba(pix: fitz.Pixmap) -> fitz.Pixmap:
    if pix.colorspace is None or pix.colorspace.n != 3:
        pix = fitz.Pixmap(fitz.csRGB, pix)
    if not pix.alpha:
        pix = fitz.Pixmap(pix, 1)
    return pix


def _straight_rgb(samples: bytearray, i: int) -> Tuple[float, float, float]:
    """Colour of one pixel with MuPDF's alpha premultiplication undone."""
    alpha = samples[i + 3]
    if alpha == 0:
        return 0.0, 0.0, 0.0
    if alpha == 255:
        return samples[i], samples[i + 1], samples[i + 2]
    return tuple(min(255.0, samples[i + c] * 255.0 / alpha) for c in range(3))


def remove_background(data: bytes, media_type: Optional[str] = None) -> fitz.Pixmap:
    """
    Make the light background of an image transparent.

    Pixels are only ever cleared: transparency already present in the
    upload is kept.

    Args:
        data: PNG or JPEG bytes
        media_type: Declared media type of the data

    Returns:
        An RGBA pixmap with background pixels at alpha 0

    Raises:
        ValueError: if the image cannot be decoded
    """
    pix = _to_rgba(decode_raster(data, media_type))
    width, height = pix.width, pix.height
    samples = bytearray(pix.samples)
    n = pix.n

    corners = [
        0,
        (width - 1) * n,
        (height - 1) * width * n,
        (height * width - 1) * n,
    ]
    corner_colors = [_straight_rgb(samples, i) for i in corners]
    bg_r, bg_g, bg_b = (sum(color[c] for color in corner_colors) / len(corners)
                        for c in range(3))
    threshold = removal_threshold(luminance(bg_r, bg_g, bg_b))

    removed = 0
    for i in range(0, len(samples), n):
        if samples[i + 3] == 0:
            continue
        if luminance(*_straight_rgb(samples, i)) > threshold:
            samples[i:i + 4] = b"\x00\x00\x00\x00"
            removed += 1

    logger.debug("Background removal cleared %d of %d pixels (threshold %.1f)",
                 removed, width * height, threshold)
    return fitz.Pixmap(fitz.csRGB, width, height, bytes(samples), 1)
