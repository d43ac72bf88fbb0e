"""
Raster helpers: data URIs, freehand strokes and background removal.
"""
from .background import remove_background
from .raster import (
    decode_data_uri,
    decode_raster,
    encode_data_uri,
    fit_width,
    image_size,
    sniff_media_type,
)
from .strokes import StrokeCanvas

__all__ = [
    'StrokeCanvas',
    'decode_data_uri',
    'decode_raster',
    'encode_data_uri',
    'fit_width',
    'image_size',
    'remove_background',
    'sniff_media_type',
]
