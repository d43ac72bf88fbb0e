from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Optional, Tuple


class ElementKind(Enum):
    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"
    DRAWING = "drawing"
    REDACTION = "redaction"


class ShapeKind(Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


class FontFamily(Enum):
    HELVETICA = "Helvetica"
    TIMES_ROMAN = "TimesRoman"
    COURIER = "Courier"


# Resizable kinds always carry a width and height
RESIZABLE_KINDS = {
    ElementKind.IMAGE,
    ElementKind.SHAPE,
    ElementKind.DRAWING,
    ElementKind.REDACTION,
}

# Fields callers may not change through an update
IMMUTABLE_FIELDS = {"id", "kind"}


@dataclass(frozen=True)
class AnnotationElement:
    """An overlay element anchored to a single page."""
    id: str
    kind: ElementKind
    page_number: int  # 1-based page number

    # Top-left corner in display pixels
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None

    # Text payload
    text: Optional[str] = None
    font_size: float = 14.0
    font_family: FontFamily = FontFamily.HELVETICA
    bold: bool = False

    # Text and shape colour
    color_hex: Optional[str] = None

    # Image and drawing payload
    raster_data_uri: Optional[str] = None

    # Shape payload
    shape_kind: Optional[ShapeKind] = None

    def bounds(self, default_size: Tuple[float, float]) -> Tuple[float, float, float, float]:
        """Return (x0, y0, x1, y1) in display pixels."""
        width = self.width if self.width is not None else default_size[0]
        height = self.height if self.height is not None else default_size[1]
        return self.x, self.y, self.x + width, self.y + height

    def contains_point(self, x: float, y: float,
                       default_size: Tuple[float, float]) -> bool:
        x0, y0, x1, y1 = self.bounds(default_size)
        return x0 <= x <= x1 and y0 <= y <= y1


class ElementIdGenerator:
    """
    Hands out element ids in creation order.

    Ids come from a counter so rapid successive creation never collides.
    """

    def __init__(self):
        self._counter = count(1)

    def next_id(self, kind: ElementKind) -> str:
        return f"{kind.value}-{next(self._counter)}"


def parse_hex_color(color_hex: Optional[str]) -> Tuple[float, float, float]:
    """
    Convert ``#RRGGBB`` to an RGB tuple in the 0-1 range.

    Anything that is not a six digit hex colour renders as black.
    """
    if not color_hex:
        return (0.0, 0.0, 0.0)
    value = color_hex[1:] if color_hex.startswith("#") else color_hex
    if len(value) != 6:
        return (0.0, 0.0, 0.0)
    try:
        r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return (0.0, 0.0, 0.0)
    return (r / 255.0, g / 255.0, b / 255.0)
