"""
Freehand stroke capture.

Strokes are recorded as polylines in canvas pixels and rasterised once,
when the drawing is finished.
"""
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from pdflyer.core.errors import NoContentError
from .raster import encode_data_uri, has_visible_pixels

Point = Tuple[float, float]


class StrokeCanvas:
    """A transparent scratch canvas that records freehand strokes."""

    def __init__(self, width: float, height: float, stroke_width: float = 3.0,
                 color: Tuple[float, float, float] = (0.0, 0.0, 0.0)):
        self.width = width
        self.height = height
        self.stroke_width = stroke_width
        self.color = color
        self.strokes: List[List[Point]] = []
        self.is_stroking = False

    def begin_stroke(self, x: float, y: float) -> None:
        """Start a new stroke at a pointer-down position."""
        self.strokes.append([(x, y)])
        self.is_stroking = True

    def add_point(self, x: float, y: float) -> Optional[Tuple[Point, Point]]:
        """
        Extend the current stroke to a pointer-move position.

        Returns:
            The segment from the last recorded point to the new one, or
            None when no stroke is in progress
        """
        if not self.is_stroking:
            return None
        stroke = self.strokes[-1]
        last = stroke[-1]
        stroke.append((x, y))
        return last, (x, y)

    def end_stroke(self) -> None:
        """End the current stroke. The drawing stays open for more strokes."""
        self.is_stroking = False

    def clear(self) -> None:
        self.strokes = []
        self.is_stroking = False

    @property
    def is_empty(self) -> bool:
        return not any(len(stroke) > 1 for stroke in self.strokes)

    def rasterize(self) -> fitz.Pixmap:
        """Render all strokes onto a transparent pixmap of the canvas size."""
        doc = fitz.open()
        try:
            page = doc.new_page(width=self.width, height=self.height)
            shape = page.new_shape()
            for stroke in self.strokes:
                # A lone pointer-down leaves no mark
                if len(stroke) < 2:
                    continue
                shape.draw_polyline([fitz.Point(x, y) for x, y in stroke])
                shape.finish(color=self.color, width=self.stroke_width,
                             lineCap=1, lineJoin=1, closePath=False)
            shape.commit()
            return page.get_pixmap(alpha=True)
        finally:
            doc.close()

    def has_content(self) -> bool:
        """True if any rendered pixel has non-zero alpha."""
        if self.is_empty:
            return False
        return has_visible_pixels(self.rasterize())

    def to_data_uri(self) -> str:
        """
        Encode the canvas as a PNG data URI.

        Raises:
            NoContentError: if nothing visible has been drawn
        """
        if self.is_empty:
            raise NoContentError()
        pix = self.rasterize()
        if not has_visible_pixels(pix):
            raise NoContentError()
        return encode_data_uri(pix.tobytes("png"))
