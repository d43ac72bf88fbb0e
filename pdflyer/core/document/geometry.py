"""
Page geometry and the display-space to PDF-space transform.

Display space is the on-screen preview: origin top-left, y grows down.
Native PDF space is the page at scale 1.0 with the origin bottom-left.
"""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class PageGeometry:
    """Display geometry of the currently rendered page."""

    rendered_width: float
    rendered_height: float
    scale_factor: float
    native_width: float
    native_height: float

    @classmethod
    def for_page(cls, native_width: float, native_height: float,
                 target_width: float) -> "PageGeometry":
        """
        Compute the geometry of a page rendered at a fixed width.

        Args:
            native_width: Page width in points at scale 1
            native_height: Page height in points at scale 1
            target_width: Rendered width in display pixels

        Returns:
            The page geometry
        """
        scale = target_width / native_width
        return cls(
            rendered_width=target_width,
            rendered_height=native_height * scale,
            scale_factor=scale,
            native_width=native_width,
            native_height=native_height,
        )

    def to_native_point(self, x: float, y: float) -> Tuple[float, float]:
        """Convert a display point to native PDF space (y-up)."""
        return (x / self.scale_factor,
                self.native_height - y / self.scale_factor)

    def to_native_length(self, length: float) -> float:
        return length / self.scale_factor

    def clamp_position(self, x: float, y: float, width: float,
                       height: float) -> Tuple[float, float]:
        """Keep a box of the given size inside the page overlay."""
        max_x = max(0.0, self.rendered_width - width)
        max_y = max(0.0, self.rendered_height - height)
        return min(max(x, 0.0), max_x), min(max(y, 0.0), max_y)


@dataclass(frozen=True)
class NativeBox:
    """
    An element box in native PDF space.

    ``x, y`` is the converted top-left corner of the element, so the box
    spans downwards from ``y`` to ``y - height``.
    """

    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def bottom(self) -> float:
        return self.y - (self.height or 0.0)


def to_native_box(geometry: PageGeometry, x: float, y: float,
                  width: Optional[float] = None,
                  height: Optional[float] = None) -> NativeBox:
    """
    Convert a display-space box to native PDF space.

    Args:
        geometry: Geometry of the page the box is placed on
        x, y: Top-left corner in display pixels
        width, height: Optional size in display pixels

    Returns:
        The box in native PDF space
    """
    pdf_x, pdf_y = geometry.to_native_point(x, y)
    return NativeBox(
        x=pdf_x,
        y=pdf_y,
        width=geometry.to_native_length(width) if width is not None else None,
        height=geometry.to_native_length(height) if height is not None else None,
    )
