"""
Flattening export: every page becomes a raster background with the
overlay elements drawn on top, at the page's native size.
"""
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import fitz  # PyMuPDF
from PyQt5.QtCore import QObject, pyqtSignal

from pdflyer.config import EditorConfig
from pdflyer.core.elements.models import (
    AnnotationElement,
    ElementKind,
    FontFamily,
    ShapeKind,
    parse_hex_color,
)
from pdflyer.core.errors import EditExportError, ElementEmbedError, NoElementsError
from pdflyer.core.imaging.raster import decode_data_uri, decode_raster
from .geometry import NativeBox, PageGeometry, to_native_box
from .loader import PDFDocument

logger = logging.getLogger(__name__)

# Base-14 font names: regular and bold of each supported family
FONT_NAMES = {
    (FontFamily.HELVETICA, False): "helv",
    (FontFamily.HELVETICA, True): "hebo",
    (FontFamily.TIMES_ROMAN, False): "tiro",
    (FontFamily.TIMES_ROMAN, True): "tibo",
    (FontFamily.COURIER, False): "cour",
    (FontFamily.COURIER, True): "cobo",
}

# Native size used for images stored without a size
DEFAULT_IMAGE_SIZE = 100.0

WHITE = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class PlacedElement:
    """Where an element ended up in the output, in native PDF space."""
    element_id: str
    kind: ElementKind
    page_number: int
    box: NativeBox
    # Draw anchor: text baseline start, image/rectangle bottom-left corner,
    # or circle centre
    origin: Tuple[float, float]


@dataclass
class ExportResult:
    data: bytes
    file_name: str
    page_count: int
    placed: List[PlacedElement] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class PDFExporter(QObject):
    """Builds a flattened copy of a document with its elements drawn in."""

    progress_signal = pyqtSignal(int, int)  # current, total pages

    def __init__(self, config: Optional[EditorConfig] = None):
        super().__init__()
        self.config = config or EditorConfig()

    def export(self, document: PDFDocument,
               elements: Sequence[AnnotationElement]) -> ExportResult:
        """
        Export a document with its elements flattened onto every page.

        Args:
            document: The loaded source document
            elements: Every element of the editing session

        Returns:
            The serialized output and where each element was placed

        Raises:
            NoElementsError: if there is nothing to draw
            EditExportError: if a page or a text element cannot be drawn
        """
        if not elements:
            raise NoElementsError()

        elements_by_page: Dict[int, List[AnnotationElement]] = {}
        for element in elements:
            elements_by_page.setdefault(element.page_number, []).append(element)

        total_pages = document.page_count
        orphaned = [n for n in elements_by_page if not 1 <= n <= total_pages]
        if orphaned:
            logger.warning("Ignoring elements on missing pages %s", orphaned)

        result = ExportResult(data=b"", file_name=self.config.export_file_name,
                              page_count=total_pages)
        output = fitz.open()
        try:
            for page_number in range(1, total_pages + 1):
                self.progress_signal.emit(page_number - 1, total_pages)
                page, geometry = self._add_background_page(output, document, page_number)

                for element in elements_by_page.get(page_number, []):
                    try:
                        placed = self._draw_element(page, geometry, element)
                    except ElementEmbedError as e:
                        logger.error("Skipping %s on page %d: %s",
                                     element.id, page_number, e)
                        result.skipped.append(element.id)
                        continue
                    if placed is not None:
                        result.placed.append(placed)

            self.progress_signal.emit(total_pages, total_pages)
            result.data = output.tobytes(garbage=4, deflate=True)
        except EditExportError:
            raise
        except Exception as e:
            logger.error("Failed to export edited PDF: %s", e)
            raise EditExportError() from e
        finally:
            output.close()

        logger.info("Exported %d pages with %d elements (%d skipped)",
                    total_pages, len(result.placed), len(result.skipped))
        return result

    def _add_background_page(self, output: fitz.Document, document: PDFDocument,
                             page_number: int) -> Tuple[fitz.Page, PageGeometry]:
        """
        Append a native-size page whose only content is the source page
        rendered at the export scale.
        """
        width, height = document.get_page_size(page_number)
        pix = document.render_page(page_number, self.config.export_scale)

        page = output.new_page(width=width, height=height)
        page.insert_image(
            page.rect,
            stream=pix.tobytes("jpeg", jpg_quality=self.config.background_jpeg_quality),
        )

        # Elements were positioned on a preview of fixed width
        geometry = PageGeometry.for_page(width, height, self.config.display_width)
        return page, geometry

    def _draw_element(self, page: fitz.Page, geometry: PageGeometry,
                      element: AnnotationElement) -> Optional[PlacedElement]:
        """Draw a single element onto an output page."""
        box = to_native_box(geometry, element.x, element.y,
                            element.width, element.height)

        if element.kind == ElementKind.TEXT:
            origin = self._draw_text(page, box, element)
        elif element.kind in (ElementKind.IMAGE, ElementKind.DRAWING):
            origin = self._draw_raster(page, box, element)
        elif element.kind == ElementKind.SHAPE:
            origin = self._draw_shape(page, box, element)
        elif element.kind == ElementKind.REDACTION:
            origin = self._draw_redaction(page, box)
        else:
            origin = None

        if origin is None:
            return None
        return PlacedElement(element.id, element.kind, element.page_number, box, origin)

    def _to_page(self, page: fitz.Page, x: float, y: float) -> fitz.Point:
        # PDF space is y-up, PyMuPDF page space is y-down
        return fitz.Point(x, y) * page.transformation_matrix

    def _to_page_rect(self, page: fitz.Page, x0: float, y0: float,
                      x1: float, y1: float) -> fitz.Rect:
        return fitz.Rect(x0, y0, x1, y1) * page.transformation_matrix

    def _draw_text(self, page: fitz.Page, box: NativeBox,
                   element: AnnotationElement) -> Optional[Tuple[float, float]]:
        if not element.text:
            return None

        font_size = element.font_size
        fontname = FONT_NAMES[(element.font_family, element.bold)]
        origin = (box.x, box.y - font_size)
        try:
            page.insert_text(
                self._to_page(page, *origin),
                element.text,
                fontsize=font_size,
                fontname=fontname,
                color=parse_hex_color(element.color_hex),
            )
        except Exception as e:
            raise EditExportError(f"Text could not be written: {e}") from e
        return origin

    def _draw_raster(self, page: fitz.Page, box: NativeBox,
                     element: AnnotationElement) -> Optional[Tuple[float, float]]:
        if not element.raster_data_uri:
            return None

        try:
            media_type, data = decode_data_uri(element.raster_data_uri)
            pix = decode_raster(data, media_type)
        except ValueError as e:
            raise ElementEmbedError(str(e)) from e

        width = box.width if box.width is not None else DEFAULT_IMAGE_SIZE
        height = box.height if box.height is not None else DEFAULT_IMAGE_SIZE
        origin = (box.x, box.y - height)
        rect = self._to_page_rect(page, box.x, box.y - height, box.x + width, box.y)
        try:
            page.insert_image(rect, pixmap=pix, keep_proportion=False)
        except Exception as e:
            raise ElementEmbedError(str(e)) from e
        return origin

    def _draw_shape(self, page: fitz.Page, box: NativeBox,
                    element: AnnotationElement) -> Optional[Tuple[float, float]]:
        color = parse_hex_color(element.color_hex or self.config.default_shape_color)

        if element.shape_kind == ShapeKind.CIRCLE and box.width:
            radius = box.width / 2
            origin = (box.x + radius, box.y - radius)
            page.draw_circle(self._to_page(page, *origin), radius,
                             color=color, fill=color)
            return origin

        if element.shape_kind == ShapeKind.RECTANGLE and box.width and box.height:
            origin = (box.x, box.bottom)
            rect = self._to_page_rect(page, box.x, box.bottom, box.x + box.width, box.y)
            page.draw_rect(rect, color=color, fill=color)
            return origin

        return None

    def _draw_redaction(self, page: fitz.Page,
                        box: NativeBox) -> Optional[Tuple[float, float]]:
        if not (box.width and box.height):
            return None
        origin = (box.x, box.bottom)
        rect = self._to_page_rect(page, box.x, box.bottom, box.x + box.width, box.y)
        page.draw_rect(rect, color=None, fill=WHITE, width=0)
        return origin


def save_to_path(data: bytes, output_path: str) -> None:
    """
    Write export output, replacing the target only once fully written.

    The data goes to a temporary file in the target directory first and
    is moved into place afterwards.
    """
    output_dir = os.path.dirname(os.path.abspath(output_path))
    temp_fd, temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
    try:
        with os.fdopen(temp_fd, 'wb') as f:
            f.write(data)
        shutil.move(temp_path, output_path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
