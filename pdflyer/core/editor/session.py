"""
Editing session: the loaded document, its overlay elements, and the
interaction mode of the page overlay.

Every operation either completes or raises an ``EditorError`` without
touching the document or the element list.
"""
import logging
import mimetypes
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from pdflyer.config import EditorConfig
from pdflyer.core.document.exporter import ExportResult, PDFExporter
from pdflyer.core.document.geometry import PageGeometry
from pdflyer.core.document.loader import DocumentLoader, PDFDocument
from pdflyer.core.elements.manager import ElementManager
from pdflyer.core.elements.models import (
    AnnotationElement,
    ElementIdGenerator,
    ElementKind,
    FontFamily,
    ShapeKind,
)
from pdflyer.core.errors import ElementEmbedError, NoContentError, NoDocumentError
from pdflyer.core.imaging.raster import (
    decode_data_uri,
    encode_data_uri,
    fit_width,
    image_size,
    sniff_media_type,
)
from pdflyer.core.imaging.strokes import StrokeCanvas
from pdflyer.core.signatures.store import SignatureRecord, SignatureStore
from .mode import Drawing, EditorMode, Idle, PlacingText, Selected, ToolMode, tool_mode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextStyle:
    """Style applied to newly placed text."""
    font_size: float = 14.0
    color_hex: str = "#000000"
    font_family: FontFamily = FontFamily.HELVETICA
    bold: bool = False


class EditorSession:
    """Owns one document and everything the user adds to it."""

    def __init__(self, signature_store: SignatureStore,
                 config: Optional[EditorConfig] = None,
                 loader: Optional[DocumentLoader] = None,
                 exporter: Optional[PDFExporter] = None):
        self.config = config or EditorConfig()
        self.signature_store = signature_store
        self.loader = loader or DocumentLoader(self.config)
        self.exporter = exporter or PDFExporter(self.config)

        self.elements = ElementManager(self.config.history_size,
                                       self.config.text_box_size)
        self._ids = ElementIdGenerator()

        self.document: Optional[PDFDocument] = None
        self.page_number = 1
        self.geometry: Optional[PageGeometry] = None
        self.mode: EditorMode = Idle()
        self.text_style = TextStyle(font_size=self.config.default_font_size,
                                    color_hex=self.config.default_text_color)

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def open_file(self, file_path: str) -> PDFDocument:
        """
        Load a PDF from disk, replacing the current document.

        Raises:
            InvalidFileType, FileTooLarge, DocumentLoadError
        """
        return self._install(self.loader.load_file(file_path))

    def open_bytes(self, data: bytes, media_type: Optional[str],
                   name: str = "document.pdf") -> PDFDocument:
        """
        Load an uploaded PDF, replacing the current document.

        Raises:
            InvalidFileType, FileTooLarge, DocumentLoadError
        """
        return self._install(self.loader.load_bytes(data, media_type, name))

    def _install(self, document: PDFDocument) -> PDFDocument:
        self.close_document()
        self.document = document
        self.page_number = 1
        self.geometry = document.page_geometry(1, self.config.display_width)
        return document

    def close_document(self) -> None:
        """Release the document and discard every element."""
        if self.document is not None:
            self.document.close()
        self.document = None
        self.geometry = None
        self.page_number = 1
        self.elements.clear_all()
        self._set_mode(Idle())

    def _require_document(self) -> PDFDocument:
        if self.document is None:
            raise NoDocumentError()
        return self.document

    @property
    def page_count(self) -> int:
        return self.document.page_count if self.document else 0

    def go_to_page(self, page_number: int) -> PageGeometry:
        """
        Make another page active.

        Elements stay where they are; only the visible subset changes. Any
        pending text placement, drawing or selection is abandoned.
        """
        document = self._require_document()
        page_number = min(max(page_number, 1), document.page_count)
        self.page_number = page_number
        self.geometry = document.page_geometry(page_number, self.config.display_width)
        self._set_mode(Idle())
        return self.geometry

    def current_page_elements(self) -> List[AnnotationElement]:
        return self.elements.get_elements_for_page(self.page_number)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    @property
    def tool_mode(self) -> ToolMode:
        return tool_mode(self.mode)

    @property
    def selected_id(self) -> Optional[str]:
        return self.mode.element_id if isinstance(self.mode, Selected) else None

    def _set_mode(self, mode: EditorMode) -> None:
        if isinstance(self.mode, Drawing) and not isinstance(mode, Drawing):
            self.mode.canvas.clear()
        self.mode = mode
        self.elements.select_element(mode.element_id if isinstance(mode, Selected) else None)

    def select_tool(self, tool: ToolMode) -> EditorMode:
        """
        Switch the overlay tool.

        Switching always abandons the previous flow: a pending text
        placement is dropped and an open drawing is discarded.

        Image, shape and redaction are inserted directly with
        :meth:`add_image`, :meth:`add_shape` and :meth:`add_redaction`.
        """
        if tool == ToolMode.NONE:
            self._set_mode(Idle())
        elif tool == ToolMode.TEXT:
            self._require_document()
            self._set_mode(PlacingText())
        elif tool == ToolMode.DRAWING:
            self._require_document()
            canvas = StrokeCanvas(self.geometry.rendered_width,
                                  self.geometry.rendered_height,
                                  stroke_width=self.config.drawing_stroke_width)
            self._set_mode(Drawing(canvas))
        else:
            raise ValueError(f"{tool.value} elements are inserted directly")
        return self.mode

    # ------------------------------------------------------------------
    # Text placement
    # ------------------------------------------------------------------

    def set_text_style(self, **changes) -> TextStyle:
        self.text_style = replace(self.text_style, **changes)
        return self.text_style

    def apply_text_style(self, **changes) -> Optional[AnnotationElement]:
        """
        Change the text style.

        The style applies to text placed afterwards. A selected text
        element is restyled as well.

        Returns:
            The restyled element, or None if no text element is selected
        """
        self.set_text_style(**changes)
        element = self.elements.selected_element
        if element is None or element.kind != ElementKind.TEXT:
            return None
        self.elements.update_element(element.id, **changes)
        return self.elements.get_element(element.id)

    def place_text(self, x: float, y: float) -> bool:
        """
        Open the inline text entry at a clicked position.

        Only valid while the text tool is armed and no entry is open.
        """
        if not isinstance(self.mode, PlacingText) or self.mode.position is not None:
            return False
        self._set_mode(PlacingText((x, y)))
        return True

    @property
    def pending_text_position(self) -> Optional[Tuple[float, float]]:
        if isinstance(self.mode, PlacingText):
            return self.mode.position
        return None

    def confirm_text(self, text: str) -> Optional[AnnotationElement]:
        """
        Turn the open text entry into a text element.

        Blank text leaves the entry open. On success the tool returns to
        idle.
        """
        position = self.pending_text_position
        if position is None or not text.strip():
            return None

        width, height = self.config.text_box_size
        style = self.text_style
        element = AnnotationElement(
            id=self._ids.next_id(ElementKind.TEXT),
            kind=ElementKind.TEXT,
            page_number=self.page_number,
            x=position[0],
            y=position[1],
            width=width,
            height=height,
            text=text,
            font_size=style.font_size,
            color_hex=style.color_hex,
            font_family=style.font_family,
            bold=style.bold,
        )
        self.elements.add_element(element)
        self._set_mode(Idle())
        return element

    def cancel_text(self) -> None:
        """Close the text entry. The text tool stays armed."""
        if isinstance(self.mode, PlacingText):
            self._set_mode(PlacingText())

    def text_focus_lost(self, text: str) -> Optional[AnnotationElement]:
        """Confirm non-empty text, cancel otherwise."""
        if text.strip():
            return self.confirm_text(text)
        self.cancel_text()
        return None

    # ------------------------------------------------------------------
    # Direct insertion
    # ------------------------------------------------------------------

    def _insert(self, element: AnnotationElement) -> AnnotationElement:
        self._set_mode(Idle())
        self.elements.add_element(element)
        return element

    def _raster_element(self, kind: ElementKind, data_uri: str) -> AnnotationElement:
        try:
            media_type, data = decode_data_uri(data_uri)
            width, height = fit_width(*image_size(data, media_type),
                                      self.config.max_placed_width)
        except ValueError as e:
            raise ElementEmbedError("The image could not be read.") from e

        x, y = self.config.default_position
        return AnnotationElement(
            id=self._ids.next_id(kind),
            kind=kind,
            page_number=self.page_number,
            x=x,
            y=y,
            width=width,
            height=height,
            raster_data_uri=data_uri,
        )

    def add_image(self, data: bytes, media_type: Optional[str] = None) -> AnnotationElement:
        """
        Place an image on the active page at the default position.

        The placed width is capped while keeping the aspect ratio.

        Raises:
            ElementEmbedError: if the image cannot be decoded
        """
        self._require_document()
        media_type = sniff_media_type(data) or media_type or "image/png"
        element = self._raster_element(ElementKind.IMAGE, encode_data_uri(data, media_type))
        return self._insert(element)

    def add_image_file(self, file_path: str) -> AnnotationElement:
        media_type, _ = mimetypes.guess_type(file_path)
        with open(file_path, 'rb') as f:
            data = f.read()
        return self.add_image(data, media_type)

    def add_shape(self, shape_kind: ShapeKind,
                  color_hex: Optional[str] = None) -> AnnotationElement:
        self._require_document()
        x, y = self.config.default_position
        width, height = self.config.shape_size
        return self._insert(AnnotationElement(
            id=self._ids.next_id(ElementKind.SHAPE),
            kind=ElementKind.SHAPE,
            page_number=self.page_number,
            x=x,
            y=y,
            width=width,
            height=height,
            shape_kind=shape_kind,
            color_hex=color_hex or self.config.default_shape_color,
        ))

    def add_redaction(self) -> AnnotationElement:
        self._require_document()
        x, y = self.config.default_position
        width, height = self.config.redaction_size
        return self._insert(AnnotationElement(
            id=self._ids.next_id(ElementKind.REDACTION),
            kind=ElementKind.REDACTION,
            page_number=self.page_number,
            x=x,
            y=y,
            width=width,
            height=height,
        ))

    def apply_signature(self, index: int) -> AnnotationElement:
        """
        Place a saved signature on the active page as an image element.

        Raises:
            IndexError: if no signature exists at the index
            ElementEmbedError: if the stored image cannot be decoded
        """
        self._require_document()
        record = self.signature_store.get(index)
        return self._insert(self._raster_element(ElementKind.IMAGE, record.raster_data_uri))

    # ------------------------------------------------------------------
    # Freehand drawing
    # ------------------------------------------------------------------

    @property
    def drawing_canvas(self) -> Optional[StrokeCanvas]:
        return self.mode.canvas if isinstance(self.mode, Drawing) else None

    def begin_stroke(self, x: float, y: float) -> bool:
        canvas = self.drawing_canvas
        if canvas is None:
            return False
        canvas.begin_stroke(x, y)
        return True

    def extend_stroke(self, x: float, y: float):
        canvas = self.drawing_canvas
        if canvas is None:
            return None
        return canvas.add_point(x, y)

    def end_stroke(self) -> None:
        canvas = self.drawing_canvas
        if canvas is not None:
            canvas.end_stroke()

    def finish_drawing(self, save_as_signature: bool = False):
        """
        Finalise the drawing.

        The strokes become a drawing element covering the whole page
        overlay, or a saved signature. The canvas is cleared and drawing
        mode ends, unless the signature cannot be written, in which case
        the drawing stays open.

        Returns:
            The new element, or the new signature record

        Raises:
            NoContentError: if nothing visible has been drawn
            OSError: if a signature cannot be written
        """
        canvas = self.drawing_canvas
        if canvas is None:
            return None

        try:
            data_uri = canvas.to_data_uri()
        except NoContentError:
            self._set_mode(Idle())
            raise

        if save_as_signature:
            # The strokes stay on the canvas until the signature is stored
            record = self.signature_store.add(data_uri)
            self._set_mode(Idle())
            return record

        self._set_mode(Idle())
        element = AnnotationElement(
            id=self._ids.next_id(ElementKind.DRAWING),
            kind=ElementKind.DRAWING,
            page_number=self.page_number,
            x=0.0,
            y=0.0,
            width=canvas.width,
            height=canvas.height,
            raster_data_uri=data_uri,
        )
        self.elements.add_element(element)
        return element

    # ------------------------------------------------------------------
    # Selection and manipulation
    # ------------------------------------------------------------------

    def element_at(self, x: float, y: float) -> Optional[AnnotationElement]:
        return self.elements.get_element_at_point(self.page_number, x, y)

    def select_element(self, element_id: Optional[str]) -> bool:
        """
        Select one element exclusively, or clear the selection.

        Ignored while text is being placed or a drawing is open.
        """
        if isinstance(self.mode, (PlacingText, Drawing)):
            return False
        if element_id is None:
            self._set_mode(Idle())
            return True
        element = self.elements.get_element(element_id)
        if element is None or element.page_number != self.page_number:
            return False
        self._set_mode(Selected(element_id))
        return True

    def _size_of(self, element: AnnotationElement) -> Tuple[float, float]:
        default_width, default_height = self.config.text_box_size
        return (element.width if element.width is not None else default_width,
                element.height if element.height is not None else default_height)

    def move_element(self, element_id: str, x: float, y: float) -> bool:
        """Move an element, keeping it inside the page overlay."""
        element = self.elements.get_element(element_id)
        if element is None:
            return False
        if self.geometry is not None and element.page_number == self.page_number:
            x, y = self.geometry.clamp_position(x, y, *self._size_of(element))
        return self.elements.update_element(element_id, x=x, y=y)

    def resize_element(self, element_id: str, x: float, y: float,
                       width: float, height: float) -> bool:
        """Resize an element, keeping it inside the page overlay."""
        element = self.elements.get_element(element_id)
        if element is None:
            return False
        minimum = self.config.min_element_size
        width, height = max(width, minimum), max(height, minimum)
        if self.geometry is not None and element.page_number == self.page_number:
            width = min(width, self.geometry.rendered_width)
            height = min(height, self.geometry.rendered_height)
            x, y = self.geometry.clamp_position(x, y, width, height)
        return self.elements.update_element(element_id, x=x, y=y,
                                            width=width, height=height)

    def update_element(self, element_id: str, **changes) -> bool:
        return self.elements.update_element(element_id, **changes)

    def delete_element(self, element_id: str) -> bool:
        removed = self.elements.delete_element(element_id)
        if removed and self.selected_id == element_id:
            self._set_mode(Idle())
        return removed

    def undo(self) -> bool:
        if not self.elements.undo():
            return False
        if isinstance(self.mode, Selected):
            self._set_mode(Idle())
        return True

    def redo(self) -> bool:
        if not self.elements.redo():
            return False
        if isinstance(self.mode, Selected):
            self._set_mode(Idle())
        return True

    # ------------------------------------------------------------------
    # Signatures and export
    # ------------------------------------------------------------------

    def save_signature_drawing(self, canvas: StrokeCanvas) -> SignatureRecord:
        return self.signature_store.save_drawing(canvas)

    def import_signature(self, data: bytes, media_type: Optional[str] = None) -> SignatureRecord:
        return self.signature_store.import_image(data, media_type)

    def delete_signature(self, index: int) -> None:
        self.signature_store.delete(index)

    def new_signature_canvas(self) -> StrokeCanvas:
        width, height = self.config.signature_pad_size
        return StrokeCanvas(width, height, stroke_width=self.config.signature_stroke_width)

    def export(self) -> ExportResult:
        """
        Flatten the document with every element.

        Raises:
            NoDocumentError, NoElementsError, EditExportError
        """
        document = self._require_document()
        return self.exporter.export(document, self.elements.elements)
