"""
Page preview with the interactive element overlay.
"""
import logging
from typing import Dict, Optional, Tuple

from PyQt5.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import (
    QBrush,
    QColor,
    QFont,
    QImage,
    QMouseEvent,
    QPainter,
    QPainterPath,
    QPen,
    QPixmap,
)
from PyQt5.QtWidgets import QLabel

from pdflyer.controllers import ERROR, EditorController
from pdflyer.core.editor import Drawing, PlacingText, ToolMode
from pdflyer.core.elements import (
    RESIZABLE_KINDS,
    AnnotationElement,
    ElementKind,
    FontFamily,
    ShapeKind,
)
from pdflyer.core.errors import PageRenderError
from pdflyer.core.imaging import decode_data_uri
from .text_entry import InlineTextEntry

logger = logging.getLogger(__name__)

HANDLE_SIZE = 12.0
SELECTION_COLOR = QColor(59, 130, 246)

QT_FONT_FAMILIES = {
    FontFamily.HELVETICA: "Helvetica",
    FontFamily.TIMES_ROMAN: "Times",
    FontFamily.COURIER: "Courier",
}


def pixmap_to_qimage(pix) -> QImage:
    """Copy a PyMuPDF pixmap into a QImage."""
    fmt = QImage.Format_RGBA8888 if pix.alpha else QImage.Format_RGB888
    return QImage(pix.samples, pix.width, pix.height, pix.stride, fmt).copy()


class PageView(QLabel):
    """
    Renders the active page at the display width and hosts the overlay.

    All coordinates handled here are display pixels, which are exactly
    the element coordinates stored in the session.
    """

    # Signals
    element_activated = pyqtSignal(str)  # element id

    def __init__(self, controller: EditorController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.session = controller.session

        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)

        self.text_entry = InlineTextEntry(self)
        self.text_entry.confirmed.connect(self._on_text_confirmed)
        self.text_entry.cancelled.connect(self._on_text_cancelled)
        self.text_entry.focus_lost.connect(self._on_text_focus_lost)

        # Decoded rasters keyed by data URI
        self._raster_cache: Dict[str, QImage] = {}

        # Drag state: (element id, "move" | "resize", press point, original box)
        self._drag: Optional[Tuple[str, str, QPointF, QRectF]] = None
        self._drag_box: Optional[QRectF] = None
        self._stroking = False

        controller.page_changed.connect(lambda _: self.render_page())
        controller.document_loaded.connect(lambda _: self.render_page())
        controller.elements_changed.connect(self.update)
        controller.mode_changed.connect(self._on_mode_changed)

    # ===== Rendering =====

    def render_page(self):
        """Render the active page at the current display scale."""
        self.text_entry.close_entry()
        document, geometry = self.session.document, self.session.geometry
        if document is None or geometry is None:
            self.clear()
            return
        try:
            pix = document.render_page(self.session.page_number, geometry.scale_factor)
        except PageRenderError as e:
            logger.error("Preview failed: %s", e.message)
            self.controller.notification.emit(ERROR, e.message)
            self.clear()
            return
        pixmap = QPixmap.fromImage(pixmap_to_qimage(pix))
        self.setPixmap(pixmap)
        self.setFixedSize(pixmap.size())
        self.update()

    def _raster(self, data_uri: str) -> Optional[QImage]:
        image = self._raster_cache.get(data_uri)
        if image is None:
            try:
                _, data = decode_data_uri(data_uri)
            except ValueError:
                return None
            image = QImage.fromData(data)
            if image.isNull():
                return None
            self._raster_cache[data_uri] = image
        return image

    def _box(self, element: AnnotationElement) -> QRectF:
        if self._drag is not None and self._drag[0] == element.id and self._drag_box is not None:
            return self._drag_box
        x0, y0, x1, y1 = element.bounds(self.session.config.text_box_size)
        return QRectF(x0, y0, x1 - x0, y1 - y0)

    def paintEvent(self, event):
        super().paintEvent(event)
        if self.session.document is None:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        try:
            for element in self.session.current_page_elements():
                self._paint_element(painter, element)

            selected = self.session.elements.selected_element
            if selected is not None and selected.page_number == self.session.page_number:
                self._paint_selection(painter, selected)

            canvas = self.session.drawing_canvas
            if canvas is not None:
                self._paint_strokes(painter, canvas)
        finally:
            painter.end()

    def _paint_element(self, painter: QPainter, element: AnnotationElement):
        box = self._box(element)
        if element.kind == ElementKind.TEXT:
            font = QFont(QT_FONT_FAMILIES.get(element.font_family, "Helvetica"))
            font.setPixelSize(max(1, int(element.font_size)))
            font.setBold(element.bold)
            painter.setFont(font)
            painter.setPen(QColor(element.color_hex or "#000000"))
            painter.drawText(box, Qt.AlignLeft | Qt.AlignTop, element.text or "")
        elif element.kind in (ElementKind.IMAGE, ElementKind.DRAWING):
            image = self._raster(element.raster_data_uri) if element.raster_data_uri else None
            if image is not None:
                painter.drawImage(box, image)
        elif element.kind == ElementKind.SHAPE:
            painter.setPen(QPen(QColor(element.color_hex or "#000000"), 2))
            painter.setBrush(Qt.NoBrush)
            if element.shape_kind == ShapeKind.CIRCLE:
                painter.drawEllipse(box)
            else:
                painter.drawRect(box)
        elif element.kind == ElementKind.REDACTION:
            painter.fillRect(box, Qt.white)

    def _handle_rects(self, element: AnnotationElement) -> Tuple[QRectF, Optional[QRectF]]:
        """Delete handle at the top-right, resize handle at the bottom-right."""
        box = self._box(element)
        half = HANDLE_SIZE / 2
        delete = QRectF(box.right() - half, box.top() - half, HANDLE_SIZE, HANDLE_SIZE)
        resize = None
        if element.kind in RESIZABLE_KINDS:
            resize = QRectF(box.right() - half, box.bottom() - half, HANDLE_SIZE, HANDLE_SIZE)
        return delete, resize

    def _paint_selection(self, painter: QPainter, element: AnnotationElement):
        painter.setPen(QPen(SELECTION_COLOR, 2, Qt.DashLine))
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(self._box(element))

        delete, resize = self._handle_rects(element)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(QColor(239, 68, 68)))
        painter.drawEllipse(delete)
        painter.setPen(QPen(Qt.white, 2))
        inset = delete.adjusted(3, 3, -3, -3)
        painter.drawLine(inset.topLeft(), inset.bottomRight())
        painter.drawLine(inset.topRight(), inset.bottomLeft())

        if resize is not None:
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(SELECTION_COLOR))
            painter.drawRect(resize)

    def _paint_strokes(self, painter: QPainter, canvas):
        painter.setPen(QPen(Qt.black, canvas.stroke_width, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin))
        painter.setBrush(Qt.NoBrush)
        for stroke in canvas.strokes:
            if len(stroke) < 2:
                continue
            path = QPainterPath(QPointF(*stroke[0]))
            for point in stroke[1:]:
                path.lineTo(QPointF(*point))
            painter.drawPath(path)

    # ===== Mode changes =====

    def _on_mode_changed(self, mode):
        if isinstance(mode, PlacingText) and mode.position is not None:
            self._open_text_entry(*mode.position)
        elif self.text_entry.isVisible():
            self.text_entry.close_entry()

        if isinstance(mode, PlacingText):
            self.setCursor(Qt.IBeamCursor)
        elif isinstance(mode, Drawing):
            self.setCursor(Qt.CrossCursor)
        else:
            self.setCursor(Qt.ArrowCursor)
        self.update()

    def _open_text_entry(self, x: float, y: float):
        width, height = self.session.config.text_box_size
        style = self.session.text_style
        self.text_entry.open_at(x, y, width, height, style.font_size, style.color_hex)

    def _on_text_confirmed(self, text: str):
        self.controller.confirm_text(text)

    def _on_text_cancelled(self):
        self.controller.cancel_text()

    def _on_text_focus_lost(self, text: str):
        self.controller.text_focus_lost(text)

    # ===== Mouse =====

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton or self.session.document is None:
            return super().mousePressEvent(event)

        x, y = event.localPos().x(), event.localPos().y()
        tool = self.session.tool_mode

        if tool == ToolMode.TEXT:
            self.controller.place_text(x, y)
            return

        if tool == ToolMode.DRAWING:
            self._stroking = self.controller.begin_stroke(x, y)
            return

        point = QPointF(x, y)
        selected = self.session.elements.selected_element
        if selected is not None and selected.page_number == self.session.page_number:
            delete, resize = self._handle_rects(selected)
            if delete.contains(point):
                self.controller.delete_element(selected.id)
                return
            if resize is not None and resize.contains(point):
                self._start_drag(selected, "resize", point)
                return

        element = self.session.element_at(x, y)
        if element is None:
            self.controller.select_element(None)
            return
        self.controller.select_element(element.id)
        self._start_drag(element, "move", point)

    def _start_drag(self, element: AnnotationElement, kind: str, point: QPointF):
        box = self._box(element)
        self._drag = (element.id, kind, point, box)
        self._drag_box = QRectF(box)

    def mouseMoveEvent(self, event: QMouseEvent):
        x, y = event.localPos().x(), event.localPos().y()

        if self._stroking:
            if self.controller.extend_stroke(x, y) is not None:
                self.update()
            return

        if self._drag is None or not (event.buttons() & Qt.LeftButton):
            return

        _, kind, start, origin = self._drag
        dx, dy = x - start.x(), y - start.y()
        geometry = self.session.geometry
        if kind == "move":
            nx, ny = geometry.clamp_position(origin.x() + dx, origin.y() + dy,
                                             origin.width(), origin.height())
            self._drag_box = QRectF(nx, ny, origin.width(), origin.height())
        else:
            minimum = self.session.config.min_element_size
            width = min(max(origin.width() + dx, minimum), geometry.rendered_width - origin.x())
            height = min(max(origin.height() + dy, minimum), geometry.rendered_height - origin.y())
            self._drag_box = QRectF(origin.x(), origin.y(), width, height)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)

        if self._stroking:
            self._end_stroke()
            return

        if self._drag is not None:
            self._commit_drag()

    def leaveEvent(self, event):
        if self._stroking:
            self._end_stroke()
        super().leaveEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        element = self.session.element_at(event.localPos().x(), event.localPos().y())
        if element is not None and element.kind == ElementKind.TEXT:
            self.element_activated.emit(element.id)
        super().mouseDoubleClickEvent(event)

    def _end_stroke(self):
        self._stroking = False
        self.controller.end_stroke()
        self.update()

    def _commit_drag(self):
        element_id, kind, _, origin = self._drag
        box = self._drag_box
        self._drag = None
        self._drag_box = None
        if box is None or box == origin:
            self.update()
            return
        # One history entry per drag
        if kind == "move":
            self.controller.move_element(element_id, box.x(), box.y())
        else:
            self.controller.resize_element(element_id, box.x(), box.y(),
                                           box.width(), box.height())

    def keyPressEvent(self, event):
        selected_id = self.session.selected_id
        if selected_id is not None and event.key() in (Qt.Key_Delete, Qt.Key_Backspace):
            self.controller.delete_element(selected_id)
            return
        if event.key() == Qt.Key_Escape and selected_id is not None:
            self.controller.select_element(None)
            return
        super().keyPressEvent(event)
