"""
Controller between the editor widgets and the editing session.
"""
import logging
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from pdflyer.core.editor import EditorSession, ToolMode
from pdflyer.core.elements import AnnotationElement, ShapeKind
from pdflyer.core.errors import EditorError
from pdflyer.core.export import ExportWorker
from pdflyer.core.imaging.strokes import StrokeCanvas

logger = logging.getLogger(__name__)

INFO = "info"
ERROR = "error"


class EditorController(QObject):
    """
    Runs user actions against the session and reports the outcome.

    Errors from the core never escape: they are logged and turned into a
    ``notification`` the window shows as a transient message. The session
    is unchanged after a failed action, so the user can retry.
    """

    # Signals
    document_loaded = pyqtSignal(int)  # page count
    page_changed = pyqtSignal(int)  # 1-based page number
    elements_changed = pyqtSignal()
    mode_changed = pyqtSignal(object)  # EditorMode
    signatures_changed = pyqtSignal()
    notification = pyqtSignal(str, str)  # level, message

    export_started = pyqtSignal()
    export_progress = pyqtSignal(int, int)  # current, total pages
    export_finished = pyqtSignal(bool, str)  # success, message

    def __init__(self, session: EditorSession, parent: QObject = None):
        super().__init__(parent)
        self.session = session
        self.export_worker: Optional[ExportWorker] = None

    def _notify_error(self, error: EditorError) -> None:
        logger.warning("%s: %s", type(error).__name__, error.message)
        self.notification.emit(ERROR, error.message)

    def _notify_storage_error(self, error: OSError) -> None:
        logger.error("Saving signatures failed: %s", error)
        self.notification.emit(ERROR, f"Signatures could not be saved: {error}")

    def _notify(self, message: str) -> None:
        self.notification.emit(INFO, message)

    def _emit_mode(self) -> None:
        self.mode_changed.emit(self.session.mode)

    # Document -----------------------------------------------------------

    def open_file(self, file_path: str) -> bool:
        try:
            document = self.session.open_file(file_path)
        except EditorError as e:
            self._notify_error(e)
            return False
        self._after_load(document.page_count)
        return True

    def open_bytes(self, data: bytes, media_type: Optional[str], name: str) -> bool:
        try:
            document = self.session.open_bytes(data, media_type, name)
        except EditorError as e:
            self._notify_error(e)
            return False
        self._after_load(document.page_count)
        return True

    def _after_load(self, page_count: int) -> None:
        self.document_loaded.emit(page_count)
        self.page_changed.emit(self.session.page_number)
        self.elements_changed.emit()
        self._emit_mode()

    def go_to_page(self, page_number: int) -> None:
        try:
            self.session.go_to_page(page_number)
        except EditorError as e:
            self._notify_error(e)
            return
        self.page_changed.emit(self.session.page_number)
        self._emit_mode()

    # Tools ----------------------------------------------------------------

    def select_tool(self, tool: ToolMode) -> None:
        try:
            self.session.select_tool(tool)
        except EditorError as e:
            self._notify_error(e)
            return
        if tool == ToolMode.TEXT:
            self._notify("Click anywhere on the PDF to add text")
        elif tool == ToolMode.DRAWING:
            self._notify("Draw on the page, then press Finish Drawing")
        self._emit_mode()

    def toggle_tool(self, tool: ToolMode) -> None:
        """Arm a tool, or disarm it when it is already active."""
        if self.session.tool_mode == tool:
            self.select_tool(ToolMode.NONE)
        else:
            self.select_tool(tool)

    def place_text(self, x: float, y: float) -> bool:
        placed = self.session.place_text(x, y)
        if placed:
            self._emit_mode()
        return placed

    def confirm_text(self, text: str) -> Optional[AnnotationElement]:
        element = self.session.confirm_text(text)
        if element is not None:
            self.elements_changed.emit()
            self._emit_mode()
            self._notify("Text added")
        return element

    def cancel_text(self) -> None:
        self.session.cancel_text()
        self._emit_mode()

    def text_focus_lost(self, text: str) -> None:
        if text.strip():
            self.confirm_text(text)
        else:
            self.cancel_text()

    def add_image_file(self, file_path: str) -> Optional[AnnotationElement]:
        return self._insert(lambda: self.session.add_image_file(file_path), "Image added")

    def add_shape(self, shape_kind: ShapeKind) -> Optional[AnnotationElement]:
        return self._insert(lambda: self.session.add_shape(shape_kind), "Shape added")

    def add_redaction(self) -> Optional[AnnotationElement]:
        return self._insert(self.session.add_redaction, "Whiteout added")

    def apply_signature(self, index: int) -> Optional[AnnotationElement]:
        return self._insert(lambda: self.session.apply_signature(index), "Signature added")

    def _insert(self, action, message: str) -> Optional[AnnotationElement]:
        try:
            element = action()
        except EditorError as e:
            self._notify_error(e)
            return None
        except OSError as e:
            logger.error("Reading file failed: %s", e)
            self.notification.emit(ERROR, f"The file could not be read: {e}")
            return None
        except IndexError:
            self.notification.emit(ERROR, "That signature no longer exists.")
            return None
        self.elements_changed.emit()
        self._emit_mode()
        self._notify(message)
        return element

    # Drawing --------------------------------------------------------------

    def begin_stroke(self, x: float, y: float) -> bool:
        return self.session.begin_stroke(x, y)

    def extend_stroke(self, x: float, y: float):
        return self.session.extend_stroke(x, y)

    def end_stroke(self) -> None:
        self.session.end_stroke()

    def finish_drawing(self, save_as_signature: bool = False) -> None:
        try:
            self.session.finish_drawing(save_as_signature)
        except EditorError as e:
            self._notify_error(e)
            self._emit_mode()
            return
        except OSError as e:
            self._notify_storage_error(e)
            return
        self._emit_mode()
        if save_as_signature:
            self.signatures_changed.emit()
            self._notify("Signature saved successfully")
        else:
            self.elements_changed.emit()
            self._notify("Drawing added")

    # Selection ------------------------------------------------------------

    def select_element(self, element_id: Optional[str]) -> bool:
        changed = self.session.select_element(element_id)
        if changed:
            self._emit_mode()
        return changed

    def move_element(self, element_id: str, x: float, y: float) -> None:
        if self.session.move_element(element_id, x, y):
            self.elements_changed.emit()

    def resize_element(self, element_id: str, x: float, y: float,
                       width: float, height: float) -> None:
        if self.session.resize_element(element_id, x, y, width, height):
            self.elements_changed.emit()

    def update_element(self, element_id: str, **changes) -> None:
        if self.session.update_element(element_id, **changes):
            self.elements_changed.emit()

    def apply_text_style(self, changes: dict) -> Optional[AnnotationElement]:
        """Set the style for new text and restyle the selected text element."""
        element = self.session.apply_text_style(**changes)
        if element is not None:
            self.elements_changed.emit()
        return element

    def delete_element(self, element_id: str) -> None:
        if self.session.delete_element(element_id):
            self.elements_changed.emit()
            self._emit_mode()

    def undo(self) -> bool:
        if self.session.undo():
            self.elements_changed.emit()
            self._emit_mode()
            return True
        return False

    def redo(self) -> bool:
        if self.session.redo():
            self.elements_changed.emit()
            self._emit_mode()
            return True
        return False

    # Signatures -----------------------------------------------------------

    def save_signature_drawing(self, canvas: StrokeCanvas) -> bool:
        try:
            self.session.save_signature_drawing(canvas)
        except EditorError as e:
            self._notify_error(e)
            return False
        except OSError as e:
            self._notify_storage_error(e)
            return False
        self.signatures_changed.emit()
        self._notify("Signature saved successfully")
        return True

    def import_signature_file(self, file_path: str, media_type: Optional[str]) -> bool:
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.error("Reading %s failed: %s", file_path, e)
            self.notification.emit(ERROR, f"The file could not be read: {e}")
            return False
        try:
            self.session.import_signature(data, media_type)
        except EditorError as e:
            self._notify_error(e)
            return False
        except OSError as e:
            self._notify_storage_error(e)
            return False
        self.signatures_changed.emit()
        self._notify("Signature uploaded and processed")
        return True

    def delete_signature(self, index: int) -> None:
        try:
            self.session.delete_signature(index)
        except IndexError:
            return
        except OSError as e:
            self._notify_storage_error(e)
            return
        self.signatures_changed.emit()
        self._notify("Signature deleted")

    # Export ---------------------------------------------------------------

    def can_export(self) -> bool:
        return (self.session.document is not None
                and self.session.elements.get_element_count() > 0
                and self.export_worker is None)

    def start_export(self, output_path: str) -> bool:
        """
        Flatten the document to a file on a background thread.

        Returns:
            True if the export was started
        """
        if self.export_worker is not None:
            return False
        if self.session.document is None:
            self.notification.emit(ERROR, "No PDF document is currently loaded.")
            return False
        if self.session.elements.get_element_count() == 0:
            self.notification.emit(ERROR, "There are no elements to save.")
            return False

        self.export_worker = ExportWorker(
            self.session.document.data,
            self.session.elements.elements,
            output_path,
            self.session.config,
        )
        self.export_worker.page_progress.connect(self.export_progress)
        self.export_worker.finished.connect(self._on_export_finished)
        self.export_started.emit()
        self.export_worker.start()
        return True

    def _on_export_finished(self, success: bool, message: str) -> None:
        worker = self.export_worker
        self.export_worker = None
        if worker is not None:
            worker.wait()
            worker.deleteLater()
        self.notification.emit(INFO if success else ERROR, message)
        self.export_finished.emit(success, message)
