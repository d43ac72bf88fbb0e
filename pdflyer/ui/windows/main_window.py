import logging
import os

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QIntValidator, QKeySequence
from PyQt5.QtWidgets import (
    QFileDialog, QFrame, QHBoxLayout, QInputDialog, QLabel, QLineEdit,
    QMainWindow, QMessageBox, QProgressDialog, QScrollArea, QShortcut,
    QSizePolicy, QSpacerItem, QToolButton, QVBoxLayout, QWidget
)

from pdflyer.controllers import ERROR, EditorController
from pdflyer.core.editor import ToolMode, tool_mode
from pdflyer.core.elements import ElementKind
from pdflyer.ui.dialogs.signature_dialog import SignatureDialog
from pdflyer.ui.toolbars.edit_toolbar import EditToolbar
from pdflyer.ui.widgets.page_view import PageView

logger = logging.getLogger(__name__)

NOTIFICATION_TIMEOUT_MS = 3000


class MainWindow(QMainWindow):
    def __init__(self, controller: EditorController, file_path=None):
        super().__init__()
        self.controller = controller
        self.session = controller.session
        self.config = self.session.config

        self.setWindowTitle("Pdflyer")
        self.has_unsaved_changes = False
        self.progress_dialog = None

        self.setup_ui()
        self._connect_controller()
        self._update_document_state(False)

        if file_path:
            self.controller.open_file(file_path)

    def _tool_button(self, text, tooltip, slot):
        btn = QToolButton(self.top_frame)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.setFixedHeight(32)
        btn.clicked.connect(slot)
        self.top_layout.addWidget(btn)
        return btn

    def setup_ui(self):
        # TOP TOOLBAR
        self.top_frame = QFrame()
        self.top_frame.setObjectName("TopFrame")
        self.top_layout = QHBoxLayout(self.top_frame)
        self.top_layout.setContentsMargins(10, 8, 10, 8)
        self.top_layout.setSpacing(8)

        self.open_button = self._tool_button("Open", "Open PDF (Ctrl+O)", self.open_pdf)
        self.close_button = self._tool_button("Close", "Close PDF (Ctrl+W)", self.close_pdf)

        self.top_layout.addSpacerItem(QSpacerItem(15, 20, QSizePolicy.Fixed, QSizePolicy.Minimum))

        self.file_name_label = QLabel("No PDF Loaded", self.top_frame)
        self.file_name_label.setStyleSheet("font-weight: bold; color: #8899AA;")
        self.top_layout.addWidget(self.file_name_label)

        self.top_layout.addSpacerItem(QSpacerItem(40, 20, QSizePolicy.Expanding, QSizePolicy.Minimum))

        # Page controls
        self.prev_button = self._tool_button("<", "Previous page",
                                             lambda: self.controller.go_to_page(self.session.page_number - 1))
        self.page_edit = QLineEdit("1", self.top_frame)
        self.page_edit.setFixedWidth(50)
        self.page_edit.setAlignment(Qt.AlignCenter)
        self.page_edit.setValidator(QIntValidator(1, 99999, self))
        self.page_edit.returnPressed.connect(self.page_number_changed)
        self.top_layout.addWidget(self.page_edit)
        self.total_page_label = QLabel("/ 0", self.top_frame)
        self.top_layout.addWidget(self.total_page_label)
        self.next_button = self._tool_button(">", "Next page",
                                             lambda: self.controller.go_to_page(self.session.page_number + 1))

        self.top_layout.addSpacerItem(QSpacerItem(40, 20, QSizePolicy.Expanding, QSizePolicy.Minimum))

        self.undo_button = self._tool_button("Undo", "Undo (Ctrl+Z)", self.controller.undo)
        self.redo_button = self._tool_button("Redo", "Redo (Ctrl+Y)", self.controller.redo)
        self.save_button = self._tool_button("Export", "Export edited PDF (Ctrl+S)",
                                             self.save_edited_pdf)

        # EDIT TOOLBAR
        self.edit_toolbar = EditToolbar(self.config.text_palette, self.config.default_font_size)
        self.edit_toolbar.tool_requested.connect(self.controller.toggle_tool)
        self.edit_toolbar.image_requested.connect(self.insert_image)
        self.edit_toolbar.shape_requested.connect(self.controller.add_shape)
        self.edit_toolbar.redaction_requested.connect(self.controller.add_redaction)
        self.edit_toolbar.finish_drawing_requested.connect(self.controller.finish_drawing)
        self.edit_toolbar.signatures_requested.connect(self.show_signatures)
        self.edit_toolbar.text_style_changed.connect(self.controller.apply_text_style)

        # PAGE DISPLAY AREA
        self.page_view = PageView(self.controller)
        self.page_view.element_activated.connect(self.edit_text_element)
        self.page_container = QWidget()
        container_layout = QVBoxLayout(self.page_container)
        container_layout.addWidget(self.page_view, 0, Qt.AlignHCenter | Qt.AlignTop)
        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setWidget(self.page_container)

        main_layout = QVBoxLayout()
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(self.top_frame)
        main_layout.addWidget(self.edit_toolbar)
        main_layout.addWidget(self.scroll_area)

        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)
        self.resize(int(self.config.display_width) + 120, 900)

        QShortcut(QKeySequence.Open, self, activated=self.open_pdf)
        QShortcut(QKeySequence.Close, self, activated=self.close_pdf)
        QShortcut(QKeySequence.Save, self, activated=self.save_edited_pdf)
        QShortcut(QKeySequence.Undo, self, activated=self.controller.undo)
        QShortcut(QKeySequence("Ctrl+Y"), self, activated=self.controller.redo)
        QShortcut(QKeySequence("Ctrl+Shift+Z"), self, activated=self.controller.redo)

    def _connect_controller(self):
        self.controller.notification.connect(self.show_notification)
        self.controller.document_loaded.connect(self._on_document_loaded)
        self.controller.page_changed.connect(self._on_page_changed)
        self.controller.elements_changed.connect(self._on_elements_changed)
        self.controller.mode_changed.connect(self._on_mode_changed)
        self.controller.export_started.connect(self._on_export_started)
        self.controller.export_progress.connect(self._on_export_progress)
        self.controller.export_finished.connect(self._on_export_finished)

    # ===== Notifications and state =====

    def show_notification(self, level, message):
        if level == ERROR:
            self.statusBar().setStyleSheet("color: #ff6b6b;")
        else:
            self.statusBar().setStyleSheet("")
        self.statusBar().showMessage(message, NOTIFICATION_TIMEOUT_MS)

    def _update_document_state(self, loaded):
        self.edit_toolbar.set_document_loaded(loaded)
        for widget in (self.close_button, self.prev_button, self.next_button, self.page_edit):
            widget.setEnabled(loaded)
        self._update_undo_redo_buttons()

    def _update_undo_redo_buttons(self):
        self.undo_button.setEnabled(self.session.elements.can_undo())
        self.redo_button.setEnabled(self.session.elements.can_redo())
        self.save_button.setEnabled(self.controller.can_export())

    def _on_document_loaded(self, page_count):
        self.file_name_label.setText(self.session.document.name)
        self.total_page_label.setText(f"/ {page_count}")
        self.has_unsaved_changes = False
        self._update_document_state(True)

    def _on_page_changed(self, page_number):
        self.page_edit.setText(str(page_number))
        self.prev_button.setEnabled(page_number > 1)
        self.next_button.setEnabled(page_number < self.session.page_count)

    def _on_mode_changed(self, mode):
        self.edit_toolbar.set_tool_mode(tool_mode(mode))
        element = self.session.elements.selected_element
        if element is not None and element.kind == ElementKind.TEXT:
            self.edit_toolbar.show_text_style(element.font_size, element.color_hex,
                                              element.font_family, element.bold)

    def _on_elements_changed(self):
        self.has_unsaved_changes = self.session.elements.get_element_count() > 0
        self._update_undo_redo_buttons()

    def page_number_changed(self):
        text = self.page_edit.text()
        if text.isdigit():
            self.controller.go_to_page(int(text))
        else:
            self.page_edit.setText(str(self.session.page_number))

    # ===== File actions =====

    def open_pdf(self):
        if not self._confirm_discard():
            return
        file_path, _ = QFileDialog.getOpenFileName(self, "Open PDF", "", "PDF Files (*.pdf)")
        if file_path:
            self.controller.open_file(file_path)

    def close_pdf(self):
        if not self._confirm_discard():
            return
        self.session.close_document()
        self.page_view.render_page()
        self.file_name_label.setText("No PDF Loaded")
        self.total_page_label.setText("/ 0")
        self.page_edit.setText("1")
        self.has_unsaved_changes = False
        self._update_document_state(False)

    def _confirm_discard(self):
        if not self.has_unsaved_changes:
            return True
        reply = QMessageBox.question(
            self,
            "Unsaved Changes",
            "Your edits have not been exported. Discard them?",
            QMessageBox.Discard | QMessageBox.Cancel,
            QMessageBox.Cancel
        )
        return reply == QMessageBox.Discard

    def closeEvent(self, event):
        """Handle window close event - check for unsaved changes."""
        if self.controller.export_worker is not None:
            event.ignore()
            return
        if self._confirm_discard():
            event.accept()
        else:
            event.ignore()

    # ===== Editing actions =====

    def insert_image(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Insert Image", "", "Images (*.png *.jpg *.jpeg)"
        )
        if file_path:
            self.controller.add_image_file(file_path)

    def show_signatures(self):
        dialog = SignatureDialog(self.controller, self)
        dialog.exec_()

    def edit_text_element(self, element_id):
        element = self.session.elements.get_element(element_id)
        if element is None or element.kind != ElementKind.TEXT:
            return
        text, ok = QInputDialog.getText(self, "Edit Text", "Text:", text=element.text or "")
        if ok and text.strip():
            self.controller.update_element(element_id, text=text)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape and self.session.tool_mode != ToolMode.NONE:
            self.controller.select_tool(ToolMode.NONE)
            event.accept()
            return
        super().keyPressEvent(event)

    # ===== Export =====

    def save_edited_pdf(self):
        """Flatten the document and save it using a background thread."""
        if self.session.document is None:
            QMessageBox.warning(self, "No PDF", "No PDF document is currently loaded.")
            return False
        if self.session.elements.get_element_count() == 0:
            QMessageBox.information(self, "No Elements", "There are no elements to save.")
            return False

        default_dir = os.path.expanduser("~")
        default_path = os.path.join(default_dir, self.config.export_file_name)
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Edited PDF",
            default_path,
            "PDF Files (*.pdf)"
        )
        if not output_path:
            return False
        return self.controller.start_export(output_path)

    def _on_export_started(self):
        self.progress_dialog = QProgressDialog("Rendering pages...", None, 0, 100, self)
        self.progress_dialog.setWindowTitle("Saving PDF")
        self.progress_dialog.setWindowModality(Qt.WindowModal)
        self.progress_dialog.setMinimumDuration(0)
        self.progress_dialog.setCancelButton(None)  # No cancel button - operation must complete
        self.progress_dialog.setAutoClose(False)
        self.progress_dialog.setAutoReset(False)
        self.progress_dialog.show()
        self.save_button.setEnabled(False)

    def _on_export_progress(self, current, total):
        if self.progress_dialog is not None and total > 0:
            self.progress_dialog.setValue(int((current / total) * 100))
            self.progress_dialog.setLabelText(f"Processing pages: {current}/{total}")

    def _on_export_finished(self, success, message):
        if self.progress_dialog is not None:
            self.progress_dialog.close()
            self.progress_dialog = None

        if success:
            self.has_unsaved_changes = False
            QMessageBox.information(self, "Success", message)
        else:
            QMessageBox.critical(self, "Save Failed", message)
        self._update_undo_redo_buttons()
