from PyQt5.QtCore import pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QCheckBox, QColorDialog, QComboBox, QFrame, QHBoxLayout, QLabel,
    QSpinBox, QToolButton
)

from pdflyer.core.editor import ToolMode
from pdflyer.core.elements import FontFamily, ShapeKind


class EditToolbar(QFrame):
    """Tool buttons for adding elements, plus the style used for new text."""

    tool_requested = pyqtSignal(object)  # ToolMode
    image_requested = pyqtSignal()
    shape_requested = pyqtSignal(object)  # ShapeKind
    redaction_requested = pyqtSignal()
    finish_drawing_requested = pyqtSignal(bool)  # save as signature
    signatures_requested = pyqtSignal()
    text_style_changed = pyqtSignal(dict)

    def __init__(self, palette=("#000000",), default_font_size=14, parent=None):
        super().__init__(parent)
        self.setObjectName("EditToolbar")
        self.palette = palette
        self.current_color = palette[0]
        self.default_font_size = default_font_size

        self.setup_ui()
        self.set_tool_mode(ToolMode.NONE)

    def _button(self, text, tooltip, checkable=False):
        btn = QToolButton(self)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.setCheckable(checkable)
        btn.setFixedHeight(32)
        self.layout().addWidget(btn)
        return btn

    def setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(6)

        self.text_button = self._button("Text", "Click on the page to add text", checkable=True)
        self.text_button.clicked.connect(lambda: self.tool_requested.emit(ToolMode.TEXT))

        self.image_button = self._button("Image", "Insert an image")
        self.image_button.clicked.connect(self.image_requested)

        self.rect_button = self._button("Rectangle", "Insert a rectangle")
        self.rect_button.clicked.connect(lambda: self.shape_requested.emit(ShapeKind.RECTANGLE))

        self.circle_button = self._button("Circle", "Insert a circle")
        self.circle_button.clicked.connect(lambda: self.shape_requested.emit(ShapeKind.CIRCLE))

        self.redact_button = self._button("Whiteout", "Cover content with a white box")
        self.redact_button.clicked.connect(self.redaction_requested)

        self.draw_button = self._button("Draw", "Draw freehand on the page", checkable=True)
        self.draw_button.clicked.connect(lambda: self.tool_requested.emit(ToolMode.DRAWING))

        self.finish_button = self._button("Finish Drawing", "Add the drawing to the page")
        self.finish_button.clicked.connect(lambda: self.finish_drawing_requested.emit(False))

        self.save_sig_button = self._button("Save as Signature", "Keep the drawing as a signature")
        self.save_sig_button.clicked.connect(lambda: self.finish_drawing_requested.emit(True))

        self.signature_button = self._button("Signatures", "Manage saved signatures")
        self.signature_button.clicked.connect(self.signatures_requested)

        layout.addSpacing(12)

        # Text style
        layout.addWidget(QLabel("Size:", self))
        self.font_size_spin = QSpinBox(self)
        self.font_size_spin.setRange(8, 72)
        self.font_size_spin.setValue(int(self.default_font_size))
        self.font_size_spin.valueChanged.connect(
            lambda value: self.text_style_changed.emit({"font_size": float(value)}))
        layout.addWidget(self.font_size_spin)

        self.font_combo = QComboBox(self)
        for family in FontFamily:
            self.font_combo.addItem(family.value, family)
        self.font_combo.currentIndexChanged.connect(
            lambda index: self.text_style_changed.emit({"font_family": self.font_combo.itemData(index)}))
        layout.addWidget(self.font_combo)

        self.bold_check = QCheckBox("Bold", self)
        self.bold_check.toggled.connect(
            lambda checked: self.text_style_changed.emit({"bold": checked}))
        layout.addWidget(self.bold_check)

        self.color_buttons = []
        for color_hex in self.palette:
            btn = QToolButton(self)
            btn.setToolTip(color_hex)
            btn.setFixedSize(22, 22)
            btn.clicked.connect(lambda _, c=color_hex: self._set_color(c))
            layout.addWidget(btn)
            self.color_buttons.append((color_hex, btn))

        self.custom_color_button = QToolButton(self)
        self.custom_color_button.setText("...")
        self.custom_color_button.setToolTip("Choose color")
        self.custom_color_button.clicked.connect(self._choose_color)
        layout.addWidget(self.custom_color_button)
        self._update_color_buttons()

        layout.addStretch()

    def _set_color(self, color_hex):
        self.current_color = color_hex
        self._update_color_buttons()
        self.text_style_changed.emit({"color_hex": color_hex})

    def _choose_color(self):
        """Open color picker dialog."""
        color = QColorDialog.getColor(QColor(self.current_color), self, "Choose Text Color")
        if color.isValid():
            self._set_color(color.name().upper())

    def _update_color_buttons(self):
        for color_hex, btn in self.color_buttons:
            border = "#3b82f6" if color_hex == self.current_color else "#555555"
            btn.setStyleSheet(
                f"QToolButton {{ background-color: {color_hex}; border: 2px solid {border};"
                " border-radius: 4px; }"
            )

    def show_text_style(self, font_size, color_hex, font_family, bold):
        """Show a text element's style without emitting change signals."""
        widgets = (self.font_size_spin, self.font_combo, self.bold_check)
        for widget in widgets:
            widget.blockSignals(True)
        try:
            self.font_size_spin.setValue(int(font_size))
            for index in range(self.font_combo.count()):
                if self.font_combo.itemData(index) == font_family:
                    self.font_combo.setCurrentIndex(index)
                    break
            self.bold_check.setChecked(bold)
        finally:
            for widget in widgets:
                widget.blockSignals(False)
        if color_hex:
            self.current_color = color_hex
            self._update_color_buttons()

    def set_tool_mode(self, tool):
        """Reflect the active tool in the checkable buttons."""
        self.text_button.setChecked(tool == ToolMode.TEXT)
        self.draw_button.setChecked(tool == ToolMode.DRAWING)
        drawing = tool == ToolMode.DRAWING
        self.finish_button.setVisible(drawing)
        self.save_sig_button.setVisible(drawing)

    def set_document_loaded(self, loaded):
        for btn in (self.text_button, self.image_button, self.rect_button,
                    self.circle_button, self.redact_button, self.draw_button,
                    self.finish_button, self.save_sig_button):
            btn.setEnabled(loaded)
