"""
Inline text entry shown where the user clicked with the text tool.
"""
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QFont, QKeyEvent
from PyQt5.QtWidgets import QLineEdit


class InlineTextEntry(QLineEdit):
    """
    Single-line editor floating over the page.

    Enter confirms, Escape cancels. Losing focus reports the current text
    so the owner can confirm or cancel it.
    """

    confirmed = pyqtSignal(str)
    cancelled = pyqtSignal()
    focus_lost = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setPlaceholderText("Type text...")
        self.setFrame(True)
        self.hide()
        # Suppresses focus_lost while the entry is being closed on purpose
        self._closing = False

    def open_at(self, x: float, y: float, width: float, height: float,
                font_size: float, color_hex: str) -> None:
        self._closing = False
        self.clear()
        self.setGeometry(int(x), int(y), int(width), int(height))
        font = QFont("Helvetica")
        font.setPixelSize(max(1, int(font_size)))
        self.setFont(font)
        self.setStyleSheet(
            f"QLineEdit {{ color: {color_hex}; background: rgba(255, 255, 255, 220);"
            " border: 1px dashed #3b82f6; }"
        )
        self.show()
        self.raise_()
        self.setFocus(Qt.OtherFocusReason)

    def close_entry(self) -> None:
        self._closing = True
        self.clear()
        self.hide()

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() in (Qt.Key_Return, Qt.Key_Enter) and not (event.modifiers() & Qt.ShiftModifier):
            self.confirmed.emit(self.text())
            return
        if event.key() == Qt.Key_Escape:
            self.cancelled.emit()
            return
        super().keyPressEvent(event)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        if not self._closing and self.isVisible():
            self.focus_lost.emit(self.text())
