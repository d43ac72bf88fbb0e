"""
Signature manager: draw, upload, reuse and delete saved signatures.
"""
import mimetypes
from typing import Optional

from PyQt5.QtCore import QPointF, QSize, Qt
from PyQt5.QtGui import QIcon, QImage, QMouseEvent, QPainter, QPainterPath, QPen, QPixmap
from PyQt5.QtWidgets import (
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from pdflyer.controllers import EditorController
from pdflyer.core.imaging import decode_data_uri
from pdflyer.core.imaging.strokes import StrokeCanvas


class SignaturePad(QWidget):
    """Fixed-size white pad that records strokes into a :class:`StrokeCanvas`."""

    def __init__(self, canvas: StrokeCanvas, parent=None):
        super().__init__(parent)
        self.canvas = canvas
        self.setFixedSize(int(canvas.width), int(canvas.height))
        self.setCursor(Qt.CrossCursor)

    def clear(self):
        self.canvas.clear()
        self.update()

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            self.canvas.begin_stroke(event.localPos().x(), event.localPos().y())

    def mouseMoveEvent(self, event: QMouseEvent):
        if self.canvas.add_point(event.localPos().x(), event.localPos().y()) is not None:
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):
        self.canvas.end_stroke()

    def leaveEvent(self, event):
        self.canvas.end_stroke()
        super().leaveEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), Qt.white)
        painter.setPen(QPen(Qt.lightGray, 1, Qt.DashLine))
        painter.drawRect(self.rect().adjusted(0, 0, -1, -1))

        painter.setPen(QPen(Qt.black, self.canvas.stroke_width, Qt.SolidLine,
                            Qt.RoundCap, Qt.RoundJoin))
        for stroke in self.canvas.strokes:
            if len(stroke) < 2:
                continue
            path = QPainterPath(QPointF(*stroke[0]))
            for point in stroke[1:]:
                path.lineTo(QPointF(*point))
            painter.drawPath(path)
        painter.end()


class SignatureDialog(QDialog):
    """Dialog listing saved signatures next to a drawing pad."""

    def __init__(self, controller: EditorController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.setWindowTitle("Signatures")
        self.setModal(True)
        self.setAttribute(Qt.WA_DeleteOnClose)

        self.pad = SignaturePad(controller.session.new_signature_canvas(), self)

        save_btn = QPushButton("Save Signature")
        save_btn.clicked.connect(self.save_drawing)
        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.pad.clear)
        upload_btn = QPushButton("Upload Image...")
        upload_btn.clicked.connect(self.upload_image)

        pad_buttons = QHBoxLayout()
        pad_buttons.addWidget(save_btn)
        pad_buttons.addWidget(clear_btn)
        pad_buttons.addStretch()
        pad_buttons.addWidget(upload_btn)

        self.signature_list = QListWidget()
        self.signature_list.setViewMode(QListWidget.IconMode)
        self.signature_list.setIconSize(QSize(150, 60))
        self.signature_list.setResizeMode(QListWidget.Adjust)
        self.signature_list.itemDoubleClicked.connect(lambda _: self.use_selected())

        self.use_btn = QPushButton("Use on Page")
        self.use_btn.clicked.connect(self.use_selected)
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(self.delete_selected)

        list_buttons = QHBoxLayout()
        list_buttons.addStretch()
        list_buttons.addWidget(self.use_btn)
        list_buttons.addWidget(self.delete_btn)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Draw your signature:"))
        layout.addWidget(self.pad)
        layout.addLayout(pad_buttons)
        layout.addWidget(QLabel("Saved signatures:"))
        layout.addWidget(self.signature_list)
        layout.addLayout(list_buttons)

        controller.signatures_changed.connect(self.refresh)
        self.signature_list.currentRowChanged.connect(lambda _: self._update_buttons())
        self.refresh()

    def refresh(self):
        self.signature_list.clear()
        for index, record in enumerate(self.controller.session.signature_store.signatures):
            item = QListWidgetItem(f"Signature {index + 1}")
            icon = self._icon_for(record.raster_data_uri)
            if icon is not None:
                item.setIcon(icon)
            self.signature_list.addItem(item)
        self._update_buttons()

    @staticmethod
    def _icon_for(data_uri: str) -> Optional[QIcon]:
        try:
            _, data = decode_data_uri(data_uri)
        except ValueError:
            return None
        image = QImage.fromData(data)
        if image.isNull():
            return None
        return QIcon(QPixmap.fromImage(image))

    def _update_buttons(self):
        has_selection = self.signature_list.currentRow() >= 0
        self.use_btn.setEnabled(has_selection and self.controller.session.document is not None)
        self.delete_btn.setEnabled(has_selection)

    def save_drawing(self):
        if self.controller.save_signature_drawing(self.pad.canvas):
            self.pad.clear()

    def upload_image(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Upload Signature", "", "Images (*.png *.jpg *.jpeg)"
        )
        if not file_path:
            return
        media_type, _ = mimetypes.guess_type(file_path)
        self.controller.import_signature_file(file_path, media_type)

    def use_selected(self):
        row = self.signature_list.currentRow()
        if row < 0:
            return
        if self.controller.apply_signature(row) is not None:
            self.accept()

    def delete_selected(self):
        row = self.signature_list.currentRow()
        if row >= 0:
            self.controller.delete_signature(row)
