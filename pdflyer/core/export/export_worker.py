# core/export/export_worker.py

import logging
from typing import List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from pdflyer.config import EditorConfig
from pdflyer.core.document.exporter import PDFExporter, save_to_path
from pdflyer.core.document.loader import PDF_MEDIA_TYPE, DocumentLoader
from pdflyer.core.elements.models import AnnotationElement
from pdflyer.core.errors import EditorError

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """
    Worker thread for flattening a document without freezing the UI.

    The worker opens its own copy of the source bytes so rendering in the
    UI thread never shares a document with the export. There is no
    cancellation: once started it runs to completion or failure.
    """

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, source_data: bytes, elements: List[AnnotationElement],
                 output_path: str, config: Optional[EditorConfig] = None):
        super().__init__()
        self.source_data = source_data
        self.elements = list(elements)
        self.output_path = output_path
        self.config = config or EditorConfig()
        self.result = None

    def run(self):
        """Execute the export in a background thread."""
        exporter = PDFExporter(self.config)
        exporter.progress_signal.connect(self._on_page_progress)

        document = None
        try:
            self.progress.emit("Rendering pages...")
            document = DocumentLoader(self.config).load_bytes(self.source_data, PDF_MEDIA_TYPE)
            self.result = exporter.export(document, self.elements)

            self.progress.emit("Finalizing...")
            save_to_path(self.result.data, self.output_path)
        except EditorError as e:
            logger.error("Export failed: %s", e.message)
            self.finished.emit(False, e.message)
            return
        except OSError as e:
            logger.error("Writing %s failed: %s", self.output_path, e)
            self.finished.emit(False, f"The file could not be written: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected error during export")
            self.finished.emit(False, f"Error during export: {e}")
            return
        finally:
            if document is not None:
                document.close()

        message = "Edited PDF saved successfully!"
        if self.result.skipped:
            message += f" {len(self.result.skipped)} element(s) could not be embedded."
        self.finished.emit(True, message)

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
