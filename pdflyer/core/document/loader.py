"""
PDF document loading and page rendering.
"""
import logging
import mimetypes
import os
from typing import Optional, Tuple

import fitz  # PyMuPDF

from pdflyer.config import EditorConfig
from pdflyer.core.errors import (
    DocumentLoadError,
    FileTooLarge,
    InvalidFileType,
    PageRenderError,
)
from .geometry import PageGeometry

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


class PDFDocument:
    """An opened, read-only PDF document."""

    def __init__(self, doc: fitz.Document, data: bytes, name: str):
        self.doc = doc
        self.data = data
        self.name = name

    @property
    def page_count(self) -> int:
        return self.doc.page_count

    @property
    def is_closed(self) -> bool:
        return self.doc.is_closed

    def get_page(self, page_number: int) -> fitz.Page:
        """
        Load a page.

        Args:
            page_number: 1-based page number

        Returns:
            PyMuPDF page object
        """
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} is out of range")
        return self.doc.load_page(page_number - 1)

    def get_page_size(self, page_number: int) -> Tuple[float, float]:
        """
        Get the native size of a page in points, at scale 1.

        Args:
            page_number: 1-based page number

        Returns:
            Tuple of (width, height)
        """
        rect = self.get_page(page_number).rect
        return rect.width, rect.height

    def page_geometry(self, page_number: int, target_width: float) -> PageGeometry:
        """
        Compute the display geometry of a page rendered at a fixed width.

        Native sizes can differ from page to page, so this is recomputed
        whenever the active page changes.
        """
        width, height = self.get_page_size(page_number)
        return PageGeometry.for_page(width, height, target_width)

    def render_page(self, page_number: int, scale: float,
                    alpha: bool = False) -> fitz.Pixmap:
        """
        Rasterise a page.

        Args:
            page_number: 1-based page number
            scale: Zoom factor relative to the native page size
            alpha: Whether the pixmap gets an alpha channel

        Returns:
            The rendered pixmap

        Raises:
            PageRenderError: if the page cannot be rasterised
        """
        try:
            page = self.get_page(page_number)
            return page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=alpha)
        except Exception as e:
            logger.error("Rendering page %d failed: %s", page_number, e)
            raise PageRenderError(page_number) from e

    def close(self) -> None:
        if not self.doc.is_closed:
            self.doc.close()


class DocumentLoader:
    """Validates candidate files and opens them as :class:`PDFDocument`."""

    def __init__(self, config: Optional[EditorConfig] = None):
        self.config = config or EditorConfig()

    def load_file(self, file_path: str) -> PDFDocument:
        """
        Load a PDF from disk.

        The media type is declared from the file extension.

        Raises:
            InvalidFileType, FileTooLarge, DocumentLoadError
        """
        media_type, _ = mimetypes.guess_type(file_path)
        self._check_type(media_type)
        try:
            size = os.path.getsize(file_path)
        except OSError as e:
            raise DocumentLoadError(f"Could not read {file_path}: {e}") from e
        self._check_size(size)

        with open(file_path, 'rb') as f:
            data = f.read()
        return self._open(data, os.path.basename(file_path))

    def load_bytes(self, data: bytes, media_type: Optional[str],
                   name: str = "document.pdf") -> PDFDocument:
        """
        Load a PDF from an in-memory upload.

        Args:
            data: Raw file content
            media_type: Media type declared by the caller
            name: Original file name

        Raises:
            InvalidFileType, FileTooLarge, DocumentLoadError
        """
        self._check_type(media_type)
        self._check_size(len(data))
        return self._open(bytes(data), name)

    def _check_type(self, media_type: Optional[str]) -> None:
        if media_type != PDF_MEDIA_TYPE:
            raise InvalidFileType()

    def _check_size(self, size: int) -> None:
        if size > self.config.max_file_size:
            raise FileTooLarge()

    def _open(self, data: bytes, name: str) -> PDFDocument:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            logger.error("Error loading PDF %s: %s", name, e)
            raise DocumentLoadError() from e

        if doc.needs_pass:
            doc.close()
            raise DocumentLoadError("The PDF is password protected.")

        if doc.page_count == 0:
            doc.close()
            raise DocumentLoadError("The PDF does not contain any pages.")

        logger.info("Loaded %s (%d pages)", name, doc.page_count)
        return PDFDocument(doc, data, name)
