import os

# Qt must run headless before any QApplication exists
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

import fitz  # PyMuPDF
import pytest
from PyQt5.QtWidgets import QApplication

from pdflyer.config import EditorConfig
from pdflyer.core.document import DocumentLoader
from pdflyer.core.editor import EditorSession
from pdflyer.core.signatures import MemoryStorage, SignatureStore


def make_pdf(page_sizes, label=True):
    """Build a PDF with one page per (width, height) entry."""
    doc = fitz.open()
    try:
        for number, (width, height) in enumerate(page_sizes, start=1):
            page = doc.new_page(width=width, height=height)
            if label:
                page.insert_text((72, 72), f"Source page {number}", fontsize=12)
        return doc.tobytes()
    finally:
        doc.close()


def make_image(width, height, background=(255, 255, 255), square=(0, 0, 0),
               fmt="png"):
    """Build an image with a filled square in the middle."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), 0)
    pix.set_rect(pix.irect, background)
    pix.set_rect(fitz.IRect(width // 4, height // 4, 3 * width // 4, 3 * height // 4), square)
    if fmt == "jpeg":
        return pix.tobytes("jpeg")
    return pix.tobytes("png")


def make_transparent_image(width, height, square=(0, 0, 0), alpha=255):
    """Build an RGBA PNG: fully transparent except a square in the middle."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), 1)
    pix.clear_with(0)
    pix.set_rect(fitz.IRect(width // 4, height // 4, 3 * width // 4, 3 * height // 4),
                 square + (alpha,))
    return pix.tobytes("png")


class ReadOnlyStorage(MemoryStorage):
    """Storage whose writes fail, like a full disk or a read-only home."""

    def set(self, key, value):
        raise PermissionError(13, "Permission denied")

    def remove(self, key):
        raise PermissionError(13, "Permission denied")


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def config():
    return EditorConfig()


@pytest.fixture
def letter_pdf():
    """Three 612x792 pages."""
    return make_pdf([(612, 792)] * 3)


@pytest.fixture
def mixed_pdf():
    """Pages of different native sizes."""
    return make_pdf([(612, 792), (842, 595), (300, 300)])


@pytest.fixture
def png_bytes():
    return make_image(400, 100)


@pytest.fixture
def jpeg_bytes():
    return make_image(120, 60, fmt="jpeg")


@pytest.fixture
def loader(config):
    return DocumentLoader(config)


@pytest.fixture
def signature_store():
    return SignatureStore(MemoryStorage())


@pytest.fixture
def session(qapp, config, signature_store):
    session = EditorSession(signature_store, config)
    yield session
    session.close_document()


@pytest.fixture
def loaded_session(session, letter_pdf):
    session.open_bytes(letter_pdf, "application/pdf", "letter.pdf")
    return session


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep user data and settings out of the real home directory."""
    monkeypatch.setenv('PDFLYER_DATA_DIR', str(tmp_path / "data"))
    monkeypatch.setenv('PDFLYER_CONFIG_DIR', str(tmp_path / "config"))
