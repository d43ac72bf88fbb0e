import fitz  # PyMuPDF

from pdflyer.config import EditorConfig
from pdflyer.core.document import PDFExporter
from pdflyer.core.elements import AnnotationElement, ElementKind
from pdflyer.core.export import ExportWorker
from pdflyer.core.imaging import encode_data_uri


def redaction(page_number=1):
    return AnnotationElement(id="redaction-1", kind=ElementKind.REDACTION,
                             page_number=page_number, x=0, y=0, width=100, height=100)


def collect(worker):
    finished, pages = [], []
    worker.finished.connect(lambda ok, msg: finished.append((ok, msg)))
    worker.page_progress.connect(lambda current, total: pages.append((current, total)))
    return finished, pages


def test_run_writes_output(qapp, letter_pdf, tmp_path):
    output = tmp_path / "edited.pdf"
    worker = ExportWorker(letter_pdf, [redaction()], str(output), EditorConfig())
    finished, pages = collect(worker)

    # Run synchronously in the test thread
    worker.run()

    assert finished == [(True, "Edited PDF saved successfully!")]
    assert pages[-1] == (3, 3)
    with fitz.open(str(output)) as doc:
        assert doc.page_count == 3
    assert worker.result.page_count == 3


def test_run_reports_skipped_elements(qapp, letter_pdf, tmp_path):
    broken = AnnotationElement(id="image-1", kind=ElementKind.IMAGE, page_number=1,
                               x=0, y=0, width=10, height=10,
                               raster_data_uri="data:image/png;base64,AAAA")
    worker = ExportWorker(letter_pdf, [broken, redaction()], str(tmp_path / "out.pdf"))
    finished, _ = collect(worker)

    worker.run()

    ok, message = finished[0]
    assert ok
    assert "1 element(s) could not be embedded" in message


def test_run_without_elements(qapp, letter_pdf, tmp_path):
    output = tmp_path / "out.pdf"
    worker = ExportWorker(letter_pdf, [], str(output))
    finished, _ = collect(worker)

    worker.run()

    assert finished == [(False, "There are no elements to save.")]
    assert not output.exists()


def test_run_unwritable_target(qapp, letter_pdf, tmp_path):
    worker = ExportWorker(letter_pdf, [redaction()], str(tmp_path / "missing" / "out.pdf"))
    finished, _ = collect(worker)

    worker.run()

    ok, message = finished[0]
    assert not ok
    assert message.startswith("The file could not be written")


def test_unexpected_error_still_finishes(qapp, letter_pdf, tmp_path, monkeypatch):
    def explode(self, document, elements):
        raise KeyError("font table")

    monkeypatch.setattr(PDFExporter, "export", explode)
    worker = ExportWorker(letter_pdf, [redaction()], str(tmp_path / "out.pdf"))
    finished, _ = collect(worker)

    worker.run()

    ok, message = finished[0]
    assert not ok
    assert message.startswith("Error during export:")
    assert not (tmp_path / "out.pdf").exists()


def test_corrupt_image_is_skipped(qapp, letter_pdf, tmp_path):
    broken = AnnotationElement(id="image-1", kind=ElementKind.IMAGE, page_number=1,
                               x=0, y=0, width=10, height=10,
                               raster_data_uri=encode_data_uri(b"not an image at all"))
    output = tmp_path / "out.pdf"
    worker = ExportWorker(letter_pdf, [broken, redaction()], str(output))
    finished, _ = collect(worker)

    worker.run()

    assert finished[0][0]
    assert worker.result.skipped == ["image-1"]
    assert output.exists()
