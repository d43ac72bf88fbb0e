import io
import zipfile

import fitz  # PyMuPDF
import pytest

from pdflyer.core.document import (
    OutputFile,
    bundle_split,
    merge_documents,
    parse_page_ranges,
    split_document,
)
from pdflyer.core.errors import DocumentLoadError, InvalidPageRange, NotEnoughFiles
from tests.conftest import make_pdf


def page_count(data):
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc.page_count


class TestMerge:
    def test_merge_concatenates_in_order(self):
        first = make_pdf([(612, 792)] * 2)
        second = make_pdf([(300, 300)])

        merged = merge_documents([first, second])

        with fitz.open(stream=merged, filetype="pdf") as doc:
            assert doc.page_count == 3
            assert doc[2].rect.width == 300

    def test_merge_needs_two_files(self, letter_pdf):
        with pytest.raises(NotEnoughFiles):
            merge_documents([letter_pdf])

    def test_merge_rejects_corrupt_input(self, letter_pdf):
        with pytest.raises(DocumentLoadError):
            merge_documents([letter_pdf, b"not a pdf at all"])


class TestPageRanges:
    def test_parse_mixed_ranges(self):
        assert parse_page_ranges("1-3, 5, 7-9", 10) == [(1, 3), (5, 5), (7, 9)]

    def test_ignores_empty_parts(self):
        assert parse_page_ranges(" 2 ,, 4 ", 5) == [(2, 2), (4, 4)]

    @pytest.mark.parametrize("text", ["", "0", "4", "3-1", "1-4", "a", "1-b", " , "])
    def test_invalid_ranges(self, text):
        with pytest.raises(InvalidPageRange):
            parse_page_ranges(text, 3)


class TestSplit:
    def test_split_every_page(self, letter_pdf):
        parts = split_document(letter_pdf, "report.pdf")

        assert [p.name for p in parts] == [
            "report_page_1.pdf", "report_page_2.pdf", "report_page_3.pdf",
        ]
        assert all(page_count(p.data) == 1 for p in parts)

    def test_split_ranges(self, letter_pdf):
        parts = split_document(letter_pdf, "report.pdf", [(1, 2), (3, 3)])

        assert [p.name for p in parts] == ["report_pages_1-2.pdf", "report_page_3.pdf"]
        assert page_count(parts[0].data) == 2

    def test_bundle_single_part(self):
        part = OutputFile("report_page_1.pdf", b"%PDF")

        assert bundle_split([part], "report.pdf") is part

    def test_bundle_several_parts(self, letter_pdf):
        parts = split_document(letter_pdf, "report.pdf")

        bundle = bundle_split(parts, "report.pdf")

        assert bundle.name == "report_split.zip"
        with zipfile.ZipFile(io.BytesIO(bundle.data)) as archive:
            assert archive.namelist() == [p.name for p in parts]

    def test_bundle_nothing(self):
        with pytest.raises(InvalidPageRange):
            bundle_split([], "report.pdf")
