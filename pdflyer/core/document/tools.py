"""
Merge and split tools.
"""
import io
import logging
import os
import zipfile
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import fitz  # PyMuPDF

from pdflyer.core.errors import DocumentLoadError, InvalidPageRange, NotEnoughFiles

logger = logging.getLogger(__name__)

PageRange = Tuple[int, int]


@dataclass(frozen=True)
class OutputFile:
    name: str
    data: bytes


def _open_pdf(data: bytes, label: str) -> fitz.Document:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentLoadError(f"{label} could not be opened.") from e
    if doc.page_count == 0:
        doc.close()
        raise DocumentLoadError(f"{label} does not contain any pages.")
    return doc


def merge_documents(sources: Sequence[bytes]) -> bytes:
    """
    Concatenate several PDFs in order.

    Args:
        sources: Raw bytes of each input PDF

    Returns:
        The merged PDF

    Raises:
        NotEnoughFiles: if fewer than two inputs are given
        DocumentLoadError: if an input cannot be opened
    """
    if len(sources) < 2:
        raise NotEnoughFiles()

    merged = fitz.open()
    try:
        for index, data in enumerate(sources, start=1):
            src = _open_pdf(data, f"File {index}")
            try:
                merged.insert_pdf(src)
            finally:
                src.close()
        logger.info("Merged %d files into %d pages", len(sources), merged.page_count)
        return merged.tobytes(garbage=4, deflate=True)
    finally:
        merged.close()


def parse_page_ranges(text: str, total_pages: int) -> List[PageRange]:
    """
    Parse ranges such as ``"1-3, 5, 7-9"`` into inclusive 1-based pairs.

    Raises:
        InvalidPageRange: if any part is malformed or out of range, or
            no part is given at all
    """
    ranges: List[PageRange] = []
    parts = [part.strip() for part in text.split(",") if part.strip()]

    for part in parts:
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            try:
                start, end = int(start_text.strip()), int(end_text.strip())
            except ValueError:
                raise InvalidPageRange() from None
            if start < 1 or end > total_pages or start > end:
                raise InvalidPageRange()
            ranges.append((start, end))
        else:
            try:
                page_number = int(part)
            except ValueError:
                raise InvalidPageRange() from None
            if not 1 <= page_number <= total_pages:
                raise InvalidPageRange()
            ranges.append((page_number, page_number))

    if not ranges:
        raise InvalidPageRange()
    return ranges


def _base_name(name: str) -> str:
    base, ext = os.path.splitext(os.path.basename(name))
    return base if ext.lower() == ".pdf" else os.path.basename(name)


def split_document(data: bytes, name: str,
                   ranges: Optional[Sequence[PageRange]] = None) -> List[OutputFile]:
    """
    Split a PDF into one file per page, or one file per page range.

    Args:
        data: Raw bytes of the source PDF
        name: Original file name, used to name the outputs
        ranges: Inclusive 1-based page ranges; every page when omitted

    Returns:
        The output files in order
    """
    base = _base_name(name)
    src = _open_pdf(data, name)
    try:
        if ranges is None:
            ranges = [(n, n) for n in range(1, src.page_count + 1)]

        outputs = []
        for start, end in ranges:
            part = fitz.open()
            try:
                part.insert_pdf(src, from_page=start - 1, to_page=end - 1)
                suffix = f"page_{start}" if start == end else f"pages_{start}-{end}"
                outputs.append(OutputFile(f"{base}_{suffix}.pdf",
                                          part.tobytes(garbage=4, deflate=True)))
            finally:
                part.close()
        logger.info("Split %s into %d files", name, len(outputs))
        return outputs
    finally:
        src.close()


def bundle_split(parts: Sequence[OutputFile], name: str) -> OutputFile:
    """
    Package split output for download.

    A single part is returned unchanged; several parts are zipped into
    ``<name>_split.zip``.
    """
    if not parts:
        raise InvalidPageRange("No pages were selected.")
    if len(parts) == 1:
        return parts[0]

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for part in parts:
            archive.writestr(part.name, part.data)
    return OutputFile(f"{_base_name(name)}_split.zip", buffer.getvalue())
