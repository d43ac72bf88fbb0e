"""
PDF document handling: loading, rendering, flattening export, merge/split.
"""
from .exporter import ExportResult, PDFExporter, PlacedElement, save_to_path
from .geometry import NativeBox, PageGeometry, to_native_box
from .loader import DocumentLoader, PDFDocument
from .tools import (
    OutputFile,
    bundle_split,
    merge_documents,
    parse_page_ranges,
    split_document,
)

__all__ = [
    'DocumentLoader',
    'ExportResult',
    'NativeBox',
    'OutputFile',
    'PDFDocument',
    'PDFExporter',
    'PageGeometry',
    'PlacedElement',
    'bundle_split',
    'merge_documents',
    'parse_page_ranges',
    'save_to_path',
    'split_document',
    'to_native_box',
]
