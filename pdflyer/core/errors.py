"""
Error types raised by the editing core.

Every error carries a human-readable message that the controllers show
to the user as a transient notification.
"""


class EditorError(Exception):
    """Base class for all errors reported to the user."""

    default_message = "The operation could not be completed."

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


class InvalidFileType(EditorError):
    default_message = "Please select a PDF file."


class FileTooLarge(EditorError):
    default_message = "The file is too large. The maximum size is 100 MB."


class DocumentLoadError(EditorError):
    default_message = "The PDF could not be opened."


class NoDocumentError(EditorError):
    default_message = "No PDF document is currently loaded."


class NoContentError(EditorError):
    default_message = "Nothing has been drawn yet."


class EditExportError(EditorError):
    default_message = "The edited PDF could not be created."


class PageRenderError(EditExportError):
    """Rasterising a page failed. Fatal to an export."""

    def __init__(self, page_number: int, message: str = None):
        self.page_number = page_number
        super().__init__(message or f"Page {page_number} could not be rendered.")


class ElementEmbedError(EditorError):
    """A single element's raster could not be embedded. Recoverable."""

    default_message = "An image could not be embedded."


class NoElementsError(EditorError):
    default_message = "There are no elements to save."


class InvalidPageRange(EditorError):
    default_message = "Invalid page ranges. Use a format like 1-3, 5, 7-9."


class NotEnoughFiles(EditorError):
    default_message = "Select at least two PDF files to merge."
