"""
Overlay elements placed on PDF pages.
"""
from .models import (
    RESIZABLE_KINDS,
    AnnotationElement,
    ElementIdGenerator,
    ElementKind,
    FontFamily,
    ShapeKind,
    parse_hex_color,
)
from .manager import ElementManager
from .undo_redo import UndoRedoStack

__all__ = [
    'RESIZABLE_KINDS',
    'AnnotationElement',
    'ElementIdGenerator',
    'ElementKind',
    'ElementManager',
    'FontFamily',
    'ShapeKind',
    'UndoRedoStack',
    'parse_hex_color',
]
