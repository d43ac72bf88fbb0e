"""
Core business logic for the Pdflyer editor.
"""
from .editor import EditorSession, ToolMode
from .elements import AnnotationElement, ElementKind, ElementManager

__all__ = [
    'AnnotationElement',
    'EditorSession',
    'ElementKind',
    'ElementManager',
    'ToolMode',
]
