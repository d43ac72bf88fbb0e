"""
Application controllers for managing interactions between UI and core logic.
"""
from .editor_controller import ERROR, INFO, EditorController

__all__ = [
    'EditorController',
    'ERROR',
    'INFO',
]
