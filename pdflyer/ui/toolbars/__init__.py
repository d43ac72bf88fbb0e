"""
Toolbar components for editing operations.
"""
from .edit_toolbar import EditToolbar

__all__ = ['EditToolbar']
