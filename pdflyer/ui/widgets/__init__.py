"""
Custom widgets for page editing.
"""
from .page_view import PageView
from .text_entry import InlineTextEntry

__all__ = ['InlineTextEntry', 'PageView']
