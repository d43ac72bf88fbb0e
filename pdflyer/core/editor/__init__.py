"""
Editing session and overlay interaction modes.
"""
from .mode import Drawing, EditorMode, Idle, PlacingText, Selected, ToolMode, tool_mode
from .session import EditorSession, TextStyle

__all__ = [
    'Drawing',
    'EditorMode',
    'EditorSession',
    'Idle',
    'PlacingText',
    'Selected',
    'TextStyle',
    'ToolMode',
    'tool_mode',
]
