"""
Overlay interaction state.

The overlay is always in exactly one of these modes, so a pending text
placement, an open drawing and a selection can never coexist.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from pdflyer.core.imaging.strokes import StrokeCanvas


class ToolMode(Enum):
    NONE = "none"
    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"
    DRAWING = "drawing"
    REDACTION = "redaction"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PlacingText:
    """Text tool armed; ``position`` is set once the user has clicked."""
    position: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class Drawing:
    canvas: StrokeCanvas = field(compare=False)


@dataclass(frozen=True)
class Selected:
    element_id: str


EditorMode = Union[Idle, PlacingText, Drawing, Selected]


def tool_mode(mode: EditorMode) -> ToolMode:
    """The creation tool a mode corresponds to."""
    if isinstance(mode, PlacingText):
        return ToolMode.TEXT
    if isinstance(mode, Drawing):
        return ToolMode.DRAWING
    return ToolMode.NONE
