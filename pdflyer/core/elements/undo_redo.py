"""
Undo/Redo history for the element list.
"""
from typing import List, Optional
from .models import AnnotationElement


class UndoRedoStack:
    """Manages undo/redo snapshots of the element list."""

    def __init__(self, max_size: int = 50):
        """
        Initialize the undo/redo stack.

        Args:
            max_size: Maximum number of states to keep in history
        """
        self.undo_stack: List[List[AnnotationElement]] = []
        self.redo_stack: List[List[AnnotationElement]] = []
        self.max_size = max_size

    def push_state(self, elements: List[AnnotationElement]) -> None:
        """
        Push current state to undo stack.

        Elements are immutable, so a shallow copy of the list is a full
        snapshot.
        """
        self.undo_stack.append(list(elements))

        # A new action invalidates anything that was undone
        self.redo_stack.clear()

        if len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def undo(self, current_state: List[AnnotationElement]) -> Optional[List[AnnotationElement]]:
        """
        Perform undo and return the previous state.

        Args:
            current_state: Current elements before undo

        Returns:
            Previous state, or None if undo not available
        """
        if not self.can_undo():
            return None

        self.redo_stack.append(list(current_state))
        return self.undo_stack.pop()

    def redo(self, current_state: List[AnnotationElement]) -> Optional[List[AnnotationElement]]:
        """
        Perform redo and return the next state.

        Args:
            current_state: Current elements before redo

        Returns:
            Next state, or None if redo not available
        """
        if not self.can_redo():
            return None

        self.undo_stack.append(list(current_state))
        return self.redo_stack.pop()

    def clear(self) -> None:
        """Clear both stacks."""
        self.undo_stack.clear()
        self.redo_stack.clear()
