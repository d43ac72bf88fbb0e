"""
Ordered, page-scoped collection of overlay elements with undo/redo.
"""
import logging
from dataclasses import fields, replace
from typing import List, Optional, Tuple

from .models import IMMUTABLE_FIELDS, AnnotationElement
from .undo_redo import UndoRedoStack

logger = logging.getLogger(__name__)

_ELEMENT_FIELDS = {f.name for f in fields(AnnotationElement)}


class ElementManager:
    """Manages all overlay elements of the current document."""

    def __init__(self, history_size: int = 50,
                 default_size: Tuple[float, float] = (200.0, 30.0)):
        self.elements: List[AnnotationElement] = []
        self.selected_id: Optional[str] = None
        self.undo_redo_stack = UndoRedoStack(history_size)

        # Box used for hit testing elements without an explicit size
        self.default_size = default_size

    def add_element(self, element: AnnotationElement) -> None:
        """
        Append a new element with undo support.

        Args:
            element: Element to add
        """
        self.undo_redo_stack.push_state(self.elements)
        self.elements = self.elements + [element]
        logger.debug("Added %s on page %d", element.id, element.page_number)

    def get_element(self, element_id: str) -> Optional[AnnotationElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def update_element(self, element_id: str, **changes) -> bool:
        """
        Replace fields of an element with undo support.

        Args:
            element_id: Id of the element to update
            **changes: Field values to set

        Returns:
            True if the element was found and updated
        """
        unknown = set(changes) - _ELEMENT_FIELDS
        if unknown:
            raise ValueError(f"Unknown element fields: {sorted(unknown)}")
        frozen = set(changes) & IMMUTABLE_FIELDS
        if frozen:
            raise ValueError(f"Element fields cannot be changed: {sorted(frozen)}")

        for index, element in enumerate(self.elements):
            if element.id == element_id:
                updated = replace(element, **changes)
                if updated == element:
                    return True
                self.undo_redo_stack.push_state(self.elements)
                new_elements = list(self.elements)
                new_elements[index] = updated
                self.elements = new_elements
                return True
        return False

    def delete_element(self, element_id: str) -> bool:
        """
        Remove an element with undo support.

        Clears the selection when the removed element was selected.

        Returns:
            True if the element was found and removed
        """
        if self.get_element(element_id) is None:
            return False

        self.undo_redo_stack.push_state(self.elements)
        self.elements = [el for el in self.elements if el.id != element_id]
        if self.selected_id == element_id:
            self.selected_id = None
        return True

    def select_element(self, element_id: Optional[str]) -> bool:
        """
        Select a single element, or clear the selection with None.

        Returns:
            True if the selection changed to a valid state
        """
        if element_id is not None and self.get_element(element_id) is None:
            return False
        self.selected_id = element_id
        return True

    @property
    def selected_element(self) -> Optional[AnnotationElement]:
        if self.selected_id is None:
            return None
        return self.get_element(self.selected_id)

    def get_elements_for_page(self, page_number: int) -> List[AnnotationElement]:
        """
        Get all elements anchored to a page, in creation order.

        Args:
            page_number: 1-based page number
        """
        return [el for el in self.elements if el.page_number == page_number]

    def get_element_at_point(self, page_number: int, x: float,
                             y: float) -> Optional[AnnotationElement]:
        """
        Get the topmost element under a display-space point.

        Args:
            page_number: 1-based page number
            x: X coordinate in display pixels
            y: Y coordinate in display pixels
        """
        for element in reversed(self.get_elements_for_page(page_number)):
            if element.contains_point(x, y, self.default_size):
                return element
        return None

    def undo(self) -> bool:
        """
        Perform undo operation.

        Returns:
            True if undo was successful
        """
        previous_state = self.undo_redo_stack.undo(self.elements)
        if previous_state is None:
            return False
        self.elements = previous_state
        self.selected_id = None
        return True

    def redo(self) -> bool:
        """
        Perform redo operation.

        Returns:
            True if redo was successful
        """
        next_state = self.undo_redo_stack.redo(self.elements)
        if next_state is None:
            return False
        self.elements = next_state
        self.selected_id = None
        return True

    def can_undo(self) -> bool:
        return self.undo_redo_stack.can_undo()

    def can_redo(self) -> bool:
        return self.undo_redo_stack.can_redo()

    def clear_all(self) -> None:
        """Clear all elements and reset state."""
        self.elements = []
        self.selected_id = None
        self.undo_redo_stack.clear()

    def get_element_count(self) -> int:
        return len(self.elements)
