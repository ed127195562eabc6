"""
Scene - the ordered element sequence plus the transient selection cursor.

Sequence order is the z-order: index 0 is drawn first (bottom), the last
element is drawn on top and wins hit-tests. Operations that reference an id
that is not in the scene are silent no-ops.
"""

import copy
from typing import Iterator, List, Optional, Tuple

from .elements import Element, patch_element, validate_element


class Scene:
    def __init__(self, elements: Optional[List[Element]] = None):
        self._elements: List[Element] = []
        self.selected_id: Optional[str] = None
        for element in elements or []:
            self.add(element, select=False)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __contains__(self, element_id: str) -> bool:
        return self.index_of(element_id) >= 0

    @property
    def elements(self) -> Tuple[Element, ...]:
        """Read-only view of the sequence, bottom to top."""
        return tuple(self._elements)

    def ids(self) -> List[str]:
        return [e.id for e in self._elements]

    def index_of(self, element_id: Optional[str]) -> int:
        for i, element in enumerate(self._elements):
            if element.id == element_id:
                return i
        return -1

    def get(self, element_id: Optional[str]) -> Optional[Element]:
        idx = self.index_of(element_id)
        return self._elements[idx] if idx >= 0 else None

    def snapshot(self) -> Tuple[Element, ...]:
        """Deep copy of the sequence for renderers and the analysis engine."""
        return tuple(copy.deepcopy(e) for e in self._elements)

    # ── Mutation ──────────────────────────────────────────────────────

    def add(self, element: Element, select: bool = True) -> str:
        """Append on top of the z-order and (by default) select it."""
        if element.id in self:
            raise ValueError(f"Duplicate element id: {element.id}")
        validate_element(element)
        self._elements.append(element)
        if select:
            self.selected_id = element.id
        return element.id

    def update(self, element_id: Optional[str], **changes) -> Optional[Element]:
        """Property edit. Returns the updated element, or None if the id is absent."""
        idx = self.index_of(element_id)
        if idx < 0:
            return None
        updated = patch_element(self._elements[idx], changes)
        self._elements[idx] = updated
        return updated

    def move(self, element_id: Optional[str], x: float, y: float) -> Optional[Element]:
        """Drag end: set the position as reported, no clamping to the canvas."""
        return self.update(element_id, x=x, y=y)

    def bring_to_front(self, element_id: Optional[str]) -> bool:
        idx = self.index_of(element_id)
        if idx < 0:
            return False
        self._elements.append(self._elements.pop(idx))
        return True

    def send_to_back(self, element_id: Optional[str]) -> bool:
        idx = self.index_of(element_id)
        if idx < 0:
            return False
        self._elements.insert(0, self._elements.pop(idx))
        return True

    def remove(self, element_id: Optional[str]) -> bool:
        idx = self.index_of(element_id)
        if idx < 0:
            return False
        del self._elements[idx]
        if self.selected_id == element_id:
            self.selected_id = None
        return True

    # ── Selection ─────────────────────────────────────────────────────

    def select(self, element_id: Optional[str]) -> Optional[str]:
        """Select an element by id; None or an unknown id clears the selection."""
        self.selected_id = element_id if element_id in self else None
        return self.selected_id

    @property
    def selected(self) -> Optional[Element]:
        return self.get(self.selected_id)
