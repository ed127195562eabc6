"""
Transform normalizer - folds an interactive resize/rotate back into the model.

After a transform gesture the renderer reports the live node state (position,
independent x/y scale factors, rotation). Scale never persists: it is folded
into each kind's size fields and the live node is reset to scale 1.
"""

from dataclasses import dataclass
from typing import Optional

from .elements import (
    ArrowElement, BadgeElement, CircleElement, Element, RectElement, TextElement,
)
from .scene import Scene

MIN_RECT_SIZE = 10
MIN_CIRCLE_RADIUS = 5


@dataclass
class NodeTransform:
    """Live transform state of a rendered node."""
    x: float = 0.0
    y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation: float = 0.0

    def reset_scale(self) -> None:
        self.scale_x = 1.0
        self.scale_y = 1.0


def normalized_changes(element: Element, node: NodeTransform) -> dict:
    """Canonical field changes for a transform-end on this element."""
    # Mirrored scales (negative) are not representable; sizes stay non-negative
    sx, sy = abs(node.scale_x), abs(node.scale_y)
    if isinstance(element, TextElement):
        return {
            "width": element.width * sx,
            "height": element.height * sy,
            "rotation": node.rotation,
        }
    if isinstance(element, RectElement):
        return {
            "width": max(MIN_RECT_SIZE, element.width * sx),
            "height": max(MIN_RECT_SIZE, element.height * sy),
            "rotation": node.rotation,
        }
    if isinstance(element, CircleElement):
        # Uniform approximation under non-uniform scale
        return {
            "radius": max(MIN_CIRCLE_RADIUS, element.radius * (sx + sy) / 2),
            "rotation": node.rotation,
        }
    if isinstance(element, (ArrowElement, BadgeElement)):
        # Resized through properties only; scale is dropped
        return {"rotation": node.rotation}
    raise TypeError(f"Unsupported element type: {type(element).__name__}")


def apply_transform_end(scene: Scene, element_id: Optional[str], node: NodeTransform) -> Optional[Element]:
    """
    Fold node scale/rotation into the element and reset the node's scale.

    Returns the updated element, or None (node untouched) if the id is absent.
    """
    element = scene.get(element_id)
    if element is None:
        return None
    changes = normalized_changes(element, node)
    node.reset_scale()
    return scene.update(element_id, **changes)
