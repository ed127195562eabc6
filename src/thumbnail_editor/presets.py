"""
Style presets - one-click starting points for common thumbnail looks.

A preset patches the background settings and appends its elements on top of
whatever is already in the scene.
"""

from typing import List

from .background import Background
from .elements import create_element
from .scene import Scene

PRESETS = {
    "impact-yellow": {
        "description": "Dark overlay, dark headline with white outline, amber block",
        "background": {
            "overlay": "#000000", "overlay_alpha": 0.35,
            "saturation": 0.1, "contrast": 0.15, "brightness": -0.05,
        },
        "elements": [
            ("text", {"text": "JANGAN LEWATKAN INI", "fill": "#111111", "stroke": "#ffffff", "font_size": 140}),
            ("rect", None),
        ],
    },
    "neon": {
        "description": "Cyan headline with magenta outline and a pointer arrow",
        "background": {"overlay": "#000000", "overlay_alpha": 0.25},
        "elements": [
            ("text", {"text": "RAHASIA VIRAL", "fill": "#16f3ff", "stroke": "#ff00e6", "font_size": 150}),
            ("arrow", None),
        ],
    },
    "clean": {
        "description": "White headline, light overlay, slightly desaturated",
        "background": {"overlay": "#000000", "overlay_alpha": 0.2, "saturation": -0.1},
        "elements": [
            ("text", {"text": "TIPS YOUTUBE", "fill": "#ffffff", "stroke": "#000000", "font_size": 132}),
        ],
    },
}

# Quick color palette
SWATCHES = ["#ffffff", "#000000", "#ffce33", "#ff5b6e", "#2fa6ff", "#16f3ff", "#00ff7f", "#ff8a00"]


class UnknownPresetError(LookupError):
    pass


def list_presets() -> dict:
    return {name: p["description"] for name, p in PRESETS.items()}


def apply_preset(scene: Scene, background: Background, name: str) -> List[str]:
    """Apply a named preset. Returns the ids of the added elements."""
    preset = PRESETS.get(name)
    if preset is None:
        raise UnknownPresetError(
            f"Unknown preset '{name}'. Available: {', '.join(PRESETS)}"
        )
    background.update(**preset["background"])
    added = []
    for kind, overrides in preset["elements"]:
        added.append(scene.add(create_element(kind, overrides)))
    print(f"  Preset '{name}' applied ({len(added)} element(s))")
    return added
