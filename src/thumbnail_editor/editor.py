"""
Editor session - one Scene, one Background and the current selection.

Every mutation bumps a revision counter. The analysis is the pure
analyze() projection of (scene snapshot, background), memoized on that
snapshot and the background settings and image; mutators never compute it
themselves.
"""

from typing import Optional

from .analysis import Analysis, analyze
from .background import Background, BackgroundUploader
from .compositor import export_png, hit_test, render_preview, save_thumbnail
from .elements import Element, TextElement, create_element
from .presets import apply_preset
from .scene import Scene
from .transform import NodeTransform, apply_transform_end


class Editor:
    def __init__(self, config: dict = None):
        self.config = config
        self.scene = Scene()
        self.background = Background()
        timeout = config["images"]["fetch_timeout"] if config else None
        self.uploader = BackgroundUploader(self.background, timeout=timeout)
        self.revision = 0
        self._analysis: Optional[Analysis] = None
        self._analysis_key = None
        self._analysis_image = None

    def _touch(self) -> None:
        self.revision += 1

    @property
    def analysis(self) -> Analysis:
        # Keyed on content so direct edits to scene or background are seen too
        snapshot = self.scene.snapshot()
        key = (snapshot, self.background.settings())
        image = self.background.image
        if self._analysis is None or key != self._analysis_key or image is not self._analysis_image:
            self._analysis = analyze(snapshot, self.background)
            self._analysis_key = key
            self._analysis_image = image
        return self._analysis

    @property
    def selected(self) -> Optional[Element]:
        return self.scene.selected

    # ── Elements ──────────────────────────────────────────────────────

    def add(self, kind: str, preset: dict = None) -> str:
        """Add a new element on top and select it."""
        element_id = self.scene.add(create_element(kind, preset))
        self._touch()
        return element_id

    def select(self, element_id: Optional[str]) -> Optional[str]:
        return self.scene.select(element_id)

    def select_at(self, x: float, y: float) -> Optional[str]:
        """Click/tap: select the topmost element under the point, or clear."""
        return self.scene.select(hit_test(self.scene.elements, x, y))

    def update(self, element_id: Optional[str] = None, **changes) -> Optional[Element]:
        """Property edit on element_id (default: the selection)."""
        target = element_id if element_id is not None else self.scene.selected_id
        updated = self.scene.update(target, **changes)
        if updated is not None:
            self._touch()
        return updated

    def drag_end(self, element_id: str, x: float, y: float) -> Optional[Element]:
        moved = self.scene.move(element_id, x, y)
        if moved is not None:
            self._touch()
        return moved

    def transform_end(self, element_id: str, node: NodeTransform) -> Optional[Element]:
        updated = apply_transform_end(self.scene, element_id, node)
        if updated is not None:
            self._touch()
        return updated

    def bring_to_front(self) -> bool:
        changed = self.scene.bring_to_front(self.scene.selected_id)
        if changed:
            self._touch()
        return changed

    def send_to_back(self) -> bool:
        changed = self.scene.send_to_back(self.scene.selected_id)
        if changed:
            self._touch()
        return changed

    def remove_selected(self) -> bool:
        changed = self.scene.remove(self.scene.selected_id)
        if changed:
            self._touch()
        return changed

    # ── Background ────────────────────────────────────────────────────

    def set_background(self, clear_image: bool = False, **settings) -> Background:
        """Apply settings and optionally drop the image; all or nothing."""
        if settings:
            self.background.update(**settings)
        if clear_image:
            self.background.image = None
        self._touch()
        return self.background

    async def upload_background(self, source) -> bool:
        """Load a background image; False if superseded by a newer upload."""
        installed = await self.uploader.upload(source)
        if installed:
            self._touch()
        return installed

    def clear_background_image(self) -> None:
        self.set_background(clear_image=True)

    # ── Presets / swatches ────────────────────────────────────────────

    def apply_preset(self, name: str) -> list:
        added = apply_preset(self.scene, self.background, name)
        self._touch()
        return added

    def apply_swatch(self, color: str) -> str:
        """Selected text gets the fill; otherwise the color becomes the overlay."""
        selected = self.scene.selected
        if isinstance(selected, TextElement):
            self.update(selected.id, fill=color)
            return "text"
        self.set_background(overlay=color)
        return "overlay"

    # ── Output ────────────────────────────────────────────────────────

    def preview(self, scale: float = 1.0, guides: dict = None):
        return render_preview(self.scene.snapshot(), self.background, scale, guides, self.config)

    def export_png(self) -> bytes:
        return export_png(self.scene.snapshot(), self.background, self.config)

    def save(self, path=None):
        return save_thumbnail(self.scene.snapshot(), self.background, path, self.config)
