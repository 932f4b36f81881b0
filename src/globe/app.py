"""
Application wiring for the density globe.

Connects the globe model to its collaborators: a renderer that draws the scene,
camera controls that report changes, and a UI list whose selections start
crossfades. All of it runs on one thread; redraws are driven by the render
scheduler's dirty flag.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Tuple, Union

import numpy as np

from src.config import CROSSFADE_DURATION, MAX_MORPH_TARGETS
from src.globe.crossfade import CrossfadeController, RenderScheduler, slot_weights
from src.globe.morph_targets import SlotBinding
from src.globe.pipeline import GlobeModel

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def draw(self, scene: "GlobeScene", camera: "CameraControls") -> None: ...

    def display_size(self) -> Tuple[int, int]: ...


class CameraControls(Protocol):
    def set_aspect(self, aspect: float) -> None: ...

    def update(self) -> None: ...

    def add_change_listener(self, callback: Callable[[], None]) -> None: ...


@dataclass
class GlobeScene:
    """Scene root handed to the renderer: the model plus this frame's morph slots."""

    model: GlobeModel
    bindings: List[SlotBinding] = field(default_factory=list)
    weights: np.ndarray = field(default_factory=lambda: np.zeros(MAX_MORPH_TARGETS))


class GlobeApp:
    """
    Drives the globe: selections, crossfades and scheduled redraws.

    Args:
        model: Built globe model
        renderer: Draws the scene and reports the display size
        camera: Camera controls collaborator
        duration: Crossfade duration in time units
    """

    def __init__(
        self,
        model: GlobeModel,
        renderer: Renderer,
        camera: CameraControls,
        duration: float = CROSSFADE_DURATION,
    ):
        self.model = model
        self.renderer = renderer
        self.camera = camera
        self.scene = GlobeScene(model=model)
        self.scheduler = RenderScheduler(self._render)
        self.controller = CrossfadeController(
            len(model.descriptors), duration=duration, on_change=self.request_render
        )
        self._display_size: Optional[Tuple[int, int]] = None
        self._dt = 0.0

        camera.add_change_listener(self.request_render)
        self.request_render()

    def entries(self) -> List[dict]:
        """One selectable entry per displayable dataset, for the UI list."""
        return [
            {"index": i, "name": name, "selected": i == self.controller.selected}
            for i, name in enumerate(self.model.names)
        ]

    def select(self, key: Union[int, str]) -> None:
        """
        Crossfade to a dataset given by index or name.

        Raises:
            KeyError: If no dataset has the given name
            IndexError: If the index is out of range
        """
        if isinstance(key, str):
            if key not in self.model.names:
                raise KeyError(f"Unknown dataset '{key}', expected one of {self.model.names}")
            index = self.model.names.index(key)
        else:
            index = key
        logger.info(f"Showing '{self.model.names[index]}'")
        self.controller.select(index)

    def request_render(self) -> None:
        self.scheduler.request()

    def on_resize(self) -> None:
        self.request_render()

    def tick(self, dt: float) -> bool:
        """
        Process one frame.

        Args:
            dt: Time elapsed since the previous tick

        Returns:
            bool: True if the scene was drawn
        """
        self._dt = dt
        return self.scheduler.run_pending()

    def _resize_if_needed(self) -> None:
        size = tuple(self.renderer.display_size())
        if size != self._display_size:
            self._display_size = size
            width, height = size
            if height > 0:
                self.camera.set_aspect(width / height)

    def _render(self) -> None:
        self._resize_if_needed()

        self.controller.advance(self._dt)
        if self.controller.is_active:
            self.request_render()

        self.camera.update()
        self.scene.bindings = self.controller.bind_frame(self.model.mesh)
        self.scene.weights = slot_weights(self.scene.bindings)
        self.renderer.draw(self.scene, self.camera)


def run_until_idle(app: GlobeApp, dt: float, max_ticks: int = 10000) -> int:
    """
    Tick the app at a fixed step until no redraw is pending.

    Returns:
        int: Number of frames drawn
    """
    drawn = 0
    for _ in range(max_ticks):
        if not app.scheduler.pending:
            break
        if app.tick(dt):
            drawn += 1
    return drawn
