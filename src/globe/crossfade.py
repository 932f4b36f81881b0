"""
Crossfading between datasets.

The crossfade controller owns the influence vector (one morph weight per
dataset). Selecting a dataset re-targets a single shared tween so a selection
made mid-fade continues smoothly from the current weights instead of jumping.
The render scheduler keeps one dirty flag that decides whether a redraw is
needed this tick.
"""

import logging
from typing import Callable, Optional

import numpy as np

from src.config import CROSSFADE_DURATION, INFLUENCE_TOLERANCE, MAX_MORPH_TARGETS

logger = logging.getLogger(__name__)


def ease_power1_out(t):
    """Quadratic ease-out: fast start, gentle landing, monotonic on [0, 1]."""
    return 1.0 - (1.0 - t) ** 2


def one_hot(index, size):
    values = np.zeros(size, dtype=np.float64)
    values[index] = 1.0
    return values


class InfluenceTween:
    """
    Interpolates a weight vector toward a target over a fixed duration.

    The vector is updated in place. Re-targeting while active restarts the
    tween from the current values, so components never jump.
    """

    def __init__(
        self,
        values,
        duration: float = CROSSFADE_DURATION,
        ease: Callable[[float], float] = ease_power1_out,
    ):
        self.values = np.array(values, dtype=np.float64)
        self.duration = duration
        self.ease = ease
        self._start = self.values.copy()
        self._target = self.values.copy()
        self._elapsed = 0.0
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def target(self) -> np.ndarray:
        return self._target.copy()

    def retarget(self, target) -> None:
        target = np.asarray(target, dtype=np.float64)
        if target.shape != self.values.shape:
            raise ValueError(f"Target shape {target.shape} != {self.values.shape}")
        self._start = self.values.copy()
        self._target = target.copy()
        self._elapsed = 0.0
        self._active = not np.allclose(self.values, target, atol=INFLUENCE_TOLERANCE, rtol=0)
        if not self._active:
            self.values[:] = target

    def advance(self, dt: float) -> bool:
        """
        Step the tween forward by ``dt`` time units.

        Returns:
            bool: True while the tween still has frames to play
        """
        if not self._active:
            return False
        self._elapsed += dt
        t = 1.0 if self.duration <= 0 else min(self._elapsed / self.duration, 1.0)
        if t >= 1.0:
            self.values[:] = self._target
            self._active = False
        else:
            self.values[:] = self._start + (self._target - self._start) * self.ease(t)
        return self._active


class CrossfadeController:
    """
    Drives the influence vector from dataset selections.

    States are ``idle`` (weights settled on a one-hot vector) and
    ``animating`` (tween in flight). ``select`` moves to animating;
    ``advance`` returns to idle once the weights land on the target.

    Args:
        n_datasets: Number of displayable datasets
        duration: Crossfade duration in time units
        initial: Index of the dataset shown at start
        on_change: Callback invoked when a selection starts a crossfade
    """

    IDLE = "idle"
    ANIMATING = "animating"

    def __init__(
        self,
        n_datasets: int,
        duration: float = CROSSFADE_DURATION,
        initial: int = 0,
        on_change: Optional[Callable[[], None]] = None,
    ):
        if n_datasets < 1:
            raise ValueError("CrossfadeController needs at least one dataset")
        self.n_datasets = n_datasets
        self.selected = initial
        self.on_change = on_change
        self._tween = InfluenceTween(one_hot(initial, n_datasets), duration=duration)

    @property
    def influences(self) -> np.ndarray:
        """Live influence vector, one weight per dataset."""
        return self._tween.values

    @property
    def is_active(self) -> bool:
        return self._tween.is_active

    @property
    def state(self) -> str:
        return self.ANIMATING if self._tween.is_active else self.IDLE

    def select(self, index: int) -> None:
        """Start crossfading toward dataset ``index``."""
        if not 0 <= index < self.n_datasets:
            raise IndexError(f"Dataset index {index} out of range 0..{self.n_datasets - 1}")
        logger.debug(f"Crossfade to dataset {index} from {self.influences.round(3).tolist()}")
        self.selected = index
        self._tween.retarget(one_hot(index, self.n_datasets))
        if self.on_change is not None:
            self.on_change()

    def advance(self, dt: float) -> bool:
        """Advance the crossfade; True means another frame is needed."""
        return self._tween.advance(dt)

    def bind_frame(self, mesh, max_slots: int = MAX_MORPH_TARGETS):
        """
        Slot bindings for the current weights.

        Each active slot is paired with its target's color set by name, so
        binding order never depends on registration order.
        """
        return mesh.active_bindings(self.influences, max_slots=max_slots)


def slot_weights(bindings, max_slots: int = MAX_MORPH_TARGETS) -> np.ndarray:
    """Weight array for the vertex stage, zero-padded to ``max_slots``."""
    weights = np.zeros(max_slots, dtype=np.float64)
    for binding in bindings:
        weights[binding.slot] = binding.weight
    return weights


class RenderScheduler:
    """
    Single dirty flag deciding whether the scene is redrawn this tick.

    Any number of ``request`` calls between ticks collapse into one render.
    The flag is cleared before rendering, so a render that needs another
    frame (e.g. during a crossfade) simply requests again.
    """

    def __init__(self, render_fn: Callable[[], None]):
        self._render_fn = render_fn
        self._requested = False
        self.render_count = 0

    @property
    def pending(self) -> bool:
        return self._requested

    def request(self) -> bool:
        """Mark the scene dirty. Returns True if this call armed the flag."""
        if self._requested:
            return False
        self._requested = True
        return True

    def run_pending(self) -> bool:
        """Render once if requested. Returns True if a render happened."""
        if not self._requested:
            return False
        self._requested = False
        self.render_count += 1
        self._render_fn()
        return True
