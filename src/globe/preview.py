"""
Offline matplotlib preview of the globe.

Implements the renderer and camera collaborators without Blender so a
crossfade can be written out as PNG frames on any machine. The morph vertex
stage is evaluated on the CPU with blend_vertices.
"""

import logging
from pathlib import Path
from typing import Callable, List

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from src.globe.morph_targets import blend_vertices

logger = logging.getLogger(__name__)


def yup_to_zup(positions):
    """Convert Y-up globe coordinates to the Z-up frame used by matplotlib and Blender."""
    positions = np.asarray(positions)
    return np.column_stack([positions[:, 0], -positions[:, 2], positions[:, 1]])


class PreviewCamera:
    """Orbit-style camera described by elevation and azimuth in degrees."""

    def __init__(self, elevation: float = 20.0, azimuth: float = -60.0):
        self.elevation = elevation
        self.azimuth = azimuth
        self.aspect = 2.0
        self._listeners: List[Callable[[], None]] = []

    def set_aspect(self, aspect: float) -> None:
        self.aspect = aspect

    def update(self) -> None:
        pass

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def orbit(self, d_azimuth: float = 0.0, d_elevation: float = 0.0) -> None:
        """Rotate around the globe and notify listeners."""
        self.azimuth += d_azimuth
        self.elevation = float(np.clip(self.elevation + d_elevation, -90, 90))
        for callback in self._listeners:
            callback()


class MatplotlibRenderer:
    """
    Draws each frame of the globe to a numbered PNG file.

    Args:
        output_dir: Directory for the frames
        width: Frame width in pixels
        height: Frame height in pixels
        dpi: Figure resolution
        prefix: File name prefix
    """

    def __init__(self, output_dir, width=800, height=600, dpi=100, prefix="frame"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.width = width
        self.height = height
        self.dpi = dpi
        self.prefix = prefix
        self.frames: List[Path] = []

    def display_size(self):
        return (self.width, self.height)

    def draw(self, scene, camera) -> Path:
        positions, colors = blend_vertices(scene.model.mesh, scene.bindings)
        triangles = scene.model.mesh.base.triangles()

        fig = Figure(figsize=(self.width / self.dpi, self.height / self.dpi), dpi=self.dpi)
        FigureCanvasAgg(fig)
        fig.patch.set_facecolor("black")
        ax = fig.add_subplot(projection="3d")
        ax.set_facecolor("black")
        ax.set_axis_off()

        if len(triangles):
            polygons = yup_to_zup(positions)[triangles]
            # Boxes are flat colored, the first corner stands for the face
            face_colors = np.clip(colors[triangles[:, 0]], 0.0, 1.0)
            ax.add_collection3d(Poly3DCollection(polygons, facecolors=face_colors, edgecolors="none"))

        for set_lim in (ax.set_xlim, ax.set_ylim, ax.set_zlim):
            set_lim(-1.5, 1.5)
        ax.set_box_aspect((1, 1, 1))
        ax.view_init(elev=getattr(camera, "elevation", 20.0), azim=getattr(camera, "azimuth", -60.0))

        path = self.output_dir / f"{self.prefix}_{len(self.frames):04d}.png"
        fig.savefig(path, facecolor="black")
        self.frames.append(path)
        logger.debug(f"Wrote preview frame {path.name}")
        return path
