"""
Mesh merging operations for globe geometry.

Collapses the per-cell boxes of one dataset into a single buffer so the whole
dataset renders with one draw call.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from src.globe.box_geometry import CellBoxGeometry


@dataclass
class MergedGeometry:
    """Positions, colors and quad faces of all boxes for one dataset."""

    positions: np.ndarray  # (n, 3) float64
    colors: np.ndarray  # (n, 3) uint8
    faces: np.ndarray  # (f, 4) int64, indices into positions

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    def triangles(self) -> np.ndarray:
        """
        Split quad faces into triangles.

        Returns:
            np.ndarray: (2f, 3) triangle indices, both triangles wound like the quad
        """
        if len(self.faces) == 0:
            return np.zeros((0, 3), dtype=np.int64)
        first = self.faces[:, [0, 1, 2]]
        second = self.faces[:, [0, 2, 3]]
        return np.stack([first, second], axis=1).reshape(-1, 3)


def merge_geometries(geometries: Sequence[CellBoxGeometry]) -> MergedGeometry:
    """
    Concatenate box geometries without sharing vertices.

    Args:
        geometries: Boxes for one dataset

    Returns:
        MergedGeometry with face indices offset into the merged buffer
    """
    if not geometries:
        return MergedGeometry(
            positions=np.zeros((0, 3), dtype=np.float64),
            colors=np.zeros((0, 3), dtype=np.uint8),
            faces=np.zeros((0, 4), dtype=np.int64),
        )

    offsets = np.cumsum([0] + [len(g.positions) for g in geometries[:-1]])
    positions = np.concatenate([g.positions for g in geometries])
    colors = np.concatenate([g.colors for g in geometries]).astype(np.uint8)
    faces = np.concatenate([g.faces + offset for g, offset in zip(geometries, offsets)])
    return MergedGeometry(positions=positions, colors=colors, faces=faces)
