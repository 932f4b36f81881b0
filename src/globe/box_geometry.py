"""
Per-cell box geometry for the density globe.

Every grid cell becomes one box standing on the unit sphere. The box is
rotated to the cell's longitude and latitude, pushed out to the sphere
surface and extruded by the cell's normalized amount. The composed transform
is baked into the box's vertices so each dataset can later be merged into a
single static buffer.
"""

import logging
from dataclasses import dataclass
from math import radians
from typing import List, Sequence

import numpy as np
from tqdm import tqdm

from src.config import (
    BOX_WIDTH,
    BOX_HEIGHT,
    MIN_EXTRUSION,
    MAX_EXTRUSION,
    LON_OFFSET,
    LAT_OFFSET,
    SPHERE_RADIUS,
)
from src.globe.color_mapping import amount_color, broadcast_color, lerp
from src.globe.diff_datasets import check_compatible
from src.globe.grid_data import GridDataset

logger = logging.getLogger(__name__)


def _unit_box():
    """Unit cube centered at the origin, 4 unshared vertices per face."""
    positions = []
    for axis in range(3):
        for sign in (1.0, -1.0):
            u, v = (axis + 1) % 3, (axis + 2) % 3
            if sign < 0:
                u, v = v, u
            # Counter-clockwise when seen from outside
            for du, dv in ((-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)):
                corner = [0.0, 0.0, 0.0]
                corner[axis] = 0.5 * sign
                corner[u] = du
                corner[v] = dv
                positions.append(corner)
    faces = np.arange(24, dtype=np.int64).reshape(6, 4)
    return np.array(positions, dtype=np.float64), faces


UNIT_BOX_POSITIONS, BOX_FACES = _unit_box()
VERTICES_PER_BOX = len(UNIT_BOX_POSITIONS)


@dataclass
class CellBoxGeometry:
    """One box with baked positions and a flat per-vertex color."""

    positions: np.ndarray  # (24, 3) float64
    colors: np.ndarray  # (24, 3) uint8
    faces: np.ndarray  # (6, 4) local vertex indices
    lat_ndx: int = 0
    lon_ndx: int = 0


def rotation_x(theta):
    c, s = np.cos(theta), np.sin(theta)
    return np.array(
        [[1, 0, 0, 0], [0, c, -s, 0], [0, s, c, 0], [0, 0, 0, 1]], dtype=np.float64
    )


def rotation_y(theta):
    c, s = np.cos(theta), np.sin(theta)
    return np.array(
        [[c, 0, s, 0], [0, 1, 0, 0], [-s, 0, c, 0], [0, 0, 0, 1]], dtype=np.float64
    )


def translation(x, y, z):
    m = np.eye(4)
    m[:3, 3] = (x, y, z)
    return m


def scaling(x, y, z):
    return np.diag([x, y, z, 1.0])


def apply_matrix(positions, matrix):
    """Transform (n, 3) points by a 4x4 affine matrix."""
    return positions @ matrix[:3, :3].T + matrix[:3, 3]


def normalized_amount(value, lo, hi):
    """
    Position of ``value`` within [lo, hi] as a fraction.

    A uniform dataset (lo == hi) has no range to normalize over and maps every
    value to 0.
    """
    if hi == lo:
        return 0.0
    return (value - lo) / (hi - lo)


def missing_in_any(datasets: Sequence[GridDataset]) -> np.ndarray:
    """
    Mask of cells that are missing in at least one dataset.

    Args:
        datasets: Datasets sharing one grid shape

    Returns:
        np.ndarray: Boolean mask, True where any dataset lacks a sample
    """
    first = datasets[0]
    missing = np.zeros(first.shape, dtype=bool)
    for dataset in datasets:
        check_compatible(first, dataset)
        missing |= ~dataset.valid_mask
    return missing


def cell_box_matrix(lat_ndx, lon_ndx, dataset: GridDataset, amount):
    """
    Compose the transform that places one cell's box on the globe.

    Equivalent to nesting four frames: longitude rotation about the polar (Y)
    axis, latitude rotation about the X axis, a push out to the sphere
    surface, and a half-depth shift so the box grows from its base.
    """
    lon = rotation_y(radians(lon_ndx + dataset.xllcorner) + LON_OFFSET)
    lat = rotation_x(radians(lat_ndx + dataset.yllcorner) + LAT_OFFSET)
    surface = translation(0, 0, SPHERE_RADIUS)
    extrude = scaling(BOX_WIDTH, BOX_HEIGHT, lerp(MIN_EXTRUSION, MAX_EXTRUSION, amount))
    origin = translation(0, 0, 0.5)
    return lon @ lat @ surface @ extrude @ origin


def make_cell_box(lat_ndx, lon_ndx, dataset: GridDataset, hue_range, amount) -> CellBoxGeometry:
    """Build one box with baked transform and flat color."""
    matrix = cell_box_matrix(lat_ndx, lon_ndx, dataset, amount)
    positions = apply_matrix(UNIT_BOX_POSITIONS, matrix)
    colors = broadcast_color(amount_color(hue_range, amount), VERTICES_PER_BOX)
    return CellBoxGeometry(
        positions=positions,
        colors=colors,
        faces=BOX_FACES.copy(),
        lat_ndx=int(lat_ndx),
        lon_ndx=int(lon_ndx),
    )


def build_box_geometries(
    dataset: GridDataset,
    hue_range,
    datasets: Sequence[GridDataset],
    show_progress: bool = False,
) -> List[CellBoxGeometry]:
    """
    Create one box per cell of ``dataset``.

    Cells missing in any of ``datasets`` are skipped so that every dataset
    yields the same vertex layout, which morph blending requires.

    Args:
        dataset: Dataset to build boxes for
        hue_range: (start hue, end hue) for this dataset
        datasets: All displayable datasets, used for masking
        show_progress: Show a tqdm progress bar

    Returns:
        list: CellBoxGeometry in row-major cell order
    """
    keep = ~missing_in_any(datasets)
    cells = np.argwhere(keep)
    logger.info(f"Building {len(cells)} boxes ({int((~keep).sum())} cells masked)")

    geometries = []
    for lat_ndx, lon_ndx in tqdm(cells, desc="Building boxes", disable=not show_progress):
        value = dataset.data[lat_ndx, lon_ndx]
        amount = normalized_amount(value, dataset.min, dataset.max)
        geometries.append(make_cell_box(lat_ndx, lon_ndx, dataset, hue_range, amount))
    return geometries
