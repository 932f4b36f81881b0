"""
Morph-target assembly for crossfading between datasets.

All datasets share one vertex layout (see missing-cell masking in
box_geometry), so the first dataset's geometry acts as the base mesh and every
dataset registers its positions as a named morph target. Colors are not part
of native position morphing; each dataset's colors are kept as a separate
color set paired with its position target by name.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from src.config import MAX_MORPH_TARGETS
from src.globe.mesh_operations import MergedGeometry

logger = logging.getLogger(__name__)


class TopologyMismatchError(ValueError):
    """Raised when merged geometries do not share the base vertex layout."""


@dataclass
class MorphTarget:
    name: str
    positions: np.ndarray


@dataclass
class SlotBinding:
    """One active morph slot for a frame: a target, its weight and its colors."""

    slot: int
    target_name: str
    weight: float
    positions: np.ndarray
    colors: np.ndarray


@dataclass
class MorphMesh:
    """
    Base geometry plus morph position targets and paired color sets.

    Attributes:
        base: Merged geometry of the first dataset
        targets: Position targets in registration order
        color_sets: Ordered (target name, colors) pairs
    """

    base: MergedGeometry
    targets: List[MorphTarget] = field(default_factory=list)
    color_sets: List[Tuple[str, np.ndarray]] = field(default_factory=list)

    @property
    def target_names(self) -> List[str]:
        return [target.name for target in self.targets]

    def color_pairs(self) -> List[Tuple[MorphTarget, np.ndarray]]:
        """Pair every position target with the color set registered under its name."""
        colors_by_name = dict(self.color_sets)
        pairs = []
        for target in self.targets:
            if target.name not in colors_by_name:
                raise KeyError(f"No color set registered for morph target '{target.name}'")
            pairs.append((target, colors_by_name[target.name]))
        return pairs

    def active_bindings(self, influences, max_slots: int = MAX_MORPH_TARGETS) -> List[SlotBinding]:
        """
        Choose the morph slots for one frame.

        The strongest non-zero influences fill at most ``max_slots`` slots, and
        each slot gets the color set paired with its target's name.

        Args:
            influences: One weight per target, in target registration order
            max_slots: Number of slots the vertex stage supports

        Returns:
            list: SlotBinding ordered by slot
        """
        influences = np.asarray(influences, dtype=np.float64)
        if len(influences) != len(self.targets):
            raise ValueError(
                f"Expected {len(self.targets)} influences, got {len(influences)}"
            )

        # Stable sort keeps registration order among equal weights
        order = sorted(range(len(influences)), key=lambda i: -abs(influences[i]))
        pairs = self.color_pairs()

        bindings = []
        for index in order[:max_slots]:
            weight = float(influences[index])
            if weight == 0.0:
                break
            target, colors = pairs[index]
            bindings.append(
                SlotBinding(
                    slot=len(bindings),
                    target_name=target.name,
                    weight=weight,
                    positions=target.positions,
                    colors=colors,
                )
            )
        return bindings


def assemble_morph_mesh(names: Sequence[str], geometries: Sequence[MergedGeometry]) -> MorphMesh:
    """
    Register every dataset's merged geometry as a morph target on the first.

    Args:
        names: Dataset names, used as target and color-set names
        geometries: Merged geometry per dataset, same order as names

    Returns:
        MorphMesh using geometries[0] as the base

    Raises:
        ValueError: If names and geometries do not line up or names repeat
        TopologyMismatchError: If any geometry differs from the base layout
    """
    if len(names) != len(geometries):
        raise ValueError(f"Got {len(names)} names for {len(geometries)} geometries")
    if not geometries:
        raise ValueError("At least one geometry is required")
    if len(set(names)) != len(names):
        raise ValueError(f"Dataset names must be unique: {list(names)}")

    base = geometries[0]
    mesh = MorphMesh(base=base)
    for name, geometry in zip(names, geometries):
        if geometry.vertex_count != base.vertex_count:
            raise TopologyMismatchError(
                f"Dataset '{name}' has {geometry.vertex_count} vertices, "
                f"base has {base.vertex_count}"
            )
        if not np.array_equal(geometry.faces, base.faces):
            raise TopologyMismatchError(f"Dataset '{name}' faces differ from the base")
        mesh.targets.append(MorphTarget(name=name, positions=geometry.positions))
        mesh.color_sets.append((name, geometry.colors))

    logger.info(f"Assembled morph mesh: {base.vertex_count} vertices, {len(mesh.targets)} targets")
    return mesh


def blend_vertices(mesh: MorphMesh, bindings: Sequence[SlotBinding]):
    """
    Evaluate the morph vertex stage on the CPU.

    position = base + sum((target - base) * weight)
    color    = sum(color * weight), colors normalized to [0, 1]

    Returns:
        tuple: (positions (n, 3) float64, colors (n, 3) float64)
    """
    base_positions = mesh.base.positions
    positions = base_positions.copy()
    colors = np.zeros(base_positions.shape, dtype=np.float64)
    for binding in bindings:
        positions += (binding.positions - base_positions) * binding.weight
        colors += (binding.colors / 255.0) * binding.weight
    return positions, colors
