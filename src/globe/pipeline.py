"""
Data-to-geometry pipeline for the density globe.

Runs the stages in dependency order:

1. load_bases: fetch and parse the base grids (concurrently, all-or-nothing)
2. derive: compute the excess datasets from the two bases
3. build_boxes: one box per unmasked cell, for every dataset
4. merge: collapse each dataset's boxes into one geometry
5. assemble: register every geometry as a morph target on the first

Example:
    from src.globe.pipeline import GlobePipeline

    model = GlobePipeline(data_dir="data").build()
    print(model.names, model.mesh.base.vertex_count)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from src.config import DATA_DIR, FETCH_TIMEOUT
from src.globe.box_geometry import build_box_geometries
from src.globe.data_loading import (
    DatasetDescriptor,
    build_displayable_datasets,
    default_base_descriptors,
    load_base_datasets,
)
from src.globe.mesh_operations import MergedGeometry, merge_geometries
from src.globe.morph_targets import MorphMesh, assemble_morph_mesh
from src.globe.shader_patch import MorphShaderPatcher

logger = logging.getLogger(__name__)


@dataclass
class GlobeModel:
    """Everything the renderer needs, built once at startup."""

    descriptors: List[DatasetDescriptor]
    geometries: List[MergedGeometry] = field(default_factory=list)
    mesh: Optional[MorphMesh] = None

    @property
    def names(self) -> List[str]:
        return [d.name for d in self.descriptors]


def build_globe_model(
    descriptors: Sequence[DatasetDescriptor],
    patcher: Optional[MorphShaderPatcher] = None,
    show_progress: bool = False,
) -> GlobeModel:
    """
    Build geometry and the morph mesh for already loaded datasets.

    Args:
        descriptors: All displayable datasets, the first becomes the base mesh
        patcher: Vertex-stage template, used to check morph slot capacity
        show_progress: Show progress bars while building boxes

    Returns:
        GlobeModel

    Raises:
        ShaderPatchError: If there are more datasets than morph slots
        TopologyMismatchError: If the merged geometries differ in layout
    """
    patcher = patcher or MorphShaderPatcher()
    patcher.check_capacity(len(descriptors))

    datasets = [d.dataset for d in descriptors]
    geometries = []
    for descriptor in descriptors:
        logger.info(f"Building geometry for '{descriptor.name}'")
        boxes = build_box_geometries(
            descriptor.dataset, descriptor.hue_range, datasets, show_progress=show_progress
        )
        geometries.append(merge_geometries(boxes))

    mesh = assemble_morph_mesh([d.name for d in descriptors], geometries)
    return GlobeModel(descriptors=list(descriptors), geometries=geometries, mesh=mesh)


class GlobePipeline:
    """
    Loads the base grids and builds the globe model.

    Args:
        base_descriptors: Descriptors of the two base datasets (default: the
            male/female grids in ``data_dir``)
        data_dir: Directory holding the default grid files
        timeout: Per-request timeout when sources are URLs
        show_progress: Show progress bars while building boxes
    """

    STAGES = ["load_bases", "derive", "build_boxes", "merge", "assemble"]

    def __init__(
        self,
        base_descriptors: Optional[Sequence[DatasetDescriptor]] = None,
        *,
        data_dir: Path | str = DATA_DIR,
        timeout: float = FETCH_TIMEOUT,
        show_progress: bool = True,
    ):
        self.base_descriptors = list(base_descriptors or default_base_descriptors(data_dir))
        self.timeout = timeout
        self.show_progress = show_progress
        self.patcher = MorphShaderPatcher()

    def explain(self) -> str:
        """Describe the execution plan."""
        sources = ", ".join(f"{d.name}={d.source}" for d in self.base_descriptors)
        lines = [f"Sources: {sources}"]
        lines += [f"  {i + 1}. {stage}" for i, stage in enumerate(self.STAGES)]
        return "\n".join(lines)

    def load(self) -> List[DatasetDescriptor]:
        """Load the bases and derive the excess datasets."""
        bases = load_base_datasets(self.base_descriptors, timeout=self.timeout)
        return build_displayable_datasets(bases)

    def build(self) -> GlobeModel:
        descriptors = self.load()
        model = build_globe_model(descriptors, self.patcher, show_progress=self.show_progress)
        logger.info(
            f"Globe model ready: {len(model.descriptors)} datasets, "
            f"{model.mesh.base.vertex_count} vertices each"
        )
        return model
