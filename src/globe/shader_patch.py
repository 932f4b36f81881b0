"""
Vertex-stage template for blending morph positions and colors.

A generated vertex shader is patched at fixed include markers so that it
blends up to ``max_targets`` position targets and the same number of per-vertex
color inputs with one shared weight array. Markers and identifiers are
configurable so the template can follow another renderer's generated code.

The bundled renderers do not compile GLSL. The Blender backend blends colors
in a node tree (materials.apply_morph_color_material) and positions through
shape keys, and the matplotlib preview uses morph_targets.blend_vertices.
The pipeline uses the patcher's slot count to refuse datasets that would not
fit the vertex stage.
"""

import logging
from typing import Dict, List, Optional, Tuple

from src.config import MAX_MORPH_TARGETS

logger = logging.getLogger(__name__)


class ShaderPatchError(RuntimeError):
    """Raised when a shader cannot be patched for morph blending."""


DEFAULT_MARKERS = {
    "weights": "#include <morphtarget_pars_vertex>",
    "normals": "#include <morphnormal_vertex>",
    "positions": "#include <morphtarget_vertex>",
    "color_inputs": "#include <color_pars_vertex>",
    "colors": "#include <color_vertex>",
}


class MorphShaderPatcher:
    """
    Rewrites a vertex shader for bounded-count position and color morphing.

    Args:
        max_targets: Number of morph slots the shader supports
        markers: Overrides for DEFAULT_MARKERS
        weight_uniform: Name of the influence weight array
        position_attribute: Prefix of the per-slot position attributes
        color_attribute: Prefix of the per-slot color attributes
    """

    def __init__(
        self,
        max_targets: int = MAX_MORPH_TARGETS,
        markers: Optional[Dict[str, str]] = None,
        weight_uniform: str = "morphTargetInfluences",
        position_attribute: str = "morphTarget",
        color_attribute: str = "morphColor",
    ):
        if max_targets < 1:
            raise ShaderPatchError(f"max_targets must be positive, got {max_targets}")
        self.max_targets = max_targets
        self.markers = dict(DEFAULT_MARKERS)
        if markers:
            self.markers.update(markers)
        self.weight_uniform = weight_uniform
        self.position_attribute = position_attribute
        self.color_attribute = color_attribute

    def check_capacity(self, n_datasets: int) -> None:
        """Fail if more datasets are displayable than the shader has slots."""
        if n_datasets > self.max_targets:
            raise ShaderPatchError(
                f"{n_datasets} datasets exceed the {self.max_targets} supported morph targets"
            )

    def color_attribute_names(self) -> List[str]:
        return [f"{self.color_attribute}{i}" for i in range(self.max_targets)]

    def _weighted_terms(self, template: str) -> List[str]:
        return [
            template.format(i=i, w=f"{self.weight_uniform}[{i}]") for i in range(self.max_targets)
        ]

    def replacements(self) -> List[Tuple[str, str]]:
        """
        Marker and replacement pairs, in the order they are applied.

        Returns:
            list: (marker, replacement source) tuples
        """
        weights = f"uniform float {self.weight_uniform}[{self.max_targets}];\n"

        positions = "\n".join(
            self._weighted_terms(
                f"transformed += ({self.position_attribute}{{i}} - position) * {{w}};"
            )
        )

        color_inputs = "varying vec3 vColor;\n" + "\n".join(
            f"attribute vec3 {name};" for name in self.color_attribute_names()
        )

        color_sum = " +\n             ".join(
            self._weighted_terms(f"{self.color_attribute}{{i}} * {{w}}")
        )
        colors = f"vColor.xyz = {color_sum};"

        return [
            (self.markers["weights"], weights),
            # Boxes are flat shaded, normals need no blending
            (self.markers["normals"], ""),
            (self.markers["positions"], positions + "\n"),
            (self.markers["color_inputs"], color_inputs + "\n"),
            (self.markers["colors"], colors + "\n"),
        ]

    def patch(self, vertex_source: str) -> str:
        """
        Apply every replacement to a vertex shader source.

        Raises:
            ShaderPatchError: If a marker is missing from the source
        """
        for marker, replacement in self.replacements():
            if marker not in vertex_source:
                raise ShaderPatchError(f"Marker '{marker}' not found in vertex shader")
            vertex_source = vertex_source.replace(marker, replacement, 1)
        logger.debug(f"Patched vertex shader for {self.max_targets} morph targets")
        return vertex_source
