"""
Tests for the morph vertex-stage template.
"""

import pytest


VERTEX_SOURCE = """
#include <common>
#include <color_pars_vertex>
#include <morphtarget_pars_vertex>
void main() {
    #include <color_vertex>
    #include <begin_vertex>
    #include <morphnormal_vertex>
    #include <morphtarget_vertex>
    #include <project_vertex>
}
"""


class TestMorphShaderPatcher:
    """Tests for MorphShaderPatcher."""

    def test_weight_array_sized_to_max_targets(self):
        """Test the influence array declaration."""
        from src.globe.shader_patch import MorphShaderPatcher

        patched = MorphShaderPatcher().patch(VERTEX_SOURCE)

        assert "uniform float morphTargetInfluences[4];" in patched

    def test_markers_replaced(self):
        """Test that every morph/color include marker is gone."""
        from src.globe.shader_patch import DEFAULT_MARKERS, MorphShaderPatcher

        patched = MorphShaderPatcher().patch(VERTEX_SOURCE)

        for marker in DEFAULT_MARKERS.values():
            assert marker not in patched
        assert "#include <project_vertex>" in patched

    def test_position_and_color_blending(self):
        """Test the weighted sums for positions and colors."""
        from src.globe.shader_patch import MorphShaderPatcher

        patched = MorphShaderPatcher().patch(VERTEX_SOURCE)

        for i in range(4):
            assert (
                f"transformed += (morphTarget{i} - position) * morphTargetInfluences[{i}];"
                in patched
            )
            assert f"attribute vec3 morphColor{i};" in patched
            assert f"morphColor{i} * morphTargetInfluences[{i}]" in patched
        assert "morphTarget4" not in patched

    def test_normals_not_blended(self):
        """Test that morph normals are dropped."""
        from src.globe.shader_patch import MorphShaderPatcher

        patched = MorphShaderPatcher().patch(VERTEX_SOURCE)

        assert "objectNormal" not in patched

    def test_larger_capacity(self):
        """Test that raising the capacity extends weights and attributes together."""
        from src.globe.shader_patch import MorphShaderPatcher

        patcher = MorphShaderPatcher(max_targets=6)
        patched = patcher.patch(VERTEX_SOURCE)

        assert "morphTargetInfluences[6];" in patched
        assert "attribute vec3 morphColor5;" in patched
        assert patcher.color_attribute_names()[-1] == "morphColor5"

    def test_missing_marker_raises(self):
        """Test that a shader without the expected markers is rejected."""
        from src.globe.shader_patch import MorphShaderPatcher, ShaderPatchError

        with pytest.raises(ShaderPatchError, match="morphtarget_pars_vertex"):
            MorphShaderPatcher().patch("void main() {}")

    def test_custom_markers(self):
        """Test that markers can follow another generator's code."""
        from src.globe.shader_patch import MorphShaderPatcher

        markers = {
            "weights": "//WEIGHTS",
            "normals": "//NORMALS",
            "positions": "//POSITIONS",
            "color_inputs": "//COLOR_INPUTS",
            "colors": "//COLORS",
        }
        source = "\n".join(markers.values())

        patched = MorphShaderPatcher(max_targets=2, markers=markers).patch(source)

        assert "uniform float morphTargetInfluences[2];" in patched
        assert "//" not in patched

    def test_capacity_check(self):
        """Test that more datasets than slots fail early."""
        from src.globe.shader_patch import MorphShaderPatcher, ShaderPatchError

        patcher = MorphShaderPatcher()
        patcher.check_capacity(4)

        with pytest.raises(ShaderPatchError, match="5 datasets"):
            patcher.check_capacity(5)
