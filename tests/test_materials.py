"""
Tests for material operations.

Tests the morph color material node tree and the earth material.
"""

import pytest

# These tests require Blender environment
pytest.importorskip("bpy")


class TestApplyMorphColorMaterial:
    """Tests for apply_morph_color_material function."""

    def test_creates_slot_nodes(self):
        """Test that every slot gets a color attribute and a weight node."""
        import bpy
        from src.globe.materials import apply_morph_color_material, slot_node_names

        mat = bpy.data.materials.new("TestMaterial")
        apply_morph_color_material(mat, slot_count=4)

        nodes = mat.node_tree.nodes
        for slot in range(4):
            color_name, weight_name = slot_node_names(slot)
            assert nodes[color_name].bl_idname == "ShaderNodeAttribute"
            assert nodes[weight_name].bl_idname == "ShaderNodeValue"

        # Cleanup
        bpy.data.materials.remove(mat)

    def test_initial_weights_show_first_slot(self):
        """Test that only slot 0 is weighted before the first frame."""
        import bpy
        from src.globe.materials import apply_morph_color_material, slot_node_names

        mat = bpy.data.materials.new("TestMaterial")
        apply_morph_color_material(mat, slot_count=3)

        weights = [
            mat.node_tree.nodes[slot_node_names(slot)[1]].outputs[0].default_value
            for slot in range(3)
        ]
        assert weights == [1.0, 0.0, 0.0]

        bpy.data.materials.remove(mat)

    def test_emission_connected_to_output(self):
        """Test that the blended color drives the surface output."""
        import bpy
        from src.globe.materials import apply_morph_color_material

        mat = bpy.data.materials.new("TestMaterial")
        apply_morph_color_material(mat)

        node_types = [node.bl_idname for node in mat.node_tree.nodes]
        assert "ShaderNodeOutputMaterial" in node_types
        assert "ShaderNodeEmission" in node_types
        surface_links = [l for l in mat.node_tree.links if l.to_socket.name == "Surface"]
        assert surface_links[0].from_node.bl_idname == "ShaderNodeEmission"

        bpy.data.materials.remove(mat)


class TestCreateEarthMaterial:
    """Tests for create_earth_material function."""

    def test_untextured(self):
        """Test the plain dark globe material."""
        import bpy
        from src.globe.materials import create_earth_material

        mat = create_earth_material(name="TestEarth")

        node_types = [node.bl_idname for node in mat.node_tree.nodes]
        assert "ShaderNodeTexImage" not in node_types
        assert "ShaderNodeEmission" in node_types

        bpy.data.materials.remove(mat)
