"""
Tests for Blender rendering setup.
"""

import pytest

# These tests require Blender environment
pytest.importorskip("bpy")


class TestSetupRenderSettings:
    """Tests for setup_render_settings function."""

    def test_resolution_and_samples(self):
        """Test that render settings are applied to the scene."""
        import bpy
        from src.globe.rendering import setup_render_settings

        setup_render_settings(width=640, height=360, samples=4)

        scene = bpy.context.scene
        assert scene.render.engine == "CYCLES"
        assert (scene.render.resolution_x, scene.render.resolution_y) == (640, 360)
        assert scene.cycles.samples == 4
        assert scene.render.image_settings.file_format == "PNG"


class TestBlenderRenderer:
    """Tests for BlenderRenderer."""

    def test_display_size_from_scene(self, globe_model, tmp_path):
        """Test that the display size follows the render resolution."""
        from src.globe.blender_integration import create_globe_object
        from src.globe.rendering import BlenderRenderer, setup_render_settings

        setup_render_settings(width=320, height=240)
        obj = create_globe_object(globe_model.mesh, name="RenderGlobe")
        renderer = BlenderRenderer(obj, tmp_path)

        assert renderer.display_size() == (320, 240)
        assert renderer.frames == []
