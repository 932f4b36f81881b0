"""
Rendering operations for the Blender globe.

This module configures Blender render settings and provides the renderer
collaborator that writes one still per drawn frame.
"""

import logging
from pathlib import Path

import bpy

from src.globe.blender_integration import apply_frame_bindings

logger = logging.getLogger(__name__)


def setup_render_settings(
    width: int = 1280,
    height: int = 720,
    samples: int = 16,
    use_gpu: bool = False,
    compute_device: str = "CUDA",
) -> None:
    """
    Configure Blender render settings for the globe.

    The globe is emission-only, so a low sample count is enough.

    Args:
        width: Render width in pixels
        height: Render height in pixels
        samples: Number of Cycles samples
        use_gpu: Whether to use GPU acceleration
        compute_device: Compute device type ('OPTIX', 'CUDA', 'HIP', 'METAL')
    """
    logger.info("Configuring render settings...")

    scene = bpy.context.scene
    scene.render.engine = "CYCLES"
    scene.render.resolution_x = width
    scene.render.resolution_y = height
    scene.render.resolution_percentage = 100
    scene.render.image_settings.file_format = "PNG"
    scene.render.image_settings.color_mode = "RGBA"
    scene.view_settings.view_transform = "Standard"

    cycles = scene.cycles
    cycles.samples = samples
    cycles.use_denoising = False

    if use_gpu:
        logger.info(f"Setting up GPU rendering with {compute_device}...")
        try:
            cycles.device = "GPU"
            cprefs = bpy.context.preferences.addons["cycles"].preferences
            cprefs.compute_device_type = compute_device
            for device in cprefs.devices:
                device.use = True
        except Exception as e:
            logger.error(f"Failed to configure GPU rendering: {str(e)}")
            logger.warning("Falling back to CPU rendering")
            cycles.device = "CPU"

    logger.info("Render settings configured successfully")


class BlenderRenderer:
    """
    Renderer collaborator that renders the Blender scene to numbered PNGs.

    Args:
        globe_obj: Object made by create_globe_object
        output_dir: Directory for rendered frames
        prefix: File name prefix
    """

    def __init__(self, globe_obj, output_dir, prefix="globe"):
        self.globe_obj = globe_obj
        self.output_dir = Path(output_dir).resolve()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix
        self.frames = []

    def display_size(self):
        render = bpy.context.scene.render
        return (render.resolution_x, render.resolution_y)

    def draw(self, scene, camera):
        apply_frame_bindings(self.globe_obj, scene.bindings)

        output_path = self.output_dir / f"{self.prefix}_{len(self.frames):04d}.png"
        bpy.context.scene.render.filepath = str(output_path)
        try:
            bpy.ops.render.render(write_still=True)
        except Exception as e:
            logger.error(f"Render failed: {str(e)}")
            raise

        self.frames.append(output_path)
        logger.info(f"Rendered {output_path.name}")
        return output_path
