"""
Scene setup operations for the Blender globe.

This module contains functions for clearing the scene, adding the earth sphere
and placing a camera that orbits the globe.
"""

import logging
from math import cos, radians, sin
from typing import Callable, List

import bpy
from mathutils import Vector

from src.globe.materials import create_earth_material

logger = logging.getLogger(__name__)


def clear_scene():
    """
    Clear all objects from the Blender scene.

    Resets the scene to factory settings (empty scene) so repeated runs start
    from a clean workspace.
    """
    logger.info("Clearing Blender scene...")
    bpy.ops.wm.read_factory_settings(use_empty=True)

    for collection in (bpy.data.meshes, bpy.data.materials, bpy.data.images):
        for block in list(collection):
            collection.remove(block)


def add_earth_sphere(radius=1.0, texture_path=None, name="Earth"):
    """
    Add the sphere the density boxes stand on.

    Args:
        radius: Sphere radius (the boxes start at the unit sphere)
        texture_path: Optional earth texture image
        name: Object name

    Returns:
        bpy.types.Object: The sphere
    """
    bpy.ops.mesh.primitive_uv_sphere_add(segments=64, ring_count=32, radius=radius)
    sphere = bpy.context.active_object
    sphere.name = name
    sphere.data.materials.append(create_earth_material(texture_path))
    return sphere


def setup_world_background(color=(0.0, 0.0, 0.0, 1.0)):
    """Set a flat world background color."""
    world = bpy.context.scene.world
    if world is None:
        world = bpy.data.worlds.new("World")
        bpy.context.scene.world = world
    world.use_nodes = True
    background = world.node_tree.nodes.get("Background")
    if background is not None:
        background.inputs["Color"].default_value = color


class BlenderOrbitCamera:
    """
    Camera controls collaborator backed by a Blender camera.

    The camera sits on a circle around the globe and always looks at the
    origin. ``orbit`` moves it and notifies change listeners.

    Args:
        distance: Distance from the globe center
        fov: Vertical field of view in degrees
        azimuth: Initial angle around the polar axis in degrees
        elevation: Initial angle above the equator in degrees
    """

    def __init__(self, distance=2.5, fov=60.0, azimuth=0.0, elevation=0.0):
        camera_data = bpy.data.cameras.new(name="GlobeCamera")
        camera_data.angle = radians(fov)
        camera_data.clip_start = 0.1
        camera_data.clip_end = 10.0
        self.camera = bpy.data.objects.new("GlobeCamera", camera_data)
        bpy.context.scene.collection.objects.link(self.camera)
        bpy.context.scene.camera = self.camera

        self.distance = distance
        self.azimuth = azimuth
        self.elevation = elevation
        self.aspect = 2.0
        self._listeners: List[Callable[[], None]] = []
        self.update()

    def set_aspect(self, aspect: float) -> None:
        self.aspect = aspect
        self.camera.data.sensor_fit = "VERTICAL" if aspect >= 1.0 else "HORIZONTAL"

    def update(self) -> None:
        az, el = radians(self.azimuth), radians(self.elevation)
        location = Vector(
            (
                self.distance * cos(el) * sin(az),
                -self.distance * cos(el) * cos(az),
                self.distance * sin(el),
            )
        )
        self.camera.location = location
        self.camera.rotation_euler = (-location).to_track_quat("-Z", "Y").to_euler()

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def orbit(self, d_azimuth=0.0, d_elevation=0.0) -> None:
        self.azimuth += d_azimuth
        self.elevation = max(-89.0, min(89.0, self.elevation + d_elevation))
        for callback in self._listeners:
            callback()
