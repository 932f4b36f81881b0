"""
Blender integration for the density globe.

Turns a MorphMesh into a Blender object: the base geometry becomes the mesh,
every dataset becomes a shape key, and every dataset's colors become a point
color attribute. Per frame, shape-key values and the material's color slots
are updated from the crossfade's slot bindings.
"""

from math import radians

import numpy as np

import bpy

from src.config import MAX_MORPH_TARGETS
from src.globe.materials import apply_morph_color_material, slot_node_names


def color_attribute_name(target_name: str) -> str:
    return f"color_{target_name}"


def create_globe_object(morph_mesh, name="DensityGlobe", logger=None):
    """
    Create a Blender object with shape keys and color sets for a MorphMesh.

    The globe geometry is Y-up; the object is rotated 90 degrees about X so
    the polar axis points along Blender's Z.

    Args:
        morph_mesh (MorphMesh): Assembled morph mesh
        name (str): Name for the mesh, object and material
        logger (logging.Logger, optional): Logger for progress messages

    Returns:
        bpy.types.Object: The created globe object with its morph material
    """
    base = morph_mesh.base
    if logger:
        logger.info(
            f"Creating Blender globe with {base.vertex_count} vertices "
            f"and {len(morph_mesh.targets)} shape keys..."
        )

    try:
        mesh = bpy.data.meshes.new(name)
        mesh.from_pydata(base.positions.tolist(), [], base.faces.tolist())
        mesh.update(calc_edges=True)

        for target_name, colors in morph_mesh.color_sets:
            attribute = mesh.color_attributes.new(
                name=color_attribute_name(target_name), type="FLOAT_COLOR", domain="POINT"
            )
            rgba = np.ones((len(colors), 4), dtype=np.float32)
            rgba[:, :3] = colors / 255.0
            attribute.data.foreach_set("color", rgba.ravel())

        obj = bpy.data.objects.new(name, mesh)
        bpy.context.scene.collection.objects.link(obj)
        obj.rotation_euler = (radians(90), 0, 0)

        obj.shape_key_add(name="Basis", from_mix=False)
        for target in morph_mesh.targets:
            key = obj.shape_key_add(name=target.name, from_mix=False)
            key.data.foreach_set("co", target.positions.astype(np.float32).ravel())
            key.value = 0.0

        material = bpy.data.materials.new(name=f"{name}Material")
        obj.data.materials.append(material)
        apply_morph_color_material(material)

        if logger:
            logger.info(f"Globe '{name}' created successfully")
        return obj

    except Exception as e:
        if logger:
            logger.error(f"Error creating globe object: {str(e)}")
        raise


def apply_frame_bindings(obj, bindings, slot_count=MAX_MORPH_TARGETS):
    """
    Push one frame's slot bindings into the object's shape keys and material.

    Shape keys not bound to a slot are zeroed. Each material slot is rebound
    to the color attribute of the target it carries this frame.

    Args:
        obj (bpy.types.Object): Object made by create_globe_object
        bindings (list): SlotBinding list from CrossfadeController.bind_frame
        slot_count (int): Number of slots in the material
    """
    key_blocks = obj.data.shape_keys.key_blocks
    for key in key_blocks[1:]:
        key.value = 0.0
    for binding in bindings:
        key_blocks[binding.target_name].value = binding.weight

    nodes = obj.active_material.node_tree.nodes
    for slot in range(slot_count):
        color_name, weight_name = slot_node_names(slot)
        if slot < len(bindings):
            nodes[color_name].attribute_name = color_attribute_name(bindings[slot].target_name)
            nodes[weight_name].outputs[0].default_value = bindings[slot].weight
        else:
            nodes[weight_name].outputs[0].default_value = 0.0
