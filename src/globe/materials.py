"""
Material operations for the Blender globe.

Blender morphs positions natively through shape keys, but vertex colors are
not part of shape keys. The globe material therefore blends the colors
itself: one color-attribute input and one weight per morph slot, summed into
the emission color. This is the node-tree counterpart of MorphShaderPatcher.
"""

import logging

import bpy

from src.config import MAX_MORPH_TARGETS

logger = logging.getLogger(__name__)


def slot_node_names(slot):
    """Names of the (color attribute, weight) nodes for one morph slot."""
    return f"MorphColorSlot{slot}", f"MorphWeightSlot{slot}"


def apply_morph_color_material(
    material: bpy.types.Material,
    slot_count: int = MAX_MORPH_TARGETS,
    emission_strength: float = 1.0,
) -> None:
    """
    Build a node tree that blends ``slot_count`` color attributes by weight.

    Each slot has an Attribute node (rebound to a color set every frame) and a
    Value node holding the slot's weight. The weighted colors are summed and
    drive an emission shader, so colors show regardless of lighting.

    Args:
        material: Blender material to configure
        slot_count: Number of morph slots
        emission_strength: Emission shader strength
    """
    logger.info(f"Setting up morph color material {material.name} with {slot_count} slots")

    material.use_nodes = True
    material.node_tree.nodes.clear()
    nodes = material.node_tree.nodes
    links = material.node_tree.links

    try:
        output = nodes.new("ShaderNodeOutputMaterial")
        emission = nodes.new("ShaderNodeEmission")
        output.location = (400 + 200 * slot_count, 0)
        emission.location = (200 + 200 * slot_count, 0)
        emission.inputs["Strength"].default_value = emission_strength

        total = None
        for slot in range(slot_count):
            color_name, weight_name = slot_node_names(slot)

            attribute = nodes.new("ShaderNodeAttribute")
            attribute.name = attribute.label = color_name
            attribute.attribute_type = "GEOMETRY"
            attribute.location = (0, -200 * slot)

            weight = nodes.new("ShaderNodeValue")
            weight.name = weight.label = weight_name
            weight.outputs[0].default_value = 1.0 if slot == 0 else 0.0
            weight.location = (0, -200 * slot - 100)

            scale = nodes.new("ShaderNodeVectorMath")
            scale.operation = "SCALE"
            scale.location = (200, -200 * slot)
            links.new(attribute.outputs["Color"], scale.inputs[0])
            links.new(weight.outputs[0], scale.inputs["Scale"])

            if total is None:
                total = scale
            else:
                add = nodes.new("ShaderNodeVectorMath")
                add.operation = "ADD"
                add.location = (200 + 200 * slot, -100 * slot)
                links.new(total.outputs["Vector"], add.inputs[0])
                links.new(scale.outputs["Vector"], add.inputs[1])
                total = add

        links.new(total.outputs["Vector"], emission.inputs["Color"])
        links.new(emission.outputs["Emission"], output.inputs["Surface"])

        logger.info("Morph color material setup completed")

    except Exception as e:
        logger.error(f"Error setting up morph color material: {str(e)}")
        raise


def create_earth_material(texture_path=None, name: str = "EarthMaterial") -> bpy.types.Material:
    """
    Unlit material for the globe sphere, textured when an image is given.

    Args:
        texture_path: Optional equirectangular earth image
        name: Material name

    Returns:
        bpy.types.Material
    """
    material = bpy.data.materials.new(name=name)
    material.use_nodes = True
    nodes = material.node_tree.nodes
    links = material.node_tree.links
    nodes.clear()

    output = nodes.new("ShaderNodeOutputMaterial")
    emission = nodes.new("ShaderNodeEmission")
    output.location = (400, 0)
    emission.location = (200, 0)
    emission.inputs["Color"].default_value = (0.05, 0.05, 0.08, 1.0)

    if texture_path is not None:
        image = nodes.new("ShaderNodeTexImage")
        image.location = (0, 0)
        image.image = bpy.data.images.load(str(texture_path))
        links.new(image.outputs["Color"], emission.inputs["Color"])

    links.new(emission.outputs["Emission"], output.inputs["Surface"])
    return material
