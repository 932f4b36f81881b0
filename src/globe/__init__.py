"""
Density globe package.

Core functionality:
- Grid parsing and derived excess datasets
- Per-cell box geometry baked onto a unit sphere
- Morph-target assembly and crossfading between datasets
- Blender and matplotlib renderers
"""

from .grid_data import GridDataset, parse_grid_text, load_grid_file
from .diff_datasets import make_diff_dataset, amount_greater_than
from .box_geometry import build_box_geometries
from .mesh_operations import MergedGeometry, merge_geometries
from .morph_targets import MorphMesh, assemble_morph_mesh, blend_vertices
from .shader_patch import MorphShaderPatcher
from .crossfade import CrossfadeController, RenderScheduler
from .pipeline import GlobePipeline, GlobeModel, build_globe_model

__all__ = [
    "GridDataset",
    "parse_grid_text",
    "load_grid_file",
    "make_diff_dataset",
    "amount_greater_than",
    "build_box_geometries",
    "MergedGeometry",
    "merge_geometries",
    "MorphMesh",
    "assemble_morph_mesh",
    "blend_vertices",
    "MorphShaderPatcher",
    "CrossfadeController",
    "RenderScheduler",
    "GlobePipeline",
    "GlobeModel",
    "build_globe_model",
]
