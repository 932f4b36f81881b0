"""Configuration module for density-globe project.

Centralizes data paths, globe geometry constants and crossfade settings.
"""
from math import pi
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
RENDER_DIR = DATA_DIR / "renders"

# Default settings
DEFAULT_LOG_LEVEL = "INFO"
FETCH_TIMEOUT = 60  # seconds per dataset request

# Globe geometry
SPHERE_RADIUS = 1.0
BOX_WIDTH = 0.005
BOX_HEIGHT = 0.005
MIN_EXTRUSION = 0.01
MAX_EXTRUSION = 0.5
# Calibration offsets line the grid up with the earth texture
LON_OFFSET = pi * 0.5
LAT_OFFSET = pi * -0.135

# Box color (HSL)
BOX_SATURATION = 1.0
MIN_LIGHTNESS = 0.4
MAX_LIGHTNESS = 1.0

# Morphing and crossfade
MAX_MORPH_TARGETS = 4
CROSSFADE_DURATION = 0.1  # seconds
INFLUENCE_TOLERANCE = 1e-6
