"""
Color mapping functions for globe boxes.

Each box gets one flat color: the hue is interpolated across the dataset's hue
range and the lightness brightens with the sample amount.
"""

import colorsys

import numpy as np

from src.config import BOX_SATURATION, MIN_LIGHTNESS, MAX_LIGHTNESS


def lerp(a, b, t):
    return a + (b - a) * t


def hsl_to_rgb8(hue, saturation, lightness):
    """
    Convert an HSL color to an 8-bit RGB triple.

    Hue wraps around, so ranges such as (0.9, 1.1) pass through red.
    Saturation and lightness are clamped to [0, 1].

    Args:
        hue: Hue in turns (any real number)
        saturation: Saturation in [0, 1]
        lightness: Lightness in [0, 1]

    Returns:
        np.ndarray: Shape (3,) uint8 array
    """
    hue = hue % 1.0
    saturation = min(max(saturation, 0.0), 1.0)
    lightness = min(max(lightness, 0.0), 1.0)
    rgb = colorsys.hls_to_rgb(hue, lightness, saturation)
    return (np.array(rgb) * 255).astype(np.uint8)


def amount_color(hue_range, amount):
    """Color for a normalized amount within a dataset's hue range."""
    hue = lerp(hue_range[0], hue_range[1], amount)
    lightness = lerp(MIN_LIGHTNESS, MAX_LIGHTNESS, amount)
    return hsl_to_rgb8(hue, BOX_SATURATION, lightness)


def broadcast_color(color, n_vertices):
    """
    Replicate one color across a vertex buffer.

    Args:
        color: Sequence of channel values (e.g. an RGB triple)
        n_vertices: Number of vertices to fill

    Returns:
        np.ndarray: Shape (n_vertices, len(color)) with the dtype of ``color``
    """
    color = np.asarray(color)
    return np.broadcast_to(color, (n_vertices, color.shape[-1])).copy()
