"""
math_visuals - deterministic preset-to-raster rendering

    from math_visuals import render, get_preset
    raster = render(get_preset("mandelbrot_full"), 256, 256, quality="draft")
    raster.pixels  # (256, 256, 4) uint8
"""

from .dispatcher import KERNELS, describe_kernels, get_kernel, render
from .errors import KernelFault, UnknownRendererType, ValidationError
from .presets import PRESETS, PRESET_ORDER, Preset, get_preset, list_presets, load_presets
from .raster import RasterTarget

__all__ = [
    "KERNELS",
    "KernelFault",
    "PRESETS",
    "PRESET_ORDER",
    "Preset",
    "RasterTarget",
    "UnknownRendererType",
    "ValidationError",
    "describe_kernels",
    "get_kernel",
    "get_preset",
    "list_presets",
    "load_presets",
    "render",
]
