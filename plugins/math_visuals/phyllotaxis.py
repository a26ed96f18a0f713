"""
Point-Polar Kernel (phyllotaxis)

Vogel's model of seed packing: point i sits at

    r = scale * sqrt(i / n),   theta = i * divergence

with the golden angle (~137.507 deg) as the default divergence. Each point
is one pixel; there is no connectivity between points.
"""

import math
from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import to_pixel
from .raster import INK
from .validate import ParamReader

GOLDEN_ANGLE_DEG = 137.507
BOUNDS = (-1.0, 1.0, -1.0, 1.0)


@dataclass(frozen=True)
class PhyllotaxisParams:
    n_points: int
    divergence_deg: float
    scale: float


def vogel_points(n, divergence_deg, scale):
    """World (x, y) arrays of the n points."""
    i = np.arange(n, dtype=np.float64)
    r = scale * np.sqrt(i / max(n, 1))
    theta = i * math.radians(divergence_deg)
    return r * np.cos(theta), r * np.sin(theta)


class Phyllotaxis(Kernel):
    """Sunflower-head scatter of points at a fixed divergence angle."""

    renderer_type = "point_polar"
    label = "Phyllotaxis"
    families = ("phyllotaxis",)

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        return PhyllotaxisParams(
            n_points=read.integer("n_points", 2000, minimum=0),
            divergence_deg=read.number("divergence_deg", GOLDEN_ANGLE_DEG),
            scale=read.number("scale", 0.7),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = BOUNDS
        n = ctx.budget.clamp("n_points", params.n_points)
        x, y = vogel_points(n, params.divergence_deg, params.scale)
        px, py = to_pixel(x, y, ctx.bounds, ctx.width, ctx.height)
        raster.plot(px, py, INK)
