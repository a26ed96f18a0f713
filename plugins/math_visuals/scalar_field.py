"""
Scalar Field Kernel (plane-wave interference)

On the square x, y in [-1, 1] sum cosine plane waves

    v = mean_i cos((kx_i x + ky_i y) * kmag_i * pi + phase_i)

and map (v * 0.5 + 0.5) through a colormap LUT (grayscale by default).
Cost is W * H * number_of_waves; the grid is evaluated one wave at a time.
"""

from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .palette import COLORMAPS, apply_colormap, get_colormap
from .validate import ParamReader

DEFAULT_K_VECTORS = ((1.0, 0.0, 1.0), (0.309, 0.951, 1.0), (-0.809, 0.588, 1.0))
DEFAULT_PHASES = (0.0, 1.0, 2.0)
BOUNDS = (-1.0, 1.0, -1.0, 1.0)


@dataclass(frozen=True)
class ScalarFieldParams:
    k_vectors: tuple
    phases: tuple
    palette: str = "gray"


def interference(k_vectors, phases, W, H):
    """Averaged wave sum on the W x H grid, row 0 at y = -1."""
    x = -1.0 + 2.0 * np.arange(W) / max(W - 1, 1)
    y = -1.0 + 2.0 * np.arange(H) / max(H - 1, 1)
    X, Y = np.meshgrid(x, y)
    v = np.zeros((H, W), dtype=np.float64)
    for i, (kx, ky, kmag) in enumerate(k_vectors):
        phase = phases[i] if i < len(phases) else 0.0
        v += np.cos((kx * X + ky * Y) * kmag * np.pi + phase)
    return v / len(k_vectors)


class ScalarField(Kernel):
    """Interference pattern of summed plane waves."""

    renderer_type = "scalar_field"
    label = "Wave interference field"
    families = ("interference",)

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        raw = preset.params.get("k_vectors")
        if raw is None:
            k_vectors = DEFAULT_K_VECTORS
        else:
            if isinstance(raw, (str, bytes)) or not hasattr(raw, "__len__") or len(raw) == 0:
                read.fail("k_vectors", "expected a non-empty list of [kx, ky, kmag]")
            k_vectors = tuple(read.check_vector("k_vectors", k, 3) for k in raw)
        raw_phases = preset.params.get("phases")
        if raw_phases is None:
            phases = DEFAULT_PHASES
        elif isinstance(raw_phases, (str, bytes)) or not hasattr(raw_phases, "__len__"):
            read.fail("phases", "expected a list of numbers")
        else:
            phases = read.check_vector("phases", raw_phases, len(raw_phases))
        return ScalarFieldParams(
            k_vectors=k_vectors,
            phases=phases,
            palette=read.string("palette", "gray", choices=set(COLORMAPS)),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = BOUNDS
        v = interference(params.k_vectors, params.phases, ctx.width, ctx.height)
        raster.fill_rgb(apply_colormap(v * 0.5 + 0.5, get_colormap(params.palette)))
