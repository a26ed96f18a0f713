"""
Reaction-Diffusion Preview (APPROXIMATION)

This is NOT a Gray-Scott simulation. Solving the PDE to a settled pattern
takes thousands of steps, far too slow for a gallery thumbnail, so this
kernel synthesises a look-alike from three summed sine fields:

    v = (sin(12x + 8y) + 0.5 sin(22x - 11y + 1.7) + 0.25 sin(40x + 3y + 0.3)) / 1.75
    s = 0.5 + 0.5 sin(8v + 30 (F - 0.03) - 20 (k - 0.06))

with x = px / W, y = py / H. F and k only shift the banding phase. An
optional `noise` amplitude perturbs v from ctx.rng for a less regular look.
Rasters produced here carry approximate=True.
"""

from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .palette import COLORMAPS, apply_colormap, get_colormap
from .validate import ParamReader


@dataclass(frozen=True)
class ReactionDiffusionParams:
    feed: float
    kill: float
    noise: float = 0.0
    palette: str = "gray"


def sine_proxy(W, H, feed, kill, noise=None):
    """The summed-sine stand-in for a Gray-Scott V field, values in [0, 1]."""
    x = np.arange(W, dtype=np.float64) / W
    y = np.arange(H, dtype=np.float64) / H
    X, Y = np.meshgrid(x, y)
    v = np.sin(12 * X + 8 * Y)
    v += 0.5 * np.sin(22 * X - 11 * Y + 1.7)
    v += 0.25 * np.sin(40 * X + 3 * Y + 0.3)
    v /= 1.75
    if noise is not None:
        v += noise
    return 0.5 + 0.5 * np.sin(8 * v + 30 * (feed - 0.03) - 20 * (kill - 0.06))


class ReactionDiffusionStub(Kernel):
    """Fast visual proxy for Gray-Scott patterns (approximation, no PDE)."""

    renderer_type = "reaction_diffusion"
    label = "Reaction-diffusion preview"
    families = ("gray_scott",)
    uses_rng = True
    approximate = True

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        return ReactionDiffusionParams(
            feed=read.number("F", 0.04),
            kill=read.number("k", 0.06),
            noise=read.number("noise", 0.0, minimum=0.0),
            palette=read.string("palette", "gray", choices=set(COLORMAPS)),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        W, H = ctx.width, ctx.height
        ctx.bounds = (0.0, 1.0, 0.0, 1.0)
        noise = None
        if params.noise > 0:
            noise = ctx.rng.standard_normal((H, W)) * params.noise
        s = sine_proxy(W, H, params.feed, params.kill, noise)
        raster.fill_rgb(apply_colormap(s, get_colormap(params.palette)))
