"""
IFS Kernel (chaos game)

One running point; at every iteration one affine map

    x' = a x + b y + e
    y' = c x + d y + f

is picked with probability p and applied. Iterates after the first
`discard` are plotted. Map choice scans cumulative probabilities
(r <= acc) and falls back to the LAST map when rounding leaves r above the
final cumulative sum, so probabilities that add up to 0.999 still pick a
map every time.

All randomness comes from ctx.rng.
"""

from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import to_pixel
from .raster import INK
from .validate import ParamReader

DEFAULT_BOUNDS = (-3.0, 3.0, -6.0, 1.0)
MAP_KEYS = ("a", "b", "c", "d", "e", "f")


@dataclass(frozen=True)
class IfsParams:
    maps: tuple          # ((a, b, c, d, e, f), ...)
    probabilities: tuple
    points: int
    discard: int
    bounds: tuple


def choose_maps(probabilities, r):
    """Map index for each uniform draw in r.

    Index of the first map whose cumulative probability reaches r; draws
    beyond the total fall back to the last map.
    """
    cumulative = np.cumsum(np.asarray(probabilities, dtype=np.float64))
    idx = np.searchsorted(cumulative, r, side="left")
    return np.minimum(idx, len(cumulative) - 1)


def chaos_game(maps, choices):
    """Apply maps[choices[i]] in sequence from (0, 0); returns (xs, ys)."""
    coeffs = np.asarray(maps, dtype=np.float64)
    picked = coeffs[choices]
    n = len(choices)
    xs = np.empty(n, dtype=np.float64)
    ys = np.empty(n, dtype=np.float64)
    x = y = 0.0
    for i, (a, b, c, d, e, f) in enumerate(picked.tolist()):
        x, y = a * x + b * y + e, c * x + d * y + f
        xs[i] = x
        ys[i] = y
    return xs, ys


class Ifs(Kernel):
    """Iterated function system rendered by the chaos game."""

    renderer_type = "ifs"
    label = "Iterated function system"
    families = ("ifs",)
    uses_rng = True

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        raw = preset.params.get("maps")
        if isinstance(raw, (str, bytes)) or not hasattr(raw, "__len__") or len(raw) == 0:
            read.fail("maps", "expected a non-empty list of affine maps")
        maps = []
        probabilities = []
        for i, m in enumerate(raw):
            if not hasattr(m, "get"):
                read.fail(f"maps[{i}]", "expected a mapping with a..f and p")
            sub = ParamReader(preset, m, prefix=f"maps[{i}].")
            maps.append(tuple(sub.number(k) for k in MAP_KEYS))
            probabilities.append(sub.number("p", minimum=0.0))
        return IfsParams(
            maps=tuple(maps),
            probabilities=tuple(probabilities),
            points=read.integer("points", 150_000, minimum=0),
            discard=read.integer("discard", 100, minimum=0),
            bounds=read.view_bounds(DEFAULT_BOUNDS),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = params.bounds
        n = ctx.budget.clamp("ifs_points", params.points)
        r = ctx.rng.random(n)
        xs, ys = chaos_game(params.maps, choose_maps(params.probabilities, r))

        keep = slice(params.discard + 1, None)
        with np.errstate(invalid="ignore", over="ignore"):
            px, py = to_pixel(xs[keep], ys[keep], ctx.bounds, ctx.width, ctx.height)
        raster.plot(px, py, INK)
