"""
Escape-Time Kernel (Mandelbrot / Julia)

For every pixel p mapped to the complex plane:

    mandelbrot:  z0 = 0,  c = p
    julia:       z0 = p,  c = c_re + i c_im

iterate z <- z^2 + c until |z| > escape_radius or max_iter is reached and
colour by the iteration count. The whole grid is iterated at once; escaped
points drop out of the working index set each step, so late iterations only
touch points that are still bounded.

Mandelbrot presets may give `centre` + `zoom` instead of bounds: the window is
3.5/zoom wide and follows the canvas aspect ratio.
"""

from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import aspect_bounds, world_grid
from .palette import color_from_iterations
from .validate import ParamReader

DEFAULT_BOUNDS = (-2.5, 1.5, -1.5, 1.5)
MANDELBROT_WIDTH = 3.5


@dataclass(frozen=True)
class EscapeTimeParams:
    family: str
    max_iter: int
    escape_radius: float
    bounds: tuple
    centre: tuple = None
    zoom: float = None
    c: complex = 0j


def escape_counts(z, c, max_iter, escape_radius):
    """Iteration count per point for z <- z^2 + c.

    Args:
        z: complex array of starting values (modified in place)
        c: complex array broadcastable to z
        max_iter: hard iteration cap
        escape_radius: bailout magnitude

    Returns:
        int32 array shaped like z; max_iter means "never escaped"
    """
    shape = z.shape
    zf = z.reshape(-1)
    cf = np.broadcast_to(c, shape).reshape(-1)
    iters = np.zeros(zf.size, dtype=np.int32)
    idx = np.arange(zf.size)
    r2 = escape_radius * escape_radius

    # Overflowing orbits become inf/nan; nan compares False and drops out
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(max_iter):
            zs = zf[idx]
            alive = (zs.real * zs.real + zs.imag * zs.imag) <= r2
            idx = idx[alive]
            if idx.size == 0:
                break
            zf[idx] = zs[alive] * zs[alive] + cf[idx]
            iters[idx] += 1
    return iters.reshape(shape)


class EscapeTime(Kernel):
    """Escape-time fractals: Mandelbrot and Julia sets."""

    renderer_type = "escape_time"
    label = "Escape-time fractal"
    families = ("mandelbrot", "julia")

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        family = "julia" if preset.family == "julia" else "mandelbrot"
        centre = zoom = None
        c = 0j
        if family == "mandelbrot" and "centre" in preset.params and "zoom" in preset.params:
            centre = read.vector("centre", 2)
            zoom = read.number("zoom", positive=True)
        if family == "julia":
            c = complex(read.number("c_re"), read.number("c_im"))
        # centre + zoom decide the window; any bounds are then ignored
        bounds = DEFAULT_BOUNDS
        if centre is None:
            bounds = read.bounds("bounds", default=DEFAULT_BOUNDS)
        return EscapeTimeParams(
            family=family,
            max_iter=read.integer("max_iter", 400, minimum=1),
            escape_radius=read.number("escape_radius", 2.0, positive=True),
            bounds=bounds,
            centre=centre,
            zoom=zoom,
            c=c,
        )

    @classmethod
    def window(cls, params, W, H):
        """World window for this canvas size."""
        if params.centre is not None:
            cx, cy = params.centre
            return aspect_bounds(cx, cy, MANDELBROT_WIDTH / params.zoom, W, H)
        return params.bounds

    @classmethod
    def draw(cls, params, ctx, raster):
        W, H = ctx.width, ctx.height
        ctx.bounds = cls.window(params, W, H)
        max_iter = ctx.budget.clamp("max_iter", params.max_iter)

        X, Y = world_grid(ctx.bounds, W, H)
        points = X + 1j * Y
        if params.family == "julia":
            z = points
            c = np.complex128(params.c)
        else:
            z = np.zeros_like(points)
            c = points

        iters = escape_counts(z, c, max_iter, params.escape_radius)
        raster.fill_rgb(color_from_iterations(iters, max_iter))
