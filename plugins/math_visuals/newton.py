"""
Newton Basin Kernel

Newton-Raphson on f(z) = z^n - 1 for every pixel:

    z <- z - f(z) / f'(z),   f'(z) = n z^(n-1)

z^(n-1) is computed in polar form (r^(n-1), (n-1) theta). Iteration stops
early once |dz| < tolerance. Converged pixels are coloured by the root they
reached: the final angle is snapped to the nearest n-th root of unity, so
every pixel in one basin gets exactly the same hue. Pixels that never
converge (or hit z = 0 / f'(z) = 0) are black.
"""

from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import world_grid
from .palette import TAU, color_from_angle
from .validate import ParamReader, polynomial_degree

DEFAULT_BOUNDS = (-2.0, 2.0, -2.0, 2.0)


@dataclass(frozen=True)
class NewtonParams:
    degree: int
    max_iter: int
    tolerance: float
    bounds: tuple


def newton_solve(x, y, n, max_iter, tolerance):
    """Vectorised Newton iteration for z^n - 1.

    Args:
        x, y: float arrays of starting points (not modified)

    Returns:
        (x, y, converged) final coordinates and boolean convergence mask
    """
    x = np.array(x, dtype=np.float64).ravel()
    y = np.array(y, dtype=np.float64).ravel()
    converged = np.zeros(x.size, dtype=bool)
    idx = np.arange(x.size)

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for _ in range(max_iter):
            if idx.size == 0:
                break
            xs, ys = x[idx], y[idx]
            r = np.hypot(xs, ys)
            theta = np.arctan2(ys, xs)
            rn = r ** (n - 1)
            re = rn * np.cos((n - 1) * theta)
            im = rn * np.sin((n - 1) * theta)

            f_re = xs * re - ys * im - 1.0
            f_im = xs * im + ys * re
            df_re = n * re
            df_im = n * im
            denom = df_re * df_re + df_im * df_im

            # z = 0 has no defined angle and f'(0) = 0: stop, unconverged
            ok = (r != 0) & (denom != 0) & np.isfinite(denom)
            safe = np.where(ok, denom, 1.0)
            zx = xs - (f_re * df_re + f_im * df_im) / safe
            zy = ys - (f_im * df_re - f_re * df_im) / safe
            step = np.hypot(zx - xs, zy - ys)
            done = ok & (step < tolerance)

            x[idx[ok]] = zx[ok]
            y[idx[ok]] = zy[ok]
            converged[idx[done]] = True
            idx = idx[ok & ~done]

    return x, y, converged


def root_angle(x, y, n):
    """Angle of the n-th root of unity nearest to each point."""
    ang = np.mod(np.arctan2(y, x), TAU)
    k = np.rint(ang * n / TAU)
    return np.mod(k, n) * (TAU / n)


class NewtonBasins(Kernel):
    """Basins of attraction of Newton's method on z^n - 1."""

    renderer_type = "newton_basins"
    label = "Newton basins"
    families = ("newton",)

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        polynomial = read.string("polynomial", "z**3 - 1")
        degree = polynomial_degree(polynomial)
        if degree < 2:
            read.fail("polynomial", f"degree must be >= 2, got {degree}")
        return NewtonParams(
            degree=degree,
            max_iter=read.integer("max_iter", 40, minimum=1),
            tolerance=read.number("tolerance", 1e-6, positive=True),
            bounds=read.bounds("bounds", default=DEFAULT_BOUNDS),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        W, H = ctx.width, ctx.height
        ctx.bounds = params.bounds
        max_iter = ctx.budget.clamp("newton_iter", params.max_iter)
        X, Y = world_grid(ctx.bounds, W, H)
        x, y, converged = newton_solve(X, Y, params.degree, max_iter, params.tolerance)

        rgb = np.zeros((W * H, 3), dtype=np.uint8)
        if converged.any():
            rgb[converged] = color_from_angle(
                root_angle(x[converged], y[converged], params.degree))
        raster.fill_rgb(rgb.reshape(H, W, 3))
