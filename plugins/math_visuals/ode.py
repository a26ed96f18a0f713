"""
ODE Attractor Kernel (Lorenz, Rossler, Aizawa, Halvorsen)

Integrates a 3D vector field with classic 4th-order Runge-Kutta at a fixed
step dt:

    lorenz:     (sigma (y - x),  x (rho - z) - y,  x y - beta z)
    rossler:    (-(y + z),  x + a y,  b + z (x - c))
    aizawa:     ((z - b) x - d y,  d x + (z - b) y,
                 c + a z - z^3/3 - (x^2 + y^2)(1 + e z) + f z x^3)
    halvorsen:  (-a x - 4y - 4z - y^2,  -a y - 4z - 4x - z^2,
                 -a z - 4x - 4y - x^2)

The trajectory is flattened by a fixed oblique projection
(x*0.8 + z*0.2, y*0.8 - z*0.1) and every 2nd sample becomes a vertex of one
connected polyline. A trajectory that blows up ends at its last finite
sample.
"""

import math
from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import to_pixel
from .raster import INK
from .validate import ParamReader

DEFAULT_BOUNDS = (-30.0, 30.0, -30.0, 30.0)
STROKE_ALPHA = 0.8

FAMILY_PARAMS = {
    "lorenz": ("sigma", "rho", "beta"),
    "rossler": ("a", "b", "c"),
    "aizawa": ("a", "b", "c", "d", "e", "f"),
    "halvorsen": ("a",),
}


@dataclass(frozen=True)
class OdeParams:
    family: str
    coeffs: tuple
    dt: float
    steps: int
    xyz0: tuple
    bounds: tuple


def make_derivative(family, coeffs):
    """Return the family's vector field as (x, y, z) -> (dx, dy, dz)."""
    if family == "lorenz":
        sigma, rho, beta = coeffs

        def deriv(x, y, z):
            return sigma * (y - x), x * (rho - z) - y, x * y - beta * z

    elif family == "rossler":
        a, b, c = coeffs

        def deriv(x, y, z):
            return -(y + z), x + a * y, b + z * (x - c)

    elif family == "aizawa":
        a, b, c, d, e, f = coeffs

        def deriv(x, y, z):
            return (
                (z - b) * x - d * y,
                d * x + (z - b) * y,
                c + a * z - (z * z * z) / 3.0 - (x * x + y * y) * (1.0 + e * z) + f * z * (x * x * x),
            )

    else:
        (a,) = coeffs

        def deriv(x, y, z):
            return (
                -a * x - 4.0 * y - 4.0 * z - y * y,
                -a * y - 4.0 * z - 4.0 * x - z * z,
                -a * z - 4.0 * x - 4.0 * y - x * x,
            )

    return deriv


def rk4_step(deriv, x, y, z, dt):
    """One RK4 step; all four stages use the same derivative."""
    k1 = deriv(x, y, z)
    k2 = deriv(x + dt * k1[0] / 2, y + dt * k1[1] / 2, z + dt * k1[2] / 2)
    k3 = deriv(x + dt * k2[0] / 2, y + dt * k2[1] / 2, z + dt * k2[2] / 2)
    k4 = deriv(x + dt * k3[0], y + dt * k3[1], z + dt * k3[2])
    return (
        x + dt * (k1[0] + 2 * k2[0] + 2 * k3[0] + k4[0]) / 6,
        y + dt * (k1[1] + 2 * k2[1] + 2 * k3[1] + k4[1]) / 6,
        z + dt * (k1[2] + 2 * k2[2] + 2 * k3[2] + k4[2]) / 6,
    )


def integrate(deriv, xyz0, dt, steps, every=2):
    """Integrate and keep every `every`-th state (starting with step 0).

    Returns:
        (n, 3) float64 array of kept states; stops early on a non-finite state
    """
    x, y, z = xyz0
    kept = []
    for i in range(steps):
        x, y, z = rk4_step(deriv, x, y, z, dt)
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
            break
        if i % every == 0:
            kept.append((x, y, z))
    return np.array(kept, dtype=np.float64).reshape(-1, 3)


def project(states):
    """Fixed oblique projection of (n, 3) states to (px, py) world coords."""
    x, y, z = states[:, 0], states[:, 1], states[:, 2]
    return x * 0.8 + z * 0.2, y * 0.8 - z * 0.1


class OdeAttractor(Kernel):
    """RK4-integrated 3D attractor drawn as a projected polyline."""

    renderer_type = "ode"
    label = "ODE attractor"
    families = tuple(FAMILY_PARAMS)

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        if preset.family not in FAMILY_PARAMS:
            read.fail("family", f"ode supports {list(FAMILY_PARAMS)}, got {preset.family!r}")
        return OdeParams(
            family=preset.family,
            coeffs=tuple(read.number(k) for k in FAMILY_PARAMS[preset.family]),
            dt=read.number("dt", 0.01, positive=True),
            steps=read.integer("steps", 80_000, minimum=0),
            xyz0=read.vector("xyz0", 3, default=(0.1, 0.0, 0.0)),
            bounds=read.view_bounds(DEFAULT_BOUNDS),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = params.bounds
        steps = ctx.budget.clamp("ode_steps", params.steps)
        deriv = make_derivative(params.family, params.coeffs)
        states = integrate(deriv, params.xyz0, params.dt, steps)
        if len(states) == 0:
            return
        wx, wy = project(states)
        px, py = to_pixel(wx, wy, ctx.bounds, ctx.width, ctx.height)
        raster.stroke_polyline(px, py, INK, STROKE_ALPHA)
