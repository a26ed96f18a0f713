"""
Curve Kernels

parametric_2d - closed-form (x(t), y(t)), t in [0, 2*pi]
    lissajous:   (A sin(a t + delta), B sin(b t))
    spirograph:  Rr = R + r (epi) or R - r (hypo), k = Rr / r
                 (Rr cos t - d cos k t, Rr sin t - d sin k t) / (R + |r| + |d|)

polar_2d - r(theta) converted to Cartesian with aspect correction
    superformula: r = (|cos(m phi/4)/a|^n2 + |sin(m phi/4)/b|^n3)^(-1/n1)
    rose_curve:   r = A cos(k theta), k = k_num / k_den; negative r is
                  folded to (|r|, theta + pi)

Both evaluate N uniform samples and stroke one polyline. Samples that come
out non-finite (superformula at a vanishing denominator) break the line
instead of drawing to infinity.
"""

import math
from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .mapper import to_pixel
from .raster import INK
from .validate import ParamReader

STROKE_ALPHA = 0.85
POLAR_SCALE = 1.2
POLAR_BOUNDS = (-1.0, 1.0, -1.0, 1.0)


def sample_angles(n):
    """n samples of t in [0, 2*pi], both ends included."""
    return np.linspace(0.0, 2.0 * math.pi, n)


# ── parametric_2d ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParametricParams:
    family: str
    samples: int
    values: tuple       # lissajous: (A, B, a, b, delta); spirograph: (R, r, d)
    kind: str = "hypo"
    bounds: tuple = None


def lissajous(t, A, B, a, b, delta):
    return A * np.sin(a * t + delta), B * np.sin(b * t)


def spirograph(t, R, r, d, kind="hypo"):
    """Epi/hypotrochoid normalised into the unit box."""
    Rr = R + r if kind == "epi" else R - r
    k = Rr / r
    norm = R + abs(r) + abs(d)
    x = Rr * np.cos(t) - d * np.cos(k * t)
    y = Rr * np.sin(t) - d * np.sin(k * t)
    return x / norm, y / norm


class Parametric2D(Kernel):
    """Lissajous figures and spirographs."""

    renderer_type = "parametric_2d"
    label = "Parametric curve"
    families = ("lissajous", "spirograph")

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        samples = read.integer("samples", 4000, minimum=2)
        if preset.family == "lissajous":
            values = tuple(read.number(k) for k in ("A", "B", "a", "b", "delta"))
            kind = ""
        elif preset.family == "spirograph":
            values = (read.number("R"), read.number("r", nonzero=True), read.number("d"))
            kind = read.string("kind", "hypo", choices={"epi", "hypo"})
            if values[0] + abs(values[1]) + abs(values[2]) == 0:
                read.fail("R", "R + |r| + |d| must be non-zero")
        else:
            read.fail("family", f"parametric_2d supports {list(cls.families)}, got {preset.family!r}")
        bounds = None
        if preset.view_bounds is not None:
            bounds = read.view_bounds(None)
        return ParametricParams(preset.family, samples, values, kind, bounds)

    @classmethod
    def draw(cls, params, ctx, raster):
        aspect = ctx.aspect
        ctx.bounds = params.bounds or (-1.2 * aspect, 1.2 * aspect, -1.2, 1.2)
        n = max(2, ctx.budget.clamp("samples", params.samples))
        t = sample_angles(n)
        if params.family == "lissajous":
            x, y = lissajous(t, *params.values)
        else:
            x, y = spirograph(t, *params.values, kind=params.kind)
        px, py = to_pixel(x, y, ctx.bounds, ctx.width, ctx.height)
        raster.stroke_polyline(px, py, INK, STROKE_ALPHA)


# ── polar_2d ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PolarParams:
    family: str
    samples: int
    values: tuple       # superformula: (m, a, b, n1, n2, n3); rose: (k, A)


def superformula(phi, m, a, b, n1, n2, n3):
    """Gielis superformula; returns nan where the radius is not finite."""
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        t1 = np.abs(np.cos(m * phi / 4.0) / a) ** n2
        t2 = np.abs(np.sin(m * phi / 4.0) / b) ** n3
        r = (t1 + t2) ** (-1.0 / n1)
    return np.where(np.isfinite(r), r, np.nan)


def rose(theta, k, A):
    """Rose curve with negative radii folded onto the opposite ray."""
    r = A * np.cos(k * theta)
    return np.abs(r), theta + np.where(r < 0, math.pi, 0.0)


class Polar2D(Kernel):
    """Superformula shapes and rose curves."""

    renderer_type = "polar_2d"
    label = "Polar curve"
    families = ("superformula", "rose_curve")

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        samples = read.integer("samples", 3000, minimum=2)
        if preset.family == "superformula":
            values = (
                read.number("m"),
                read.number("a", nonzero=True),
                read.number("b", nonzero=True),
                read.number("n1", nonzero=True),
                read.number("n2"),
                read.number("n3"),
            )
        elif preset.family == "rose_curve":
            k = read.number("k_num") / read.number("k_den", nonzero=True)
            values = (k, read.number("A"))
        else:
            read.fail("family", f"polar_2d supports {list(cls.families)}, got {preset.family!r}")
        return PolarParams(preset.family, samples, values)

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = POLAR_BOUNDS
        n = max(2, ctx.budget.clamp("samples", params.samples))
        theta = sample_angles(n)
        if params.family == "superformula":
            r = superformula(theta, *params.values)
        else:
            r, theta = rose(theta, *params.values)
        x = r * np.cos(theta) / POLAR_SCALE * ctx.aspect
        y = r * np.sin(theta) / POLAR_SCALE
        px, py = to_pixel(x, y, ctx.bounds, ctx.width, ctx.height)
        raster.stroke_polyline(px, py, INK, STROKE_ALPHA)
