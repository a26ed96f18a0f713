"""
Preset Model and Built-in Preset Store

A Preset is an immutable description of one renderable object:

    id             - unique identifier
    family         - sub-behaviour within a kernel ("julia", "lorenz", ...)
    renderer_type  - which kernel runs ("escape_time", "ode", ...)
    params         - read-only mapping of named values for the kernel
    view_bounds    - optional (xmin, xmax, ymin, ymax) world window
    notes          - display text, ignored by the renderer

PRESETS below holds one or more hand-tuned entries per family in the same
dict shape the gallery JSON uses ("renderer_hint": {"type": ...}).
"""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .errors import ValidationError

DEFAULT_RENDERER = "escape_time"


def _freeze(value):
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    if isinstance(value, MappingProxyType):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class Preset:
    id: str
    family: str
    renderer_type: str = DEFAULT_RENDERER
    params: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    view_bounds: tuple = None
    notes: str = ""

    def __post_init__(self):
        if self.params is not None and not isinstance(self.params, Mapping):
            raise ValidationError(f"expected a mapping, got {type(self.params).__name__}",
                                  preset_id=self.id, field="params")
        if self.view_bounds is not None and not isinstance(self.view_bounds, (list, tuple)):
            raise ValidationError(f"expected a sequence of 4 numbers, got {self.view_bounds!r}",
                                  preset_id=self.id, field="view_bounds")
        # Deep-freeze whatever the caller passed in
        object.__setattr__(self, "params", _freeze(dict(self.params or {})))
        if self.view_bounds is not None:
            object.__setattr__(self, "view_bounds", _freeze(self.view_bounds))

    @classmethod
    def from_dict(cls, d):
        """Build a Preset from a gallery dict.

        Accepts both {"renderer_hint": {"type": t}} and {"renderer_type": t};
        a missing type defaults to escape_time.
        """
        hint = d.get("renderer_hint") or {}
        if not isinstance(hint, Mapping):
            raise ValidationError(f"expected a mapping, got {hint!r}",
                                  preset_id=d.get("id"), field="renderer_hint")
        renderer_type = d.get("renderer_type") or hint.get("type") or DEFAULT_RENDERER
        return cls(
            id=str(d.get("id", "")),
            family=str(d.get("family", "")),
            renderer_type=renderer_type,
            params=d.get("params") or {},
            view_bounds=d.get("view_bounds"),
            notes=d.get("notes") or "",
        )

    def to_dict(self):
        """Gallery dict shape (inverse of from_dict)."""
        d = {
            "id": self.id,
            "family": self.family,
            "renderer_hint": {"type": self.renderer_type},
            "params": _thaw(self.params),
        }
        if self.view_bounds is not None:
            d["view_bounds"] = _thaw(self.view_bounds)
        if self.notes:
            d["notes"] = self.notes
        return d


def _entry(pid, family, renderer, params, view_bounds=None, notes=""):
    d = {"id": pid, "family": family, "renderer_hint": {"type": renderer},
         "params": params, "notes": notes}
    if view_bounds is not None:
        d["view_bounds"] = view_bounds
    return d


_ENTRIES = [
    # =====================================================================
    # ESCAPE TIME
    # =====================================================================
    _entry("mandelbrot_full", "mandelbrot", "escape_time",
           {"centre": [-0.5, 0.0], "zoom": 1.0, "max_iter": 300},
           notes="The whole set, main cardioid centred"),
    _entry("mandelbrot_seahorse", "mandelbrot", "escape_time",
           {"centre": [-0.745, 0.105], "zoom": 40.0, "max_iter": 600},
           notes="Seahorse valley"),
    _entry("julia_dendrite", "julia", "escape_time",
           {"c_re": -0.8, "c_im": 0.156, "max_iter": 300,
            "bounds": [-1.8, 1.8, -1.1, 1.1]},
           notes="Filament Julia set"),
    _entry("julia_rabbit", "julia", "escape_time",
           {"c_re": -0.123, "c_im": 0.745, "max_iter": 250},
           notes="Douady rabbit"),

    # =====================================================================
    # ITERATED MAPS
    # =====================================================================
    _entry("de_jong_classic", "de_jong", "iter_map",
           {"a": -2.24, "b": 0.43, "c": -0.65, "d": -2.43,
            "steps": 200000, "discard": 1000},
           view_bounds=[-2.5, 2.5, -2.5, 2.5]),
    _entry("clifford_veil", "clifford", "iter_map",
           {"a": -1.4, "b": 1.6, "c": 1.0, "d": 0.7, "steps": 200000}),
    _entry("ikeda_spiral", "ikeda", "iter_map",
           {"u": 0.918, "steps": 150000},
           view_bounds=[-0.5, 2.0, -2.5, 1.0]),
    _entry("gumowski_mira_bloom", "gumowski_mira", "iter_map",
           {"a": -0.48, "b": 0.93, "steps": 150000},
           view_bounds=[-20.0, 20.0, -20.0, 20.0]),

    # =====================================================================
    # ODE ATTRACTORS
    # =====================================================================
    _entry("lorenz_butterfly", "lorenz", "ode",
           {"sigma": 10.0, "rho": 28.0, "beta": 8.0 / 3.0,
            "dt": 0.005, "steps": 40000, "xyz0": [0.1, 0.0, 0.0]},
           view_bounds=[-25.0, 35.0, -30.0, 30.0]),
    _entry("rossler_band", "rossler", "ode",
           {"a": 0.2, "b": 0.2, "c": 5.7, "dt": 0.02, "steps": 40000},
           view_bounds=[-15.0, 15.0, -15.0, 15.0]),
    _entry("aizawa_shell", "aizawa", "ode",
           {"a": 0.95, "b": 0.7, "c": 0.6, "d": 3.5, "e": 0.25, "f": 0.1,
            "dt": 0.01, "steps": 40000},
           view_bounds=[-2.0, 2.0, -2.0, 2.0]),
    _entry("halvorsen_trefoil", "halvorsen", "ode",
           {"a": 1.89, "dt": 0.005, "steps": 40000, "xyz0": [-1.48, -1.51, 2.04]},
           view_bounds=[-15.0, 15.0, -15.0, 15.0]),

    # =====================================================================
    # CURVES
    # =====================================================================
    _entry("lissajous_3_2", "lissajous", "parametric_2d",
           {"A": 1.0, "B": 1.0, "a": 3, "b": 2, "delta": math.pi / 2,
            "samples": 3000}),
    _entry("spirograph_hypo", "spirograph", "parametric_2d",
           {"R": 5.0, "r": 3.0, "d": 5.0, "kind": "hypo", "samples": 4000}),
    _entry("spirograph_epi", "spirograph", "parametric_2d",
           {"R": 3.0, "r": 1.0, "d": 0.5, "kind": "epi", "samples": 4000}),
    _entry("superformula_star", "superformula", "polar_2d",
           {"m": 6, "a": 1.0, "b": 1.0, "n1": 1.0, "n2": 7.0, "n3": 8.0,
            "samples": 3000}),
    _entry("rose_5_4", "rose_curve", "polar_2d",
           {"k_num": 5, "k_den": 4, "A": 1.0, "samples": 6000}),

    # =====================================================================
    # POINTS, FIELDS, IFS
    # =====================================================================
    _entry("phyllotaxis_sunflower", "phyllotaxis", "point_polar",
           {"n_points": 2000, "divergence_deg": 137.507, "scale": 0.9}),
    _entry("interference_three", "interference", "scalar_field",
           {"k_vectors": [[1, 0, 6], [0.309, 0.951, 6], [-0.809, 0.588, 6]],
            "phases": [0, 1, 2]}),
    _entry("interference_five", "interference", "scalar_field",
           {"k_vectors": [[1, 0, 10], [0.309, 0.951, 10], [-0.809, 0.588, 10],
                          [-0.809, -0.588, 10], [0.309, -0.951, 10]],
            "phases": [0, 0, 0, 0, 0], "palette": "ocean"},
           notes="Five-fold quasicrystal"),
    _entry("barnsley_fern", "ifs", "ifs",
           {"points": 150000, "discard": 100, "maps": [
               {"a": 0.0, "b": 0.0, "c": 0.0, "d": 0.16, "e": 0.0, "f": 0.0, "p": 0.01},
               {"a": 0.85, "b": 0.04, "c": -0.04, "d": 0.85, "e": 0.0, "f": 1.6, "p": 0.85},
               {"a": 0.2, "b": -0.26, "c": 0.23, "d": 0.22, "e": 0.0, "f": 1.6, "p": 0.07},
               {"a": -0.15, "b": 0.28, "c": 0.26, "d": 0.24, "e": 0.0, "f": 0.44, "p": 0.07},
           ]},
           view_bounds=[-3.0, 3.0, -0.5, 10.5]),
    _entry("sierpinski", "ifs", "ifs",
           {"points": 60000, "maps": [
               {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.0, "f": 0.0, "p": 0.333},
               {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.5, "f": 0.0, "p": 0.333},
               {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.25, "f": 0.5, "p": 0.333},
           ]},
           view_bounds=[-0.05, 1.05, -0.05, 1.05]),

    # =====================================================================
    # NEWTON BASINS
    # =====================================================================
    _entry("newton_cubic", "newton", "newton_basins",
           {"polynomial": "z**3 - 1", "max_iter": 40, "tolerance": 1e-6}),
    _entry("newton_quintic", "newton", "newton_basins",
           {"polynomial": "z**5 - 1", "max_iter": 50, "bounds": [-1.5, 1.5, -1.5, 1.5]}),

    # =====================================================================
    # APPROXIMATIONS (fast previews, not reference simulations)
    # =====================================================================
    _entry("gray_scott_preview", "gray_scott", "reaction_diffusion",
           {"F": 0.037, "k": 0.06, "palette": "ink"},
           notes="Summed-sine proxy, not a PDE solve"),
    _entry("dla_cluster", "dla", "dla",
           {"particles": 3000, "walk_steps": 2000, "spawn": "ring"},
           notes="Small random-walk aggregate"),
]

PRESETS = {d["id"]: d for d in _ENTRIES}

PRESET_ORDER = [d["id"] for d in _ENTRIES]

RENDERER_ORDER = [
    "escape_time", "iter_map", "ode", "parametric_2d", "polar_2d",
    "point_polar", "scalar_field", "ifs", "newton_basins",
    "reaction_diffusion", "dla",
]


def get_preset(name):
    """Get a built-in Preset by id. Returns None if not found."""
    d = PRESETS.get(name)
    if d is None:
        return None
    return Preset.from_dict(d)


def list_presets(renderer_type=None):
    """Return list of (id, family, notes) for presets.
    If renderer_type is specified, filter to that renderer only."""
    out = []
    for key in PRESET_ORDER:
        d = PRESETS[key]
        if renderer_type and d["renderer_hint"]["type"] != renderer_type:
            continue
        out.append((key, d["family"], d.get("notes", "")))
    return out


def load_presets(path):
    """Load a gallery JSON file (a list of preset dicts) as Presets."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [Preset.from_dict(d) for d in data]
