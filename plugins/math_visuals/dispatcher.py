"""
Dispatcher

Maps a preset's renderer type to its kernel and runs one render:

    preset -> validate -> pick kernel -> KernelContext -> guarded draw
           -> frozen RasterTarget

Unknown renderer types fall back to the escape-time kernel (logged and
flagged on the raster). Each call owns its RasterTarget, KernelContext and
random generator, so independent renders may run in parallel.
"""

import logging

import numpy as np

from .budget import Budget
from .curves import Parametric2D, Polar2D
from .dla import DlaStub
from .engine_base import KernelContext
from .errors import UnknownRendererType
from .escape_time import EscapeTime
from .guard import run_guarded
from .ifs import Ifs
from .iter_map import IterMap
from .newton import NewtonBasins
from .ode import OdeAttractor
from .phyllotaxis import Phyllotaxis
from .presets import DEFAULT_RENDERER, Preset
from .raster import RasterTarget
from .reaction_diffusion import ReactionDiffusionStub
from .scalar_field import ScalarField
from .validate import validate_canvas

logger = logging.getLogger(__name__)

# Kernel class registry
KERNELS = {
    "escape_time": EscapeTime,
    "iter_map": IterMap,
    "ode": OdeAttractor,
    "parametric_2d": Parametric2D,
    "polar_2d": Polar2D,
    "point_polar": Phyllotaxis,
    "scalar_field": ScalarField,
    "ifs": Ifs,
    "newton_basins": NewtonBasins,
    "reaction_diffusion": ReactionDiffusionStub,
    "dla": DlaStub,
}


def get_kernel(renderer_type, strict=False):
    """Kernel class for a renderer type.

    Args:
        renderer_type: Tag from the preset
        strict: Raise UnknownRendererType instead of falling back

    Returns:
        The kernel class (escape_time for unknown tags unless strict)
    """
    kernel = KERNELS.get(renderer_type)
    if kernel is not None:
        return kernel
    if strict:
        raise UnknownRendererType(renderer_type)
    logger.warning("unknown renderer type %r, falling back to %s",
                   renderer_type, DEFAULT_RENDERER)
    return KERNELS[DEFAULT_RENDERER]


def describe_kernels():
    """List of kernel descriptions (type, families, rng use, approximation)."""
    return [k.describe() for k in KERNELS.values()]


def render(preset, width, height, quality="draft", seed=None):
    """Render a preset into a new RasterTarget.

    Args:
        preset: Preset, or a gallery preset dict
        width, height: Canvas size in pixels
        quality: "draft" or "full"; selects budget ceilings
        seed: Seed for the per-call random generator (None = fresh entropy)

    Returns:
        Frozen RasterTarget. Check raster.fault for kernel failures.

    Raises:
        ValidationError: bad canvas arguments or malformed preset params
    """
    if isinstance(preset, dict):
        preset = Preset.from_dict(preset)
    validate_canvas(width, height, quality)

    kernel = get_kernel(preset.renderer_type)
    params = kernel.parse_params(preset)

    budget = Budget(quality)
    ctx = KernelContext(width, height, budget, np.random.default_rng(seed))
    raster = RasterTarget(width, height)
    raster.preset_id = preset.id
    raster.renderer_type = kernel.renderer_type
    raster.fallback = kernel.renderer_type != preset.renderer_type
    raster.approximate = kernel.approximate

    run_guarded(kernel, params, ctx, raster, preset_id=preset.id)

    raster.budget_clamps = dict(budget.clamps)
    raster.freeze()
    return raster
