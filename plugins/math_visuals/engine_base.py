"""
Abstract Base Class for Numeric Kernels

Every kernel (escape-time, iterated maps, ODE attractors, ...) implements
this interface so the dispatcher can run any of them interchangeably.

A kernel is a stateless class: parse_params() turns a Preset into the
kernel's own frozen params record (validated, defaulted), and draw() renders
those params into a RasterTarget using the per-render KernelContext.
"""

from abc import ABC, abstractmethod


class KernelContext:
    """Ephemeral state for one render call.

    Args:
        width, height: Canvas size in pixels
        budget: Budget for the requested quality
        rng: numpy.random.Generator owned by this call
        bounds: World window (xmin, xmax, ymin, ymax), set by the kernel
    """

    def __init__(self, width, height, budget, rng, bounds=None):
        self.width = width
        self.height = height
        self.budget = budget
        self.rng = rng
        self.bounds = bounds

    @property
    def quality(self):
        return self.budget.quality

    @property
    def aspect(self):
        return self.width / self.height


class Kernel(ABC):
    """Base class for numeric kernels."""

    renderer_type = ""   # e.g. "escape_time"
    label = ""           # e.g. "Escape-time fractal"
    families = ()        # family tags the kernel understands
    uses_rng = False     # draws from ctx.rng
    approximate = False  # documented approximation, not a reference method

    @classmethod
    @abstractmethod
    def parse_params(cls, preset):
        """Validate a Preset and return this kernel's params record.

        Raises:
            ValidationError: required params missing or malformed
        """

    @classmethod
    @abstractmethod
    def draw(cls, params, ctx, raster):
        """Render params into raster."""

    @classmethod
    def describe(cls):
        """Return a dict describing the kernel for listings."""
        return {
            "renderer_type": cls.renderer_type,
            "label": cls.label,
            "families": list(cls.families),
            "uses_rng": cls.uses_rng,
            "approximate": cls.approximate,
            "notes": (cls.__doc__ or "").strip().split("\n")[0],
        }
