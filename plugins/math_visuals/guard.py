"""
Error Guard

Runs a kernel so that a fault inside it never escapes to the caller. Any
Exception raised while drawing is logged, wrapped in a KernelFault stored on
the raster, and the raster is overwritten with a visible error marker.

Only kernel execution is guarded. Validation errors are raised before a
kernel runs and reach the caller unchanged.
"""

import logging

from .errors import KernelFault

logger = logging.getLogger(__name__)


def run_guarded(kernel, params, ctx, raster, preset_id=None):
    """Draw params with kernel into raster.

    Returns:
        None on success, the KernelFault when the kernel raised
    """
    try:
        kernel.draw(params, ctx, raster)
    except Exception as exc:
        fault = KernelFault(kernel.renderer_type, preset_id, exc)
        logger.exception("%s", fault)
        raster.fault = fault
        raster.draw_error_marker()
        return fault
    return None
