"""
Error Taxonomy for the Preset Renderer

ValidationError      - malformed preset, render refused before any kernel runs
UnknownRendererType  - unrecognised renderer type (only raised on strict lookup;
                       the dispatcher normally falls back to escape_time)
KernelFault          - exception raised inside a kernel, caught by the guard
                       and recorded on the returned raster
"""


class ValidationError(ValueError):
    """Preset parameters are missing, malformed or out of range."""

    def __init__(self, message, preset_id=None, field=None):
        self.preset_id = preset_id
        self.field = field
        prefix = ""
        if preset_id:
            prefix += f"[{preset_id}] "
        if field:
            prefix += f"{field}: "
        super().__init__(prefix + message)


class UnknownRendererType(LookupError):
    """No kernel is registered for the requested renderer type."""

    def __init__(self, renderer_type):
        self.renderer_type = renderer_type
        super().__init__(f"Unknown renderer type: {renderer_type!r}")


class KernelFault(RuntimeError):
    """A kernel raised while drawing. Wraps the original exception."""

    def __init__(self, renderer_type, preset_id, cause):
        self.renderer_type = renderer_type
        self.preset_id = preset_id
        self.cause = cause
        super().__init__(
            f"{renderer_type} kernel failed on preset {preset_id!r}: "
            f"{type(cause).__name__}: {cause}"
        )
