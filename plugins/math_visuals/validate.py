"""
Preset Validator

Shared range/shape checks used by every kernel's parse_params(). A kernel
reads its parameters through a ParamReader bound to the preset, so every
failure is reported as a ValidationError naming the preset and the field:

    read = ParamReader(preset)
    max_iter = read.integer("max_iter", 400, minimum=1)
    bounds = read.bounds("bounds", default=(-2.5, 1.5, -1.5, 1.5))

Validation is about shape and finiteness only. Loop counts are NOT capped
here; that is the budget's job at draw time.
"""

import math
import numbers
import re

from .budget import QUALITIES
from .errors import ValidationError
from .mapper import is_proper

REQUIRED = object()


def _is_number(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


class ParamReader:
    """Typed, defaulted access to a preset's params."""

    def __init__(self, preset, params=None, prefix=""):
        self.preset = preset
        self.params = preset.params if params is None else params
        self.prefix = prefix

    def fail(self, field, message):
        raise ValidationError(message, preset_id=self.preset.id, field=self.prefix + field)

    def _get(self, key, default):
        value = self.params.get(key)
        if value is None:
            if default is REQUIRED:
                self.fail(key, f"required for {self.preset.family!r}")
            return default
        return value

    def number(self, key, default=REQUIRED, minimum=None, positive=False,
               nonzero=False):
        value = self._get(key, default)
        if not _is_number(value):
            self.fail(key, f"expected a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value):
            self.fail(key, "must be finite")
        if positive and value <= 0:
            self.fail(key, f"must be > 0, got {value}")
        if nonzero and value == 0:
            self.fail(key, "must be non-zero")
        if minimum is not None and value < minimum:
            self.fail(key, f"must be >= {minimum}, got {value}")
        return value

    def integer(self, key, default=REQUIRED, minimum=None):
        value = self.number(key, default, minimum=minimum)
        return int(value)

    def string(self, key, default=REQUIRED, choices=None):
        value = self._get(key, default)
        if not isinstance(value, str):
            self.fail(key, f"expected a string, got {value!r}")
        if choices is not None and value not in choices:
            self.fail(key, f"must be one of {sorted(choices)}, got {value!r}")
        return value

    def vector(self, key, length, default=REQUIRED):
        value = self._get(key, default)
        return self.check_vector(key, value, length)

    def check_vector(self, key, value, length):
        if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
            self.fail(key, f"expected a sequence of {length} numbers")
        if len(value) != length:
            self.fail(key, f"expected {length} numbers, got {len(value)}")
        out = []
        for v in value:
            if not _is_number(v) or not math.isfinite(v):
                self.fail(key, f"expected finite numbers, got {value!r}")
            out.append(float(v))
        return tuple(out)

    def bounds(self, key="bounds", default=None):
        """World window from params[key], else the preset's view bounds,
        else `default`. Degenerate windows are rejected."""
        value = self.params.get(key)
        field = key
        if value is None:
            value = self.preset.view_bounds
            field = "view_bounds"
        if value is None:
            value = default
        if value is None:
            self.fail(key, "no world bounds available")
        value = self.check_vector(field, value, 4)
        if not is_proper(value):
            self.fail(field, f"degenerate window {value}: need xmax > xmin and ymax > ymin")
        return value

    def view_bounds(self, default):
        """Preset view bounds (ignoring params) or `default`."""
        if self.preset.view_bounds is None:
            return default
        value = self.check_vector("view_bounds", self.preset.view_bounds, 4)
        if not is_proper(value):
            self.fail("view_bounds",
                      f"degenerate window {value}: need xmax > xmin and ymax > ymin")
        return value


_POWER = re.compile(r"z\*\*(\d+)")


def polynomial_degree(text, default=3):
    """Degree n of a 'z**n - 1' polynomial string; default when absent."""
    m = _POWER.search(text or "")
    if m:
        return int(m.group(1))
    return default


def validate_canvas(width, height, quality):
    """Check render() call arguments."""
    for name, value in (("width", width), ("height", height)):
        if not isinstance(value, numbers.Integral) or isinstance(value, bool) or value < 1:
            raise ValidationError(f"must be a positive int, got {value!r}", field=name)
    if quality not in QUALITIES:
        raise ValidationError(f"must be one of {QUALITIES}, got {quality!r}",
                              field="quality")
