"""
Sampling / Iteration Budgeter

Every kernel loop count passes through a Budget before use, so worst-case
render time is bounded no matter what a preset asks for. Ceilings depend on
the render quality:

    draft - gallery thumbnails, lazy-rendered while scrolling
    full  - enlarged single render / export
"""

import logging

logger = logging.getLogger(__name__)

QUALITIES = ("draft", "full")

BUDGETS = {
    "draft": {
        "max_iter": 300,         # escape-time iterations per pixel
        "map_steps": 120_000,    # iterated-map orbit length
        "ode_steps": 50_000,     # RK4 steps
        "samples": 4_000,        # curve samples
        "n_points": 2_400,       # phyllotaxis points
        "ifs_points": 50_000,    # chaos-game iterations
        "newton_iter": 50,       # Newton iterations per pixel
        "dla_particles": 1_000,  # DLA walkers
        "dla_walk": 2_000,       # steps per DLA walker
    },
    "full": {
        "max_iter": 1_000,
        "map_steps": 250_000,
        "ode_steps": 70_000,
        "samples": 8_000,
        "n_points": 4_000,
        "ifs_points": 200_000,
        "newton_iter": 100,
        "dla_particles": 4_000,
        "dla_walk": 2_000,
    },
}


class Budget:
    """Per-render ceilings for one quality level.

    Clamping is not an error: the requested value is capped, and the cap is
    remembered in `clamps` so callers can see which params were not honoured.
    """

    def __init__(self, quality="draft"):
        if quality not in BUDGETS:
            raise ValueError(f"Unknown quality: {quality!r}. Use one of {QUALITIES}")
        self.quality = quality
        self.ceilings = dict(BUDGETS[quality])
        self.clamps = {}

    def ceiling(self, key):
        return self.ceilings[key]

    def clamp(self, key, requested):
        """Return min(requested, ceiling) as an int, never below 0."""
        ceiling = self.ceilings[key]
        value = max(0, int(requested))
        if value > ceiling:
            self.clamps[key] = (value, ceiling)
            logger.debug("budget clamp %s: %d -> %d (%s)",
                         key, value, ceiling, self.quality)
            return ceiling
        return value
