"""
Diffusion-Limited Aggregation Preview (APPROXIMATION)

A deliberately small DLA for interactive use, not a reference
implementation: a seed cell at the canvas centre, a capped number of
walkers, each capped at walk_steps unit moves (4 directions). A walker dies
when it leaves the interior [1, W-1) x [1, H-1) and sticks as soon as any of
its 8 neighbours (or its own cell) is occupied.

Walkers are processed one at a time (each sees the cluster left by the
previous ones) but a single walk is computed as a whole array: the path is
a cumulative sum of random moves, and the first exit / first touch are
found with vectorised lookups against a dilated occupancy mask.

spawn = "top"  - walkers start at a random x on the top row (default)
spawn = "ring" - walkers start on a circle just outside the cluster, which
                 grows a visible tree on large canvases
"""

import math
from dataclasses import dataclass

import numpy as np

from .engine_base import Kernel
from .validate import ParamReader

CLUSTER_COLOR = (230, 245, 255)
SPAWN_MARGIN = 5

_DX = np.array([1, -1, 0, 0], dtype=np.int64)
_DY = np.array([0, 0, 1, -1], dtype=np.int64)


@dataclass(frozen=True)
class DlaParams:
    particles: int
    walk_steps: int
    spawn: str = "top"


class Cluster:
    """Occupancy grid plus its 3x3-dilated 'touching' mask."""

    def __init__(self, W, H):
        self.W = W
        self.H = H
        self.grid = np.zeros((H, W), dtype=bool)
        self.near = np.zeros((H, W), dtype=bool)
        self.cx = W // 2
        self.cy = H // 2
        self.radius = 0.0
        self.stick(self.cx, self.cy)

    def stick(self, x, y):
        self.grid[y, x] = True
        self.near[max(0, y - 1):y + 2, max(0, x - 1):x + 2] = True
        self.radius = max(self.radius, math.hypot(x - self.cx, y - self.cy))

    @property
    def size(self):
        return int(self.grid.sum())


def walk(cluster, x0, y0, moves):
    """Follow one walker; stick it if it touches the cluster.

    Returns:
        True when the walker joined the cluster
    """
    W, H = cluster.W, cluster.H
    xs = x0 + np.cumsum(_DX[moves])
    ys = y0 + np.cumsum(_DY[moves])
    inside = (xs >= 1) & (xs < W - 1) & (ys >= 1) & (ys < H - 1)
    if not inside.all():
        exit_at = int(np.argmin(inside))
        xs, ys = xs[:exit_at], ys[:exit_at]
    if xs.size == 0:
        return False
    touching = cluster.near[ys, xs]
    if not touching.any():
        return False
    j = int(np.argmax(touching))
    cluster.stick(int(xs[j]), int(ys[j]))
    return True


def aggregate(W, H, particles, walk_steps, rng, spawn="top"):
    """Grow a cluster; returns the Cluster."""
    cluster = Cluster(W, H)
    limit = max(0, min(W, H) // 2 - 2)
    for _ in range(particles):
        if spawn == "ring":
            r = min(cluster.radius + SPAWN_MARGIN, limit)
            a = rng.random() * 2.0 * math.pi
            x0 = int(round(cluster.cx + r * math.cos(a)))
            y0 = int(round(cluster.cy + r * math.sin(a)))
        else:
            x0 = int(rng.integers(0, W))
            y0 = 0
        walk(cluster, x0, y0, rng.integers(0, 4, size=walk_steps))
    return cluster


class DlaStub(Kernel):
    """Small random-walk aggregation preview (approximation)."""

    renderer_type = "dla"
    label = "DLA preview"
    families = ("dla",)
    uses_rng = True
    approximate = True

    @classmethod
    def parse_params(cls, preset):
        read = ParamReader(preset)
        return DlaParams(
            particles=read.integer("particles", 4000, minimum=0),
            walk_steps=read.integer("walk_steps", 2000, minimum=0),
            spawn=read.string("spawn", "top", choices={"top", "ring"}),
        )

    @classmethod
    def draw(cls, params, ctx, raster):
        ctx.bounds = (0.0, float(ctx.width), 0.0, float(ctx.height))
        particles = ctx.budget.clamp("dla_particles", params.particles)
        steps = ctx.budget.clamp("dla_walk", params.walk_steps)
        cluster = aggregate(ctx.width, ctx.height, particles, steps, ctx.rng, params.spawn)
        ys, xs = np.nonzero(cluster.grid)
        raster.plot(xs, ys, CLUSTER_COLOR)
