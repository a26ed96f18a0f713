"""
Raster Sink

RasterTarget is the per-render RGBA buffer that kernels draw into and that
is handed to an external image sink afterwards. One target per render call;
once render() returns it the buffer is frozen (read-only) and the engine
never touches it again.

Drawing primitives (all vectorised, all clip to the canvas):
  fill_rgb          - dense full-frame write (escape-time, fields, basins)
  accumulate        - additive ink, saturating at 255 (iterated maps)
  plot              - single-pixel scatter (IFS, phyllotaxis, DLA)
  stroke_polyline   - connected polyline (ODE, parametric, polar curves)
  draw_error_marker - legible "RENDER ERROR" indicator for faulted renders
"""

import numpy as np

from .mapper import in_canvas

BACKGROUND = (11, 11, 16)
INK = (255, 255, 255)
ERROR_COLOR = (252, 211, 77)

# 5x7 bitmap glyphs for the error marker
_GLYPHS = {
    "R": ["####.", "#...#", "#...#", "####.", "#.#..", "#..#.", "#...#"],
    "E": ["#####", "#....", "#....", "####.", "#....", "#....", "#####"],
    "N": ["#...#", "##..#", "#.#.#", "#..##", "#...#", "#...#", "#...#"],
    "D": ["####.", "#...#", "#...#", "#...#", "#...#", "#...#", "####."],
    "O": [".###.", "#...#", "#...#", "#...#", "#...#", "#...#", ".###."],
    " ": [".....", ".....", ".....", ".....", ".....", ".....", "....."],
}


def _text_bitmap(text):
    """Boolean (7, 6*len-1) bitmap for text using _GLYPHS."""
    cols = []
    for i, ch in enumerate(text):
        glyph = np.array([[c == "#" for c in row] for row in _GLYPHS[ch]])
        if i:
            cols.append(np.zeros((7, 1), dtype=bool))
        cols.append(glyph)
    return np.concatenate(cols, axis=1)


def _clip_segments(x0, y0, x1, y1, xmax, ymax):
    """Liang-Barsky clip of segments to [-0.5, xmax+0.5] x [-0.5, ymax+0.5].

    Returns clipped endpoints plus a keep mask for segments that survive.
    """
    dx = x1 - x0
    dy = y1 - y0
    t0 = np.zeros_like(x0)
    t1 = np.ones_like(x0)
    keep = np.ones(x0.shape, dtype=bool)
    lo = -0.5
    edges = (
        (-dx, x0 - lo),
        (dx, xmax + 0.5 - x0),
        (-dy, y0 - lo),
        (dy, ymax + 0.5 - y0),
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        for p, q in edges:
            parallel = p == 0
            keep &= ~(parallel & (q < 0))
            r = q / np.where(parallel, 1.0, p)
            t0 = np.where(~parallel & (p < 0), np.maximum(t0, r), t0)
            t1 = np.where(~parallel & (p > 0), np.minimum(t1, r), t1)
    keep &= t0 <= t1
    return (x0 + t0 * dx, y0 + t0 * dy, x0 + t1 * dx, y0 + t1 * dy, keep)


class RasterTarget:
    """Fixed-size RGBA pixel buffer, row 0 at the top.

    Attributes:
        width, height: Canvas size in pixels
        pixels: (H, W, 4) uint8 array
        preset_id: Preset that produced this raster
        renderer_type: Kernel that actually ran (after any fallback)
        fallback: True when the requested renderer type was unknown
        approximate: True when the kernel is a documented approximation
        fault: KernelFault when the kernel raised, else None
        budget_clamps: {key: (requested, ceiling)} for clamped params
    """

    def __init__(self, width, height, background=BACKGROUND):
        self.width = width
        self.height = height
        self.background = tuple(background)
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.preset_id = None
        self.renderer_type = None
        self.fallback = False
        self.approximate = False
        self.fault = None
        self.budget_clamps = {}
        self.clear()

    @property
    def shape(self):
        return self.pixels.shape

    @property
    def frozen(self):
        return not self.pixels.flags.writeable

    def clear(self):
        """Reset to opaque background."""
        self.pixels[..., :3] = self.background
        self.pixels[..., 3] = 255

    def freeze(self):
        """Make the buffer read-only; called once the render is complete."""
        self.pixels.flags.writeable = False

    # ── Dense writes ─────────────────────────────────────────────────────

    def fill_rgb(self, rgb):
        """Overwrite every pixel with an (H, W, 3) uint8 image."""
        self.pixels[..., :3] = rgb
        self.pixels[..., 3] = 255

    # ── Sparse writes ────────────────────────────────────────────────────

    def _flat_index(self, px, py):
        px = np.asarray(px, dtype=np.float64).ravel()
        py = np.asarray(py, dtype=np.float64).ravel()
        ok = in_canvas(px, py, self.width, self.height)
        ix = px[ok].astype(np.int64)
        iy = py[ok].astype(np.int64)
        return iy * self.width + ix

    def accumulate(self, px, py, ink=220):
        """Additive ink: every hit adds `ink` to RGB, saturating at 255."""
        flat = self._flat_index(px, py)
        if flat.size == 0:
            return
        hits = np.bincount(flat, minlength=self.width * self.height)
        hits = hits.reshape(self.height, self.width, 1)
        rgb = self.pixels[..., :3].astype(np.int64) + hits * int(ink)
        self.pixels[..., :3] = np.minimum(rgb, 255).astype(np.uint8)
        self.pixels[..., 3] = 255

    def plot(self, px, py, color=INK, alpha=1.0):
        """Set single pixels, alpha-blended over what is already there."""
        flat = np.unique(self._flat_index(px, py))
        if flat.size == 0:
            return
        view = self.pixels.reshape(-1, 4)
        src = np.asarray(color, dtype=np.float64)
        dst = view[flat, :3].astype(np.float64)
        view[flat, :3] = np.rint(dst + alpha * (src - dst)).astype(np.uint8)
        view[flat, 3] = 255

    def stroke_polyline(self, px, py, color=INK, alpha=1.0):
        """Draw consecutive points as connected 1px line segments.

        Non-finite points break the line; segments are clipped to the canvas
        before rasterisation so far-away vertices cost nothing.
        """
        px = np.asarray(px, dtype=np.float64).ravel()
        py = np.asarray(py, dtype=np.float64).ravel()
        if px.size == 0:
            return
        if px.size == 1:
            self.plot(px, py, color, alpha)
            return

        x0, y0, x1, y1 = px[:-1], py[:-1], px[1:], py[1:]
        finite = np.isfinite(x0) & np.isfinite(y0) & np.isfinite(x1) & np.isfinite(y1)
        x0, y0, x1, y1 = x0[finite], y0[finite], x1[finite], y1[finite]
        x0, y0, x1, y1, keep = _clip_segments(
            x0, y0, x1, y1, self.width - 1, self.height - 1)
        x0, y0, x1, y1 = x0[keep], y0[keep], x1[keep], y1[keep]
        if x0.size == 0:
            return

        # DDA: sample spacing strictly below one pixel along the major axis
        steps = np.ceil(np.maximum(np.abs(x1 - x0), np.abs(y1 - y0))).astype(np.int64) + 1
        counts = steps + 1
        seg = np.repeat(np.arange(x0.size), counts)
        starts = np.repeat(np.cumsum(counts) - counts, counts)
        t = (np.arange(seg.size) - starts) / np.maximum(steps[seg], 1)
        # Round half up, like to_pixel
        xs = np.floor(x0[seg] + t * (x1[seg] - x0[seg]) + 0.5)
        ys = np.floor(y0[seg] + t * (y1[seg] - y0[seg]) + 0.5)
        self.plot(xs, ys, color, alpha)

    # ── Error marker ─────────────────────────────────────────────────────

    def draw_error_marker(self, color=ERROR_COLOR):
        """Wipe the canvas and draw a visible error indicator."""
        self.clear()
        W, H = self.width, self.height
        border = max(1, min(W, H) // 64)
        self.pixels[:border, :, :3] = color
        self.pixels[-border:, :, :3] = color
        self.pixels[:, :border, :3] = color
        self.pixels[:, -border:, :3] = color

        bitmap = _text_bitmap("RENDER ERROR")
        scale = max(1, (W - 4 * border) // (bitmap.shape[1] * 2))
        text = np.kron(bitmap, np.ones((scale, scale), dtype=bool))
        th, tw = text.shape
        if tw <= W - 2 * border and th <= H - 2 * border:
            top = (H - th) // 2
            left = (W - tw) // 2
            region = self.pixels[top:top + th, left:left + tw, :3]
            region[text] = color
        else:
            # Too small for text: diagonal cross
            n = max(W, H)
            t = np.linspace(0.0, 1.0, n)
            xs = np.rint(t * (W - 1))
            ys = np.rint(t * (H - 1))
            self.plot(xs, ys, color)
            self.plot(xs, (H - 1) - ys, color)

    # ── Export helpers for image sinks ───────────────────────────────────

    def get_pixel(self, px, py):
        """RGBA tuple at pixel (px, py)."""
        return tuple(int(v) for v in self.pixels[py, px])

    def to_rgb(self):
        """(H, W, 3) uint8 copy without alpha."""
        return self.pixels[..., :3].copy()
