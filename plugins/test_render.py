#!/usr/bin/env python3
"""
End-to-end tests through render() and the bundled tools.

Verifies:
1. Mandelbrot centre pixel is inside the set, corners escape
2. Non-random kernels are deterministic; random ones reproduce with a seed
3. Budget ceilings cap huge requests and are reported on the raster
4. Unknown renderer types fall back to escape_time
5. Validation errors name the preset and field
6. A raising kernel yields an error-marked raster, never an exception
7. Every built-in preset renders without a fault
8. Preset freezing and dict round trips
9. PNG sink, the snapshot CLI and view mode start-up
10. Badly shaped presets fail validation instead of raising TypeError
"""

import dataclasses
import json
import os
import sys
import time
import types

import numpy as np
import pytest

from math_visuals import (
    KERNELS, PRESET_ORDER, PRESETS, KernelFault, Preset, UnknownRendererType,
    ValidationError, describe_kernels, get_kernel, get_preset, list_presets,
    load_presets, render,
)
from math_visuals.__main__ import main
from math_visuals.engine_base import Kernel
from math_visuals.palette import color_from_angle
from math_visuals.raster import BACKGROUND, ERROR_COLOR
from math_visuals.sink import encode_png, save_png


def mandelbrot(**params):
    base = {"centre": [-0.5, 0.0], "zoom": 1.0, "max_iter": 100}
    base.update(params)
    return {"id": "m", "family": "mandelbrot",
            "renderer_hint": {"type": "escape_time"}, "params": base}


def sierpinski(**params):
    maps = [
        {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.0, "f": 0.0, "p": 0.333},
        {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.5, "f": 0.0, "p": 0.333},
        {"a": 0.5, "b": 0.0, "c": 0.0, "d": 0.5, "e": 0.25, "f": 0.5, "p": 0.333},
    ]
    base = {"maps": maps, "points": 20000}
    base.update(params)
    return {"id": "tri", "family": "ifs", "renderer_hint": {"type": "ifs"},
            "params": base, "view_bounds": [-0.05, 1.05, -0.05, 1.05]}


class Exploding(Kernel):
    """Always raises while drawing."""

    renderer_type = "exploding"
    label = "Exploding"
    families = ("boom",)

    @classmethod
    def parse_params(cls, preset):
        return None

    @classmethod
    def draw(cls, params, ctx, raster):
        raster.plot(np.array([1]), np.array([1]))
        raise ZeroDivisionError("boom")


# ── end to end ───────────────────────────────────────────────────────────

def test_mandelbrot_centre_black_corners_coloured():
    raster = render(mandelbrot(), 64, 64)
    assert raster.shape == (64, 64, 4)
    assert raster.fault is None
    assert raster.get_pixel(32, 32) == (0, 0, 0, 255)
    for px, py in ((0, 0), (63, 0), (0, 63), (63, 63)):
        assert sum(raster.get_pixel(px, py)[:3]) > 0


def test_julia_with_bounds_renders():
    raster = render({"id": "j", "family": "julia",
                     "params": {"c_re": -0.8, "c_im": 0.156, "max_iter": 100,
                                "bounds": [-1.8, 1.8, -1.1, 1.1]}}, 48, 32)
    assert raster.fault is None
    assert raster.renderer_type == "escape_time"


def test_newton_same_root_same_colour():
    raster = render(get_preset("newton_cubic"), 41, 41)
    root_one = color_from_angle(0.0).tolist()
    # world (1, 0) and (1.5, 0) both converge to z = 1
    assert list(raster.get_pixel(30, 20)[:3]) == root_one
    assert list(raster.get_pixel(35, 20)[:3]) == root_one
    # z = 0 never converges
    assert raster.get_pixel(20, 20)[:3] == (0, 0, 0)


def test_deterministic_kernels_ignore_seed():
    for key in PRESET_ORDER:
        preset = get_preset(key)
        if get_kernel(preset.renderer_type).uses_rng:
            continue
        a = render(preset, 40, 30, seed=1)
        b = render(preset, 40, 30, seed=2)
        assert np.array_equal(a.pixels, b.pixels), key


def test_seeded_random_kernels_reproduce():
    for key in ("barnsley_fern", "dla_cluster"):
        a = render(get_preset(key), 32, 32, seed=11)
        b = render(get_preset(key), 32, 32, seed=11)
        assert np.array_equal(a.pixels, b.pixels), key


def test_all_presets_render_cleanly():
    for key in PRESET_ORDER:
        raster = render(get_preset(key), 32, 24, seed=0)
        assert raster.fault is None, key
        assert not raster.fallback, key
        assert raster.frozen
        assert raster.preset_id == key


# ── budget ───────────────────────────────────────────────────────────────

def test_huge_max_iter_is_capped():
    t0 = time.perf_counter()
    raster = render(mandelbrot(max_iter=10_000_000), 16, 16)
    assert time.perf_counter() - t0 < 30
    assert raster.budget_clamps == {"max_iter": (10_000_000, 300)}


def test_huge_ifs_point_count_is_capped():
    raster = render(sierpinski(points=5_000_000), 32, 32, quality="full", seed=3)
    assert raster.fault is None
    assert raster.budget_clamps["ifs_points"] == (5_000_000, 200_000)
    draft = render(sierpinski(points=5_000_000), 32, 32, quality="draft", seed=3)
    assert draft.budget_clamps["ifs_points"] == (5_000_000, 50_000)


def test_unclamped_render_reports_nothing():
    assert render(mandelbrot(max_iter=50), 16, 16).budget_clamps == {}


def test_ifs_probabilities_short_of_one():
    raster = render(sierpinski(), 32, 32, seed=5)
    assert raster.fault is None
    lit = (raster.pixels[..., :3] != BACKGROUND).any(axis=2)
    assert lit.sum() > 50


# ── dispatch ─────────────────────────────────────────────────────────────

def test_unknown_renderer_falls_back():
    raster = render({"id": "odd", "family": "mandelbrot",
                     "renderer_hint": {"type": "unknown_xyz"}, "params": {}}, 32, 32)
    assert raster.renderer_type == "escape_time"
    assert raster.fallback
    assert raster.fault is None


def test_missing_renderer_defaults_to_escape_time():
    raster = render({"id": "bare", "family": "mandelbrot"}, 16, 16)
    assert raster.renderer_type == "escape_time"
    assert not raster.fallback


def test_strict_lookup_raises():
    with pytest.raises(UnknownRendererType):
        get_kernel("unknown_xyz", strict=True)
    assert get_kernel("ode") is KERNELS["ode"]


def test_approximate_flag():
    assert render(get_preset("gray_scott_preview"), 24, 24).approximate
    assert render(get_preset("dla_cluster"), 24, 24, seed=1).approximate
    assert not render(get_preset("mandelbrot_full"), 24, 24).approximate
    flags = {d["renderer_type"]: d["approximate"] for d in describe_kernels()}
    assert flags["reaction_diffusion"] and flags["dla"]
    assert not flags["escape_time"]
    assert len(flags) == 11


# ── validation ───────────────────────────────────────────────────────────

def test_canvas_arguments_validated():
    for w, h, q in ((0, 10, "draft"), (10, -1, "draft"), (2.5, 10, "draft"),
                    (True, 10, "draft"), (10, 10, "ultra")):
        with pytest.raises(ValidationError):
            render(mandelbrot(), w, h, quality=q)


def test_julia_requires_c():
    with pytest.raises(ValidationError) as info:
        render({"id": "j1", "family": "julia", "params": {"c_re": 0.3}}, 16, 16)
    assert info.value.field == "c_im"
    assert info.value.preset_id == "j1"
    assert "[j1] c_im:" in str(info.value)


def test_degenerate_bounds_rejected():
    with pytest.raises(ValidationError) as info:
        render({"id": "flat", "family": "julia",
                "params": {"c_re": 0.0, "c_im": 0.0, "bounds": [1, 1, 0, 1]}}, 16, 16)
    assert info.value.field == "bounds"
    with pytest.raises(ValidationError) as info:
        render({"id": "flip", "family": "de_jong", "renderer_type": "iter_map",
                "params": {"a": 1, "b": 1, "c": 1, "d": 1},
                "view_bounds": [0, 1, 2, 1]}, 16, 16)
    assert info.value.field == "view_bounds"


def test_bad_numbers_rejected():
    for bad in ("300", float("nan"), float("inf"), 0):
        with pytest.raises(ValidationError):
            render(mandelbrot(max_iter=bad), 16, 16)


def test_ifs_maps_validated():
    for maps in ([], 5, "maps", None):
        with pytest.raises(ValidationError) as info:
            render(sierpinski(maps=maps), 16, 16)
        assert info.value.field == "maps"
    broken = sierpinski()
    del broken["params"]["maps"][0]["p"]
    with pytest.raises(ValidationError) as info:
        render(broken, 16, 16)
    assert info.value.field == "maps[0].p"


def test_badly_shaped_presets_rejected():
    cases = [
        ({"id": "p", "family": "mandelbrot", "params": [1, 2]}, "params"),
        ({"id": "p", "family": "mandelbrot", "params": "max_iter=5"}, "params"),
        ({"id": "p", "family": "de_jong", "renderer_type": "iter_map",
          "params": {"a": 1, "b": 1, "c": 1, "d": 1}, "view_bounds": 5}, "view_bounds"),
        ({"id": "p", "family": "ifs", "renderer_hint": "ifs"}, "renderer_hint"),
    ]
    for d, field in cases:
        with pytest.raises(ValidationError) as info:
            render(d, 16, 16)
        assert info.value.field == field
        assert info.value.preset_id == "p"
    with pytest.raises(ValidationError):
        Preset(id="direct", family="mandelbrot", params=[("max_iter", 5)])


def test_centre_zoom_ignores_stale_bounds():
    raster = render(mandelbrot(bounds=[1, 1, 0, 1]), 32, 32)
    assert raster.fault is None
    reference = render(mandelbrot(), 32, 32)
    assert np.array_equal(raster.pixels, reference.pixels)


def test_other_kernel_validation():
    cases = [
        {"id": "n1", "family": "newton", "renderer_type": "newton_basins",
         "params": {"polynomial": "z**1 - 1"}},
        {"id": "o1", "family": "chua", "renderer_type": "ode", "params": {}},
        {"id": "c1", "family": "spirograph", "renderer_type": "parametric_2d",
         "params": {"R": 1, "r": 0, "d": 1}},
        {"id": "p1", "family": "rose_curve", "renderer_type": "polar_2d",
         "params": {"k_num": 1, "k_den": 0, "A": 1}},
        {"id": "s1", "family": "interference", "renderer_type": "scalar_field",
         "params": {"k_vectors": [[1, 0]]}},
        {"id": "d1", "family": "dla", "renderer_type": "dla",
         "params": {"spawn": "left"}},
    ]
    for d in cases:
        with pytest.raises(ValidationError):
            render(d, 16, 16)


# ── fault guard ──────────────────────────────────────────────────────────

def test_raising_kernel_gives_error_marker(monkeypatch):
    monkeypatch.setitem(KERNELS, "exploding", Exploding)
    raster = render({"id": "bad", "family": "boom",
                     "renderer_hint": {"type": "exploding"}}, 64, 48)
    assert isinstance(raster.fault, KernelFault)
    assert isinstance(raster.fault.cause, ZeroDivisionError)
    assert raster.fault.preset_id == "bad"
    assert raster.get_pixel(0, 0)[:3] == ERROR_COLOR
    assert raster.get_pixel(63, 47)[:3] == ERROR_COLOR
    assert raster.frozen


def test_error_marker_on_tiny_canvas(monkeypatch):
    monkeypatch.setitem(KERNELS, "exploding", Exploding)
    raster = render({"id": "bad", "family": "boom", "renderer_type": "exploding"}, 3, 2)
    assert raster.fault is not None
    assert raster.get_pixel(0, 0)[:3] == ERROR_COLOR


def test_raster_is_read_only():
    raster = render(mandelbrot(max_iter=20), 8, 8)
    with pytest.raises(ValueError):
        raster.pixels[0, 0, 0] = 1


# ── presets ──────────────────────────────────────────────────────────────

def test_presets_are_frozen():
    p = get_preset("barnsley_fern")
    with pytest.raises(TypeError):
        p.params["points"] = 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.id = "other"
    assert isinstance(p.params["maps"], tuple)
    assert get_preset("no_such_preset") is None


def test_preset_dict_round_trip():
    for key in PRESET_ORDER:
        d = get_preset(key).to_dict()
        assert Preset.from_dict(d).to_dict() == d
        assert d["renderer_hint"]["type"] == PRESETS[key]["renderer_hint"]["type"]
    json.dumps(get_preset("interference_five").to_dict())


def test_list_and_load_presets(tmp_path):
    ifs = list_presets("ifs")
    assert [k for k, _, _ in ifs] == ["barnsley_fern", "sierpinski"]
    assert len(list_presets()) == len(PRESET_ORDER)

    path = tmp_path / "gallery.json"
    path.write_text(json.dumps([mandelbrot(), sierpinski()]))
    loaded = load_presets(str(path))
    assert [p.id for p in loaded] == ["m", "tri"]
    assert loaded[1].renderer_type == "ifs"


# ── sink and CLI ─────────────────────────────────────────────────────────

def test_png_sink(tmp_path):
    raster = render(mandelbrot(max_iter=20), 20, 10)
    data = encode_png(raster)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    path = save_png(raster, str(tmp_path / "nested" / "m.png"))
    assert os.path.getsize(path) > 0


def test_cli_listing():
    assert main(["--list"]) == 0
    assert main(["--kernels"]) == 0
    assert main(["no_such_preset"]) == 2


def test_cli_snapshot(tmp_path):
    code = main(["sierpinski", "--snap", "--size", "24", "--seed", "1",
                 "--out", str(tmp_path)])
    assert code == 0
    assert (tmp_path / "mv_sierpinski.png").exists()


def test_cli_view_mode_starts_viewer(monkeypatch):
    started = []

    class RecordingViewer:
        def __init__(self, width, height, start_preset, quality):
            started.append((width, height, start_preset, quality))

        def run(self):
            started.append("run")

    fake = types.ModuleType("math_visuals.viewer")
    fake.Viewer = RecordingViewer
    monkeypatch.setitem(sys.modules, "math_visuals.viewer", fake)
    assert main(["rose_5_4", "--size", "48", "--quality", "full"]) == 0
    assert main(["--view", "sierpinski"]) == 0
    assert started == [(48, 48, "rose_5_4", "full"), "run",
                       (512, 512, "sierpinski", "draft"), "run"]


def test_viewer_is_part_of_the_package():
    import math_visuals
    here = os.path.dirname(math_visuals.__file__)
    assert os.path.exists(os.path.join(here, "viewer.py"))
    pytest.importorskip("pygame")
    from math_visuals.viewer import Viewer
    viewer = Viewer(width=32, height=32, start_preset="sierpinski")
    assert viewer.preset_key == "sierpinski"


if __name__ == "__main__":
    print("\n=== Testing render ===\n")
    pytest.main([__file__, "-v"])
