"""
Math Visuals - Entry Point

Usage:
    python -m math_visuals [preset|all] [--snap] [--view] [--size N]
                           [--quality draft|full] [--seed S] [--out DIR]

Examples:
    python -m math_visuals --list
    python -m math_visuals --kernels
    python -m math_visuals mandelbrot_full --snap
    python -m math_visuals all --snap --size 512 --quality full --seed 7
    python -m math_visuals lorenz_butterfly --view

Modes:
    --snap      Render to PNG in --out (default ./snapshots), no window
    --view      Open the pygame viewer (default mode)
    --verbose   Log kernel warnings/faults to stderr

Use --list to see all available presets.
"""

import logging
import os
import sys
import time

from .dispatcher import describe_kernels, render
from .presets import PRESET_ORDER, RENDERER_ORDER, get_preset, list_presets


def snap(preset_key, size, quality, seed, out_dir):
    """Headless mode: render preset(s) to PNG and exit."""
    from .sink import save_png

    keys = PRESET_ORDER if preset_key == "all" else [preset_key]
    failures = 0
    for key in keys:
        preset = get_preset(key)
        print(f"  {key}: rendering {size}x{size} ({quality})...", end="", flush=True)
        t0 = time.perf_counter()
        raster = render(preset, size, size, quality=quality, seed=seed)
        elapsed = time.perf_counter() - t0
        path = save_png(raster, os.path.join(out_dir, f"mv_{key}.png"))
        notes = []
        if raster.fault is not None:
            failures += 1
            notes.append("FAULT")
        if raster.approximate:
            notes.append("approximation")
        if raster.budget_clamps:
            notes.append("clamped " + ",".join(sorted(raster.budget_clamps)))
        suffix = f" [{'; '.join(notes)}]" if notes else ""
        print(f" {elapsed:.2f}s saved: {path}{suffix}")
    return failures


def main(argv=None):
    preset = "mandelbrot_full"
    size = 512
    quality = "draft"
    seed = None
    out_dir = os.path.join(os.getcwd(), "snapshots")
    mode = "view"

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--size" and i + 1 < len(args):
            size = int(args[i + 1])
            i += 2
        elif arg == "--quality" and i + 1 < len(args):
            quality = args[i + 1]
            i += 2
        elif arg == "--seed" and i + 1 < len(args):
            seed = int(args[i + 1])
            i += 2
        elif arg == "--out" and i + 1 < len(args):
            out_dir = args[i + 1]
            i += 2
        elif arg == "--snap":
            mode = "snap"
            i += 1
        elif arg == "--view":
            mode = "view"
            i += 1
        elif arg == "--verbose":
            logging.basicConfig(level=logging.DEBUG,
                                format="[%(levelname)s] %(name)s: %(message)s")
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:")
            for renderer in RENDERER_ORDER:
                entries = list_presets(renderer)
                if not entries:
                    continue
                print(f"\n  [{renderer}]")
                for key, family, notes in entries:
                    print(f"    {key:24s} {family:16s} {notes}")
            print()
            return 0
        elif arg == "--kernels":
            print("\nKernels:")
            for info in describe_kernels():
                flag = " (approximation)" if info["approximate"] else ""
                fams = ", ".join(info["families"])
                print(f"  {info['renderer_type']:20s} {info['label']}{flag}  [{fams}]")
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    if mode == "snap":
        print(f"Snapshot mode: {preset} @ {size}x{size}, quality={quality}, seed={seed}")
        failures = snap(preset, size, quality, seed, out_dir)
        return 1 if failures else 0

    if preset == "all":
        preset = PRESET_ORDER[0]

    from .viewer import Viewer

    print("Starting Math Visuals Viewer")
    print(f"  Preset: {preset}")
    print(f"  Window: {size}x{size}")
    print()

    viewer = Viewer(width=size, height=size, start_preset=preset, quality=quality)
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
