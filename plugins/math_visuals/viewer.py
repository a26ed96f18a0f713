"""
Interactive Pygame Viewer for Math Visuals

Shows one preset at a time, rendered at window size. Rendering is
synchronous; the window simply blocks while a frame is computed, then
holds the finished raster.

Controls:
  LEFT / RIGHT  Previous / next preset
  Q             Toggle quality (draft / full)
  R             Re-render with a new seed (random kernels only differ)
  S             Save screenshot (PNG via the Pillow sink)
  H             Toggle HUD overlay
  ESC           Quit
"""

import os
import time

import numpy as np
import pygame

from .dispatcher import render
from .presets import PRESET_ORDER, get_preset
from .sink import save_png

HUD_COLOR = (220, 220, 230)
HUD_WARN = (252, 211, 77)


class Viewer:

    def __init__(self, width=640, height=640, start_preset=None, quality="draft"):
        self.width = width
        self.height = height
        self.quality = quality
        self.index = PRESET_ORDER.index(start_preset) if start_preset in PRESET_ORDER else 0
        self.seed = 0
        self.show_hud = True
        self.raster = None
        self.render_time = 0.0
        self.surface = None

    @property
    def preset_key(self):
        return PRESET_ORDER[self.index]

    def _render(self):
        preset = get_preset(self.preset_key)
        t0 = time.perf_counter()
        self.raster = render(preset, self.width, self.height,
                             quality=self.quality, seed=self.seed)
        self.render_time = time.perf_counter() - t0
        rgb = self.raster.to_rgb()
        # pygame surfaces are (W, H)
        self.surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.swapaxes(0, 1)))

    def _draw_hud(self, screen, font):
        r = self.raster
        lines = [
            (f"{self.preset_key}  [{r.renderer_type}]", HUD_COLOR),
            (f"{self.quality}  seed={self.seed}  {self.render_time * 1000:.0f} ms", HUD_COLOR),
        ]
        if r.approximate:
            lines.append(("approximation (not a reference simulation)", HUD_WARN))
        if r.budget_clamps:
            lines.append(("clamped: " + ", ".join(sorted(r.budget_clamps)), HUD_WARN))
        if r.fault is not None:
            lines.append((str(r.fault)[:80], HUD_WARN))
        y = 8
        for text, color in lines:
            screen.blit(font.render(text, True, color), (8, y))
            y += 18

    def _save_screenshot(self):
        stamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(os.getcwd(), "screenshots", f"mv_{self.preset_key}_{stamp}.png")
        save_png(self.raster, path)
        print(f"Screenshot saved: {path}")

    def _handle_keydown(self, key):
        """Returns False when the viewer should quit."""
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_RIGHT:
            self.index = (self.index + 1) % len(PRESET_ORDER)
            self._render()
        elif key == pygame.K_LEFT:
            self.index = (self.index - 1) % len(PRESET_ORDER)
            self._render()
        elif key == pygame.K_q:
            self.quality = "full" if self.quality == "draft" else "draft"
            self._render()
        elif key == pygame.K_r:
            self.seed += 1
            self._render()
        elif key == pygame.K_s:
            self._save_screenshot()
        elif key == pygame.K_h:
            self.show_hud = not self.show_hud
        return True

    def run(self):
        pygame.init()
        screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Math Visuals")
        font = pygame.font.SysFont("monospace", 14)
        clock = pygame.time.Clock()

        self._render()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self._handle_keydown(event.key)

            screen.blit(self.surface, (0, 0))
            if self.show_hud:
                self._draw_hud(screen, font)
            pygame.display.set_caption(f"Math Visuals - {self.preset_key}")
            pygame.display.flip()
            clock.tick(30)

        pygame.quit()
