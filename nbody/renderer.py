import numpy as np
from typing import Optional, Tuple
from dataclasses import dataclass
import logging
import os

import nbody as P
from nbody.engine import Simulation

os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'
import pygame

logger = logging.getLogger("nbody.renderer")


@dataclass
class Camera:
    """World point shown at the screen centre, plus zoom factor."""
    target_x: float = P.WORLD_WIDTH / 2
    target_y: float = P.WORLD_HEIGHT / 2
    zoom: float = 0.5
    min_zoom: float = 0.01
    max_zoom: float = 100.0

    def world_to_screen(self, wx: float, wy: float,
                        size: Tuple[int, int]) -> Tuple[float, float]:
        return ((wx - self.target_x) * self.zoom + size[0] / 2,
                (wy - self.target_y) * self.zoom + size[1] / 2)

    def screen_to_world(self, sx: float, sy: float,
                        size: Tuple[int, int]) -> Tuple[float, float]:
        return ((sx - size[0] / 2) / self.zoom + self.target_x,
                (sy - size[1] / 2) / self.zoom + self.target_y)

    def pan(self, dx_screen: float, dy_screen: float):
        self.target_x += dx_screen / self.zoom
        self.target_y += dy_screen / self.zoom

    def zoom_by(self, factor: float):
        self.zoom = float(np.clip(self.zoom * factor, self.min_zoom, self.max_zoom))

    def follow(self, sim: Simulation):
        p = sim.selected_particle()
        if sim.following and p is not None:
            self.target_x, self.target_y = p.x, p.y


class Renderer:
    """Maps simulation state → pixels. Reads the store only between steps."""

    def __init__(self, resolution: Tuple[int, int] = P.RESOLUTION,
                 camera: Optional[Camera] = None,
                 bg_color: Tuple[int, int, int] = P.BG_COLOR):
        self.resolution = resolution
        self.camera = camera or Camera()
        self.bg_color = bg_color
        self.show_info = False
        self._font = None

    def draw(self, surface, sim: Simulation):
        surface.fill(self.bg_color)
        size = surface.get_size()
        for p in sim.store:
            if not p.active:
                continue
            sx, sy = self.camera.world_to_screen(p.x, p.y, size)
            pr = max(1, int(p.radius * self.camera.zoom))
            if -pr <= sx <= size[0] + pr and -pr <= sy <= size[1] + pr:
                pygame.draw.circle(surface, p.color, (int(sx), int(sy)), pr)

    def render(self, sim: Simulation) -> np.ndarray:
        """Render single frame offscreen → (H, W, 3) uint8."""
        surface = pygame.Surface(self.resolution)
        self.draw(surface, sim)
        return pygame.surfarray.array3d(surface).transpose(1, 0, 2)

    def _draw_text(self, surface, text: str, pos: Tuple[int, int]):
        surface.blit(self._font.render(text, True, (245, 245, 245)), pos)

    def draw_overlay(self, surface, sim: Simulation, clock, frame_dt: float):
        width = surface.get_width()
        if self.show_info:
            lines = [
                f"FPS: {clock.get_fps():.0f}",
                f"Latency: {frame_dt * 1000:.2f} ms",
                "Simulation: PAUSED" if sim.paused else "Simulation: RUNNING",
                f"N = {sim.n_active()} / {len(sim.store)}",
                f"Collisions: {sim.config.collision_policy.value}",
                f"Color Mode: {sim.config.color_mode.value}",
                f"t = {sim.time:.2f} s",
            ]
            for k, line in enumerate(lines):
                self._draw_text(surface, line, (10, 12 + 28 * k))

        p = sim.selected_particle()
        if p is not None:
            lines = [
                f"Name: {p.name}",
                f"Speed: {p.speed:.2f}",
                f"Mass: {p.mass:.2f}",
                f"Size: {p.radius:.2f}",
            ]
            if sim.store.partner(sim.selected) is not None:
                lines.append(f"Stuck with: {sim.store[sim.store.partner(sim.selected)].name}")
            for k, line in enumerate(lines):
                self._draw_text(surface, line, (width - 300, 12 + 28 * k))

    def _handle_event(self, event, sim: Simulation, size) -> bool:
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_q:
                return False
            if event.key == pygame.K_ESCAPE:
                if sim.selected is None:
                    return False
                sim.clear_selection()
            elif event.key == pygame.K_p:
                sim.toggle_pause()
            elif event.key == pygame.K_i:
                self.show_info = not self.show_info
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            wx, wy = self.camera.screen_to_world(*event.pos, size)
            picked = sim.select_at(wx, wy)
            if picked is not None:
                logger.info(f"selected {sim.store[picked].name}")
        elif event.type == pygame.MOUSEWHEEL:
            self.camera.zoom_by(1.0 + event.y * P.ZOOM_STEP)
        elif event.type == pygame.MOUSEMOTION and event.buttons[2]:
            dx, dy = event.rel
            self.camera.pan(-dx, -dy)
        return True

    def _poll_keys(self):
        keys = pygame.key.get_pressed()
        if keys[pygame.K_RIGHT]:
            self.camera.pan(P.PAN_SPEED, 0)
        if keys[pygame.K_LEFT]:
            self.camera.pan(-P.PAN_SPEED, 0)
        if keys[pygame.K_UP]:
            self.camera.pan(0, -P.PAN_SPEED)
        if keys[pygame.K_DOWN]:
            self.camera.pan(0, P.PAN_SPEED)
        if keys[pygame.K_w]:
            self.camera.zoom_by(1.0 + P.ZOOM_STEP / 5)
        if keys[pygame.K_s]:
            self.camera.zoom_by(1.0 - P.ZOOM_STEP / 5)

    def play(self, sim: Simulation, fps: int = P.FPS, dt: Optional[float] = None):
        """
        Interactive loop. dt=None → measured frame duration drives the physics.
        P pause, I info, arrows/right-drag pan, W/S/wheel zoom, left click select,
        Esc clear selection, Q quit.
        """
        pygame.init()
        screen = pygame.display.set_mode(self.resolution)
        pygame.display.set_caption('2D Gravity Simulation')
        clock = pygame.time.Clock()
        self._font = pygame.font.SysFont(None, 26)

        running = True
        frame_dt = 0.0
        while running:
            for event in pygame.event.get():
                if not self._handle_event(event, sim, screen.get_size()):
                    running = False
            self._poll_keys()

            sim.tick(frame_dt if dt is None else dt)
            self.camera.follow(sim)

            self.draw(screen, sim)
            self.draw_overlay(screen, sim, clock, frame_dt)
            pygame.display.flip()
            frame_dt = clock.tick(fps) / 1000.0

        pygame.quit()
