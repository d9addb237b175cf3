# visualization.py
"""
Renders scenes with Pygame.

The Visualizer owns the window, translates keyboard and window events into
actions, and draws the endlessly scrolling composition. Drawing of a single
scene is done by `render_scene`, which works on any pygame Surface.
"""
import enum
import functools
import logging
import time
import pygame
import numpy as np
from typing import Dict, Any, List, Optional, Tuple
from layout import Scene
from wheel import WheelSystem, WheelStyle, WheelLook
from palette import HSB
from constants import (
    FULLSCREEN, DEFAULT_WINDOW_SIZE, FPS, BACKGROUND_COLOR_HSB, OUTLINE_COLOR_HSB,
    TIME_SCALE, SCROLL_SPEED
)

# --- Data Contracts ---
#
# render_scene(surface, scene, anim_time, offset_x=0.0) -> None:
#   - Inputs:
#     - surface: pygame.Surface to draw on.
#     - scene: Scene from layout.regenerate.
#     - anim_time: float, already scaled animation time.
#     - offset_x: horizontal shift applied to everything drawn.
#   - Side Effects: Draws dots, bead arcs and wheels. Does not touch the
#     scene.
#
# class Visualizer:
#   - __init__(self, vis_params: Dict[str, Any], anim_params: Dict[str, Any]):
#     - Side Effects: Initializes Pygame and creates a display surface.
#   - poll_events(self) -> List[Action]
#   - draw(self, scene: Scene, time_sec: float) -> None
#   - save_screenshot(self) -> str


class Action(enum.Enum):
    """Things the user asked for since the last frame."""
    QUIT = "quit"
    REGENERATE_NEW_SEED = "regenerate_new_seed"
    REGENERATE_SAME_SEED = "regenerate_same_seed"
    SCREENSHOT = "screenshot"
    RESIZED = "resized"


_REGENERATING = (Action.REGENERATE_NEW_SEED, Action.REGENERATE_SAME_SEED, Action.RESIZED)


def coalesce_actions(actions: List[Action]) -> List[Action]:
    """
    Folds one frame's actions into what actually needs doing.

    QUIT wins over everything. A screenshot is taken at most once, before
    any regeneration. Any number of regenerate requests and resizes collapse
    into a single one, with a new seed if any request asked for one.
    """
    if Action.QUIT in actions:
        return [Action.QUIT]
    result = []
    if Action.SCREENSHOT in actions:
        result.append(Action.SCREENSHOT)
    if Action.REGENERATE_NEW_SEED in actions:
        result.append(Action.REGENERATE_NEW_SEED)
    elif any(a in _REGENERATING for a in actions):
        result.append(Action.REGENERATE_SAME_SEED)
    return result


# Stripe wedges shift hue per band and segment, so every layout brings new
# colors. Bounded so that regenerating forever does not grow memory.
COLOR_CACHE_SIZE = 4096


@functools.lru_cache(maxsize=COLOR_CACHE_SIZE)
def hsb_color(hsb: HSB) -> pygame.Color:
    """Converts an HSB tuple (0-360, 0-100, 0-100) to a pygame Color."""
    h, s, b = hsb
    hue = h % 360
    # Tiny negative hues can round up to exactly 360
    if hue >= 360:
        hue = 0.0
    color = pygame.Color(0, 0, 0)
    color.hsva = (hue, min(max(s, 0), 100), min(max(b, 0), 100), 100)
    return color


def _map(value: float, in_lo: float, in_hi: float, out_lo: float, out_hi: float) -> float:
    return out_lo + (value - in_lo) * (out_hi - out_lo) / (in_hi - in_lo)


def _to_world(local: np.ndarray, center: Tuple[float, float], scale: float, angle: float) -> np.ndarray:
    """Rotates, scales and translates (N, 2) local wheel coordinates."""
    c, s = np.cos(angle), np.sin(angle)
    x = local[:, 0] * scale
    y = local[:, 1] * scale
    return np.column_stack((center[0] + x * c - y * s, center[1] + x * s + y * c))


def _circle(surface: pygame.Surface, color, center, radius: float) -> None:
    # Very small radii would otherwise draw nothing
    pygame.draw.circle(surface, color, (float(center[0]), float(center[1])), max(1.0, radius))


def _draw_sunburst(surface, center, scale, angle, rad: float, color: HSB) -> None:
    rays = max(1, int(_map(rad, 20, 220, 20, 40)))
    dark = hsb_color(OUTLINE_COLOR_HSB)
    light = hsb_color(color)
    for i in range(rays):
        a0 = 2 * np.pi * i / rays
        a1 = 2 * np.pi * (i + 0.5) / rays
        local = np.array([[0.0, 0.0],
                          [np.cos(a0) * rad, np.sin(a0) * rad],
                          [np.cos(a1) * rad, np.sin(a1) * rad]])
        pygame.draw.polygon(surface, light if i % 2 else dark, _to_world(local, center, scale, angle).tolist())


def _draw_stripes(surface, center, scale, angle, rad: float, color: HSB, bands: int) -> None:
    bands = max(1, bands)
    thick = (rad * 0.9) / bands
    segs = max(1, int(_map(rad, 20, 220, 12, 24)))
    h, s, b = color
    for band in range(bands):
        rr = rad * 0.1 + band * thick
        for i in range(segs):
            a0 = 2 * np.pi * i / segs
            a1 = 2 * np.pi * (i + 0.6) / segs
            arc = np.linspace(a0, a1, 6)
            local = np.vstack(([0.0, 0.0], np.column_stack((np.cos(arc) * rr, np.sin(arc) * rr))))
            wedge = hsb_color(((h + band * 8 + i * 3) % 360, s, b))
            pygame.draw.polygon(surface, wedge, _to_world(local, center, scale, angle).tolist())


def _draw_wheel(surface: pygame.Surface, center: Tuple[float, float], radius: float,
                look: WheelLook, scale: float, rotation_deg: float) -> None:
    angle = np.radians(rotation_deg)
    outline = hsb_color(OUTLINE_COLOR_HSB)

    # 1. Outer bead ring
    ring = look.bead_ring
    beads = 2 * np.pi * np.arange(ring.count) / ring.count
    local = np.column_stack((np.cos(beads), np.sin(beads))) * ring.radius
    bead_color = hsb_color(look.bead_color)
    for p in _to_world(local, center, scale, angle):
        _circle(surface, outline, p, ring.bead_size * 0.7 * scale)
        _circle(surface, bead_color, p, ring.bead_size * 0.5 * scale)

    # 2. Internal layers, innermost first
    for layer in look.layers:
        rad = radius * layer.ratio * 0.9
        if layer.style is WheelStyle.SOLID:
            _circle(surface, hsb_color(layer.color), center, rad * scale)
        elif layer.style is WheelStyle.DOTS:
            color = hsb_color(layer.color)
            for p in _to_world(layer.dots, center, scale, angle):
                _circle(surface, color, p, layer.dot_radius * scale)
        elif layer.style is WheelStyle.SUNBURST:
            _draw_sunburst(surface, center, scale, angle, rad, layer.color)
        elif layer.style is WheelStyle.STRIPES:
            _draw_stripes(surface, center, scale, angle, rad, layer.color, layer.bands)

    # 3. Core
    _circle(surface, hsb_color(look.core_color), center, radius * 0.09 * scale)


def render_scene(surface: pygame.Surface, scene: Scene, anim_time: float, offset_x: float = 0.0) -> None:
    """
    Draws one copy of the scene: drifting dots, then bead arcs, then wheels.
    """
    shift = np.array([offset_x, 0.0])

    # Background dots
    dots = scene.dots
    if len(dots):
        drifted = dots.positions + dots.offsets_at(anim_time) + shift
        for p, r, c in zip(drifted, dots.radii, dots.colors):
            _circle(surface, hsb_color(c), p, r)

    # Bead arcs
    arcs = scene.arcs
    outline = hsb_color(OUTLINE_COLOR_HSB)
    for m in range(len(arcs)):
        color = hsb_color(arcs.colors[m]) if arcs.colors[m] is not None else outline
        size = arcs.bead_sizes[m]
        for p in arcs.bead_points(m) + shift:
            _circle(surface, outline, p, size * 1.45 / 2)
            _circle(surface, color, p, size / 2)

    # Wheels, scaled and rotated about their centres
    wheels: WheelSystem = scene.wheels
    if len(wheels) and wheels.looks:
        scales = wheels.scale_at(anim_time)
        rotations = wheels.rotation_at(anim_time)
        for i in range(len(wheels)):
            center = (wheels.positions[i, 0] + offset_x, wheels.positions[i, 1])
            _draw_wheel(surface, center, wheels.radii[i], wheels.looks[i], scales[i], rotations[i])


class Visualizer:
    """
    Owns the Pygame window and draws the scrolling scene.
    """
    def __init__(self, vis_params: Optional[Dict[str, Any]] = None,
                 anim_params: Optional[Dict[str, Any]] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params or {}
        anim_params = anim_params or {}
        pygame.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            size = (display_info.current_w, display_info.current_h)
            self.screen = pygame.display.set_mode(size, pygame.FULLSCREEN)
        else:
            size = tuple(vis_params.get('window_size', DEFAULT_WINDOW_SIZE))
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)

        pygame.display.set_caption("Wheels of Fortune")
        self.clock = pygame.time.Clock()
        self.fps = int(vis_params.get('fps', FPS))
        self.screenshot_prefix = vis_params.get('screenshot_prefix', 'wheels_of_fortune_anim')
        self.time_scale = float(anim_params.get('time_scale', TIME_SCALE))
        self.scroll_speed = float(anim_params.get('scroll_speed', SCROLL_SPEED))
        self.background = hsb_color(BACKGROUND_COLOR_HSB)

        logging.info(f"Visualizer initialized with Pygame display ({self.width}x{self.height}).")

    @property
    def width(self) -> int:
        return self.screen.get_width()

    @property
    def height(self) -> int:
        return self.screen.get_height()

    def poll_events(self) -> List[Action]:
        """Collects the user's requests since the last frame."""
        actions = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                actions.append(Action.QUIT)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    actions.append(Action.QUIT)
                elif event.key == pygame.K_r:
                    if event.mod & pygame.KMOD_SHIFT:
                        actions.append(Action.REGENERATE_SAME_SEED)
                    else:
                        actions.append(Action.REGENERATE_NEW_SEED)
                elif event.key == pygame.K_s:
                    actions.append(Action.SCREENSHOT)
            elif event.type == pygame.VIDEORESIZE:
                logging.info(f"Window resized to {event.w}x{event.h}.")
                actions.append(Action.RESIZED)
        return actions

    def draw(self, scene: Scene, time_sec: float) -> None:
        """
        Draws the scene twice, side by side, shifted left by the scroll
        offset so the composition loops without a seam.
        """
        anim_time = time_sec * self.time_scale
        scroll = (time_sec * self.scroll_speed) % max(1, self.width)

        self.screen.fill(self.background)
        render_scene(self.screen, scene, anim_time, -scroll)
        render_scene(self.screen, scene, anim_time, -scroll + self.width)

        pygame.display.flip()
        self.clock.tick(self.fps)

    def save_screenshot(self) -> str:
        """Saves the current frame as a PNG and returns its path."""
        path = f"{self.screenshot_prefix}_{time.strftime('%Y%m%d-%H%M%S')}.png"
        pygame.image.save(self.screen, path)
        logging.info(f"Screenshot saved to {path}.")
        return path

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
