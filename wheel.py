# wheel.py
"""
Manages the state of all wheels in a layout.

This module defines the WheelSystem class, which places wheels on a
jittered grid with collision rejection, stores their geometry and
animation parameters in read-only NumPy arrays, and evaluates their
noise-driven scale and rotation for any time value.
"""
import logging
import enum
import numpy as np
from numba import jit
from typing import List, NamedTuple, Optional, Tuple, TYPE_CHECKING
from noisefield import NoiseField
from palette import HSB, PaletteSystem
from utils import map_unit

if TYPE_CHECKING:
    from context import GenerationContext

# --- Data Contracts ---
#
# class WheelSystem:
#   - generate(ctx: GenerationContext) -> WheelSystem:
#     - Inputs: a GenerationContext (seed, canvas, layout parameters).
#     - Outputs: a new WheelSystem.
#     - Invariants: for every pair (i, j), the centre distance is at least
#       overlap_factor * (radii[i] + radii[j]). Empty for a degenerate canvas.
#
#   - positions: np.ndarray (N, 2) float64, read-only.
#   - radii: np.ndarray (N,) float64, read-only, all > 0.
#   - min_scales, max_scales, scale_seeds, scale_freqs,
#     rot_seeds, rot_freqs, rot_ranges: np.ndarray (N,) float64, read-only.
#   - looks: List[WheelLook], one per wheel.
#
#   - scale_at(t) / rotation_at(t) -> np.ndarray (N,):
#     - Invariants: min_scales <= scale <= max_scales and
#       -rot_ranges <= rotation <= rot_ranges for every t. Pure in t.
#
#   - transform(index: int, t: float) -> Tuple[float, float]:
#     - Outputs: (scale, rotation in degrees) of one wheel.


class WheelStyle(enum.Enum):
    """Fill pattern of one concentric wheel layer."""
    SOLID = "solid"
    DOTS = "dots"
    SUNBURST = "sunburst"
    STRIPES = "stripes"


class WheelLayer(NamedTuple):
    ratio: float
    style: WheelStyle
    color: HSB
    # Ring dot centres relative to the wheel centre, only for DOTS
    dots: Optional[np.ndarray] = None
    dot_radius: float = 0.0
    # Band count, only for STRIPES
    bands: int = 0


class BeadRing(NamedTuple):
    radius: float
    bead_size: float
    count: int


class WheelLook(NamedTuple):
    """Colors and layer structure of one wheel. Used only by the renderer."""
    core_color: HSB
    bead_color: HSB
    layers: Tuple[WheelLayer, ...]
    bead_ring: BeadRing


@jit(nopython=True)
def _collides_numba(xs, ys, rs, count, cx, cy, r, factor):
    """
    Numba-jitted check of a candidate circle against the first `count`
    accepted circles. True if any centre is closer than
    factor * (sum of radii).
    """
    for i in range(count):
        dx = xs[i] - cx
        dy = ys[i] - cy
        limit = (rs[i] + r) * factor
        if dx * dx + dy * dy < limit * limit:
            return True
    return False


@jit(nopython=True)
def _point_covered_numba(xs, ys, rs, px, py, factor, skip_a, skip_b):
    """
    Numba-jitted test of whether a point lies within factor * radius of
    any wheel centre, ignoring the wheels at indices skip_a and skip_b.
    """
    for k in range(xs.shape[0]):
        if k == skip_a or k == skip_b:
            continue
        dx = xs[k] - px
        dy = ys[k] - py
        limit = rs[k] * factor
        if dx * dx + dy * dy < limit * limit:
            return True
    return False


def _ring_dots(rng: np.random.Generator, rad: float) -> Tuple[np.ndarray, float]:
    """Evenly spaced dots on a slightly irregular ring of radius ~rad."""
    count = int(16 + (rad - 20) * (32 - 16) / (220 - 20))
    count = max(count, 1)
    angles = 2 * np.pi * np.arange(count) / count
    dists = rad * rng.uniform(0.8, 0.95, size=count)
    dots = np.column_stack((np.cos(angles) * dists, np.sin(angles) * dists))
    dots.flags.writeable = False
    return dots, rad * 0.10


def _draw_look(palette: PaletteSystem, rng: np.random.Generator, radius: float) -> WheelLook:
    core_color = palette.pick()
    bead_color = palette.pick()

    styles = list(WheelStyle)
    n_layers = int(rng.uniform(3, 5))
    layers = []
    for i in range(n_layers):
        ratio = 0.25 + (1.0 - 0.25) * i / (n_layers - 1)
        style = styles[int(rng.integers(len(styles)))]
        color = palette.pick()
        if style is WheelStyle.DOTS:
            dots, dot_radius = _ring_dots(rng, radius * ratio * 0.9)
            layers.append(WheelLayer(ratio, style, color, dots=dots, dot_radius=dot_radius))
        elif style is WheelStyle.STRIPES:
            layers.append(WheelLayer(ratio, style, color, bands=int(rng.uniform(4, 6))))
        else:
            layers.append(WheelLayer(ratio, style, color))

    ring_radius = radius * 0.88
    bead_size = radius * 0.09
    count = max(10, int(2 * np.pi * ring_radius / (bead_size * 1.2)))
    return WheelLook(core_color, bead_color, tuple(layers), BeadRing(ring_radius, bead_size, count))


class WheelSystem:
    """
    A container for all wheels of one layout, with their animation model.
    """
    def __init__(self, noise: NoiseField, positions, radii, min_scales, max_scales,
                 scale_seeds, scale_freqs, rot_seeds, rot_freqs, rot_ranges,
                 looks: Optional[List[WheelLook]] = None):
        """
        Wraps already generated wheel data. Use `generate` to build a layout.

        Args:
            noise (NoiseField): Noise shared by all wheels of the layout.
            positions: (N, 2) wheel centres.
            radii: (N,) base radii.
            min_scales, max_scales: (N,) scale bounds.
            scale_seeds, scale_freqs: (N,) scale noise seed and frequency.
            rot_seeds, rot_freqs: (N,) rotation noise seed and frequency.
            rot_ranges: (N,) maximum rotation in degrees either way.
            looks (Optional[List[WheelLook]]): Visual identity per wheel.
        """
        self.noise = noise
        self.positions = self._frozen(positions).reshape(-1, 2)
        self.radii = self._frozen(radii)
        self.min_scales = self._frozen(min_scales)
        self.max_scales = self._frozen(max_scales)
        self.scale_seeds = self._frozen(scale_seeds)
        self.scale_freqs = self._frozen(scale_freqs)
        self.rot_seeds = self._frozen(rot_seeds)
        self.rot_freqs = self._frozen(rot_freqs)
        self.rot_ranges = self._frozen(rot_ranges)
        self.looks = list(looks) if looks is not None else []

        for name in ('radii', 'min_scales', 'max_scales', 'scale_seeds', 'scale_freqs',
                     'rot_seeds', 'rot_freqs', 'rot_ranges'):
            if getattr(self, name).shape[0] != self.positions.shape[0]:
                raise ValueError(
                    f"Wheel array '{name}' has {getattr(self, name).shape[0]} entries, "
                    f"expected {self.positions.shape[0]}."
                )

    @staticmethod
    def _frozen(values) -> np.ndarray:
        arr = np.array(values, dtype=np.float64)
        arr.flags.writeable = False
        return arr

    @classmethod
    def empty(cls, noise: NoiseField) -> "WheelSystem":
        nothing = np.zeros(0)
        return cls(noise, np.zeros((0, 2)), *([nothing] * 8))

    @classmethod
    def generate(cls, ctx: "GenerationContext") -> "WheelSystem":
        """
        Places wheels on a jittered grid, rejecting any candidate that
        would overlap an already accepted wheel.

        Cells are visited row by row. A rejected cell stays empty; there is
        no retry, so the result is irregular but never overlapping.
        """
        if ctx.is_degenerate:
            logging.warning(
                f"Canvas {ctx.width}x{ctx.height} is too small to lay out. No wheels generated."
            )
            return cls.empty(ctx.noise)

        rng = ctx.rng
        unit = ctx.shorter_side / ctx.grid_divisions
        cols = int(ctx.width / unit) + 1
        rows = int(ctx.height / unit) + 1
        jitter = unit * ctx.cell_jitter
        r_low, r_high = ctx.radius_range

        capacity = cols * rows
        xs = np.empty(capacity, dtype=np.float64)
        ys = np.empty(capacity, dtype=np.float64)
        rs = np.empty(capacity, dtype=np.float64)
        count = 0
        rejected = 0

        # Per-wheel animation parameters, in column order:
        # min_scale, max_scale, scale_seed, scale_freq, rot_seed, rot_freq, rot_range
        anim = []
        looks = []

        for j in range(rows):
            for i in range(cols):
                if rng.random() >= ctx.cell_fill_probability:
                    continue
                cx = (i + 0.5) * unit + rng.uniform(-jitter, jitter)
                cy = (j + 0.5) * unit + rng.uniform(-jitter, jitter)
                r = unit * rng.uniform(r_low, r_high)

                if _collides_numba(xs, ys, rs, count, cx, cy, r, ctx.overlap_factor):
                    rejected += 1
                    continue

                xs[count] = cx
                ys[count] = cy
                rs[count] = r
                count += 1

                looks.append(_draw_look(ctx.palette, rng, r))
                scale_seed = rng.uniform(0, 1000)
                scale_freq = rng.uniform(0.005, 0.015)
                min_scale = rng.uniform(0.3, 0.7)
                max_scale = min_scale + rng.uniform(0.8, 1.2)
                rot_seed = rng.uniform(2000, 3000)
                rot_freq = rng.uniform(0.005, 0.015)
                rot_range = rng.uniform(20, 60)
                anim.append((min_scale, max_scale, scale_seed, scale_freq, rot_seed, rot_freq, rot_range))

        params = np.array(anim, dtype=np.float64).reshape(-1, 7)
        wheels = cls(
            ctx.noise,
            np.column_stack((xs[:count], ys[:count])),
            rs[:count],
            *(params[:, c] for c in range(7)),
            looks=looks
        )

        logging.info(
            f"Placed {count} wheels on a {cols}x{rows} grid "
            f"(unit {unit:.1f}px, {rejected} candidates rejected by overlap)."
        )
        return wheels

    def __len__(self) -> int:
        return self.positions.shape[0]

    def covers(self, x: float, y: float, factor: float, skip: Tuple[int, int] = (-1, -1)) -> bool:
        """
        True if (x, y) lies within factor * radius of any wheel centre,
        not counting the wheels whose indices are in `skip`.
        """
        return bool(_point_covered_numba(
            self.positions[:, 0], self.positions[:, 1], self.radii,
            float(x), float(y), float(factor), int(skip[0]), int(skip[1])
        ))

    # --- Animation model ---

    def scale_at(self, t: float) -> np.ndarray:
        """Scale factor of every wheel at time t."""
        n = self.noise.sample_many(self.scale_seeds, self.scale_freqs * t)
        return map_unit(n, self.min_scales, self.max_scales)

    def rotation_at(self, t: float) -> np.ndarray:
        """Rotation in degrees of every wheel at time t."""
        n = self.noise.sample_many(self.rot_seeds, self.rot_freqs * t)
        return map_unit(n, -self.rot_ranges, self.rot_ranges)

    def scale(self, index: int, t: float) -> float:
        n = self.noise.sample(self.scale_seeds[index], t * self.scale_freqs[index])
        return float(map_unit(n, self.min_scales[index], self.max_scales[index]))

    def rotation(self, index: int, t: float) -> float:
        n = self.noise.sample(self.rot_seeds[index], t * self.rot_freqs[index])
        return float(map_unit(n, -self.rot_ranges[index], self.rot_ranges[index]))

    def transform(self, index: int, t: float) -> Tuple[float, float]:
        """(scale, rotation in degrees) of one wheel at time t."""
        return self.scale(index, t), self.rotation(index, t)
