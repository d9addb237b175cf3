# dots.py
"""
Background dot field.

Scatters small decorative dots over the canvas, leaving out the area
covered by wheels, and gives every dot its own noise-driven drift.
"""
import logging
import numpy as np
from typing import List, Optional, Tuple, TYPE_CHECKING
from noisefield import NoiseField
from palette import HSB
from wheel import WheelSystem
from utils import map_unit
from constants import DOT_EXCLUSION_FACTOR, DOT_DRIFT_FREQUENCY

if TYPE_CHECKING:
    from context import GenerationContext

# --- Data Contracts ---
#
# class DotField:
#   - generate(ctx: GenerationContext, wheels: WheelSystem) -> DotField:
#     - Invariants: every dot is at least 0.9 * radius away from every
#       wheel centre. Empty for a degenerate canvas.
#
#   - positions: np.ndarray (M, 2), radii: (M,), seeds_x: (M,),
#     seeds_y: (M,), amplitudes: (M,) -- all float64, read-only.
#   - colors: List[HSB], one per dot.
#
#   - offsets_at(t: float) -> np.ndarray (M, 2):
#     - Invariants: |dx| <= amplitude and |dy| <= amplitude. Pure in t.


class DotField:
    """
    A container for the background dots of one layout.
    """
    def __init__(self, noise: NoiseField, positions, radii, seeds_x, seeds_y, amplitudes,
                 colors: Optional[List[HSB]] = None,
                 drift_frequency: float = DOT_DRIFT_FREQUENCY):
        self.noise = noise
        self.positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        self.radii = np.array(radii, dtype=np.float64)
        self.seeds_x = np.array(seeds_x, dtype=np.float64)
        self.seeds_y = np.array(seeds_y, dtype=np.float64)
        self.amplitudes = np.array(amplitudes, dtype=np.float64)
        self.colors = list(colors) if colors is not None else []
        self.drift_frequency = float(drift_frequency)
        for arr in (self.positions, self.radii, self.seeds_x, self.seeds_y, self.amplitudes):
            if arr.shape[0] != self.positions.shape[0]:
                raise ValueError("Dot arrays must all have the same length.")
            arr.flags.writeable = False

    @classmethod
    def generate(cls, ctx: "GenerationContext", wheels: WheelSystem) -> "DotField":
        """
        Samples a jittered grid, keeps each candidate with probability
        1 - dot_skip_probability, and drops those inside a wheel.
        """
        if ctx.is_degenerate:
            logging.warning(
                f"Canvas {ctx.width}x{ctx.height} is too small to lay out. No background dots generated."
            )
            return cls(ctx.noise, np.zeros((0, 2)), [], [], [], [],
                       drift_frequency=ctx.dot_drift_frequency)

        rng = ctx.rng
        step = ctx.shorter_side / ctx.dot_grid_divisions
        jitter = step * ctx.dot_jitter

        rows = []
        colors = []
        covered = 0
        for y in np.arange(step * 0.5, ctx.height, step):
            for x in np.arange(step * 0.5, ctx.width, step):
                if rng.random() < ctx.dot_skip_probability:
                    continue
                px = x + rng.uniform(-jitter, jitter)
                py = y + rng.uniform(-jitter, jitter)

                if wheels.covers(px, py, DOT_EXCLUSION_FACTOR):
                    covered += 1
                    continue

                radius = rng.uniform(step * 0.06, step * 0.12)
                colors.append(ctx.palette.pick_accent())
                seed_x = rng.uniform(0, 1000)
                seed_y = rng.uniform(0, 1000)
                amplitude = rng.uniform(2, 5)
                rows.append((px, py, radius, seed_x, seed_y, amplitude))

        data = np.array(rows, dtype=np.float64).reshape(-1, 6)
        field = cls(
            ctx.noise, data[:, 0:2], data[:, 2], data[:, 3], data[:, 4], data[:, 5],
            colors=colors, drift_frequency=ctx.dot_drift_frequency
        )
        logging.info(
            f"Scattered {len(field)} background dots "
            f"(step {step:.1f}px, {covered} dropped inside wheels)."
        )
        return field

    def __len__(self) -> int:
        return self.positions.shape[0]

    def offsets_at(self, t: float) -> np.ndarray:
        """Drift offsets (dx, dy) of every dot at time t."""
        phase = t * self.drift_frequency
        dx = map_unit(self.noise.sample_many(self.seeds_x, phase), -self.amplitudes, self.amplitudes)
        dy = map_unit(self.noise.sample_many(self.seeds_y, phase), -self.amplitudes, self.amplitudes)
        return np.column_stack((dx, dy))

    def offset(self, index: int, t: float) -> Tuple[float, float]:
        """Drift offset (dx, dy) of one dot at time t."""
        phase = t * self.drift_frequency
        amp = self.amplitudes[index]
        dx = map_unit(self.noise.sample(self.seeds_x[index], phase), -amp, amp)
        dy = map_unit(self.noise.sample(self.seeds_y[index], phase), -amp, amp)
        return float(dx), float(dy)
