# context.py
"""
Explicit generation state.

A GenerationContext bundles everything one regenerate pass needs: the
seed, the canvas size, the layout parameters, a random generator and a
noise field. It is passed into every generator call instead of relying on
process-wide random state, so two contexts never interfere.
"""
import logging
import time
import numpy as np
from typing import Dict, Any, Optional, Tuple
from noisefield import NoiseField
from palette import PaletteSystem
from constants import (
    GRID_DIVISIONS, CELL_FILL_PROBABILITY, CELL_JITTER, RADIUS_RANGE,
    OVERLAP_FACTOR, NEIGHBORS_PER_WHEEL, DOT_GRID_DIVISIONS,
    DOT_SKIP_PROBABILITY, DOT_JITTER, DOT_DRIFT_FREQUENCY
)

# Arc beads and dot radii are 0.06 of a wheel radius or grid step; the
# second factor is headroom for spacing and jitter arithmetic.
MIN_FEATURE_RATIO = 0.06 * 0.06

# --- Data Contracts ---
#
# class GenerationContext:
#   - __init__(self, seed: int, width: float, height: float,
#              layout_params: Optional[Dict[str, Any]] = None,
#              animation_params: Optional[Dict[str, Any]] = None):
#     - Inputs:
#       - seed: int, any integer. Reduced modulo 2**64.
#       - width, height: canvas size. Non-positive or vanishingly small
#         values are allowed and make every generator return an empty result.
#       - layout_params: the "layout" section of config.json.
#         - "grid_divisions": int
#         - "cell_fill_probability": float
#         - "cell_jitter": float
#         - "radius_range": [float, float]
#         - "overlap_factor": float
#         - "neighbors_per_wheel": int
#         - "dot_grid_divisions": int
#         - "dot_skip_probability": float
#         - "dot_jitter": float
#       - animation_params: the "animation" section of config.json.
#         - "dot_drift_frequency": float
#     - Side Effects: Creates independent random and noise streams derived
#       from the seed.
#     - Invariants: Raises ValueError for invalid parameters. Two contexts
#       built from equal inputs produce identical random sequences.
#
# new_seed() -> int:
#   - Outputs: an unsigned 32-bit seed mixed from clock and OS entropy.


def new_seed() -> int:
    """Generates a fresh seed from the wall clock, a perf counter and OS entropy."""
    entropy = int(np.random.default_rng().integers(0, 1_000_000_000))
    seed = (time.time_ns() // 1_000_000) ^ int(time.perf_counter() * 1e6) ^ entropy
    return seed & 0xFFFFFFFF


class GenerationContext:
    """
    Carries the seed, canvas and parameters for one regenerate pass.
    """
    def __init__(self, seed: int, width: float, height: float,
                 layout_params: Optional[Dict[str, Any]] = None,
                 animation_params: Optional[Dict[str, Any]] = None):
        """
        Initializes the context and its random streams.

        Args:
            seed (int): The master seed for the pass.
            width (float): Canvas width.
            height (float): Canvas height.
            layout_params (Optional[Dict[str, Any]]): Layout overrides.
            animation_params (Optional[Dict[str, Any]]): Animation overrides.
        """
        layout_params = layout_params or {}
        animation_params = animation_params or {}

        self.seed = int(seed) % (1 << 64)
        self.width = float(width)
        self.height = float(height)

        self.grid_divisions = int(layout_params.get('grid_divisions', GRID_DIVISIONS))
        self.cell_fill_probability = float(layout_params.get('cell_fill_probability', CELL_FILL_PROBABILITY))
        self.cell_jitter = float(layout_params.get('cell_jitter', CELL_JITTER))
        self.radius_range: Tuple[float, float] = tuple(
            float(v) for v in layout_params.get('radius_range', RADIUS_RANGE)
        )
        self.overlap_factor = float(layout_params.get('overlap_factor', OVERLAP_FACTOR))
        self.neighbors_per_wheel = int(layout_params.get('neighbors_per_wheel', NEIGHBORS_PER_WHEEL))
        self.dot_grid_divisions = int(layout_params.get('dot_grid_divisions', DOT_GRID_DIVISIONS))
        self.dot_skip_probability = float(layout_params.get('dot_skip_probability', DOT_SKIP_PROBABILITY))
        self.dot_jitter = float(layout_params.get('dot_jitter', DOT_JITTER))
        self.dot_drift_frequency = float(animation_params.get('dot_drift_frequency', DOT_DRIFT_FREQUENCY))

        self._validate()

        # Layout draws and the noise lattice come from separate child
        # streams so that neither shifts the other.
        layout_seq, noise_seq = np.random.SeedSequence(self.seed).spawn(2)
        self.rng = np.random.default_rng(layout_seq)
        self.noise = NoiseField(noise_seq)
        self.palette = PaletteSystem(self.rng)

        logging.debug(
            f"GenerationContext created: seed={self.seed}, "
            f"canvas={self.width:.0f}x{self.height:.0f}."
        )

    def _validate(self) -> None:
        """Rejects parameter combinations no layout can be built from."""
        problems = []
        if self.grid_divisions <= 0:
            problems.append(f"grid_divisions must be positive, got {self.grid_divisions}")
        if self.dot_grid_divisions <= 0:
            problems.append(f"dot_grid_divisions must be positive, got {self.dot_grid_divisions}")
        for name in ('cell_fill_probability', 'dot_skip_probability'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                problems.append(f"{name} must be within [0, 1], got {value}")
        for name in ('cell_jitter', 'dot_jitter', 'overlap_factor', 'dot_drift_frequency'):
            value = getattr(self, name)
            if value < 0.0:
                problems.append(f"{name} must not be negative, got {value}")
        if len(self.radius_range) != 2 or not 0.0 < self.radius_range[0] <= self.radius_range[1]:
            problems.append(f"radius_range must be [low, high] with 0 < low <= high, got {list(self.radius_range)}")

        if problems:
            msg = "Configuration error: " + "; ".join(problems) + "."
            logging.critical(msg)
            raise ValueError(msg)

    @property
    def shorter_side(self) -> float:
        return min(self.width, self.height)

    @property
    def is_degenerate(self) -> bool:
        """
        True when the canvas has no area to lay anything out on, or is so
        small that the square of the finest derived length (bead size on
        the smallest possible wheel) is no longer a normal float. Overlap
        and distance tests compare squared lengths.
        """
        if not (self.width > 0 and self.height > 0):
            return True
        cell = self.shorter_side / max(self.grid_divisions, self.dot_grid_divisions)
        finest = cell * min(self.radius_range[0], 1.0) * MIN_FEATURE_RATIO
        return finest < np.sqrt(np.finfo(np.float64).tiny)
