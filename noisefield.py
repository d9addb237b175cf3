# noisefield.py
"""
Seeded 2D coherent noise.

This module defines the NoiseField class, a smooth pseudo-random function
of two continuous coordinates. It is used both as a static randomizer and
as an animation driver: the first coordinate is an entity's private seed,
the second advances with time.
"""
import logging
import numpy as np
from numba import jit
from constants import NOISE_TABLE_SIZE, NOISE_OCTAVES, NOISE_FALLOFF

# --- Data Contracts ---
#
# class NoiseField:
#   - __init__(self, seed, octaves: int = 4, falloff: float = 0.5):
#     - Inputs:
#       - seed: int or numpy.random.SeedSequence.
#     - Side Effects: Builds a lattice table and permutation from the seed.
#
#   - sample(self, x: float, y: float) -> float:
#     - Outputs: value in [0, 1).
#     - Invariants: Pure. Same (seed, x, y) always gives the same value.
#       Continuous in both coordinates.
#
#   - sample_many(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
#     - Outputs: float64 array of the broadcast shape, values in [0, 1).

# Largest float64 strictly below 1.0
_BELOW_ONE = np.nextafter(1.0, 0.0)


@jit(nopython=True)
def _value_noise_numba(table, perm, x, y, octaves, falloff):
    """
    Numba-jitted lattice value noise summed over several octaves.

    Each octave interpolates the four surrounding lattice values with a
    smoothstep fade, so the result is C1-continuous. The weighted sum is
    divided by the total weight, which keeps it inside the table's [0, 1)
    range.
    """
    mask = table.shape[0] - 1
    total = 0.0
    norm = 0.0
    amp = 1.0
    freq = 1.0
    for _ in range(octaves):
        fx = x * freq
        fy = y * freq
        x0 = np.floor(fx)
        y0 = np.floor(fy)
        xf = fx - x0
        yf = fy - y0
        ix = int(x0)
        iy = int(y0)

        u = xf * xf * (3.0 - 2.0 * xf)
        v = yf * yf * (3.0 - 2.0 * yf)

        # Hash lattice corners through the permutation. Masking wraps
        # negative and very large indices into the table.
        px0 = perm[ix & mask]
        px1 = perm[(ix + 1) & mask]
        r00 = table[perm[(px0 + iy) & mask]]
        r10 = table[perm[(px1 + iy) & mask]]
        r01 = table[perm[(px0 + iy + 1) & mask]]
        r11 = table[perm[(px1 + iy + 1) & mask]]

        a = r00 + (r10 - r00) * u
        b = r01 + (r11 - r01) * u
        total += amp * (a + (b - a) * v)
        norm += amp
        amp *= falloff
        freq *= 2.0

    value = total / norm
    # Guard the open upper bound against rounding in the interpolation
    if value >= 1.0:
        value = _BELOW_ONE
    return value


@jit(nopython=True)
def _value_noise_many_numba(table, perm, xs, ys, octaves, falloff):
    """Evaluates the noise for flat coordinate arrays of equal length."""
    out = np.empty(xs.shape[0], dtype=np.float64)
    for i in range(xs.shape[0]):
        out[i] = _value_noise_numba(table, perm, xs[i], ys[i], octaves, falloff)
    return out


class NoiseField:
    """
    A deterministic, smooth 2D noise function bound to one seed.
    """
    def __init__(self, seed, octaves: int = NOISE_OCTAVES, falloff: float = NOISE_FALLOFF):
        """
        Builds the noise lattice.

        Args:
            seed: An integer seed or a numpy SeedSequence.
            octaves (int): Number of summed octaves, at least 1.
            falloff (float): Amplitude multiplier between octaves, in (0, 1].
        """
        if octaves < 1:
            raise ValueError(f"Noise octaves must be at least 1, got {octaves}.")
        if not 0.0 < falloff <= 1.0:
            raise ValueError(f"Noise falloff must be in (0, 1], got {falloff}.")

        rng = np.random.default_rng(seed)
        self.octaves = int(octaves)
        self.falloff = float(falloff)
        self.table = rng.random(NOISE_TABLE_SIZE)
        self.perm = rng.permutation(NOISE_TABLE_SIZE).astype(np.int64)
        self.table.flags.writeable = False
        self.perm.flags.writeable = False

        logging.debug(
            f"NoiseField initialized: {NOISE_TABLE_SIZE} lattice values, "
            f"{self.octaves} octaves, falloff {self.falloff}."
        )

    def sample(self, x: float, y: float) -> float:
        """Returns the noise value at (x, y), in [0, 1)."""
        return float(_value_noise_numba(
            self.table, self.perm, float(x), float(y), self.octaves, self.falloff
        ))

    def sample_many(self, xs, ys) -> np.ndarray:
        """
        Vectorized sampling. `xs` and `ys` are broadcast against each other,
        so a scalar time can be paired with an array of seeds.
        """
        xs, ys = np.broadcast_arrays(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        shape = xs.shape
        flat = _value_noise_many_numba(
            self.table, self.perm,
            np.ascontiguousarray(xs).ravel(), np.ascontiguousarray(ys).ravel(),
            self.octaves, self.falloff
        )
        return flat.reshape(shape)
