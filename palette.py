# palette.py
"""
Color selection for wheels, beads and background dots.

Colors are plain HSB tuples (hue 0-360, saturation 0-100, brightness
0-100). Conversion to screen colors is left to the renderer.
"""
import numpy as np
from typing import List, Optional, Tuple
from constants import BASE_PALETTE_HSB, DOT_PALETTE_HSB

HSB = Tuple[float, float, float]


class PaletteSystem:
    """
    Picks colors from a small curated base set with bounded random
    perturbation. All randomness comes from the generator passed in.
    """
    def __init__(self, rng: np.random.Generator, base: Optional[List[HSB]] = None,
                 accents: Optional[List[HSB]] = None):
        self.rng = rng
        self.base = list(base) if base else list(BASE_PALETTE_HSB)
        self.accents = list(accents) if accents else list(DOT_PALETTE_HSB)

    def pick(self) -> HSB:
        """
        Selects a base color and nudges it: hue by up to +/-8 degrees
        (wrapped), saturation and brightness by up to +/-6 (clamped).
        """
        h, s, b = self.base[int(self.rng.integers(len(self.base)))]
        hue = (h + self.rng.uniform(-8, 8) + 360) % 360
        sat = float(np.clip(s + self.rng.uniform(-6, 6), 50, 100))
        bri = float(np.clip(b + self.rng.uniform(-6, 6), 40, 100))
        return (float(hue), sat, bri)

    def pick_accent(self) -> HSB:
        """Selects one of the background accent colors unchanged."""
        return tuple(float(c) for c in self.accents[int(self.rng.integers(len(self.accents)))])
