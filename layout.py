# layout.py
"""
Builds complete scenes.

This module links nearby wheels with curved bead arcs and defines the
regenerate pass, which turns a seed and a canvas size into a Scene of
wheels, arcs and background dots in one step. It also exposes the
per-entity animation queries used by the renderer.
"""
import logging
import numpy as np
from typing import Dict, Any, List, NamedTuple, Optional, Tuple
from context import GenerationContext
from wheel import WheelSystem
from dots import DotField
from palette import HSB
from constants import LINK_OVERLAP_FACTOR, LINK_BLOCK_FACTOR

# --- Data Contracts ---
#
# generate_bead_arcs(ctx, wheels, k=None) -> BeadArcSet:
#   - Inputs:
#     - ctx: GenerationContext of the pass (canvas size, random stream).
#     - wheels: the WheelSystem of the same pass.
#     - k: arcs sought per wheel, defaults to ctx.neighbors_per_wheel.
#   - Invariants: for every arc (i, j), i < j,
#     dist >= 0.95 * (r_i + r_j), dist <= min(width, height) / 2, and the
#     curve midpoint is at least 0.9 * r_k from every other wheel k.
#     At most k arcs are started from any wheel. Empty when k <= 0.
#
# regenerate(seed, width, height, layout_params=None, animation_params=None) -> Scene:
#   - Outputs: Scene(wheels, arcs, dots, seed, width, height).
#   - Invariants: deterministic in (seed, width, height, params).
#
# animated_transform(wheels, index, t) -> (scale, rotation_deg)
# animated_offset(dots, index, t) -> (dx, dy)


def quadratic_bezier(a: np.ndarray, c: np.ndarray, b: np.ndarray, t) -> np.ndarray:
    """
    Point(s) on the quadratic Bezier curve from a to b with control c.
    `t` may be a scalar or a 1-D array; the result is (2,) or (len(t), 2).
    """
    t = np.asarray(t, dtype=np.float64)[..., np.newaxis]
    u = 1.0 - t
    return u * u * a + 2.0 * u * t * c + t * t * b


class BeadArcSet:
    """
    The bead arcs of one layout, as read-only arrays.

    pairs[m] holds the wheel indices (i, j) the arc joins, in the direction
    the curve was built; starts, controls and ends are the Bezier points.
    """
    def __init__(self, pairs, starts, controls, ends, bead_counts, bead_sizes,
                 colors: Optional[List[HSB]] = None):
        self.pairs = np.array(pairs, dtype=np.int64).reshape(-1, 2)
        self.starts = np.array(starts, dtype=np.float64).reshape(-1, 2)
        self.controls = np.array(controls, dtype=np.float64).reshape(-1, 2)
        self.ends = np.array(ends, dtype=np.float64).reshape(-1, 2)
        self.bead_counts = np.array(bead_counts, dtype=np.int64)
        self.bead_sizes = np.array(bead_sizes, dtype=np.float64)
        self.colors = list(colors) if colors is not None else []
        for arr in (self.pairs, self.starts, self.controls, self.ends,
                    self.bead_counts, self.bead_sizes):
            if arr.shape[0] != self.pairs.shape[0]:
                raise ValueError("Bead arc arrays must all have the same length.")
            arr.flags.writeable = False

    @classmethod
    def empty(cls) -> "BeadArcSet":
        return cls(np.zeros((0, 2)), np.zeros((0, 2)), np.zeros((0, 2)), np.zeros((0, 2)), [], [])

    def __len__(self) -> int:
        return self.pairs.shape[0]

    def point_at(self, index: int, t) -> np.ndarray:
        return quadratic_bezier(self.starts[index], self.controls[index], self.ends[index], t)

    def midpoints(self) -> np.ndarray:
        """Curve points at t = 0.5 for every arc, shape (M, 2)."""
        return 0.25 * self.starts + 0.5 * self.controls + 0.25 * self.ends

    def bead_points(self, index: int) -> np.ndarray:
        """The n + 1 bead centres of one arc, evenly spaced in t."""
        n = int(self.bead_counts[index])
        return self.point_at(index, np.arange(n + 1) / n)


def _build_arc(rng: np.random.Generator, ca: np.ndarray, ra: float,
               cb: np.ndarray, rb: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray, int, float]:
    """
    Curve geometry between two wheels: endpoints pulled in from the
    centres to 0.95 * radius, and a control point pushed off the chord
    midpoint along its normal by a quarter of the chord, give or take.
    """
    direction = cb - ca
    direction = direction / np.linalg.norm(direction)
    start = ca + direction * ra * 0.95
    end = cb - direction * rb * 0.95

    chord = end - start
    chord_len = float(np.hypot(chord[0], chord[1]))
    mid = start + chord * 0.5
    normal = np.array([-chord[1], chord[0]])
    if chord_len > 0.0:
        normal = normal / chord_len
    curvature = chord_len * (0.25 + rng.uniform(-0.08, 0.08))
    control = mid + normal * curvature

    bead_size = min(ra, rb) * 0.06
    spacing = bead_size * 1.4
    count = max(4, int(chord_len * 1.1 / spacing))
    return start, control, end, count, bead_size


def generate_bead_arcs(ctx: GenerationContext, wheels: WheelSystem,
                       k: Optional[int] = None) -> BeadArcSet:
    """
    Connects each wheel to up to k of its nearest neighbours.

    A pair is only considered from its lower-indexed wheel. Candidates that
    overlap, lie too far apart, or whose curve midpoint falls inside a third
    wheel are skipped; a wheel may end up with fewer than k arcs.
    """
    k = ctx.neighbors_per_wheel if k is None else int(k)
    count = len(wheels)
    if k <= 0 or count < 2:
        if k <= 0:
            logging.warning(f"Requested {k} neighbours per wheel. No bead arcs generated.")
        return BeadArcSet.empty()

    rng = ctx.rng
    positions = wheels.positions
    radii = wheels.radii
    max_dist = ctx.shorter_side / 2

    # Full pairwise distance matrix; layouts hold at most a few hundred wheels.
    deltas = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
    dists = np.hypot(deltas[..., 0], deltas[..., 1])

    pairs, starts, controls, ends, counts, sizes, colors = [], [], [], [], [], [], []
    blocked = 0

    for i in range(count):
        # Stable sort so equal distances keep index order
        order = np.argsort(dists[i], kind='stable')
        added = 0
        for j in order:
            if added >= k:
                break
            j = int(j)
            if j <= i:
                continue
            d = dists[i, j]
            if d < (radii[i] + radii[j]) * LINK_OVERLAP_FACTOR:
                continue
            if d > max_dist:
                continue

            start, control, end, n, bead_size = _build_arc(rng, positions[i], radii[i], positions[j], radii[j])
            mid = quadratic_bezier(start, control, end, 0.5)
            if wheels.covers(mid[0], mid[1], LINK_BLOCK_FACTOR, skip=(i, j)):
                blocked += 1
                continue

            pairs.append((i, j))
            starts.append(start)
            controls.append(control)
            ends.append(end)
            counts.append(n)
            sizes.append(bead_size)
            colors.append(wheels.looks[i].bead_color if wheels.looks else None)
            added += 1

    arcs = BeadArcSet(
        np.array(pairs, dtype=np.int64).reshape(-1, 2),
        np.array(starts, dtype=np.float64).reshape(-1, 2),
        np.array(controls, dtype=np.float64).reshape(-1, 2),
        np.array(ends, dtype=np.float64).reshape(-1, 2),
        counts, sizes, colors
    )
    logging.info(f"Linked {len(arcs)} bead arcs ({blocked} blocked by a third wheel).")
    return arcs


class Scene(NamedTuple):
    """Everything one regenerate pass produced. Treated as read-only."""
    wheels: WheelSystem
    arcs: BeadArcSet
    dots: DotField
    seed: int
    width: float
    height: float


def regenerate(seed: int, width: float, height: float,
               layout_params: Optional[Dict[str, Any]] = None,
               animation_params: Optional[Dict[str, Any]] = None) -> Scene:
    """
    Generates a complete scene from a seed and a canvas size.

    Nothing is shared with earlier scenes; callers swap the returned Scene
    in place of the old one.
    """
    ctx = GenerationContext(seed, width, height, layout_params, animation_params)
    logging.info(f"Regenerating layout with seed {ctx.seed} on a {ctx.width:.0f}x{ctx.height:.0f} canvas.")

    wheels = WheelSystem.generate(ctx)
    arcs = generate_bead_arcs(ctx, wheels)
    dots = DotField.generate(ctx, wheels)
    return Scene(wheels, arcs, dots, ctx.seed, ctx.width, ctx.height)


def animated_transform(wheels: WheelSystem, index: int, t: float) -> Tuple[float, float]:
    """(scale, rotation in degrees) of wheel `index` at animation time t."""
    return wheels.transform(index, t)


def animated_offset(dots: DotField, index: int, t: float) -> Tuple[float, float]:
    """(dx, dy) drift of dot `index` at animation time t."""
    return dots.offset(index, t)
