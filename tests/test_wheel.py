# tests/test_wheel.py
import numpy as np
import pytest

from context import GenerationContext
from noisefield import NoiseField
from wheel import WheelSystem, WheelStyle


def _single_wheel(min_scale=0.4, max_scale=1.3, rot_range=45.0, seed=7):
    return WheelSystem(
        NoiseField(seed),
        positions=[[100.0, 100.0]],
        radii=[50.0],
        min_scales=[min_scale],
        max_scales=[max_scale],
        scale_seeds=[123.4],
        scale_freqs=[0.01],
        rot_seeds=[2345.6],
        rot_freqs=[0.012],
        rot_ranges=[rot_range],
    )


def test_wheels_never_overlap(scenes_various):
    """Every pair of centres is at least 0.85 x the sum of radii apart."""
    for scene in scenes_various:
        wheels = scene.wheels
        pos, r = wheels.positions, wheels.radii
        for i in range(len(wheels)):
            for j in range(i + 1, len(wheels)):
                d = np.hypot(*(pos[i] - pos[j]))
                assert d >= 0.85 * (r[i] + r[j])


def test_wheel_parameters_in_range(scene_900x600):
    """Radii and animation parameters stay within their documented ranges."""
    wheels = scene_900x600.wheels
    unit = 600 / 9
    assert len(wheels) > 0
    assert np.all(wheels.radii >= 0.55 * unit) and np.all(wheels.radii <= 1.05 * unit)
    assert np.all((wheels.min_scales >= 0.3) & (wheels.min_scales < 0.7))
    extra = wheels.max_scales - wheels.min_scales
    assert np.all((extra >= 0.8 - 1e-12) & (extra < 1.2 + 1e-12))
    assert np.all((wheels.scale_freqs >= 0.005) & (wheels.scale_freqs < 0.015))
    assert np.all((wheels.rot_freqs >= 0.005) & (wheels.rot_freqs < 0.015))
    assert np.all((wheels.rot_ranges >= 20) & (wheels.rot_ranges <= 60))
    assert np.all((wheels.scale_seeds >= 0) & (wheels.scale_seeds < 1000))
    assert np.all((wheels.rot_seeds >= 2000) & (wheels.rot_seeds < 3000))


def test_wheel_centres_near_grid_cells(scene_900x600):
    """Centres lie within the jittered area of some grid cell."""
    unit = 600 / 9
    for x, y in scene_900x600.wheels.positions:
        fx = x / unit - 0.5
        fy = y / unit - 0.5
        assert abs(fx - round(fx)) <= 0.25 + 1e-9
        assert abs(fy - round(fy)) <= 0.25 + 1e-9


def test_looks_are_generated_per_wheel(scene_900x600):
    wheels = scene_900x600.wheels
    assert len(wheels.looks) == len(wheels)
    for radius, look in zip(wheels.radii, wheels.looks):
        assert 3 <= len(look.layers) <= 4
        assert look.layers[0].ratio == pytest.approx(0.25)
        assert look.layers[-1].ratio == pytest.approx(1.0)
        assert look.bead_ring.count >= 10
        assert look.bead_ring.radius == pytest.approx(radius * 0.88)
        for layer in look.layers:
            assert isinstance(layer.style, WheelStyle)
            if layer.style is WheelStyle.DOTS:
                assert layer.dots.shape[1] == 2 and len(layer.dots) > 0
            if layer.style is WheelStyle.STRIPES:
                assert layer.bands in (4, 5)


def test_arrays_are_read_only(scene_900x600):
    with pytest.raises(ValueError):
        scene_900x600.wheels.positions[0, 0] = 0.0


@pytest.mark.parametrize("width, height", [(0, 600), (900, 0), (-10, 50), (0, 0)])
def test_degenerate_canvas_gives_no_wheels(width, height):
    ctx = GenerationContext(1, width, height)
    assert len(WheelSystem.generate(ctx)) == 0


def test_tiny_canvas_does_not_fail():
    """A canvas far too small for a real grid still yields a valid result."""
    ctx = GenerationContext(3, 2, 1)
    wheels = WheelSystem.generate(ctx)
    assert len(wheels) >= 0


def test_zero_fill_probability_places_nothing():
    ctx = GenerationContext(3, 900, 600, {'cell_fill_probability': 0.0})
    assert len(WheelSystem.generate(ctx)) == 0


def test_scale_example_bounds():
    """A wheel with scale range [0.4, 1.3] never leaves it."""
    wheel = _single_wheel()
    assert 0.4 <= wheel.scale(0, 0.0) <= 1.3
    assert 0.4 <= wheel.scale(0, 1e9) <= 1.3
    for t in np.linspace(0, 1000, 1000):
        assert 0.4 <= wheel.scale(0, t) <= 1.3


def test_rotation_bounds():
    wheel = _single_wheel(rot_range=45.0)
    rotations = [wheel.rotation(0, t) for t in np.linspace(0, 5000, 2000)]
    assert min(rotations) >= -45.0 and max(rotations) <= 45.0


def test_population_animation_bounds(scene_900x600):
    wheels = scene_900x600.wheels
    for t in (0.0, 3.3, 120.0, 1e6):
        scales = wheels.scale_at(t)
        rotations = wheels.rotation_at(t)
        assert np.all(scales >= wheels.min_scales) and np.all(scales <= wheels.max_scales)
        assert np.all(np.abs(rotations) <= wheels.rot_ranges)


def test_animation_is_continuous():
    """Small time steps produce small changes in scale and rotation."""
    wheel = _single_wheel()
    for t in np.linspace(0, 500, 50):
        s0, r0 = wheel.transform(0, t)
        s1, r1 = wheel.transform(0, t + 0.01)
        assert abs(s1 - s0) < 1e-3
        assert abs(r1 - r0) < 0.1


def test_animation_moves_over_time():
    wheel = _single_wheel()
    scales = {round(wheel.scale(0, t), 6) for t in np.linspace(0, 2000, 40)}
    assert len(scales) > 1


def test_transform_is_idempotent(scene_900x600):
    """Evaluation order and repetition never change results."""
    wheels = scene_900x600.wheels
    first = [wheels.transform(i, 42.0) for i in range(len(wheels))]
    # Interleave other evaluations, in reverse order
    for i in reversed(range(len(wheels))):
        wheels.transform(i, 7.0)
        wheels.scale_at(1e5)
    second = [wheels.transform(i, 42.0) for i in range(len(wheels))]
    assert first == second


def test_vectorized_matches_per_wheel(scene_900x600):
    wheels = scene_900x600.wheels
    t = 17.5
    scales = wheels.scale_at(t)
    rotations = wheels.rotation_at(t)
    for i in range(len(wheels)):
        s, r = wheels.transform(i, t)
        assert s == pytest.approx(scales[i], abs=1e-12)
        assert r == pytest.approx(rotations[i], abs=1e-9)


def test_mismatched_arrays_raise():
    with pytest.raises(ValueError):
        WheelSystem(NoiseField(1), [[0.0, 0.0]], [1.0, 2.0], [0.4], [1.3],
                    [1.0], [0.01], [2000.0], [0.01], [30.0])


def test_covers_ignores_skipped_wheels():
    wheel = _single_wheel()
    assert wheel.covers(100.0, 100.0, 0.9)
    assert not wheel.covers(100.0, 100.0, 0.9, skip=(0, -1))
    assert not wheel.covers(100.0 + 46.0, 100.0, 0.9)
