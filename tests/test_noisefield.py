# tests/test_noisefield.py
import numpy as np
import pytest

from noisefield import NoiseField


def test_sample_stays_in_unit_interval():
    """Noise values are always within [0, 1)."""
    noise = NoiseField(3)
    xs = np.linspace(-500, 3000, 2000)
    ys = np.linspace(-10, 1e6, 2000)
    values = noise.sample_many(xs, ys)
    assert values.min() >= 0.0
    assert values.max() < 1.0


def test_same_seed_same_values():
    """Two fields built from one seed agree everywhere."""
    a = NoiseField(1234)
    b = NoiseField(1234)
    for x, y in [(0.0, 0.0), (12.5, 3.25), (2500.1, 77.7), (-4.2, 1e5)]:
        assert a.sample(x, y) == b.sample(x, y)


def test_different_seeds_differ():
    """A different seed gives a different field."""
    a = NoiseField(1)
    b = NoiseField(2)
    xs = np.linspace(0, 100, 50)
    assert not np.array_equal(a.sample_many(xs, 0.5), b.sample_many(xs, 0.5))


def test_sample_is_continuous():
    """Tiny steps in either coordinate produce tiny changes."""
    noise = NoiseField(99)
    for x, y in [(0.3, 0.7), (451.9, 12.01), (2999.5, 0.999)]:
        base = noise.sample(x, y)
        assert abs(noise.sample(x + 1e-6, y) - base) < 1e-4
        assert abs(noise.sample(x, y + 1e-6) - base) < 1e-4


def test_lattice_boundaries_are_seamless():
    """Crossing an integer lattice line does not jump."""
    noise = NoiseField(5)
    for edge in (1.0, 2.0, 17.0, 4096.0):
        left = noise.sample(3.3, edge - 1e-9)
        right = noise.sample(3.3, edge + 1e-9)
        assert abs(left - right) < 1e-6


def test_vectorized_matches_scalar():
    """sample_many gives the values of repeated sample calls."""
    noise = NoiseField(11)
    seeds = np.array([1.5, 250.0, 999.9, 2500.25])
    many = noise.sample_many(seeds, 3.75)
    single = [noise.sample(s, 3.75) for s in seeds]
    np.testing.assert_allclose(many, single, rtol=0, atol=1e-12)


def test_sample_many_broadcasts_shape():
    noise = NoiseField(0)
    out = noise.sample_many(np.zeros((3, 4)), 1.0)
    assert out.shape == (3, 4)


def test_noise_is_not_constant():
    """The field actually varies."""
    noise = NoiseField(8)
    values = noise.sample_many(np.linspace(0, 50, 500), 0.0)
    assert values.std() > 0.01


@pytest.mark.parametrize("octaves, falloff", [(0, 0.5), (4, 0.0), (4, 1.5)])
def test_invalid_parameters_raise(octaves, falloff):
    with pytest.raises(ValueError):
        NoiseField(1, octaves=octaves, falloff=falloff)
