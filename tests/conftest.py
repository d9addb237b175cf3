# tests/conftest.py
import pytest

from layout import regenerate


@pytest.fixture(scope="module")
def scene_900x600():
    """The reference layout: a 900x600 canvas with seed 42."""
    return regenerate(42, 900, 600)


@pytest.fixture(scope="module")
def scenes_various():
    """A handful of layouts over different seeds and aspect ratios."""
    sizes = [(900, 600), (600, 900), (1280, 720), (400, 400)]
    return [regenerate(seed, w, h) for seed in (1, 7, 2024) for (w, h) in sizes]
