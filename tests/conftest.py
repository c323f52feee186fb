"""shared test fixtures for the texture generator."""

import numpy as np
import pytest

from texture_generator.modules import Module, Perlin, ScaleBias
from texture_generator.noise import NoiseSource


class Coordinate(Module):
    """test helper node that returns one coordinate of the sample point."""

    def __init__(self, axis: int) -> None:
        self.axis = axis

    def get_value(self, x, y, z) -> np.ndarray:
        coords = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )
        return coords[self.axis].copy()


@pytest.fixture
def noise() -> NoiseSource:
    """the seed 0 noise source."""
    return NoiseSource(0)


@pytest.fixture
def perlin(noise: NoiseSource) -> Perlin:
    """single-octave perlin generator used by the end-to-end scenarios."""
    return Perlin(noise, seed_offset=0, frequency=1.0, persistence=0.5, octave_count=1)


@pytest.fixture
def axis():
    """factory for nodes returning x (0), y (1) or z (2)."""
    return Coordinate


@pytest.fixture
def constant(perlin: Perlin):
    """factory for nodes returning a fixed value everywhere."""
    def make(value: float) -> ScaleBias:
        return ScaleBias(perlin, scale=0.0, bias=value)
    return make
