# texture_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides the seeded 3D coherent-noise source shared by every
generator node, together with the JIT-compiled octave kernels that the
fractal generators are built from.

Data Contract:
---------------
- Inputs:
    - seed: An integer used to shuffle the permutation table.
    - x, y, z: NumPy arrays (or scalars) of coordinates, broadcast together.
    - offset: An integer that selects an independent noise field from the
      same source.
    - octaves, persistence, lacunarity: Standard noise parameters.
- Outputs:
    - A NumPy array of noise values (typically in the range [-1, 1]).
- Side Effects: None.
- Invariants: The shape of the output array matches the broadcast shape of
  the inputs. Given the same seed and offset, the output is identical across
  runs and processes.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS

# The 12 cube-edge gradient vectors of improved Perlin noise.
_GRADIENT_VECTORS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z

@njit
def lattice_hash(p, offset, xi, yi, zi):
    """Hashes an integer lattice point into [0, 255] for the given offset."""
    o = offset % 256
    return p[p[p[p[o] + xi % 256] + yi % 256] + zi % 256]

@njit
def _gradient_noise(p, offset, x, y, z):
    """Single-octave 3D gradient noise at one point."""
    xi = int(np.floor(x))
    yi = int(np.floor(y))
    zi = int(np.floor(z))

    xf = x - xi
    yf = y - yi
    zf = z - zi

    u = _fade(xf)
    v = _fade(yf)
    w = _fade(zf)

    g000 = _gradient(lattice_hash(p, offset, xi, yi, zi), xf, yf, zf)
    g100 = _gradient(lattice_hash(p, offset, xi + 1, yi, zi), xf - 1, yf, zf)
    g010 = _gradient(lattice_hash(p, offset, xi, yi + 1, zi), xf, yf - 1, zf)
    g110 = _gradient(lattice_hash(p, offset, xi + 1, yi + 1, zi), xf - 1, yf - 1, zf)
    g001 = _gradient(lattice_hash(p, offset, xi, yi, zi + 1), xf, yf, zf - 1)
    g101 = _gradient(lattice_hash(p, offset, xi + 1, yi, zi + 1), xf - 1, yf, zf - 1)
    g011 = _gradient(lattice_hash(p, offset, xi, yi + 1, zi + 1), xf, yf - 1, zf - 1)
    g111 = _gradient(lattice_hash(p, offset, xi + 1, yi + 1, zi + 1), xf - 1, yf - 1, zf - 1)

    x00 = _lerp(g000, g100, u)
    x10 = _lerp(g010, g110, u)
    x01 = _lerp(g001, g101, u)
    x11 = _lerp(g011, g111, u)
    y0 = _lerp(x00, x10, v)
    y1 = _lerp(x01, x11, v)
    return _lerp(y0, y1, w)

@njit
def gradient_noise_3d(p, x, y, z, offset):
    """Single-octave gradient noise over flat coordinate arrays."""
    n = x.shape[0]
    out = np.empty(n)
    for k in range(n):
        out[k] = _gradient_noise(p, offset, x[k], y[k], z[k])
    return out

@njit
def perlin_3d(p, x, y, z, offset, octaves, persistence, lacunarity):
    """
    Fractal sum of gradient noise. Octave i uses offset + i and is weighted by
    persistence**i. The coordinates are expected to be pre-scaled by the
    base frequency.
    """
    n = x.shape[0]
    out = np.zeros(n)
    for k in range(n):
        value = 0.0
        amplitude = 1.0
        sx = x[k]
        sy = y[k]
        sz = z[k]
        for i in range(octaves):
            value += _gradient_noise(p, offset + i, sx, sy, sz) * amplitude
            amplitude *= persistence
            sx *= lacunarity
            sy *= lacunarity
            sz *= lacunarity
        out[k] = value
    return out

@njit
def billow_3d(p, x, y, z, offset, octaves, persistence, lacunarity):
    """Fractal sum of folded noise, 2|n| - 1 per octave, shifted up by 0.5."""
    n = x.shape[0]
    out = np.zeros(n)
    for k in range(n):
        value = 0.0
        amplitude = 1.0
        sx = x[k]
        sy = y[k]
        sz = z[k]
        for i in range(octaves):
            signal = _gradient_noise(p, offset + i, sx, sy, sz)
            value += (2.0 * abs(signal) - 1.0) * amplitude
            amplitude *= persistence
            sx *= lacunarity
            sy *= lacunarity
            sz *= lacunarity
        out[k] = value + 0.5 if octaves > 0 else 0.0
    return out

@njit
def ridged_multi_3d(p, x, y, z, offset, octaves, lacunarity, ridge_offset, gain):
    """
    Ridged multifractal sum. Each octave is (1 - |n|)^2, weighted by a running
    weight taken from the previous octave's signal.
    """
    n = x.shape[0]
    out = np.zeros(n)
    for k in range(n):
        value = 0.0
        weight = 1.0
        spectral = 1.0
        sx = x[k]
        sy = y[k]
        sz = z[k]
        for i in range(octaves):
            signal = ridge_offset - abs(_gradient_noise(p, offset + i, sx, sy, sz))
            signal *= signal
            signal *= weight

            weight = signal * gain
            if weight > 1.0:
                weight = 1.0
            elif weight < 0.0:
                weight = 0.0

            value += signal * spectral
            spectral /= lacunarity
            sx *= lacunarity
            sy *= lacunarity
            sz *= lacunarity
        out[k] = value * 1.25 - 1.0 if octaves > 0 else 0.0
    return out


def flatten_coordinates(x, y, z):
    """
    Broadcasts three coordinate inputs together and returns their common shape
    plus contiguous float64 1-D copies, ready for the compiled kernels.
    """
    bx, by, bz = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64),
        np.asarray(z, dtype=np.float64),
    )
    shape = bx.shape
    return (
        shape,
        np.ascontiguousarray(bx).ravel(),
        np.ascontiguousarray(by).ravel(),
        np.ascontiguousarray(bz).ravel(),
    )


def create_permutation_table(seed: int) -> np.ndarray:
    """Shuffles 0..255 with the seed and doubles the table to avoid wrapping."""
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    table = np.stack([p, p]).flatten()
    table.setflags(write=False)
    return table


class NoiseSource:
    """
    A seeded, deterministic 3D gradient-noise function.

    The source holds no mutable state after construction, so one instance can
    be shared by any number of generator nodes and read concurrently. Nodes
    that share a source select independent noise fields through the offset.
    """

    __slots__ = ("_seed", "_p")

    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED):
        self._seed = int(seed)
        self._p = create_permutation_table(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def __repr__(self):
        return f"NoiseSource(seed={self._seed})"

    def __eq__(self, other):
        if not isinstance(other, NoiseSource):
            return NotImplemented
        return self._seed == other._seed

    def __hash__(self):
        return hash(("NoiseSource", self._seed))

    def __getstate__(self):
        return (self._seed,)

    def __setstate__(self, state):
        self._seed = state[0]
        self._p = create_permutation_table(self._seed)

    def sample(self, x, y, z, offset: int = 0):
        """
        Samples single-octave noise. Returns a float for scalar coordinates and
        an array shaped like the broadcast inputs otherwise.
        """
        shape, fx, fy, fz = flatten_coordinates(x, y, z)
        values = gradient_noise_3d(self._p, fx, fy, fz, int(offset)).reshape(shape)
        if values.ndim == 0:
            return float(values)
        return values

    def perlin(self, x, y, z, offset, octaves, persistence, lacunarity) -> np.ndarray:
        shape, fx, fy, fz = flatten_coordinates(x, y, z)
        return perlin_3d(self._p, fx, fy, fz, int(offset), int(octaves),
                         float(persistence), float(lacunarity)).reshape(shape)

    def billow(self, x, y, z, offset, octaves, persistence, lacunarity) -> np.ndarray:
        shape, fx, fy, fz = flatten_coordinates(x, y, z)
        return billow_3d(self._p, fx, fy, fz, int(offset), int(octaves),
                         float(persistence), float(lacunarity)).reshape(shape)

    def ridged_multi(self, x, y, z, offset, octaves, lacunarity) -> np.ndarray:
        shape, fx, fy, fz = flatten_coordinates(x, y, z)
        return ridged_multi_3d(self._p, fx, fy, fz, int(offset), int(octaves),
                               float(lacunarity), DEFAULTS.RIDGED_OFFSET,
                               DEFAULTS.RIDGED_GAIN).reshape(shape)
