# texture_generator/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the colour ramp (Gradient) and the pure NumPy functions
that turn noise values into RGBA pixel arrays: gradient lookup, directional
lighting from finite differences, and "over" compositing of two layers.

It is a pure, stateless utility with no dependency on file formats, so it can
be used both by the renderers and directly in tests.

Data Contract:
---------------
- Inputs:
    - Noise values as float arrays of shape (rows, width).
    - Colour arrays as uint8 arrays of shape (rows, width, 4).
- Outputs:
    - uint8 RGBA arrays of the same rows and width.
- Side Effects: None.
================================================================================
"""

import math
from dataclasses import dataclass

import numpy as np

from .errors import TextureConfigError

# --- Colour Constants ---
BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


def as_rgba(color) -> tuple:
    channels = tuple(int(c) for c in color)
    if len(channels) == 3:
        channels = channels + (255,)
    if len(channels) != 4 or any(c < 0 or c > 255 for c in channels):
        msg = f"Colours must be RGB or RGBA with channels in 0..255, got {color!r}"
        raise TextureConfigError(msg)
    return channels


@dataclass(frozen=True, eq=False)
class Gradient:
    """
    A colour ramp of (position, colour) control points.

    Points are stored sorted by position. Positions must be unique and at
    least two points are required. Colours are RGB or RGBA tuples; RGB
    colours are made opaque.
    """

    points: tuple

    def __post_init__(self):
        points = []
        for point in self.points:
            position, color = point
            points.append((float(position), as_rgba(color)))
        points.sort(key=lambda item: item[0])

        if len(points) < 2:
            msg = f"A gradient needs at least 2 control points, got {len(points)}"
            raise TextureConfigError(msg)
        positions = [p for p, _ in points]
        if len(set(positions)) != len(positions):
            msg = f"Gradient control point positions must be unique, got {positions}"
            raise TextureConfigError(msg)
        if not all(math.isfinite(p) for p in positions):
            msg = f"Gradient control point positions must be finite, got {positions}"
            raise TextureConfigError(msg)

        object.__setattr__(self, "points", tuple(points))

    @property
    def positions(self) -> np.ndarray:
        return np.array([p for p, _ in self.points], dtype=np.float64)

    @property
    def colors(self) -> np.ndarray:
        return np.array([c for _, c in self.points], dtype=np.float64)

    def lookup(self, values: np.ndarray) -> np.ndarray:
        """
        Converts noise values into a uint8 RGBA array. Values outside the
        control point range take the colour of the nearest end point.
        """
        values = np.asarray(values, dtype=np.float64)
        positions = self.positions
        colors = self.colors
        clamped = np.clip(values, positions[0], positions[-1])
        channels = [np.interp(clamped, positions, colors[:, i]) for i in range(4)]
        rgba = np.stack(channels, axis=-1)
        return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)


def create_grayscale_gradient() -> Gradient:
    """Black at -1, white at +1."""
    return Gradient(((-1.0, BLACK), (1.0, WHITE)))


@dataclass
class ColorMap:
    """A dense grid of RGBA pixels, shape (height, width, 4), dtype uint8."""

    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


# --- Lighting ---

def light_vector(azimuth: float, elevation: float) -> np.ndarray:
    """Unit vector pointing towards the light, from angles in degrees."""
    az = math.radians(azimuth)
    el = math.radians(elevation)
    return np.array([
        math.cos(el) * math.cos(az),
        math.cos(el) * math.sin(az),
        math.sin(el),
    ])


def _axis_slope(z, spacing, axis, wrap):
    """
    Finite-difference slope along one axis. Interior cells use central
    differences and boundary cells one-sided ones. With wrap, the axis is
    treated as a tile whose last sample repeats its first, so the period is
    n - 1 samples.
    """
    n = z.shape[axis]
    if n < 2:
        return np.zeros_like(z)
    if wrap and n > 2:
        before = np.take(z, [n - 2], axis=axis)
        after = np.take(z, [1], axis=axis)
        padded = np.concatenate([before, z, after], axis=axis)
        slope = np.gradient(padded, spacing, axis=axis)
        return np.take(slope, np.arange(1, n + 1), axis=axis)
    return np.gradient(z, spacing, axis=axis)


def surface_normals(values: np.ndarray, spacing: float, exaggeration: float,
                    wrap_x: bool = False, wrap_y: bool = False) -> np.ndarray:
    """Estimates unit surface normals of a noise map treated as a height field."""
    z = np.asarray(values, dtype=np.float64) * exaggeration
    gx = _axis_slope(z, spacing, 1, wrap_x)
    gy = _axis_slope(z, spacing, 0, wrap_y)
    nx = -gx
    ny = -gy
    nz = np.ones_like(z)
    norm = np.sqrt(nx * nx + ny * ny + nz * nz)
    return np.stack([nx / norm, ny / norm, nz / norm], axis=-1)


def light_intensity(values: np.ndarray, light, spacing: float,
                    wrap_x: bool = False, wrap_y: bool = False) -> np.ndarray:
    """
    Per-cell RGB light multiplier, shape (rows, width, 3).

    `light` provides azimuth, elevation, contrast, brightness, color and
    exaggeration. The Lambertian term is clamped to [0, 1] and raised to
    the contrast before brightness and light colour are applied.
    """
    normals = surface_normals(values, spacing, light.exaggeration, wrap_x, wrap_y)
    lambert = np.clip((normals * light_vector(light.azimuth, light.elevation)).sum(axis=-1), 0.0, 1.0)
    shade = light.brightness * np.power(lambert, light.contrast)
    tint = np.asarray(light.color[:3], dtype=np.float64) / 255.0
    return shade[..., np.newaxis] * tint


def apply_light(pixels: np.ndarray, intensity: np.ndarray) -> np.ndarray:
    """Multiplies the RGB channels by the light intensity; alpha is untouched."""
    lit = pixels.copy()
    rgb = pixels[..., :3].astype(np.float64) * intensity
    lit[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return lit


# --- Compositing ---

def composite_over(lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """
    Standard "over" compositing of two uint8 RGBA arrays, weighted by the
    upper layer's alpha. An upper alpha of 0 returns the lower layer exactly.
    """
    lo = lower.astype(np.float64)
    up = upper.astype(np.float64)
    a = up[..., 3:4] / 255.0
    rgb = lo[..., :3] * (1.0 - a) + up[..., :3] * a
    alpha = up[..., 3:4] + lo[..., 3:4] * (1.0 - a)
    out = np.concatenate([rgb, alpha], axis=-1)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)
