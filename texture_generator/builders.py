# texture_generator/builders.py

"""
================================================================================
NOISE MAP BUILDERS
================================================================================
This module contains the domain builders that sample a module graph over a 2D
grid of output pixels and produce a noise map.

- PlaneBuilder maps pixels onto a bounded rectangle of the x/z plane (y = 0).
  In seamless mode the four corner-shifted samples of every point are blended
  so the finished map tiles without visible seams.
- SphereBuilder maps pixels onto latitude/longitude bounds of the unit sphere.

Data Contract:
---------------
- Inputs (on construction):
    - module: The root Module of the graph to sample.
    - Bounds, seamless flag and seed. Invalid bounds raise TextureConfigError.
- Outputs (from methods):
    - build(width, height, rows): A float64 array of shape (len(rows), width).
      Row 0 is the lower z bound (or the southern latitude bound), column 0
      the lower x bound (or the western longitude bound). Both ends of each
      axis are sampled exactly on the bounds.
- Side Effects: None.
- Invariants: The values of a row do not depend on which other rows are
  built in the same call.
================================================================================
"""

from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS
from .errors import TextureConfigError
from .modules import Module


@dataclass
class NoiseMap:
    """A dense grid of noise values, row-major, shape (height, width)."""

    values: np.ndarray
    # True when the map tiles, so neighbour lookups may wrap around its edges.
    wraps: bool = False

    @property
    def width(self) -> int:
        return self.values.shape[1]

    @property
    def height(self) -> int:
        return self.values.shape[0]


def _check_bounds(name, lower, upper):
    if lower > upper:
        msg = f"{name} lower bound ({lower}) cannot be greater than its upper bound ({upper})"
        raise TextureConfigError(msg)


def check_map_size(width: int, height: int):
    if int(width) < 1 or int(height) < 1:
        msg = f"Map size must be at least 1x1, got {width}x{height}"
        raise TextureConfigError(msg)


def _row_indices(height, rows):
    if rows is None:
        return np.arange(height)
    rows = np.asarray(rows, dtype=np.int64)
    if rows.size and (rows.min() < 0 or rows.max() >= height):
        msg = f"Row indices must lie in [0, {height}), got {rows.min()}..{rows.max()}"
        raise TextureConfigError(msg)
    return rows


class NoiseMapBuilder:
    """Common interface of the plane and sphere builders."""

    module: Module
    seed: int

    @property
    def wraps(self) -> bool:
        return False

    def build(self, width: int, height: int, rows=None) -> np.ndarray:
        raise NotImplementedError

    def build_map(self, width: int, height: int) -> NoiseMap:
        """Builds every row of the map in the calling process."""
        return NoiseMap(self.build(width, height), wraps=self.wraps)

    def _check_module(self):
        if not isinstance(self.module, Module):
            msg = f"{type(self).__name__} needs a Module, got {type(self.module).__name__}"
            raise TextureConfigError(msg)


@dataclass(frozen=True, eq=False)
class PlaneBuilder(NoiseMapBuilder):
    module: Module
    lower_x: float = DEFAULTS.PLANE_BOUNDS[0]
    upper_x: float = DEFAULTS.PLANE_BOUNDS[1]
    lower_z: float = DEFAULTS.PLANE_BOUNDS[2]
    upper_z: float = DEFAULTS.PLANE_BOUNDS[3]
    seamless: bool = False
    seed: int = DEFAULTS.DEFAULT_SEED

    def __post_init__(self):
        self._check_module()
        _check_bounds("Plane x", self.lower_x, self.upper_x)
        _check_bounds("Plane z", self.lower_z, self.upper_z)
        if self.seamless and (self.lower_x == self.upper_x or self.lower_z == self.upper_z):
            msg = "A seamless plane needs a non-empty span on both axes"
            raise TextureConfigError(msg)

    @property
    def wraps(self) -> bool:
        return self.seamless

    def build(self, width: int, height: int, rows=None) -> np.ndarray:
        check_map_size(width, height)
        rows = _row_indices(height, rows)
        x = np.linspace(self.lower_x, self.upper_x, width)
        z = np.linspace(self.lower_z, self.upper_z, height)[rows]
        xg, zg = np.meshgrid(x, z)
        yg = np.zeros_like(xg)

        if not self.seamless:
            return self.module.get_value(xg, yg, zg)

        # Blend the point with its copies one span to the east and north.
        # At the lower bound the shifted copy dominates, at the upper bound
        # the point itself does, so opposite edges carry the same value.
        x_extent = self.upper_x - self.lower_x
        z_extent = self.upper_z - self.lower_z
        sw = self.module.get_value(xg, yg, zg)
        se = self.module.get_value(xg + x_extent, yg, zg)
        nw = self.module.get_value(xg, yg, zg + z_extent)
        ne = self.module.get_value(xg + x_extent, yg, zg + z_extent)

        x_blend = 1.0 - (xg - self.lower_x) / x_extent
        z_blend = 1.0 - (zg - self.lower_z) / z_extent
        south = (1.0 - x_blend) * sw + x_blend * se
        north = (1.0 - x_blend) * nw + x_blend * ne
        return (1.0 - z_blend) * south + z_blend * north


@dataclass(frozen=True, eq=False)
class SphereBuilder(NoiseMapBuilder):
    """Samples the unit sphere. Bounds are latitudes and longitudes in degrees."""

    module: Module
    south: float = DEFAULTS.SPHERE_BOUNDS[0]
    north: float = DEFAULTS.SPHERE_BOUNDS[1]
    west: float = DEFAULTS.SPHERE_BOUNDS[2]
    east: float = DEFAULTS.SPHERE_BOUNDS[3]
    seed: int = DEFAULTS.DEFAULT_SEED

    def __post_init__(self):
        self._check_module()
        _check_bounds("Sphere latitude", self.south, self.north)
        _check_bounds("Sphere longitude", self.west, self.east)
        if self.south < -90.0 or self.north > 90.0:
            msg = f"Sphere latitudes must lie in [-90, 90], got {self.south}..{self.north}"
            raise TextureConfigError(msg)

    def build(self, width: int, height: int, rows=None) -> np.ndarray:
        check_map_size(width, height)
        rows = _row_indices(height, rows)
        lon = np.radians(np.linspace(self.west, self.east, width))
        lat = np.radians(np.linspace(self.south, self.north, height)[rows])
        lon_g, lat_g = np.meshgrid(lon, lat)

        r = np.cos(lat_g)
        return self.module.get_value(r * np.cos(lon_g), np.sin(lat_g), r * np.sin(lon_g))
