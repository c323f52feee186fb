# texture_generator/modules.py

"""
================================================================================
NOISE MODULE GRAPH
================================================================================
This module contains every node kind that can appear in a noise module graph.
A node is a pure scalar function of a 3D point. Nodes are composed into a
directed acyclic graph: generators are the leaves, combinators and point
transforms consume the output of one or more child nodes. One child may feed
several parents.

Node kinds:
    - Generators: Perlin, Billow, RidgedMulti, Voronoi, Cylinder
    - Combinators: Add, ScaleBias, Turbulence, Selector
    - Point transforms: TranslatePoint, ScalePoint, RotatePoint

Data Contract:
---------------
- Inputs (on construction):
    - Fully specified parameters and child nodes. Nodes are frozen
      dataclasses; invalid parameters raise TextureConfigError immediately.
- Outputs (from methods):
    - get_value(x, y, z): a NumPy array shaped like the broadcast inputs.
    - evaluate(x, y, z): a float, for a single point.
- Side Effects: None.
- Invariants: Evaluating the same node at the same point always yields the
  same value, regardless of evaluation order or the process it runs in.
================================================================================
"""

import math
from dataclasses import dataclass, field, fields

import numpy as np
from scipy.spatial.transform import Rotation

from . import config as DEFAULTS
from .errors import GraphCycleError, TextureConfigError
from .noise import NoiseSource, flatten_coordinates
from .voronoi import voronoi_3d


def _broadcast(x, y, z):
    return np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64),
        np.asarray(z, dtype=np.float64),
    )


def _s_curve(t):
    "3t^2 - 2t^3"
    t = np.clip(t, 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def _lerp(a, b, t):
    return a + t * (b - a)


def _require_positive_frequency(module):
    if not module.frequency > 0.0:
        msg = f"{type(module).__name__} frequency must be positive, got {module.frequency}"
        raise TextureConfigError(msg)


def _require_noise_source(module):
    if not isinstance(module.noise, NoiseSource):
        msg = f"{type(module).__name__} needs a NoiseSource, got {type(module.noise).__name__}"
        raise TextureConfigError(msg)


class Module:
    """
    Common interface of all graph nodes. Concrete kinds are flat subclasses
    of this class; no kind derives from another kind.
    """

    # Names of the dataclass fields holding child nodes, in input order.
    CHILD_FIELDS = ()

    @property
    def children(self) -> tuple:
        return tuple(getattr(self, name) for name in self.CHILD_FIELDS)

    def get_value(self, x, y, z) -> np.ndarray:
        raise NotImplementedError

    def evaluate(self, x: float, y: float, z: float) -> float:
        """Evaluates the node at a single point."""
        return float(self.get_value(x, y, z))

    def _check_children(self):
        for name in self.CHILD_FIELDS:
            child = getattr(self, name)
            if not isinstance(child, Module):
                msg = f"{type(self).__name__}.{name} must be a Module, got {type(child).__name__}"
                raise TextureConfigError(msg)


# --- Generators ---

@dataclass(frozen=True, eq=False)
class Perlin(Module):
    """Fractal sum of gradient noise."""

    noise: NoiseSource
    seed_offset: int = 0
    frequency: float = DEFAULTS.DEFAULT_FREQUENCY
    lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY
    persistence: float = DEFAULTS.DEFAULT_PERSISTENCE
    octave_count: int = DEFAULTS.DEFAULT_OCTAVE_COUNT

    def __post_init__(self):
        _require_noise_source(self)
        _require_positive_frequency(self)

    def get_value(self, x, y, z) -> np.ndarray:
        f = self.frequency
        return self.noise.perlin(
            np.multiply(x, f), np.multiply(y, f), np.multiply(z, f),
            self.seed_offset, max(self.octave_count, 0),
            self.persistence, self.lacunarity,
        )


@dataclass(frozen=True, eq=False)
class Billow(Module):
    """Fractal sum of folded gradient noise, producing rounded, puffy shapes."""

    noise: NoiseSource
    seed_offset: int = 0
    frequency: float = DEFAULTS.DEFAULT_FREQUENCY
    lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY
    persistence: float = DEFAULTS.DEFAULT_PERSISTENCE
    octave_count: int = DEFAULTS.DEFAULT_OCTAVE_COUNT

    def __post_init__(self):
        _require_noise_source(self)
        _require_positive_frequency(self)

    def get_value(self, x, y, z) -> np.ndarray:
        f = self.frequency
        return self.noise.billow(
            np.multiply(x, f), np.multiply(y, f), np.multiply(z, f),
            self.seed_offset, max(self.octave_count, 0),
            self.persistence, self.lacunarity,
        )


@dataclass(frozen=True, eq=False)
class RidgedMulti(Module):
    """
    Ridged multifractal noise. Each octave is weighted by the previous one, so
    detail accumulates along the ridges. Persistence does not apply.
    """

    noise: NoiseSource
    seed_offset: int = 0
    frequency: float = DEFAULTS.DEFAULT_FREQUENCY
    lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY
    octave_count: int = DEFAULTS.DEFAULT_OCTAVE_COUNT

    def __post_init__(self):
        _require_noise_source(self)
        _require_positive_frequency(self)

    def get_value(self, x, y, z) -> np.ndarray:
        f = self.frequency
        return self.noise.ridged_multi(
            np.multiply(x, f), np.multiply(y, f), np.multiply(z, f),
            self.seed_offset, max(self.octave_count, 0), self.lacunarity,
        )


@dataclass(frozen=True, eq=False)
class Voronoi(Module):
    """
    Cellular noise. Each cell outputs its own random value scaled by
    displacement; with distance_applied the distance to the cell's seed point
    is added, which produces pits at the cell centres.
    """

    noise: NoiseSource
    seed_offset: int = 0
    frequency: float = DEFAULTS.DEFAULT_FREQUENCY
    displacement: float = DEFAULTS.DEFAULT_VORONOI_DISPLACEMENT
    distance_applied: bool = False

    def __post_init__(self):
        _require_noise_source(self)
        _require_positive_frequency(self)

    def get_value(self, x, y, z) -> np.ndarray:
        f = self.frequency
        shape, fx, fy, fz = flatten_coordinates(
            np.multiply(x, f), np.multiply(y, f), np.multiply(z, f))
        values = voronoi_3d(
            self.noise.permutation_table, fx, fy, fz,
            int(self.seed_offset), float(self.displacement), bool(self.distance_applied),
        )
        return values.reshape(shape)


@dataclass(frozen=True, eq=False)
class Cylinder(Module):
    """Concentric cylinders around the y axis. Does not use a noise source."""

    frequency: float = DEFAULTS.DEFAULT_FREQUENCY

    def __post_init__(self):
        _require_positive_frequency(self)

    def get_value(self, x, y, z) -> np.ndarray:
        bx, _, bz = _broadcast(x, y, z)
        radius = np.sqrt(bx * bx + bz * bz)
        return np.cos(2.0 * math.pi * self.frequency * radius)


# --- Combinators ---

@dataclass(frozen=True, eq=False)
class Add(Module):
    source1: Module
    source2: Module

    CHILD_FIELDS = ("source1", "source2")

    def __post_init__(self):
        self._check_children()

    def get_value(self, x, y, z) -> np.ndarray:
        return self.source1.get_value(x, y, z) + self.source2.get_value(x, y, z)


@dataclass(frozen=True, eq=False)
class ScaleBias(Module):
    source: Module
    scale: float = 1.0
    bias: float = 0.0

    CHILD_FIELDS = ("source",)

    def __post_init__(self):
        self._check_children()

    def get_value(self, x, y, z) -> np.ndarray:
        return self.source.get_value(x, y, z) * self.scale + self.bias


@dataclass(frozen=True, eq=False)
class Turbulence(Module):
    """
    Displaces the sample point with three Perlin fields, one per axis, then
    evaluates the source at the displaced point. Roughness is the octave
    count of the displacement fields; power scales the displacement.
    """

    noise: NoiseSource
    source: Module
    seed_offset: int = 0
    frequency: float = DEFAULTS.DEFAULT_FREQUENCY
    power: float = DEFAULTS.DEFAULT_TURBULENCE_POWER
    roughness: int = DEFAULTS.DEFAULT_TURBULENCE_ROUGHNESS

    CHILD_FIELDS = ("source",)

    def __post_init__(self):
        _require_noise_source(self)
        _require_positive_frequency(self)
        self._check_children()

    def _displacement(self, x, y, z, axis):
        ox, oy, oz = DEFAULTS.TURBULENCE_AXIS_OFFSETS[axis]
        f = self.frequency
        return self.noise.perlin(
            (x + ox) * f, (y + oy) * f, (z + oz) * f,
            self.seed_offset + axis, max(self.roughness, 0),
            DEFAULTS.DEFAULT_PERSISTENCE, DEFAULTS.DEFAULT_LACUNARITY,
        )

    def get_value(self, x, y, z) -> np.ndarray:
        bx, by, bz = _broadcast(x, y, z)
        dx = bx + self._displacement(bx, by, bz, 0) * self.power
        dy = by + self._displacement(bx, by, bz, 1) * self.power
        dz = bz + self._displacement(bx, by, bz, 2) * self.power
        return self.source.get_value(dx, dy, dz)


@dataclass(frozen=True, eq=False)
class Selector(Module):
    """
    Chooses between source1 and source2 by the value of the control node.

    Control values inside [lower_bound, upper_bound] (both bounds inclusive)
    select source2, everything else selects source1. A positive edge_falloff
    blends the two sources with an s-curve over a band centred on each bound.
    The falloff is limited to half the bound range so the bands never overlap.
    """

    source1: Module
    source2: Module
    control: Module
    lower_bound: float = -1.0
    upper_bound: float = 1.0
    edge_falloff: float = 0.0

    CHILD_FIELDS = ("source1", "source2", "control")

    def __post_init__(self):
        self._check_children()
        if self.lower_bound > self.upper_bound:
            msg = (f"Selector lower_bound ({self.lower_bound}) cannot be greater "
                   f"than upper_bound ({self.upper_bound})")
            raise TextureConfigError(msg)
        if self.edge_falloff < 0.0:
            msg = f"Selector edge_falloff must not be negative, got {self.edge_falloff}"
            raise TextureConfigError(msg)

    @property
    def effective_falloff(self) -> float:
        return min(self.edge_falloff, (self.upper_bound - self.lower_bound) / 2.0)

    def get_value(self, x, y, z) -> np.ndarray:
        c = self.control.get_value(x, y, z)
        a = self.source1.get_value(x, y, z)
        b = self.source2.get_value(x, y, z)
        c, a, b = np.broadcast_arrays(c, a, b)

        lower, upper = self.lower_bound, self.upper_bound
        falloff = self.effective_falloff
        if falloff <= 0.0:
            return np.where((c >= lower) & (c <= upper), b, a)

        width = 2.0 * falloff
        lower_alpha = _s_curve((c - (lower - falloff)) / width)
        upper_alpha = _s_curve((c - (upper - falloff)) / width)
        return np.select(
            [c < lower - falloff, c < lower + falloff, c < upper - falloff, c < upper + falloff],
            [a, _lerp(a, b, lower_alpha), b, _lerp(b, a, upper_alpha)],
            default=a,
        )


# --- Point transforms ---

@dataclass(frozen=True, eq=False)
class TranslatePoint(Module):
    source: Module
    translate_x: float = 0.0
    translate_y: float = 0.0
    translate_z: float = 0.0

    CHILD_FIELDS = ("source",)

    def __post_init__(self):
        self._check_children()

    def get_value(self, x, y, z) -> np.ndarray:
        return self.source.get_value(
            np.add(x, self.translate_x),
            np.add(y, self.translate_y),
            np.add(z, self.translate_z),
        )


@dataclass(frozen=True, eq=False)
class ScalePoint(Module):
    source: Module
    scale_x: float = 1.0
    scale_y: float = 1.0
    scale_z: float = 1.0

    CHILD_FIELDS = ("source",)

    def __post_init__(self):
        self._check_children()

    def get_value(self, x, y, z) -> np.ndarray:
        return self.source.get_value(
            np.multiply(x, self.scale_x),
            np.multiply(y, self.scale_y),
            np.multiply(z, self.scale_z),
        )


@dataclass(frozen=True, eq=False)
class RotatePoint(Module):
    """Rotates the sample point by Euler angles in degrees, about x, then y, then z."""

    source: Module
    x_angle: float = 0.0
    y_angle: float = 0.0
    z_angle: float = 0.0
    _matrix: np.ndarray = field(init=False, repr=False)

    CHILD_FIELDS = ("source",)

    def __post_init__(self):
        self._check_children()
        matrix = Rotation.from_euler(
            "xyz", [self.x_angle, self.y_angle, self.z_angle], degrees=True
        ).as_matrix()
        object.__setattr__(self, "_matrix", matrix)

    def get_value(self, x, y, z) -> np.ndarray:
        bx, by, bz = _broadcast(x, y, z)
        m = self._matrix
        return self.source.get_value(
            m[0, 0] * bx + m[0, 1] * by + m[0, 2] * bz,
            m[1, 0] * bx + m[1, 1] * by + m[1, 2] * bz,
            m[2, 0] * bx + m[2, 1] * by + m[2, 2] * bz,
        )


# --- Registry & Graph Utilities ---

MODULE_TYPES = {
    cls.__name__: cls
    for cls in (
        Perlin, Billow, RidgedMulti, Voronoi, Cylinder,
        Add, ScaleBias, Turbulence, Selector,
        TranslatePoint, ScalePoint, RotatePoint,
    )
}


def module_parameters(module: Module) -> dict:
    """Returns the scalar parameters of a node, without children or noise source."""
    params = {}
    for f in fields(module):
        if not f.init or f.name == "noise" or f.name in module.CHILD_FIELDS:
            continue
        value = getattr(module, f.name)
        if isinstance(value, (bool, np.bool_)):
            params[f.name] = bool(value)
        elif isinstance(value, (int, np.integer)):
            params[f.name] = int(value)
        else:
            params[f.name] = float(value)
    return params


def walk_graph(root: Module) -> list:
    """
    Returns every distinct node reachable from root, children before parents.
    Nodes are compared by identity, so a shared child appears once.
    Raises GraphCycleError if a node is reachable from itself.
    """
    order = []
    done = set()
    visiting = set()

    def visit(node):
        key = id(node)
        if key in done:
            return
        if key in visiting:
            msg = f"Cycle detected in module graph at {type(node).__name__}"
            raise GraphCycleError(msg)
        if not isinstance(node, Module):
            msg = f"Graph node must be a Module, got {type(node).__name__}"
            raise TextureConfigError(msg)
        visiting.add(key)
        for child in node.children:
            visit(child)
        visiting.discard(key)
        done.add(key)
        order.append(node)

    visit(root)
    return order
