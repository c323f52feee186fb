# texture_generator/__init__.py

# This file makes the 'texture_generator' directory a Python package.
# We also use it to define the public API of the package.

from .noise import NoiseSource
from .modules import (
    Module, Perlin, Billow, RidgedMulti, Voronoi, Cylinder,
    Add, ScaleBias, Turbulence, Selector,
    TranslatePoint, ScalePoint, RotatePoint,
    walk_graph,
)
from .builders import NoiseMap, PlaneBuilder, SphereBuilder
from .color_maps import ColorMap, Gradient
from .renderers import LightConfig, ImageRenderer, BlendRenderer
from .generator import generate_noise_map, generate_color_map
from .description import describe, write_description, read_description, load_description
from .errors import TextureConfigError, GraphCycleError, DescriptionError, RenderCancelledError

__all__ = [
    "NoiseSource",
    "Module", "Perlin", "Billow", "RidgedMulti", "Voronoi", "Cylinder",
    "Add", "ScaleBias", "Turbulence", "Selector",
    "TranslatePoint", "ScalePoint", "RotatePoint",
    "walk_graph",
    "NoiseMap", "PlaneBuilder", "SphereBuilder",
    "ColorMap", "Gradient",
    "LightConfig", "ImageRenderer", "BlendRenderer",
    "generate_noise_map", "generate_color_map",
    "describe", "write_description", "read_description", "load_description",
    "TextureConfigError", "GraphCycleError", "DescriptionError", "RenderCancelledError",
]
