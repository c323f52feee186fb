# texture_generator/scenes.py

"""
================================================================================
SAMPLE TEXTURE SCENES
================================================================================
This module contains the fixed texture recipes that the baker renders:
granite, jade, sky, slime and wood. Each build_* function wires a module
graph from one NoiseSource and returns a Scene holding the graph, its
colour gradient and light settings.

Only the seed is tunable from the outside. Every other parameter is part of
the recipe.

Data Contract:
---------------
- Inputs: seed (int).
- Outputs: A Scene. scene.renderer(surface) returns a ready renderer for one
  of the surfaces "Plane", "Seamless" or "Sphere".
- Side Effects: None.
================================================================================
"""

from dataclasses import dataclass

from . import config as DEFAULTS
from .builders import PlaneBuilder, SphereBuilder
from .color_maps import Gradient
from .errors import TextureConfigError
from .modules import (
    Add, Billow, Cylinder, Module, Perlin, RidgedMulti, RotatePoint, ScaleBias,
    ScalePoint, Selector, TranslatePoint, Turbulence, Voronoi,
)
from .noise import NoiseSource
from .renderers import BlendRenderer, ImageRenderer, LightConfig

SURFACES = ("Plane", "Seamless", "Sphere")

# Light shared by every lit sample texture.
SCENE_LIGHT = LightConfig(azimuth=135.0, elevation=60.0, contrast=2.0)


@dataclass(frozen=True)
class Scene:
    """A texture recipe: one module graph, or two for a blended texture."""

    name: str
    seed: int
    module: Module
    gradient: Gradient
    light: LightConfig = None
    upper_module: Module = None
    upper_gradient: Gradient = None
    upper_light: LightConfig = None

    def image_name(self, surface: str) -> str:
        return f"{self.name}{surface}{DEFAULTS.IMAGE_EXTENSION}"

    def size(self, surface: str, height: int) -> tuple:
        """(width, height) of a surface. Spheres are twice as wide as they are high."""
        return (height * 2 if surface == "Sphere" else height), height

    def _builder(self, module, surface):
        if surface == "Sphere":
            return SphereBuilder(module, *DEFAULTS.SPHERE_BOUNDS, seed=self.seed)
        if surface in ("Plane", "Seamless"):
            return PlaneBuilder(module, *DEFAULTS.PLANE_BOUNDS,
                                seamless=(surface == "Seamless"), seed=self.seed)
        msg = f"Unknown surface {surface!r}, expected one of {SURFACES}"
        raise TextureConfigError(msg)

    def renderer(self, surface: str):
        lower = ImageRenderer(self._builder(self.module, surface), self.gradient, self.light)
        if self.upper_module is None:
            return lower
        upper = ImageRenderer(self._builder(self.upper_module, surface),
                              self.upper_gradient, self.upper_light)
        return BlendRenderer(lower, upper)


# --- Granite ---

def build_granite(seed: int = DEFAULTS.DEFAULT_SEED) -> Scene:
    noise = NoiseSource(seed)

    # Rough base, lit to show its relief.
    primary = Billow(noise, seed_offset=0, frequency=8.0, persistence=0.625,
                     lacunarity=2.18359375, octave_count=6)
    # Small grains. Voronoi cells produce pits, the negative scale turns them into bumps.
    grains = Voronoi(noise, seed_offset=1, frequency=16.0, distance_applied=True)
    scaled_grains = ScaleBias(grains, scale=-0.5, bias=0.0)
    combined = Add(primary, scaled_grains)
    final = Turbulence(noise, combined, seed_offset=2, frequency=4.0, power=1.0 / 8.0, roughness=6)

    # Black and pink at either end give the flecks.
    gradient = Gradient((
        (-1.0000, (0, 0, 0)),
        (-0.9375, (0, 0, 0)),
        (-0.8750, (216, 216, 242)),
        (0.0000, (191, 191, 191)),
        (0.5000, (210, 116, 125)),
        (0.7500, (210, 113, 98)),
        (1.0000, (255, 176, 192)),
    ))
    return Scene("TextureGranite", seed, final, gradient, SCENE_LIGHT)


# --- Jade ---

def build_jade(seed: int = DEFAULTS.DEFAULT_SEED) -> Scene:
    noise = NoiseSource(seed)

    # The ridges make the veins.
    primary = RidgedMulti(noise, seed_offset=0, frequency=2.0, lacunarity=2.20703125, octave_count=6)

    # Tilted, perturbed cylinders for the secondary pattern.
    cylinders = Cylinder(frequency=2.0)
    rotated = RotatePoint(cylinders, x_angle=90.0, y_angle=25.0, z_angle=5.0)
    perturbed = Turbulence(noise, rotated, seed_offset=1, frequency=4.0, power=1.0 / 4.0, roughness=4)
    secondary = ScaleBias(perturbed, scale=0.25, bias=0.0)

    combined = Add(primary, secondary)
    # Low roughness keeps the veins smooth.
    final = Turbulence(noise, combined, seed_offset=2, frequency=4.0, power=1.0 / 16.0, roughness=2)

    gradient = Gradient((
        (-1.000, (24, 146, 102)),
        (0.000, (78, 154, 115)),
        (0.250, (128, 204, 165)),
        (0.375, (78, 154, 115)),
        (1.000, (29, 135, 102)),
    ))
    return Scene("TextureJade", seed, final, gradient)


# --- Sky ---

def build_sky(seed: int = DEFAULTS.DEFAULT_SEED) -> Scene:
    """Water below, translucent clouds on top."""
    noise = NoiseSource(seed)

    # Lower layer: waves. Voronoi values are lowest at the cell centres and
    # rise smoothly towards the edges.
    water = Voronoi(noise, seed_offset=0, frequency=8.0, displacement=0.0, distance_applied=True)
    stretched = ScalePoint(water, scale_x=1.0, scale_y=1.0, scale_z=3.0)
    final_water = Turbulence(noise, stretched, seed_offset=1, frequency=8.0,
                             power=1.0 / 32.0, roughness=1)

    # Upper layer: clouds.
    clouds = Billow(noise, seed_offset=2, frequency=2.0, persistence=0.375,
                    lacunarity=2.12109375, octave_count=4)
    final_clouds = Turbulence(noise, clouds, seed_offset=3, frequency=16.0,
                              power=1.0 / 64.0, roughness=2)

    water_gradient = Gradient((
        (-1.00, (48, 64, 192)),
        (0.50, (96, 192, 255)),
        (1.00, (255, 255, 255)),
    ))
    # White throughout, the alpha lets the water show through.
    cloud_gradient = Gradient((
        (-1.00, (255, 255, 255, 0)),
        (-0.50, (255, 255, 255, 0)),
        (1.00, (255, 255, 255, 255)),
    ))
    return Scene("TextureSky", seed, final_water, water_gradient, SCENE_LIGHT,
                 upper_module=final_clouds, upper_gradient=cloud_gradient)


# --- Slime ---

def build_slime(seed: int = DEFAULTS.DEFAULT_SEED) -> Scene:
    noise = NoiseSource(seed)

    large = Billow(noise, seed_offset=0, frequency=4.0, lacunarity=2.12109375, octave_count=1)
    small_base = Billow(noise, seed_offset=1, frequency=24.0, lacunarity=2.14453125, octave_count=1)
    small = ScaleBias(small_base, scale=0.5, bias=-0.5)

    # Small bubbles inside a narrow band of the ridged map, large ones elsewhere.
    slime_map = RidgedMulti(noise, seed_offset=0, frequency=2.0, lacunarity=2.20703125, octave_count=3)
    chooser = Selector(large, small, slime_map, lower_bound=-0.375, upper_bound=0.375, edge_falloff=0.5)
    final = Turbulence(noise, chooser, seed_offset=2, frequency=8.0, power=1.0 / 32.0, roughness=2)

    gradient = Gradient((
        (-1.0, (160, 64, 42)),
        (0.0, (64, 192, 64)),
        (1.0, (128, 255, 128)),
    ))
    return Scene("TextureSlime", seed, final, gradient, SCENE_LIGHT)


# --- Wood ---

def build_wood(seed: int = DEFAULTS.DEFAULT_SEED) -> Scene:
    noise = NoiseSource(seed)

    # Concentric rings, like a log.
    rings = Cylinder(frequency=16.0)

    # Grain stretched along the log.
    grain_noise = Perlin(noise, seed_offset=0, frequency=48.0, persistence=0.5,
                         lacunarity=2.20703125, octave_count=3)
    stretched_grain = ScalePoint(grain_noise, scale_y=0.25)
    grain = ScaleBias(stretched_grain, scale=0.25, bias=0.125)

    combined = Add(rings, grain)
    perturbed = Turbulence(noise, combined, seed_offset=1, frequency=4.0,
                           power=1.0 / 256.0, roughness=4)

    # Cut the log off-centre and on an angle.
    translated = TranslatePoint(perturbed, translate_z=1.48)
    rotated = RotatePoint(translated, x_angle=84.0)
    final = Turbulence(noise, rotated, seed_offset=2, frequency=2.0, power=1.0 / 64.0, roughness=4)

    gradient = Gradient((
        (-1.00, (189, 94, 4)),
        (0.50, (144, 48, 6)),
        (1.00, (60, 10, 8)),
    ))
    return Scene("TextureWood", seed, final, gradient)


SCENES = {
    "granite": build_granite,
    "jade": build_jade,
    "sky": build_sky,
    "slime": build_slime,
    "wood": build_wood,
}
