# texture_generator/renderers.py

"""
================================================================================
TEXTURE RENDERERS
================================================================================
This module contains the renderers that turn a builder's noise values into
RGBA colour maps.

- ImageRenderer: one layer. Gradient lookup plus optional directional
  lighting.
- BlendRenderer: two ImageRenderer layers, the upper composited "over" the
  lower by the upper layer's alpha.

Renderers work on bands of output rows so the Map Generator can split an
image across processes. Lighting needs the neighbours of every row, so a
band is built with one extra halo row above and below, which is cropped
after shading ("overlap-and-crop"). A band therefore renders exactly like
the same rows of a full map.

Data Contract:
---------------
- Inputs (on construction):
    - builder: A PlaneBuilder or SphereBuilder.
    - gradient: A Gradient with at least two control points.
    - light: An optional LightConfig. None disables lighting.
- Outputs (from methods):
    - render_rows(width, height, start, stop): uint8 RGBA of shape
      (stop - start, width, 4).
    - render(...): A full ColorMap from already built noise maps.
- Side Effects: None.
================================================================================
"""

from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS
from . import color_maps
from .builders import NoiseMap, NoiseMapBuilder
from .color_maps import ColorMap, Gradient
from .errors import TextureConfigError


@dataclass(frozen=True)
class LightConfig:
    """Directional light settings. Angles are in degrees."""

    azimuth: float = DEFAULTS.DEFAULT_LIGHT_AZIMUTH
    elevation: float = DEFAULTS.DEFAULT_LIGHT_ELEVATION
    contrast: float = DEFAULTS.DEFAULT_LIGHT_CONTRAST
    brightness: float = DEFAULTS.DEFAULT_LIGHT_BRIGHTNESS
    color: tuple = DEFAULTS.DEFAULT_LIGHT_COLOR
    exaggeration: float = DEFAULTS.DEFAULT_LIGHT_EXAGGERATION

    def __post_init__(self):
        object.__setattr__(self, "color", color_maps.as_rgba(self.color))
        if self.contrast < 0.0:
            msg = f"Light contrast must not be negative, got {self.contrast}"
            raise TextureConfigError(msg)
        if self.brightness < 0.0:
            msg = f"Light brightness must not be negative, got {self.brightness}"
            raise TextureConfigError(msg)


def halo_rows(start: int, stop: int, height: int, wraps: bool) -> tuple:
    """
    Row indices of the band [start, stop) extended by the halo, and the
    position of row `start` in that list. Rows past the edge of a wrapping
    map come from the other side of the tile, whose period is height - 1
    because the last row repeats the first.
    """
    top = start - DEFAULTS.HALO_ROWS
    bottom = stop + DEFAULTS.HALO_ROWS
    if not wraps or height <= 2:
        top = max(0, top)
        return list(range(top, min(height, bottom))), start - top

    period = height - 1
    rows = []
    for r in range(top, bottom):
        if r < 0:
            r += period
        elif r > height - 1:
            r -= period
        rows.append(r)
    return rows, DEFAULTS.HALO_ROWS


class Renderer:
    """Common interface of the single and blended renderers."""

    @property
    def layers(self) -> tuple:
        raise NotImplementedError

    def render_rows(self, width: int, height: int, start: int, stop: int) -> np.ndarray:
        raise NotImplementedError

    def modules(self) -> list:
        """The root module of every layer, lower layer first."""
        return [layer.builder.module for layer in self.layers]


@dataclass(frozen=True, eq=False)
class ImageRenderer(Renderer):
    builder: NoiseMapBuilder
    gradient: Gradient
    light: LightConfig = None

    def __post_init__(self):
        if not isinstance(self.builder, NoiseMapBuilder):
            msg = f"ImageRenderer needs a builder, got {type(self.builder).__name__}"
            raise TextureConfigError(msg)
        if not isinstance(self.gradient, Gradient):
            msg = f"ImageRenderer needs a Gradient, got {type(self.gradient).__name__}"
            raise TextureConfigError(msg)
        if self.light is not None and not isinstance(self.light, LightConfig):
            msg = f"ImageRenderer light must be a LightConfig, got {type(self.light).__name__}"
            raise TextureConfigError(msg)

    @property
    def layers(self) -> tuple:
        return (self,)

    def shade(self, values: np.ndarray, height: int, wrap_y: bool = False) -> np.ndarray:
        """Colours noise values and applies the light, if any."""
        pixels = self.gradient.lookup(values)
        if self.light is None:
            return pixels
        intensity = color_maps.light_intensity(
            values, self.light, 1.0 / height,
            wrap_x=self.builder.wraps, wrap_y=wrap_y,
        )
        return color_maps.apply_light(pixels, intensity)

    def render_rows(self, width: int, height: int, start: int, stop: int) -> np.ndarray:
        if self.light is None:
            values = self.builder.build(width, height, range(start, stop))
            return self.gradient.lookup(values)

        rows, offset = halo_rows(start, stop, height, self.builder.wraps)
        values = self.builder.build(width, height, rows)
        pixels = self.shade(values, height)
        return pixels[offset:offset + (stop - start)]

    def render(self, noise_map: NoiseMap) -> ColorMap:
        """Renders an already built noise map in the calling process."""
        pixels = self.shade(noise_map.values, noise_map.height, wrap_y=noise_map.wraps)
        return ColorMap(pixels)


@dataclass(frozen=True, eq=False)
class BlendRenderer(Renderer):
    """Composites the upper layer over the lower layer."""

    lower: ImageRenderer
    upper: ImageRenderer

    def __post_init__(self):
        for name in ("lower", "upper"):
            layer = getattr(self, name)
            if not isinstance(layer, ImageRenderer):
                msg = f"BlendRenderer.{name} must be an ImageRenderer, got {type(layer).__name__}"
                raise TextureConfigError(msg)

    @property
    def layers(self) -> tuple:
        return (self.lower, self.upper)

    def render_rows(self, width: int, height: int, start: int, stop: int) -> np.ndarray:
        lower = self.lower.render_rows(width, height, start, stop)
        upper = self.upper.render_rows(width, height, start, stop)
        return color_maps.composite_over(lower, upper)

    def render(self, lower_map: NoiseMap, upper_map: NoiseMap) -> ColorMap:
        lower = self.lower.render(lower_map).pixels
        upper = self.upper.render(upper_map).pixels
        return ColorMap(color_maps.composite_over(lower, upper))
