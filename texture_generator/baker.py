# texture_generator/baker.py

"""
================================================================================
TEXTURE BAKER
================================================================================
This module renders the sample scenes to disk ("baking"). Every scene is
rendered three ways: a plane, a seamless plane and a sphere. Each image is
saved as an RGBA PNG together with a description file of the same name.

A failure in one scene (an unwritable output path, an invalid recipe) is
logged and reported in that scene's BakeResult; the remaining scenes are
still baked. Cancellation stops the whole batch.

Data Contract:
---------------
- Inputs:
    - scene names, height, output directory, seed, worker count.
    - logger: A configured Python logging object for runtime messages.
- Outputs:
    - A list of BakeResult, one per scene, in the requested order.
- Errors: Invalid parameters raise TextureConfigError before anything is
  written. A surface writes its .png, then its .noisegraph, only after its
  colour map is complete.
- Side Effects: Creates the output directory and writes .png and
  .noisegraph files into it. Logs progress.
================================================================================
"""

import logging
import os
import time
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

from . import config as DEFAULTS
from .color_maps import ColorMap
from .description import description_path, write_description
from .errors import TextureConfigError
from .generator import generate_color_map
from .scenes import SCENES, SURFACES, Scene


@dataclass
class BakeResult:
    scene: str
    written: list = field(default_factory=list)
    error: str = None

    @property
    def ok(self) -> bool:
        return self.error is None


def save_color_map(color_map: ColorMap, path: str):
    """
    Saves a colour map as an RGBA PNG. Row 0 of the map is the lower bound,
    so rows are flipped to put the upper bound at the top of the image.
    """
    pixels = np.ascontiguousarray(np.flipud(color_map.pixels))
    Image.fromarray(pixels).save(path, 'PNG')


def bake_scene(scene: Scene, height: int, output_dir: str, logger: logging.Logger,
               workers: int = None, cancel_event=None, progress: bool = False) -> BakeResult:
    """Bakes the three surfaces of one scene. I/O and recipe errors are captured in the result."""
    result = BakeResult(scene.name)
    try:
        os.makedirs(output_dir, exist_ok=True)
        for surface in SURFACES:
            renderer = scene.renderer(surface)
            width, surface_height = scene.size(surface, height)
            image_path = os.path.join(output_dir, scene.image_name(surface))
            logger.info(f"Rendering {image_path} ({width}x{surface_height})...")

            # Nothing is written for a surface until its colour map is complete.
            color_map = generate_color_map(renderer, width, surface_height, workers=workers,
                                           cancel_event=cancel_event, progress=progress,
                                           logger=logger)
            save_color_map(color_map, image_path)
            result.written.append(image_path)

            graph_path = description_path(image_path)
            write_description(renderer, graph_path)
            result.written.append(graph_path)
    except (OSError, TextureConfigError) as e:
        result.error = str(e)
        logger.error(f"Failed to bake {scene.name}: {e}", exc_info=True)
    return result


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def check_bake_parameters(height, seed, workers, output_dir=DEFAULTS.DEFAULT_OUTPUT_DIR):
    """Rejects bake parameters of the wrong type or range before anything is baked."""
    if not isinstance(output_dir, (str, os.PathLike)) or not os.fspath(output_dir):
        msg = f"Output directory must be a non-empty path, got {output_dir!r}"
        raise TextureConfigError(msg)
    if not _is_int(height) or height < 1:
        msg = f"Texture height must be an integer of at least 1, got {height!r}"
        raise TextureConfigError(msg)
    if not _is_int(seed):
        msg = f"Seed must be an integer, got {seed!r}"
        raise TextureConfigError(msg)
    if workers is not None and (not _is_int(workers) or workers < 1):
        msg = f"Worker count must be an integer of at least 1, got {workers!r}"
        raise TextureConfigError(msg)


def bake_all(scene_names=None, height: int = DEFAULTS.DEFAULT_TEXTURE_HEIGHT,
             output_dir: str = DEFAULTS.DEFAULT_OUTPUT_DIR, seed: int = DEFAULTS.DEFAULT_SEED,
             workers: int = None, logger: logging.Logger = None, cancel_event=None,
             progress: bool = False) -> list:
    """Bakes the named scenes (all scenes by default) and returns their results."""
    logger = logger or logging.getLogger(__name__)
    check_bake_parameters(height, seed, workers, output_dir)
    if isinstance(scene_names, str):
        scene_names = [scene_names]
    if scene_names is not None and not isinstance(scene_names, (list, tuple)):
        msg = f"Scenes must be a list of scene names, got {scene_names!r}"
        raise TextureConfigError(msg)
    scene_names = list(SCENES) if scene_names is None else list(scene_names)
    unknown = [name for name in scene_names if not isinstance(name, str) or name not in SCENES]
    if unknown:
        msg = f"Unknown scene(s) {unknown}, expected some of {sorted(SCENES)}"
        raise TextureConfigError(msg)

    start_time = time.perf_counter()
    logger.info(f"Baking {len(scene_names)} scene(s) at height {height} with seed {seed} into '{output_dir}'")

    results = []
    for name in scene_names:
        try:
            scene = SCENES[name](seed)
        except TextureConfigError as e:
            logger.error(f"Invalid scene {name}: {e}", exc_info=True)
            results.append(BakeResult(name, error=str(e)))
            continue
        results.append(bake_scene(scene, height, output_dir, logger, workers=workers,
                                  cancel_event=cancel_event, progress=progress))

    failed = [r.scene for r in results if not r.ok]
    logger.info(f"Baking complete! Total time: {time.perf_counter() - start_time:.2f} seconds.")
    if failed:
        logger.warning(f"{len(failed)} scene(s) failed: {', '.join(failed)}")
    return results
