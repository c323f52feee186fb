# texture_generator/generator.py

"""
================================================================================
MAP GENERATOR
================================================================================
This module drives a builder or a renderer over every row of an output image
and assembles the finished noise map or colour map.

The output rows are split into fixed-size bands. With more than one worker
the bands are evaluated by a multiprocessing pool whose initializer installs
the (read-only) builder or renderer in every worker process once; with one
worker the bands are evaluated in the calling process. Each band writes to a
disjoint slice of the output, so the result does not depend on the number of
workers or on the order in which bands complete.

Data Contract:
---------------
- Inputs:
    - builder / renderer: Fully constructed, immutable configuration.
    - width, height: Output size in pixels.
    - workers: Number of processes. None uses all cores but one.
    - cancel_event: Optional object with is_set() (e.g. threading.Event or
      multiprocessing.Event), checked between bands.
- Outputs:
    - generate_noise_map: A NoiseMap of shape (height, width).
    - generate_color_map: A ColorMap of shape (height, width, 4).
- Side Effects: Logs progress. Raises RenderCancelledError when cancelled.
================================================================================
"""

import logging
import multiprocessing
import time

import numpy as np
from tqdm import tqdm

from . import config as DEFAULTS
from .builders import NoiseMap, NoiseMapBuilder, check_map_size
from .color_maps import ColorMap
from .errors import RenderCancelledError, TextureConfigError
from .modules import walk_graph
from .renderers import Renderer

module_logger = logging.getLogger(__name__)


# --- Band Jobs ---

def build_band(builder, width, height, band):
    start, stop = band
    return builder.build(width, height, range(start, stop))


def render_band(renderer, width, height, band):
    start, stop = band
    return renderer.render_rows(width, height, start, stop)


# --- Global variables for worker processes ---
worker_job = None
worker_target = None
worker_size = (0, 0)


def init_worker(job, target, width, height):
    """Initializes the global state for each worker process."""
    global worker_job, worker_target, worker_size
    worker_job = job
    worker_target = target
    worker_size = (width, height)


def process_band(band):
    """Evaluates one band in a worker. Returns the band start and its rows."""
    width, height = worker_size
    return band[0], worker_job(worker_target, width, height, band)


# --- Helpers ---

def default_worker_count() -> int:
    return max(1, multiprocessing.cpu_count() - 1)


def row_bands(height: int, batch_size: int = DEFAULTS.ROW_BATCH_SIZE) -> list:
    """Splits [0, height) into consecutive (start, stop) bands."""
    return [(start, min(start + batch_size, height)) for start in range(0, height, batch_size)]


def _check_cancelled(cancel_event):
    if cancel_event is not None and cancel_event.is_set():
        raise RenderCancelledError("Map generation was cancelled")


def _run_bands(job, target, out, width, height, workers, cancel_event, progress, desc, logger):
    bands = row_bands(height)
    if workers is None:
        workers = default_worker_count()
    if int(workers) < 1:
        msg = f"Worker count must be at least 1, got {workers}"
        raise TextureConfigError(msg)
    workers = min(int(workers), len(bands))

    _check_cancelled(cancel_event)
    logger.debug(f"{desc}: {width}x{height} in {len(bands)} bands, {workers} worker(s).")
    start_time = time.perf_counter()

    if workers == 1:
        for band in tqdm(bands, desc=desc, disable=not progress):
            _check_cancelled(cancel_event)
            out[band[0]:band[1]] = job(target, width, height, band)
    else:
        init_args = (job, target, width, height)
        # Leaving the with-block terminates the pool, also when cancelled.
        with multiprocessing.Pool(processes=workers, initializer=init_worker, initargs=init_args) as pool:
            results_iterator = pool.imap_unordered(process_band, bands)
            for start, rows in tqdm(results_iterator, total=len(bands), desc=desc, disable=not progress):
                _check_cancelled(cancel_event)
                out[start:start + rows.shape[0]] = rows

    logger.debug(f"{desc} finished in {time.perf_counter() - start_time:.2f} seconds.")
    return out


# --- Entry Points ---

def generate_noise_map(builder: NoiseMapBuilder, width: int, height: int, workers: int = None,
                       cancel_event=None, progress: bool = False,
                       logger: logging.Logger = None) -> NoiseMap:
    """Builds the full noise map of a builder."""
    logger = logger or module_logger
    if not isinstance(builder, NoiseMapBuilder):
        msg = f"Expected a builder, got {type(builder).__name__}"
        raise TextureConfigError(msg)
    check_map_size(width, height)
    walk_graph(builder.module)

    out = np.empty((height, width), dtype=np.float64)
    _run_bands(build_band, builder, out, width, height, workers, cancel_event, progress,
               "Building noise map", logger)
    return NoiseMap(out, wraps=builder.wraps)


def generate_color_map(renderer: Renderer, width: int, height: int, workers: int = None,
                       cancel_event=None, progress: bool = False,
                       logger: logging.Logger = None) -> ColorMap:
    """Renders the full colour map of a renderer (single or blended)."""
    logger = logger or module_logger
    if not isinstance(renderer, Renderer):
        msg = f"Expected a renderer, got {type(renderer).__name__}"
        raise TextureConfigError(msg)
    check_map_size(width, height)
    for module in renderer.modules():
        walk_graph(module)

    out = np.empty((height, width, 4), dtype=np.uint8)
    _run_bands(render_band, renderer, out, width, height, workers, cancel_event, progress,
               "Rendering colour map", logger)
    return ColorMap(out)
