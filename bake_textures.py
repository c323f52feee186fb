# bake_textures.py

"""
================================================================================
OFFLINE TEXTURE BAKER SCRIPT
================================================================================
This script is a command-line tool for rendering the sample noise textures
(granite, jade, sky, slime, wood) to PNG images, each with a description file
of its module graph.

Settings come from an optional JSON configuration file and can be overridden
on the command line:

    {
        "bake_parameters": {
            "height": 256,
            "output_dir": "textures",
            "seed": 0,
            "workers": 4,
            "scenes": ["granite", "wood"]
        }
    }

Usage:
    python bake_textures.py --height 256 --output-dir textures
    python bake_textures.py --config path/to/your/config.json --scene jade
================================================================================
"""
import sys
import json
import logging
import logging.config
import argparse

from texture_generator import config as DEFAULTS
from texture_generator.baker import bake_all
from texture_generator.errors import TextureConfigError
from texture_generator.scenes import SCENES


def load_settings(config_path: str) -> dict:
    """Reads the 'bake_parameters' section of a JSON configuration file."""
    if not config_path:
        return {}
    with open(config_path, 'r') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise TextureConfigError(f"Config file must hold a JSON object, got {type(config).__name__}")
    settings = config.get('bake_parameters', {})
    if not isinstance(settings, dict):
        raise TextureConfigError(f"'bake_parameters' must be a JSON object, got {type(settings).__name__}")
    return settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline baker for the sample noise textures.")
    parser.add_argument("--config", type=str, help="Path to a JSON configuration file.")
    parser.add_argument("--height", type=int, help="Texture height in pixels. Spheres are twice as wide.")
    parser.add_argument("--output-dir", type=str, help="Directory the textures are written to.")
    parser.add_argument("--seed", type=int, help="Seed of the noise source.")
    parser.add_argument("--workers", type=int, help="Number of worker processes.")
    parser.add_argument(
        "--scene",
        action="append",
        choices=sorted(SCENES),
        help="Scene to bake. Repeat to bake several. Defaults to all scenes."
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar per texture.")
    return parser


def main(argv=None) -> int:
    logging.config.dictConfig(DEFAULTS.LOGGING_CONFIG)
    logger = logging.getLogger("Baker")

    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, json.JSONDecodeError, TextureConfigError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return 2

    height = args.height if args.height is not None else settings.get('height', DEFAULTS.DEFAULT_TEXTURE_HEIGHT)
    output_dir = args.output_dir or settings.get('output_dir', DEFAULTS.DEFAULT_OUTPUT_DIR)
    seed = args.seed if args.seed is not None else settings.get('seed', DEFAULTS.DEFAULT_SEED)
    workers = args.workers if args.workers is not None else settings.get('workers')
    scenes = args.scene or settings.get('scenes')

    try:
        results = bake_all(scenes, height=height, output_dir=output_dir, seed=seed,
                           workers=workers, logger=logger, progress=args.progress)
    except TextureConfigError as e:
        logger.critical(f"Invalid bake parameters: {e}")
        return 2

    return 0 if all(r.ok for r in results) else 1


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
