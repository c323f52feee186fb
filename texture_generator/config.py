# texture_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the texture
generator. These values are used if they are not explicitly provided when a
module, builder or renderer is constructed, or by the baking configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC TEXTURE.
Instead, pass the parameters to the module constructors, or a configuration
dictionary to the baker.
================================================================================
"""

# --- Noise Generation ---
DEFAULT_SEED = 0

# Standard coherent-noise parameters shared by the fractal generators.
DEFAULT_FREQUENCY = 1.0
DEFAULT_LACUNARITY = 2.0
DEFAULT_PERSISTENCE = 0.5
DEFAULT_OCTAVE_COUNT = 6

# Voronoi defaults.
DEFAULT_VORONOI_DISPLACEMENT = 1.0

# Turbulence defaults. Roughness is the octave count of the displacement noise.
DEFAULT_TURBULENCE_POWER = 1.0
DEFAULT_TURBULENCE_ROUGHNESS = 3

# Fixed fractional offsets that separate the three turbulence displacement
# fields, so that x, y and z are not displaced by the same amount.
TURBULENCE_AXIS_OFFSETS = (
    (12414.0 / 65536.0, 65124.0 / 65536.0, 31337.0 / 65536.0),
    (26519.0 / 65536.0, 18128.0 / 65536.0, 60493.0 / 65536.0),
    (53820.0 / 65536.0, 11213.0 / 65536.0, 44845.0 / 65536.0),
)

# Ridged multifractal constants.
RIDGED_OFFSET = 1.0
RIDGED_GAIN = 2.0

# --- Lighting ---
DEFAULT_LIGHT_AZIMUTH = 45.0
DEFAULT_LIGHT_ELEVATION = 45.0
DEFAULT_LIGHT_CONTRAST = 1.0
DEFAULT_LIGHT_BRIGHTNESS = 1.0
DEFAULT_LIGHT_COLOR = (255, 255, 255, 255)
# Vertical scale applied to the noise map before normals are estimated.
DEFAULT_LIGHT_EXAGGERATION = 1.0

# --- Rendering & Performance ---
# The number of output rows evaluated as one unit of work.
ROW_BATCH_SIZE = 16
# Rows of overlap fetched above and below a band for lighting.
HALO_ROWS = 1

# --- Baking ---
DEFAULT_TEXTURE_HEIGHT = 256
DEFAULT_OUTPUT_DIR = "textures"
IMAGE_EXTENSION = ".png"
DESCRIPTION_EXTENSION = ".noisegraph"
DESCRIPTION_FORMAT = "texture-generator-graph"
DESCRIPTION_VERSION = 1

# Default bounds for the planar and spherical texture maps.
PLANE_BOUNDS = (-1.0, 1.0, -1.0, 1.0)
SPHERE_BOUNDS = (-90.0, 90.0, -180.0, 180.0)

# --- Logging ---
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": "INFO",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"handlers": ["console"], "level": "INFO"},
}
