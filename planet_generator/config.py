# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration or a loaded save file.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a configuration dictionary to the ShapeGenerator instance.
================================================================================
"""

# --- Planet Shape ---
DEFAULT_RADIUS = 1.0
# Layers flagged with first_layer_mask only show where the base layer rises
# above (sea_level - 1.0). A value of 1.0 masks exactly where the base is > 0.
DEFAULT_SEA_LEVEL = 1.0

# --- Noise Filter Defaults ---
DEFAULT_NOISE_SEED = 0
DEFAULT_NUM_OCTAVES = 1
DEFAULT_STRENGTH = 1.0
DEFAULT_ROUGHNESS = 1.0    # Base frequency of the first octave
DEFAULT_LACUNARITY = 2.0   # Frequency multiplier per octave
DEFAULT_PERSISTENCE = 0.5  # Amplitude multiplier per octave
DEFAULT_OFFSET = 0.0
DEFAULT_FLOOR = 0.0
DEFAULT_CENTER = (0.0, 0.0, 0.0)
DEFAULT_WARP_OFFSET = (0.0, 0.0, 0.0)

# --- Noise Layer Defaults ---
DEFAULT_LAYER_ENABLED = True
DEFAULT_LAYER_IS_WARP = False
DEFAULT_WARP_TARGET = 1    # 1-based index into the layer list
DEFAULT_FIRST_LAYER_MASK = False

# --- Batch Evaluation Mirror ---
# Fixed capacity of the flat per-layer record array.
MAX_NOISE_LAYERS = 16
# Size of the doubled permutation table carried by every record.
PERMUTATION_TABLE_SIZE = 512

# --- Baking & Rendering ---
DEFAULT_MESH_RESOLUTION = 128   # Vertices along one edge of a cube face
MIN_MESH_RESOLUTION = 2
DEFAULT_OUTPUT_DIR = "baked_planets"
