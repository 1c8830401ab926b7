# planet_generator/persistence.py

"""
================================================================================
SAVE FILES
================================================================================
Reads and writes the structural state of a planet as JSON: the shape
generator (radius, sea level, ordered layers with their filter parameters and
seeds) together with render settings and colors.

Permutation tables are never written. They are rebuilt from each filter's
stored seed on load, so a reloaded planet reproduces its elevations exactly.
================================================================================
"""

import json
import logging
from dataclasses import dataclass, field

from . import color_maps
from . import config as DEFAULTS
from .errors import PersistenceError
from .shape import ShapeGenerator

SAVE_FORMAT_VERSION = 1


def default_settings() -> dict:
    return {'resolution': DEFAULTS.DEFAULT_MESH_RESOLUTION}


@dataclass
class SaveState:
    shape_gen: ShapeGenerator
    settings: dict = field(default_factory=default_settings)
    colors: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'version': SAVE_FORMAT_VERSION,
            'shape_gen': self.shape_gen.to_dict(),
            'settings': self.settings,
            'colors': self.colors,
        }


def save_state(path: str, shape_gen: ShapeGenerator, settings: dict = None, colors: dict = None,
               logger: logging.Logger = None):
    """Writes a planet save file to `path`."""
    logger = logger or logging.getLogger(__name__)
    state = SaveState(shape_gen, settings or default_settings(), colors or {})

    with open(path, 'w') as f:
        json.dump(state.to_dict(), f, indent=4)
    logger.info(f"Saved planet with {shape_gen.num_layers} noise layer(s) to '{path}'")


def state_from_dict(data: dict, logger: logging.Logger = None) -> SaveState:
    """Rebuilds a SaveState, including every noise kernel, from parsed JSON."""
    try:
        shape_data = data['shape_gen']
        settings = default_settings()
        settings.update(data.get('settings', {}))
        colors = data.get('colors', {})
        shape_gen = ShapeGenerator.from_dict(shape_data, logger=logger)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise PersistenceError(f"Save data does not describe a planet: {e}") from e

    resolution = settings['resolution']
    if not isinstance(resolution, int) or isinstance(resolution, bool):
        raise PersistenceError(f"Setting 'resolution' must be an integer, got {resolution!r}")
    if not isinstance(colors, dict):
        raise PersistenceError(f"The 'colors' block must be an object, got {type(colors).__name__}")
    try:
        color_maps.create_elevation_lut(color_maps.gradient_from_dict(colors))
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Invalid elevation gradient: {e}") from e

    return SaveState(shape_gen, settings, colors)


def load_state(path: str, logger: logging.Logger = None) -> SaveState:
    """
    Loads a planet save file.

    Raises:
        PersistenceError: If the file is missing, is not JSON, or is malformed.
    """
    logger = logger or logging.getLogger(__name__)
    logger.info(f"Loading planet from '{path}'")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PersistenceError(f"Failed to load or parse save file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise PersistenceError(f"Save file '{path}' does not contain a JSON object")

    return state_from_dict(data, logger=logger)
