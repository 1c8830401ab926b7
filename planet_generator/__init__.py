# planet_generator/__init__.py

# This file makes the 'planet_generator' directory a Python package.
# It also defines the public API of the package.

from .errors import ConfigurationError, PersistenceError, PlanetGeneratorError
from .noise import NoiseKernel
from .noise_filter import FilterType, NoiseFilter
from .layers import NoiseLayer
from .shape import ShapeGenerator
from .storage import NoiseLayersBuffer

__all__ = [
    "ConfigurationError",
    "PersistenceError",
    "PlanetGeneratorError",
    "NoiseKernel",
    "FilterType",
    "NoiseFilter",
    "NoiseLayer",
    "ShapeGenerator",
    "NoiseLayersBuffer",
]
