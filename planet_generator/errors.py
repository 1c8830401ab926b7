# planet_generator/errors.py

"""Exception types raised by the planet generator."""


class PlanetGeneratorError(Exception):
    """Base class for all planet generator errors."""


class ConfigurationError(PlanetGeneratorError):
    """
    The layer stack cannot be composed: it is empty, holds more layers than
    the batch mirror can carry, or a warp layer points at a missing layer.
    """


class PersistenceError(PlanetGeneratorError):
    """A save file could not be read or does not describe a planet."""
