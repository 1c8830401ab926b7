# planet_generator/shape.py

"""
================================================================================
PLANET SHAPE GENERATOR
================================================================================
This module contains the ShapeGenerator class, which composes an ordered stack
of noise layers into the elevation of any point on the unit sphere.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for 'radius', 'sea_level' and 'noise_layers'
      (a list of layer dictionaries as produced by NoiseLayer.to_dict).
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - get_elevation: radius * (1 + sum of layer contributions).
    - get_point_and_elevation: the displaced point and its elevation.
- Side Effects: Logs structural changes using the provided logger. Evaluation
  itself never logs, mutates state or caches results.
- Invariants: Given the same layers and seeds, the output is deterministic.
  Layer 0 is the base layer: it is always evaluated so that other layers can
  mask against it, but it only contributes when enabled.
================================================================================
"""

import copy
import logging

import numpy as np

from . import config as DEFAULTS
from .errors import ConfigurationError
from .layers import NoiseLayer
from .storage import NoiseLayersBuffer


class ShapeGenerator:
    """
    Generates the elevation field of a planet from a stack of noise layers.
    The generator holds no mesh data and no cached samples; callers must
    regenerate after changing any parameter.
    """
    def __init__(self, config: dict = None, logger: logging.Logger = None):
        """
        Initializes the shape generator.

        Args:
            config (dict, optional): User-defined parameters to override defaults.
            logger (logging.Logger, optional): The logger instance for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.user_config = config or {}

        self.radius = float(self.user_config.get('radius', DEFAULTS.DEFAULT_RADIUS))
        self.sea_level = float(self.user_config.get('sea_level', DEFAULTS.DEFAULT_SEA_LEVEL))

        layer_configs = self.user_config.get('noise_layers')
        if layer_configs is None:
            # A new planet starts with a single default base layer.
            self.noise_layers = [NoiseLayer()]
        else:
            self.noise_layers = [NoiseLayer.from_dict(layer) for layer in layer_configs]

        self.logger.info(
            f"ShapeGenerator initialized: radius={self.radius}, sea_level={self.sea_level}, "
            f"{len(self.noise_layers)} noise layer(s)"
        )

    @property
    def num_layers(self) -> int:
        return len(self.noise_layers)

    # --- Layer Stack Editing ---

    def add_layer(self, layer: NoiseLayer = None) -> NoiseLayer:
        """Appends a layer (a default one if none is given) and returns it."""
        layer = layer if layer is not None else NoiseLayer()
        self.noise_layers.append(layer)
        self.logger.debug(f"Added noise layer {self.num_layers}.")
        return layer

    def remove_layer(self, index: int) -> NoiseLayer:
        """Removes and returns the layer at a 0-based index."""
        layer = self.noise_layers.pop(index)
        self.logger.debug(f"Removed noise layer at index {index}.")
        return layer

    def move_layer(self, src: int, dst: int):
        """Moves the layer at `src` so that it ends up at index `dst`."""
        layer = self.noise_layers.pop(src)
        self.noise_layers.insert(dst, layer)
        self.logger.debug(f"Moved noise layer from index {src} to {dst}.")

    def snapshot(self) -> "ShapeGenerator":
        """
        Returns an independent deep copy for evaluation while the original
        keeps being edited. The logger is shared, not copied.
        """
        clone = copy.copy(self)
        clone.user_config = copy.deepcopy(self.user_config)
        clone.noise_layers = copy.deepcopy(self.noise_layers)
        return clone

    # --- Validation ---

    def validate(self) -> dict:
        """
        Checks that the layer stack can be composed and resolves warp targets.

        Returns:
            dict: Maps a 0-based target layer index to the 0-based index of the
            enabled warp layer that displaces it. If several enabled warp layers
            name the same target, the last one in the stack wins.

        Raises:
            ConfigurationError: If the stack is empty, exceeds MAX_NOISE_LAYERS,
            or any warp layer targets an index outside [1, layer_count].
        """
        count = self.num_layers
        if count == 0:
            raise ConfigurationError("The noise layer list is empty; at least a base layer is required.")
        if count > DEFAULTS.MAX_NOISE_LAYERS:
            raise ConfigurationError(
                f"{count} noise layers exceed the maximum of {DEFAULTS.MAX_NOISE_LAYERS}."
            )

        warp_map = {}
        for i, layer in enumerate(self.noise_layers):
            if not layer.is_warp:
                continue
            if not 1 <= layer.warp_target <= count:
                raise ConfigurationError(
                    f"Warp layer {i + 1} targets layer {layer.warp_target}, "
                    f"but only layers 1..{count} exist."
                )
            if layer.enabled:
                warp_map[layer.warp_target - 1] = i
        return warp_map

    # --- Evaluation ---

    def get_warped_pos(self, point, warp_layer: NoiseLayer) -> np.ndarray:
        """
        Computes the displacement vector a warp layer applies to its target.

        Each component evaluates the same filter with the whole point shifted
        by one scalar component of `warp_offset`.
        """
        p = np.asarray(point, dtype=np.float64)
        warp_filter = warp_layer.filter
        return np.array([
            warp_filter.evaluate(p + warp_filter.warp_offset[0]),
            warp_filter.evaluate(p + warp_filter.warp_offset[1]),
            warp_filter.evaluate(p + warp_filter.warp_offset[2]),
        ])

    def _sample_point(self, point: np.ndarray, index: int, warp_map: dict) -> np.ndarray:
        source = warp_map.get(index)
        if source is None:
            return point
        return point + self.get_warped_pos(point, self.noise_layers[source])

    def get_elevation(self, point_on_unit_sphere) -> float:
        """
        Composes every layer at a point on the unit sphere.

        Raises:
            ConfigurationError: If the layer stack fails validation.
        """
        warp_map = self.validate()
        point = np.asarray(point_on_unit_sphere, dtype=np.float64)

        # 1. The base layer is always evaluated, as it drives masking.
        base_layer = self.noise_layers[0]
        first_layer = base_layer.filter.evaluate(self._sample_point(point, 0, warp_map))
        elevation = first_layer if base_layer.enabled else 0.0

        # 2. Every other enabled, non-warp layer adds its (masked) value.
        for i in range(1, self.num_layers):
            layer = self.noise_layers[i]
            if layer.is_warp or not layer.enabled:
                continue

            mask = 1.0
            if layer.first_layer_mask:
                # max(0, x) that lets NaN through.
                mask = first_layer - self.sea_level + 1.0
                if mask < 0.0:
                    mask = 0.0

            value = layer.filter.evaluate(self._sample_point(point, i, warp_map))
            elevation += value * mask

        return self.radius * (1.0 + elevation)

    def get_point_and_elevation(self, point_on_unit_sphere) -> tuple[np.ndarray, float]:
        """Returns the point scaled by its elevation, and the elevation itself."""
        point = np.asarray(point_on_unit_sphere, dtype=np.float64)
        elevation = self.get_elevation(point)
        return point * elevation, elevation

    def get_elevations(self, points: np.ndarray) -> np.ndarray:
        """
        Evaluates many points at once through the flat batch mirror.

        Args:
            points (np.ndarray): An (N, 3) array of points on the unit sphere.

        Returns:
            np.ndarray: N elevations, equal to calling get_elevation per point.
        """
        return NoiseLayersBuffer.from_shape_generator(self).evaluate(points)

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            'radius': self.radius,
            'sea_level': self.sea_level,
            'noise_layers': [layer.to_dict() for layer in self.noise_layers],
        }

    @classmethod
    def from_dict(cls, data: dict, logger: logging.Logger = None) -> "ShapeGenerator":
        return cls(config=data, logger=logger)
