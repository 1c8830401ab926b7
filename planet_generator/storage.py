# planet_generator/storage.py

"""
================================================================================
FLAT NOISE LAYER STORAGE & BATCH EVALUATION
================================================================================
This module re-expresses a ShapeGenerator's layer stack as a fixed-capacity
array of flat records, and evaluates elevations for many points at once from
those records in a parallel, JIT-compiled loop.

The record layout is the one handed to a separate execution target: every
slot carries its own permutation table and plain numeric parameters, so no
Python objects are needed to evaluate it.

Data Contract:
---------------
- Inputs:
    - A validated ShapeGenerator (or records built elsewhere).
    - points: An (N, 3) float array of points on the unit sphere.
- Outputs:
    - An (N,) float64 array of elevations, matching ShapeGenerator.get_elevation.
- Side Effects: None.
- Invariants:
    - At most MAX_NOISE_LAYERS records; unused slots are zeroed.
    - `warp_target` is copied unchanged; only rows with `is_warp` set use it.
    - Numeric fields are float64 so values equal the structural model exactly.
================================================================================
"""

import numpy as np
from numba import njit, prange

from . import config as DEFAULTS
from .errors import ConfigurationError
from .noise_filter import evaluate_filter

NOISE_LAYER_DTYPE = np.dtype([
    ('simplex_random', np.int32, (DEFAULTS.PERMUTATION_TABLE_SIZE,)),
    ('filter_type', np.uint32),
    ('num_octaves', np.int32),
    ('strength', np.float64),
    ('roughness', np.float64),
    ('lacunarity', np.float64),
    ('persistence', np.float64),
    ('offset', np.float64),
    ('floor', np.float64),
    ('center', np.float64, (3,)),
    ('warp_target', np.int32),
    ('warp_offset', np.float64, (3,)),
    ('first_layer_mask', np.int32),
    ('is_warp', np.int32),
    ('enabled', np.int32),
])

# Column layout of the packed parameter matrices passed to the JIT kernel.
_INT_COLUMNS = ('filter_type', 'num_octaves')
_I_TYPE, _I_OCTAVES = 0, 1
_F_STRENGTH, _F_ROUGHNESS, _F_LACUNARITY, _F_PERSISTENCE, _F_OFFSET = 0, 1, 2, 3, 4
_F_CENTER = 5   # 3 columns
_F_WARP = 8     # 3 columns


@njit
def _layer_value(perms, int_params, float_params, i, x, y, z):
    return evaluate_filter(
        perms[i], int_params[i, _I_TYPE], int_params[i, _I_OCTAVES],
        float_params[i, _F_STRENGTH], float_params[i, _F_ROUGHNESS], float_params[i, _F_LACUNARITY],
        float_params[i, _F_PERSISTENCE], float_params[i, _F_OFFSET],
        float_params[i, _F_CENTER], float_params[i, _F_CENTER + 1], float_params[i, _F_CENTER + 2],
        x, y, z
    )


@njit
def _sample_point(perms, int_params, float_params, warp_sources, i, x, y, z):
    """The point layer `i` is sampled at, displaced if a warp layer targets it."""
    src = warp_sources[i]
    if src < 0:
        return x, y, z

    # Each component shifts the whole point by one scalar of the warp offset.
    wx = _layer_value(perms, int_params, float_params, src,
                      x + float_params[src, _F_WARP], y + float_params[src, _F_WARP],
                      z + float_params[src, _F_WARP])
    wy = _layer_value(perms, int_params, float_params, src,
                      x + float_params[src, _F_WARP + 1], y + float_params[src, _F_WARP + 1],
                      z + float_params[src, _F_WARP + 1])
    wz = _layer_value(perms, int_params, float_params, src,
                      x + float_params[src, _F_WARP + 2], y + float_params[src, _F_WARP + 2],
                      z + float_params[src, _F_WARP + 2])
    return x + wx, y + wy, z + wz


@njit(parallel=True)
def compose_elevations(points, perms, int_params, float_params, warp_sources, is_warp, first_layer_mask,
                       enabled, radius, sea_level):
    """
    Evaluates the layer composition for every point in parallel.
    Mirrors ShapeGenerator.get_elevation operation for operation.
    """
    n_points = points.shape[0]
    n_layers = perms.shape[0]
    elevations = np.empty(n_points)

    for n in prange(n_points):
        x = points[n, 0]
        y = points[n, 1]
        z = points[n, 2]

        sx, sy, sz = _sample_point(perms, int_params, float_params, warp_sources, 0, x, y, z)
        first_layer = _layer_value(perms, int_params, float_params, 0, sx, sy, sz)
        elevation = first_layer if enabled[0] else 0.0

        for i in range(1, n_layers):
            if is_warp[i] or not enabled[i]:
                continue

            mask = 1.0
            if first_layer_mask[i]:
                mask = first_layer - sea_level + 1.0
                if mask < 0.0:
                    mask = 0.0

            sx, sy, sz = _sample_point(perms, int_params, float_params, warp_sources, i, x, y, z)
            elevation += _layer_value(perms, int_params, float_params, i, sx, sy, sz) * mask

        elevations[n] = radius * (1.0 + elevation)

    return elevations


class NoiseLayersBuffer:
    """
    A fixed-capacity array of flat per-layer records plus the generator-wide
    radius and sea level needed to evaluate them.
    """
    def __init__(self, records: np.ndarray, num_layers: int, radius: float, sea_level: float):
        if records.dtype != NOISE_LAYER_DTYPE or records.shape != (DEFAULTS.MAX_NOISE_LAYERS,):
            raise ValueError("Records must be a MAX_NOISE_LAYERS array of NOISE_LAYER_DTYPE")
        if not 1 <= num_layers <= DEFAULTS.MAX_NOISE_LAYERS:
            raise ConfigurationError(
                f"Layer count {num_layers} must be within 1..{DEFAULTS.MAX_NOISE_LAYERS}."
            )

        active = records[:num_layers]
        targets = active['warp_target'][active['is_warp'] != 0]
        if np.any((targets < 1) | (targets > num_layers)):
            raise ConfigurationError(f"A warp target lies outside layers 1..{num_layers}.")

        self.records = records
        self.num_layers = num_layers
        self.radius = float(radius)
        self.sea_level = float(sea_level)

    @classmethod
    def from_shape_generator(cls, shape_gen) -> "NoiseLayersBuffer":
        """
        Packs a generator's layers into flat records.

        Raises:
            ConfigurationError: If the generator fails validation.
        """
        shape_gen.validate()

        records = np.zeros(DEFAULTS.MAX_NOISE_LAYERS, dtype=NOISE_LAYER_DTYPE)
        for i, layer in enumerate(shape_gen.noise_layers):
            record = records[i]
            noise_filter = layer.filter

            record['simplex_random'] = noise_filter.noise.random
            record['filter_type'] = int(noise_filter.filter_type)
            record['num_octaves'] = noise_filter.num_octaves
            record['strength'] = noise_filter.strength
            record['roughness'] = noise_filter.roughness
            record['lacunarity'] = noise_filter.lacunarity
            record['persistence'] = noise_filter.persistence
            record['offset'] = noise_filter.offset
            record['floor'] = noise_filter.floor
            record['center'] = noise_filter.center
            record['warp_target'] = layer.warp_target
            record['warp_offset'] = noise_filter.warp_offset
            record['first_layer_mask'] = 1 if layer.first_layer_mask else 0
            record['is_warp'] = 1 if layer.is_warp else 0
            record['enabled'] = 1 if layer.enabled else 0

        return cls(records, shape_gen.num_layers, shape_gen.radius, shape_gen.sea_level)

    def _warp_sources(self) -> np.ndarray:
        """Index of the warp layer displacing each layer, or -1. Last one wins."""
        sources = np.full(self.num_layers, -1, dtype=np.int64)
        for i, record in enumerate(self.records[:self.num_layers]):
            if record['is_warp'] and record['enabled']:
                sources[record['warp_target'] - 1] = i
        return sources

    def _pack(self):
        active = self.records[:self.num_layers]
        perms = np.ascontiguousarray(active['simplex_random'])
        int_params = np.column_stack([active[name].astype(np.int64) for name in _INT_COLUMNS])
        float_params = np.column_stack([
            active['strength'], active['roughness'], active['lacunarity'],
            active['persistence'], active['offset'], active['center'], active['warp_offset'],
        ]).astype(np.float64)
        return perms, np.ascontiguousarray(int_params), np.ascontiguousarray(float_params)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        """Elevations for an (N, 3) array of points on the unit sphere."""
        points = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 3)
        perms, int_params, float_params = self._pack()
        active = self.records[:self.num_layers]

        return compose_elevations(
            points, perms, int_params, float_params, self._warp_sources(),
            np.ascontiguousarray(active['is_warp'] != 0),
            np.ascontiguousarray(active['first_layer_mask'] != 0),
            np.ascontiguousarray(active['enabled'] != 0),
            self.radius, self.sea_level
        )

    def points_and_elevations(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Displaced positions (N, 3) and elevations (N,) for many points."""
        points = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 3)
        elevations = self.evaluate(points)
        return points * elevations[:, np.newaxis], elevations
