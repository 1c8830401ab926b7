# planet_generator/noise_filter.py

"""
================================================================================
FRACTAL NOISE FILTERS
================================================================================
This module layers several octaves of the simplex kernel into a single noise
value. Three filter types exist:

- STANDARD: classic fractal Brownian motion, remapped to [0, 1] per octave.
- RIGID:    ridged noise, 1 - |n| squared and fed back as a weight so that
            sharp crests dominate.
- WARP:     evaluated exactly like STANDARD, but only ever used to displace
            the sample point of another layer.

Data Contract:
---------------
- Inputs:
    - A 3D point and the filter parameters (octaves, strength, roughness,
      lacunarity, persistence, offset, center).
- Outputs:
    - A scalar `sum * strength - offset`.
- Side Effects: None.
- Invariants: `floor` is carried for persistence and the batch mirror but is
  not read by any evaluation path.
================================================================================
"""

from enum import IntEnum

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .noise import NoiseKernel, simplex_noise_3d


class FilterType(IntEnum):
    """Closed set of filter variants. Values are the batch record type codes."""
    STANDARD = 0
    RIGID = 1
    WARP = 2


# Plain integer codes so the JIT-compiled dispatcher can branch on them.
FILTER_STANDARD = int(FilterType.STANDARD)
FILTER_RIGID = int(FilterType.RIGID)
FILTER_WARP = int(FilterType.WARP)


@njit
def fbm_noise_3d(perm, x, y, z, num_octaves, strength, roughness, lacunarity, persistence, offset, cx, cy, cz):
    """Standard fractal noise. Each octave is remapped from [-1, 1] to [0, 1]."""
    noise_val = 0.0
    frequency = roughness
    amplitude = 1.0

    for _ in range(num_octaves):
        v = simplex_noise_3d(perm, x * frequency + cx, y * frequency + cy, z * frequency + cz)
        noise_val += (v + 1.0) * 0.5 * amplitude
        frequency *= lacunarity
        amplitude *= persistence

    return noise_val * strength - offset


@njit
def rigid_noise_3d(perm, x, y, z, num_octaves, strength, roughness, lacunarity, persistence, offset, cx, cy, cz):
    """Ridged fractal noise with multiplicative weight feedback across octaves."""
    noise_val = 0.0
    frequency = roughness
    amplitude = 1.0
    weight = 1.0

    for _ in range(num_octaves):
        v = 1.0 - abs(simplex_noise_3d(perm, x * frequency + cx, y * frequency + cy, z * frequency + cz))
        v = v * v * weight
        weight = v
        noise_val += v * amplitude
        frequency *= lacunarity
        amplitude *= persistence

    return noise_val * strength - offset


@njit
def evaluate_filter(perm, filter_type, num_octaves, strength, roughness, lacunarity, persistence, offset,
                    cx, cy, cz, x, y, z):
    """Dispatches on the filter type code. Shared by the scalar and batch paths."""
    if filter_type == FILTER_STANDARD or filter_type == FILTER_WARP:
        return fbm_noise_3d(perm, x, y, z, num_octaves, strength, roughness, lacunarity, persistence, offset,
                            cx, cy, cz)
    elif filter_type == FILTER_RIGID:
        return rigid_noise_3d(perm, x, y, z, num_octaves, strength, roughness, lacunarity, persistence, offset,
                              cx, cy, cz)
    else:
        raise ValueError("Unknown noise filter type code")


def parse_filter_type(value) -> FilterType:
    """Accepts a FilterType, its integer code, or its case-insensitive name."""
    if isinstance(value, str):
        try:
            return FilterType[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown noise filter type: '{value}'") from None
    return FilterType(value)


def _as_vec3(value) -> np.ndarray:
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {vec.shape}")
    return vec


class NoiseFilter:
    """
    A fractal noise evaluator over its own NoiseKernel. The kernel is rebuilt
    whenever `seed` is assigned, so the table always matches the stored seed.
    """
    def __init__(self, config: dict = None):
        """
        Args:
            config (dict, optional): Overrides for the default filter parameters.
                Recognised keys match the names produced by `to_dict`.
        """
        config = config or {}
        self.filter_type = parse_filter_type(config.get('filter_type', FilterType.STANDARD))
        self.num_octaves = int(config.get('num_octaves', DEFAULTS.DEFAULT_NUM_OCTAVES))
        self.strength = float(config.get('strength', DEFAULTS.DEFAULT_STRENGTH))
        self.roughness = float(config.get('roughness', DEFAULTS.DEFAULT_ROUGHNESS))
        self.lacunarity = float(config.get('lacunarity', DEFAULTS.DEFAULT_LACUNARITY))
        self.persistence = float(config.get('persistence', DEFAULTS.DEFAULT_PERSISTENCE))
        self.offset = float(config.get('offset', DEFAULTS.DEFAULT_OFFSET))
        self.floor = float(config.get('floor', DEFAULTS.DEFAULT_FLOOR))
        self.center = _as_vec3(config.get('center', DEFAULTS.DEFAULT_CENTER))
        self.warp_offset = _as_vec3(config.get('warp_offset', DEFAULTS.DEFAULT_WARP_OFFSET))
        self.seed = config.get('seed', DEFAULTS.DEFAULT_NOISE_SEED)

    @property
    def seed(self) -> int:
        return self._seed

    @seed.setter
    def seed(self, value: int):
        # Building the kernel first keeps the old seed if the new one is invalid.
        self.noise = NoiseKernel(value)
        self._seed = self.noise.seed

    def evaluate(self, p) -> float:
        """Evaluates the filter at a 3D point."""
        return evaluate_filter(
            self.noise.random, int(self.filter_type), self.num_octaves,
            self.strength, self.roughness, self.lacunarity, self.persistence, self.offset,
            self.center[0], self.center[1], self.center[2],
            float(p[0]), float(p[1]), float(p[2])
        )

    def to_dict(self) -> dict:
        """Structural state only. The permutation table is derived from `seed`."""
        return {
            'seed': self.seed,
            'filter_type': self.filter_type.name.lower(),
            'num_octaves': self.num_octaves,
            'strength': self.strength,
            'roughness': self.roughness,
            'lacunarity': self.lacunarity,
            'persistence': self.persistence,
            'offset': self.offset,
            'floor': self.floor,
            'center': self.center.tolist(),
            'warp_offset': self.warp_offset.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NoiseFilter":
        return cls(dict(data))

    def __repr__(self):
        return (
            f"NoiseFilter(type={self.filter_type.name}, seed={self.seed}, octaves={self.num_octaves}, "
            f"strength={self.strength}, roughness={self.roughness})"
        )
