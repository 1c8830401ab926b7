# planet_generator/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module converts raw planet elevations into RGB color arrays for heightmap
previews. Elevations are normalized by the min/max range tracked during the
same regeneration pass, then looked up in a gradient LUT.

It is a pure, stateless utility used by the offline baker.
================================================================================
"""
import numpy as np

LUT_SIZE = 256

# --- Default Gradient ---
# (normalized elevation, RGB) stops, from the lowest to the highest point.
DEFAULT_ELEVATION_GRADIENT = [
    (0.0, (0, 0, 50)),          # Deepest ocean
    (0.35, (20, 40, 120)),
    (0.45, (26, 102, 255)),     # Shallows
    (0.5, (240, 230, 140)),     # Shore
    (0.6, (34, 139, 34)),
    (0.8, (139, 69, 19)),
    (0.9, (112, 128, 144)),     # Rock
    (1.0, (255, 255, 255)),     # Snow
]


def gradient_from_dict(colors: dict) -> list:
    """Reads a gradient from a save file's 'colors' block, if it has one."""
    stops = colors.get('elevation_gradient')
    if not stops:
        return DEFAULT_ELEVATION_GRADIENT
    return [(float(t), tuple(int(c) for c in rgb)) for t, rgb in stops]


def create_elevation_lut(gradient: list = None) -> np.ndarray:
    """Creates a 256-entry color LUT by interpolating between gradient stops."""
    gradient = sorted(gradient or DEFAULT_ELEVATION_GRADIENT, key=lambda stop: stop[0])
    positions = np.array([stop[0] for stop in gradient], dtype=np.float64)
    colors = np.array([stop[1] for stop in gradient], dtype=np.float64)

    t = np.linspace(0.0, 1.0, LUT_SIZE)
    lut = np.stack([np.interp(t, positions, colors[:, channel]) for channel in range(3)], axis=-1)
    return np.round(lut).astype(np.uint8)


def normalize_elevations(elevations: np.ndarray, min_elevation: float, max_elevation: float) -> np.ndarray:
    """Maps elevations to [0, 1] over the tracked range. A flat range maps to 0."""
    elevation_range = max_elevation - min_elevation
    if not elevation_range > 0:
        return np.zeros_like(elevations, dtype=np.float64)
    return np.clip((elevations - min_elevation) / elevation_range, 0.0, 1.0)


def get_elevation_color_array(elevations: np.ndarray, min_elevation: float, max_elevation: float,
                              lut: np.ndarray) -> np.ndarray:
    """Converts an elevation grid into an RGB color array with the same leading shape."""
    normalized = normalize_elevations(elevations, min_elevation, max_elevation)
    indices = (normalized * (LUT_SIZE - 1)).astype(np.uint8)
    return lut[indices]
