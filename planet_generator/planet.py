# planet_generator/planet.py

"""
================================================================================
CUBE-SPHERE SAMPLING
================================================================================
This module produces the points a planet mesh is built from: a regular grid on
each of the six faces of a cube, projected onto the unit sphere. It also
tracks the elevation range seen during one regeneration pass, which the color
mapping needs.

Triangulation, normals and any GPU upload are left to the renderer.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS

FACE_DIRECTIONS = np.array([
    [0.0, 1.0, 0.0],
    [0.0, -1.0, 0.0],
    [1.0, 0.0, 0.0],
    [-1.0, 0.0, 0.0],
    [0.0, 0.0, 1.0],
    [0.0, 0.0, -1.0],
])


class ElevationMinMax:
    """Running minimum and maximum of elevations across one pass."""

    def __init__(self):
        self.min = np.inf
        self.max = -np.inf

    def add_value(self, value: float):
        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value

    def add_values(self, values: np.ndarray):
        if values.size == 0:
            return
        self.add_value(float(np.min(values)))
        self.add_value(float(np.max(values)))

    @property
    def is_empty(self) -> bool:
        return self.min > self.max

    def to_dict(self) -> dict:
        return {'min': self.min, 'max': self.max}


class TerrainFace:
    """One face of the cube, spanned by two axes perpendicular to `local_up`."""

    def __init__(self, local_up):
        self.local_up = np.asarray(local_up, dtype=np.float64)
        self.axis_a = np.array([self.local_up[1], self.local_up[2], self.local_up[0]])
        self.axis_b = np.cross(self.local_up, self.axis_a)

    def unit_sphere_points(self, resolution: int) -> np.ndarray:
        """
        Returns a (resolution * resolution, 3) array of unit vectors in row
        major order (y outer, x inner).
        """
        if resolution < DEFAULTS.MIN_MESH_RESOLUTION:
            raise ValueError(
                f"Face resolution must be at least {DEFAULTS.MIN_MESH_RESOLUTION}, got {resolution}"
            )

        steps = np.arange(resolution, dtype=np.float64) / (resolution - 1)
        v, u = np.meshgrid(steps, steps, indexing='ij')
        u = (u.ravel() - 0.5) * 2.0
        v = (v.ravel() - 0.5) * 2.0

        points_on_cube = self.local_up + u[:, np.newaxis] * self.axis_a + v[:, np.newaxis] * self.axis_b
        return points_on_cube / np.linalg.norm(points_on_cube, axis=1)[:, np.newaxis]


def terrain_faces() -> list[TerrainFace]:
    return [TerrainFace(direction) for direction in FACE_DIRECTIONS]


def generate_face(shape_gen, face: TerrainFace, resolution: int, min_max: ElevationMinMax = None):
    """
    Evaluates one face of the planet.

    Returns:
        tuple: (positions (N, 3), elevations (N,)). Positions are the unit sphere
        points scaled by their elevation.
    """
    points = face.unit_sphere_points(resolution)
    elevations = shape_gen.get_elevations(points)
    if min_max is not None:
        min_max.add_values(elevations)
    return points * elevations[:, np.newaxis], elevations
