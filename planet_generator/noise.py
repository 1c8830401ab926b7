# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides a seeded 3D simplex noise kernel. The kernel itself is a
pure, stateless function over a permutation table; `NoiseKernel` is the small
immutable object that owns one table.

Data Contract:
---------------
- Inputs:
    - seed: An unsigned 32-bit integer used to derive the permutation table.
    - perm: A 512-entry int32 permutation table (see build_permutation_table).
    - x, y, z: Floating point sample coordinates.
- Outputs:
    - A scalar noise value, practically within [-1, 1] but not strictly bounded.
- Side Effects: None.
- Invariants: Identical seed and input produce bit-identical output.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS

# Canonical source permutation (Ken Perlin's reference table).
SOURCE = np.array([
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225, 140, 36, 103, 30, 69, 142,
    8, 99, 37, 240, 21, 10, 23, 190, 6, 148, 247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203,
    117, 35, 11, 32, 57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175, 74, 165,
    71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122, 60, 211, 133, 230, 220, 105, 92, 41,
    55, 46, 245, 40, 244, 102, 143, 54, 65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89,
    18, 169, 200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64, 52, 217, 226, 250,
    124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212, 207, 206, 59, 227, 47, 16, 58, 17, 182, 189,
    28, 42, 223, 183, 170, 213, 119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104, 218, 246, 97, 228, 251, 34,
    242, 193, 238, 210, 144, 12, 191, 179, 162, 241, 81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31,
    181, 199, 106, 157, 184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93, 222, 114,
    67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
], dtype=np.int32)

SOURCE_SIZE = 256
MAX_SEED = 0xFFFFFFFF

# Skewing and unskewing factors for three dimensions.
F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

# The 12 edge directions of a cube, used as simplex gradients.
_GRADIENT_VECTORS = np.array([
    [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0], [1.0, -1.0, 0.0], [-1.0, -1.0, 0.0],
    [1.0, 0.0, 1.0], [-1.0, 0.0, 1.0], [1.0, 0.0, -1.0], [-1.0, 0.0, -1.0],
    [0.0, 1.0, 1.0], [0.0, -1.0, 1.0], [0.0, 1.0, -1.0], [0.0, -1.0, -1.0],
])


def build_permutation_table(seed: int) -> np.ndarray:
    """
    Derives the doubled 512-entry permutation table for a seed.

    Seed 0 yields the canonical source table. Any other seed XORs every source
    entry with each of the seed's four little-endian bytes.
    """
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise ValueError(f"Noise seed must be an integer, got {seed!r}")
    seed = int(seed)
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"Noise seed must be an unsigned 32-bit integer, got {seed}")

    table = SOURCE.copy()
    if seed != 0:
        for byte in seed.to_bytes(4, 'little'):
            table ^= byte

    return np.concatenate([table, table])


@njit
def _corner_contribution(gi, x, y, z):
    """Falloff-weighted gradient contribution of a single simplex corner."""
    t = 0.6 - x * x - y * y - z * z
    if t <= 0.0:
        return 0.0
    t *= t
    g = _GRADIENT_VECTORS[gi]
    return t * t * (g[0] * x + g[1] * y + g[2] * z)


@njit
def simplex_noise_3d(perm, x, y, z):
    """
    Evaluate 3D simplex noise at (x, y, z) with a pre-computed permutation table.
    This function is JIT-compiled with Numba so it can be called per point from
    parallel batch loops.
    """
    # Skew the input space to find the simplex cell.
    s = (x + y + z) * F3
    i = np.floor(x + s)
    j = np.floor(y + s)
    k = np.floor(z + s)

    # Unskew the cell origin back to (x, y, z) space.
    t = (i + j + k) * G3
    x0 = x - (i - t)
    y0 = y - (j - t)
    z0 = z - (k - t)

    # Pick the tetrahedron the point falls in.
    if x0 >= y0:
        if y0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
        elif x0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
    else:
        if y0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
        elif x0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

    x1 = x0 - i1 + G3
    y1 = y0 - j1 + G3
    z1 = z0 - k1 + G3

    x2 = x0 - i2 + F3
    y2 = y0 - j2 + F3
    z2 = z0 - k2 + F3

    x3 = x0 - 0.5
    y3 = y0 - 0.5
    z3 = z0 - 0.5

    # Only the base cell wraps; corner offsets stay within the doubled table.
    ii = int(i) & 0xFF
    jj = int(j) & 0xFF
    kk = int(k) & 0xFF

    gi0 = perm[ii + perm[jj + perm[kk]]] % 12
    gi1 = perm[ii + i1 + perm[jj + j1 + perm[kk + k1]]] % 12
    gi2 = perm[ii + i2 + perm[jj + j2 + perm[kk + k2]]] % 12
    gi3 = perm[ii + 1 + perm[jj + 1 + perm[kk + 1]]] % 12

    n0 = _corner_contribution(gi0, x0, y0, z0)
    n1 = _corner_contribution(gi1, x1, y1, z1)
    n2 = _corner_contribution(gi2, x2, y2, z2)
    n3 = _corner_contribution(gi3, x3, y3, z3)

    return (n0 + n1 + n2 + n3) * 32.0


class NoiseKernel:
    """
    A seeded simplex noise function. The permutation table is built once on
    construction and is read-only afterwards; a new seed means a new kernel.
    """
    def __init__(self, seed: int = DEFAULTS.DEFAULT_NOISE_SEED):
        self.random = build_permutation_table(seed)
        self.seed = int(seed)
        self.random.flags.writeable = False

    def evaluate(self, p) -> float:
        """Samples the kernel at a 3D point."""
        return simplex_noise_3d(self.random, float(p[0]), float(p[1]), float(p[2]))

    def __repr__(self):
        return f"NoiseKernel(seed={self.seed})"
