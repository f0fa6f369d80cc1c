"""3D vector helpers over numpy float64 arrays.

Every helper returns a new array and leaves its inputs untouched.
"""

import math
import numpy as np
from numba import njit


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Build a float64 3-vector."""
    return np.array([x, y, z], dtype=np.float64)


@njit(cache=True)
def length(v: np.ndarray) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


@njit(cache=True)
def distance(a: np.ndarray, b: np.ndarray) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)


@njit(cache=True)
def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v, or the zero vector when v has no length."""
    out = np.zeros(3)
    mag = length(v)
    if mag > 0:
        out[0] = v[0] / mag
        out[1] = v[1] / mag
        out[2] = v[2] / mag
    return out


@njit(cache=True)
def clamp_length(v: np.ndarray, min_len: float, max_len: float, fallback: np.ndarray) -> np.ndarray:
    """
    Rescale v so its length lies in [min_len, max_len].

    A zero-length v is raised to min_len along the unit vector of
    `fallback`; when that is also zero the result stays zero.
    """
    mag = length(v)
    if mag > 0:
        direction = normalize(v)
    else:
        direction = normalize(fallback)
    target = min(max(mag, min_len), max_len)
    return direction * target


@njit(cache=True)
def clamp_to_box(v: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Per-axis clamp of v into [lower, upper]."""
    out = np.empty(3)
    for i in range(3):
        out[i] = min(max(v[i], lower[i]), upper[i])
    return out
