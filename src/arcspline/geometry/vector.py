"""
2D vector helpers.

Points and directions are float64 numpy arrays of shape (2,). Functions
that take a point also accept an (N, 2) array where noted.
"""

import math

import numpy as np

# Added to norms before dividing so zero vectors normalize to zero
TINY = np.finfo(np.float64).tiny


def vec(x, y):
    """Create a 2D vector."""
    return np.array([x, y], dtype=np.float64)


def as_vec(point):
    """Convert a point-like sequence to a 2D float vector."""
    return np.asarray(point, dtype=np.float64).reshape(2)


def norm(v):
    return math.hypot(v[0], v[1])


def norm2(v):
    return float(v[0] * v[0] + v[1] * v[1])


def dist(a, b):
    return math.hypot(b[0] - a[0], b[1] - a[1])


def normalized(v):
    return v / (norm(v) + TINY)


def direction_to(a, b):
    return normalized(b - a)


def dot(a, b):
    return float(a[0] * b[0] + a[1] * b[1])


def cross(a, b):
    return float(a[0] * b[1] - a[1] * b[0])


def rotate90(v):
    return np.array([-v[1], v[0]], dtype=np.float64)


def rotate(v, radians):
    s = math.sin(radians)
    c = math.cos(radians)
    return np.array([v[0] * c - v[1] * s, v[0] * s + v[1] * c], dtype=np.float64)


def angle_to(a, b):
    """Signed angle in radians from unit vector a to unit vector b."""
    assert abs(norm2(a) - 1.0) <= 1e-4
    assert abs(norm2(b) - 1.0) <= 1e-4
    return math.atan2(cross(a, b), dot(a, b))


def interpolate(a, b, t):
    return a * (1.0 - t) + b * t


def angles_between(a, b):
    """
    Unsigned angles in degrees between rows of two (N, 2) arrays of unit vectors.
    """
    crosses = a[:, 0] * b[:, 1] - a[:, 1] * b[:, 0]
    dots = a[:, 0] * b[:, 0] + a[:, 1] * b[:, 1]
    return np.abs(np.degrees(np.arctan2(crosses, dots)))
