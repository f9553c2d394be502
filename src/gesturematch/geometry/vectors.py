"""
Vector helpers shared by the geometry and matching modules.

Points are passed around as numpy arrays of shape (3,) internally and as
tuples of floats on the pydantic models.
"""

import numpy as np
from scipy.spatial.transform import Rotation

Z_AXIS = np.array([0.0, 0.0, 1.0])

# Below this length a rotation axis is treated as "already aligned".
AXIS_EPSILON = 1e-12


def as_array(point):
    """Convert a point-like value to a float array of shape (3,)."""
    return np.asarray(point, dtype=float).reshape(3)


def as_point(array):
    """Convert an array-like of three numbers to a tuple of floats."""
    return tuple(float(c) for c in np.asarray(array, dtype=float).reshape(3))


def canonicalize_normal(normal):
    """
    Pick a deterministic sign for a normal vector.

    Prefers positive Z; if Z is exactly zero, positive Y; if Y is also zero,
    positive X. Accepts a single (3,) normal or an (N, 3) stack.
    """
    normal = np.asarray(normal, dtype=float)
    x, y, z = normal[..., 0], normal[..., 1], normal[..., 2]
    flip = (z < 0) | ((z == 0) & ((y < 0) | ((y == 0) & (x < 0))))
    return np.where(flip[..., None], -normal, normal)


def rotation_between(source, target):
    """
    Rotation taking direction `source` onto direction `target`.

    Axis is cross(source, target), angle the angle between them. When the
    axis is too short the vectors are parallel: identity if they point the
    same way, otherwise a half turn about any perpendicular axis.
    """
    source = np.asarray(source, dtype=float)
    target = np.asarray(target, dtype=float)
    source = source / np.linalg.norm(source)
    target = target / np.linalg.norm(target)

    axis = np.cross(source, target)
    axis_len = np.linalg.norm(axis)
    cos_angle = float(np.clip(np.dot(source, target), -1.0, 1.0))

    if axis_len < AXIS_EPSILON:
        if cos_angle > 0:
            return Rotation.identity()
        perpendicular = np.cross(source, [1.0, 0.0, 0.0])
        if np.linalg.norm(perpendicular) < AXIS_EPSILON:
            perpendicular = np.cross(source, [0.0, 1.0, 0.0])
        perpendicular = perpendicular / np.linalg.norm(perpendicular)
        return Rotation.from_rotvec(perpendicular * np.pi)

    angle = np.arctan2(axis_len, cos_angle)
    return Rotation.from_rotvec(axis / axis_len * angle)


def rotation_about(axis, angle):
    """Rotation by `angle` radians about `axis` (need not be unit length)."""
    axis = np.asarray(axis, dtype=float)
    return Rotation.from_rotvec(axis / np.linalg.norm(axis) * angle)
