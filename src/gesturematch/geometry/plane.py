"""
Best-fit plane normal for a cloud of figure points.

A deterministic three-point fit: the first point, the point farthest from
it, and the point farthest from the line through those two. Ties go to the
point encountered first.
"""

import numpy as np

from gesturematch.errors import DegenerateGeometryError, InsufficientPointsError

DEGENERATE_EPSILON = 1e-12


def estimate_plane_normal(points):
    """
    Estimate the unit normal of the plane spanned by points.

    Raises InsufficientPointsError for fewer than 3 points and
    DegenerateGeometryError when every point lies on one line.
    The returned normal has a non-negative Z component.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    if len(points) < 3:
        raise InsufficientPointsError(f"need at least 3 points for a plane, got {len(points)}")

    origin = points[0]
    offsets = points - origin

    # np.argmax returns the first index on ties
    far_index = int(np.argmax(np.einsum("ij,ij->i", offsets, offsets)))
    direction = offsets[far_index]
    direction_len = np.linalg.norm(direction)
    if direction_len < DEGENERATE_EPSILON:
        raise DegenerateGeometryError("all points coincide")
    direction = direction / direction_len

    perpendicular = np.linalg.norm(np.cross(offsets, direction), axis=1)
    third_index = int(np.argmax(perpendicular))

    normal = np.cross(offsets[far_index], offsets[third_index])
    normal_len = np.linalg.norm(normal)
    if normal_len < DEGENERATE_EPSILON:
        raise DegenerateGeometryError("all points are collinear")
    normal = normal / normal_len

    if normal[2] < 0:
        normal = -normal
    return normal
