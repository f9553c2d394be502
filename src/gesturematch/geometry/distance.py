"""
Distance from a point to a drawn or aligned figure.

Lets a collaborator ask how close something is to a completed symbol.
"""

import numpy as np

from gesturematch.geometry.curves import curve_from_3_points
from gesturematch.geometry.vectors import as_array


def point_to_segment_distance(point, start, end):
    """Distance from point to the closed segment start-end."""
    point, start, end = as_array(point), as_array(start), as_array(end)
    direction = end - start
    length_sq = float(np.dot(direction, direction))
    if length_sq == 0:
        return float(np.linalg.norm(point - start))
    t = np.clip(np.dot(point - start, direction) / length_sq, 0.0, 1.0)
    return float(np.linalg.norm(point - (start + t * direction)))


def point_to_polyline_distance(point, polyline):
    """Distance from point to a polyline given as an (N, 3) array."""
    polyline = np.asarray(polyline, dtype=float)
    if len(polyline) == 1:
        return float(np.linalg.norm(as_array(point) - polyline[0]))
    return min(
        point_to_segment_distance(point, polyline[i], polyline[i + 1])
        for i in range(len(polyline) - 1)
    )


def point_to_circle_distance(point, circle):
    """
    Distance from point to the circumference of circle.

    Splits the offset from the center into the component along the normal
    and the in-plane component; the nearest circumference point lies in the
    in-plane direction.
    """
    offset = as_array(point) - as_array(circle.center)
    normal = as_array(circle.normal)
    height = float(np.dot(offset, normal))
    in_plane = float(np.linalg.norm(offset - height * normal))
    return float(np.hypot(in_plane - circle.radius, height))


def distance_to_figure(point, segments=(), arcs=(), circles=(), config=None):
    """
    Smallest distance from point to any primitive of a figure.

    Returns +inf for an empty figure.
    """
    best = float("inf")

    for segment in segments:
        best = min(best, point_to_segment_distance(point, segment.a, segment.b))

    for arc in arcs:
        curve = curve_from_3_points(arc.end1, arc.midpoint, arc.end2, config=config)
        best = min(best, point_to_polyline_distance(point, curve.points))

    for circle in circles:
        best = min(best, point_to_circle_distance(point, circle))

    return best
