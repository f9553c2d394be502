"""
Three-point curve solver for gesturematch.

Finds the circle through three 3D points by rotating their plane onto the
X-Y plane, solving the circumcircle there, and rotating the generated arc
or circle points back. Used both for smoothing drawn curves into Arc and
Circle primitives and for sampling primitives as polylines.
"""

import math
from dataclasses import dataclass

import numpy as np

from gesturematch.config import CurveConfig
from gesturematch.errors import DegenerateGeometryError
from gesturematch.geometry.vectors import Z_AXIS, as_array, rotation_between
from gesturematch.models import Arc, Circle
from gesturematch.tracer import get_tracer


@dataclass(frozen=True, eq=False)
class CurveFit:
    """Dense points along a solved arc or circle, in the input frame."""
    points: np.ndarray  # (N, 3)
    center: np.ndarray  # (3,)
    start_angle: float
    end_angle: float
    radius: float
    normal: np.ndarray  # (3,) unit normal of the plane through p1, p2, p3


@dataclass(frozen=True, eq=False)
class ArcFit:
    """An Arc primitive together with the curve it was derived from."""
    arc: Arc
    curve: CurveFit

    @property
    def points(self):
        return self.curve.points


@dataclass(frozen=True, eq=False)
class CircleFit:
    """A Circle primitive together with the curve it was derived from."""
    circle: Circle
    curve: CurveFit

    @property
    def points(self):
        return self.curve.points


def circumcircle_2d(p1, p2, p3, epsilon=1e-12):
    """
    Circle through three 2D points.

    Solves the perpendicular-bisector intersection in determinant form.
    Raises DegenerateGeometryError when the points are collinear or
    coincident, i.e. the determinant is below epsilon.

    Returns ((cx, cy), radius).
    """
    ax, ay = float(p1[0]), float(p1[1])
    bx, by = float(p2[0]), float(p2[1])
    cx, cy = float(p3[0]), float(p3[1])

    d = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < epsilon:
        raise DegenerateGeometryError(
            f"points are collinear or coincident: {p1}, {p2}, {p3}"
        )

    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy

    ux = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / d
    uy = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / d

    return (ux, uy), math.hypot(ax - ux, ay - uy)


def curve_from_3_points(p1, p2, p3, as_full_circle=False, config=None):
    """
    Compute the circle, or the arc from p1 through p2 to p3, through three points.

    Steps:
    1. Plane normal from the cross product of the edge vectors
    2. Rotate the plane onto X-Y (normal onto +Z)
    3. Solve the circumcircle on the rotated X, Y coordinates
    4. Sweep counterclockwise from p1 to p3 (or nearly a full turn)
       generating points about point_spacing apart
    5. Rotate the points and center back to the input frame

    Returns a CurveFit.
    """
    if config is None:
        config = CurveConfig()
    tracer = get_tracer()

    p1, p2, p3 = as_array(p1), as_array(p2), as_array(p3)

    normal = np.cross(p2 - p1, p3 - p1)
    normal_len = np.linalg.norm(normal)
    if normal_len < config.degenerate_epsilon:
        raise DegenerateGeometryError(
            f"points are collinear or coincident: {p1.tolist()}, {p2.tolist()}, {p3.tolist()}"
        )
    normal = normal / normal_len

    to_plane = rotation_between(normal, Z_AXIS)
    r1, r2, r3 = to_plane.apply(np.array([p1, p2, p3]))

    # All three share one height once the plane is horizontal
    height = r1[2]
    drift = max(abs(r2[2] - height), abs(r3[2] - height))
    if drift > config.plane_tolerance:
        tracer.event("Rotated points disagree on plane height", level="WARN", drift=float(drift))

    (cx, cy), radius = circumcircle_2d(r1, r2, r3, config.degenerate_epsilon)

    start_angle = math.atan2(r1[1] - cy, r1[0] - cx)
    if as_full_circle:
        end_angle = start_angle + 2 * math.pi - config.full_circle_gap
    else:
        end_angle = math.atan2(r3[1] - cy, r3[0] - cx)
        while end_angle < start_angle:
            end_angle += 2 * math.pi

    num_points = max(config.min_points, int(round((end_angle - start_angle) * radius / config.point_spacing)))
    angles = np.linspace(start_angle, end_angle, num_points)

    local = np.column_stack([
        cx + radius * np.cos(angles),
        cy + radius * np.sin(angles),
        np.full(num_points, height),
    ])

    from_plane = to_plane.inv()

    return CurveFit(
        points=from_plane.apply(local),
        center=from_plane.apply(np.array([cx, cy, height])),
        start_angle=start_angle,
        end_angle=end_angle,
        radius=radius,
        normal=normal,
    )


def arc_from_3_points(p1, p2, p3, config=None):
    """
    Smooth a drawn curve into an Arc from p1 to p3 passing through p2.

    The Arc's midpoint is the middle of the generated points (mean of the
    two central samples when their count is even), which is not
    necessarily p2.
    """
    curve = curve_from_3_points(p1, p2, p3, as_full_circle=False, config=config)

    n = len(curve.points)
    if n % 2 == 1:
        midpoint = curve.points[n // 2]
    else:
        midpoint = (curve.points[n // 2 - 1] + curve.points[n // 2]) / 2

    arc = Arc(end1=as_array(p1), midpoint=midpoint, end2=as_array(p3))
    return ArcFit(arc=arc, curve=curve)


def circle_from_3_points(p1, p2, p3, config=None):
    """Full circle through three points, with a canonical normal sign."""
    curve = curve_from_3_points(p1, p2, p3, as_full_circle=True, config=config)

    circle = Circle(
        p1=as_array(p1),
        p2=as_array(p2),
        p3=as_array(p3),
        center=curve.center,
        radius=curve.radius,
        normal=curve.normal,
    )
    return CircleFit(circle=circle, curve=curve)


def primitive_polylines(segments, arcs, circles, config=None):
    """
    Sample primitives as polylines for drawing.

    Segments become their two endpoints; arcs and circles become the
    solver's dense point list. Returns a list of (N, 3) arrays in the
    order segments, arcs, circles.
    """
    polylines = []
    for segment in segments:
        polylines.append(segment.points())
    for arc in arcs:
        polylines.append(curve_from_3_points(arc.end1, arc.midpoint, arc.end2, config=config).points)
    for circle in circles:
        fit = curve_from_3_points(circle.p1, circle.p2, circle.p3, as_full_circle=True, config=config)
        polylines.append(fit.points)
    return polylines
