"""
Alignment of a template onto a drawn figure.

Produces a copy of the template rotated, uniformly scaled and translated
to overlay the drawn primitives. No reflection is attempted.
"""

import math

import numpy as np

from gesturematch.config import AlignmentConfig
from gesturematch.geometry.plane import estimate_plane_normal
from gesturematch.geometry.vectors import Z_AXIS, as_point, rotation_about, rotation_between
from gesturematch.matching.rmsd import nearest_pairs, primitive_arrays, rmsd_arrays
from gesturematch.models import centroid_of, figure_size, plane_points
from gesturematch.tracer import get_tracer


def transform_primitives(segments, arcs, circles, rotation, scale, offset):
    """Rotate about the origin, scale, then translate every primitive."""
    return (
        [s.rotated(rotation).scale_and_translate(scale, offset) for s in segments],
        [a.rotated(rotation).scale_and_translate(scale, offset) for a in arcs],
        [c.rotated(rotation).scale_and_translate(scale, offset) for c in circles],
    )


def align_template_to_drawn(drawn_segments, drawn_arcs, drawn_circles, template, config=None):
    """
    Transform template primitives onto the frame of drawn primitives.

    1. Centroid of the drawn defining points (2 per segment, 3 per arc,
       1 per circle center)
    2. Rotate the template's +Z normal onto the drawn plane normal
    3. Optionally turn about the drawn normal to minimise RMSD
    4. Scale by drawn size / template size, translate to the centroid

    Returns (segments, arcs, circles, drawn_centroid).
    Raises GeometryError subclasses when the drawn points span no plane.
    """
    if config is None:
        config = AlignmentConfig()
    tracer = get_tracer()

    drawn_centroid = centroid_of(drawn_segments, drawn_arcs, drawn_circles)
    offset = -drawn_centroid
    centered_segments = [s.translated(offset) for s in drawn_segments]
    centered_arcs = [a.translated(offset) for a in drawn_arcs]
    centered_circles = [c.translated(offset) for c in drawn_circles]

    normal_drawn = estimate_plane_normal(plane_points(drawn_segments, drawn_arcs, drawn_circles))
    to_drawn = rotation_between(Z_AXIS, normal_drawn)

    scale = 1.0
    if template.size > 0:
        scale = figure_size(centered_segments, centered_arcs, centered_circles) / template.size

    rotation = to_drawn
    if config.refine_rotation:
        drawn = primitive_arrays(centered_segments, centered_arcs, centered_circles)
        tilted = primitive_arrays(template.segments, template.arcs, template.circles).transformed(
            to_drawn, scale,
        )
        twist = best_twist(drawn, tilted, normal_drawn, config)
        rotation = rotation_about(normal_drawn, twist) * to_drawn

    tracer.event(
        f"Aligned {template.name}", level="DEBUG",
        normal=normal_drawn, rotation=rotation, scale=scale,
    )

    segments, arcs, circles = transform_primitives(
        template.segments, template.arcs, template.circles,
        rotation, scale, drawn_centroid,
    )
    return segments, arcs, circles, as_point(drawn_centroid)


def best_twist(drawn, template, normal, config=None):
    """
    Angle about normal that best fits template onto drawn.

    Both are PrimitiveArrays centered on the origin, template already
    tilted into the drawn plane and scaled. A coarse scan of
    rotation_steps angles picks a start; then each template point is
    paired with the drawn point it is scored against and the in-plane
    rotation for those pairs is solved in closed form, repeating while
    the RMSD keeps falling and the angle keeps moving.
    """
    if config is None:
        config = AlignmentConfig()

    def turned(angle):
        return template.transformed(rotation_about(normal, angle))

    step = 2 * math.pi / config.rotation_steps
    values = [rmsd_arrays(drawn, turned(k * step)) for k in range(config.rotation_steps)]
    best = int(np.argmin(values))
    angle, value = best * step, values[best]

    for _ in range(config.refine_iterations):
        source, target = nearest_pairs(drawn, turned(angle))
        delta = fitted_turn(source, target, normal)
        candidate = rmsd_arrays(drawn, turned(angle + delta))
        if candidate > value:
            break
        angle, value = angle + delta, candidate
        if abs(delta) <= config.rotation_tolerance:
            break

    return angle


def fitted_turn(source, target, normal):
    """
    Least-squares rotation angle about unit normal carrying source points
    onto target points, both (K, 3).

    Rotating p by t about n gives p cos t + (n x p) sin t + n (n.p)(1 - cos t),
    so the summed target.(R p) is a cos t + b sin t + const and peaks at
    atan2(b, a).
    """
    a = float(np.sum(source * target) - np.dot(source @ normal, target @ normal))
    b = float(np.sum(np.cross(normal, source) * target))
    return math.atan2(b, a)
