"""
Root-mean-square distance between a template and drawn primitives.

Each template primitive is paired with its nearest drawn primitive of the
same kind. Segment and arc endpoints may be drawn in either order, so both
pairings are tried and the smaller is kept.

Scoring works on stacked point arrays (PrimitiveArrays) so that alignment
can evaluate many candidate rotations without building models.
"""

import math
from dataclasses import dataclass

import numpy as np

from gesturematch.geometry.vectors import canonicalize_normal


@dataclass(frozen=True, eq=False)
class PrimitiveArrays:
    """A figure's primitives as arrays."""
    segments: np.ndarray  # (S, 2, 3) endpoints a, b
    arcs: np.ndarray  # (A, 3, 3) end1, midpoint, end2
    centers: np.ndarray  # (C, 3)
    radii: np.ndarray  # (C,)
    normals: np.ndarray  # (C, 3), canonical sign

    @property
    def point_count(self):
        """Number of scored points: 2 per segment, 3 per arc, 3 per circle."""
        return 2 * len(self.segments) + 3 * len(self.arcs) + 3 * len(self.centers)

    def transformed(self, rotation, scale=1.0, offset=(0.0, 0.0, 0.0)):
        """Rotate about the origin, scale, then translate."""
        offset = np.asarray(offset, dtype=float)
        return PrimitiveArrays(
            segments=_rotate(rotation, self.segments) * scale + offset,
            arcs=_rotate(rotation, self.arcs) * scale + offset,
            centers=_rotate(rotation, self.centers) * scale + offset,
            radii=self.radii * abs(scale),
            normals=canonicalize_normal(_rotate(rotation, self.normals)),
        )


def _rotate(rotation, points):
    if points.size == 0:
        return points.copy()
    return rotation.apply(points.reshape(-1, 3)).reshape(points.shape)


def primitive_arrays(segments, arcs, circles):
    """Stack Segment, Arc and Circle models into PrimitiveArrays."""
    return PrimitiveArrays(
        segments=np.array([[s.a, s.b] for s in segments], dtype=float).reshape(-1, 2, 3),
        arcs=np.array([[a.end1, a.midpoint, a.end2] for a in arcs], dtype=float).reshape(-1, 3, 3),
        centers=np.array([c.center for c in circles], dtype=float).reshape(-1, 3),
        radii=np.array([c.radius for c in circles], dtype=float),
        normals=np.array([c.normal for c in circles], dtype=float).reshape(-1, 3),
    )


def _pair_sq(t, d):
    """(T, M) squared distances between points t (T, 3) and d (M, 3)."""
    diff = t[:, None, :] - d[None, :, :]
    return np.einsum("ijk,ijk->ij", diff, diff)


def _end_pairings(template, drawn, last):
    """Squared end distances with ends kept in order, and with ends swapped."""
    direct = _pair_sq(template[:, 0], drawn[:, 0]) + _pair_sq(template[:, last], drawn[:, last])
    swapped = _pair_sq(template[:, 0], drawn[:, last]) + _pair_sq(template[:, last], drawn[:, 0])
    return direct, swapped


def segment_sq_distances(template, drawn):
    """(T, M) segment distances for (T, 2, 3) and (M, 2, 3) endpoint stacks."""
    return np.minimum(*_end_pairings(template, drawn, 1))


def arc_sq_distances(template, drawn):
    """(T, M) arc distances; midpoints are always paired with each other."""
    middle = _pair_sq(template[:, 1], drawn[:, 1])
    return middle + np.minimum(*_end_pairings(template, drawn, 2))


def circle_sq_distances(template, drawn):
    """(T, M) circle distances: center, radius and normal differences."""
    return (
        _pair_sq(template.centers, drawn.centers)
        + (template.radii[:, None] - drawn.radii[None, :]) ** 2
        + _pair_sq(template.normals, drawn.normals)
    )


def _nearest_sum(distances):
    if distances.shape[0] == 0:
        return 0.0
    if distances.shape[1] == 0:
        return math.inf
    return float(distances.min(axis=1).sum())


def rmsd_arrays(drawn, template):
    """RMSD of template PrimitiveArrays against drawn PrimitiveArrays."""
    total = (
        _nearest_sum(segment_sq_distances(template.segments, drawn.segments))
        + _nearest_sum(arc_sq_distances(template.arcs, drawn.arcs))
        + _nearest_sum(circle_sq_distances(template, drawn))
    )
    count = template.point_count
    if count == 0:
        return 0.0
    return math.sqrt(total / count)


def rmsd(drawn_segments, drawn_arcs, drawn_circles,
         template_segments, template_arcs, template_circles):
    """
    RMSD of template primitives against their nearest drawn counterparts.

    The sum of per-primitive minimum squared distances is divided by the
    template's point count (2 per segment, 3 per arc, 3 per circle).
    Returns +inf if a template kind has no drawn primitives to pair with,
    and 0.0 for an empty template.
    """
    return rmsd_arrays(
        primitive_arrays(drawn_segments, drawn_arcs, drawn_circles),
        primitive_arrays(template_segments, template_arcs, template_circles),
    )


def nearest_pairs(drawn, template):
    """
    Template points and the drawn points they are scored against.

    Uses the same nearest-primitive choice and end ordering as rmsd_arrays.
    Circles contribute their centers. Returns two (K, 3) arrays.
    """
    template_points = []
    drawn_points = []

    for t, d, last in ((template.segments, drawn.segments, 1), (template.arcs, drawn.arcs, 2)):
        if len(t) == 0 or len(d) == 0:
            continue
        direct, swapped = _end_pairings(t, d, last)
        distances = np.minimum(direct, swapped)
        if last == 2:
            distances = distances + _pair_sq(t[:, 1], d[:, 1])
        rows = np.arange(len(t))
        cols = distances.argmin(axis=1)
        matched = d[cols]
        flip = swapped[rows, cols] < direct[rows, cols]
        matched = np.where(flip[:, None, None], matched[:, ::-1], matched)
        template_points.append(t.reshape(-1, 3))
        drawn_points.append(matched.reshape(-1, 3))

    if len(template.centers) and len(drawn.centers):
        cols = circle_sq_distances(template, drawn).argmin(axis=1)
        template_points.append(template.centers)
        drawn_points.append(drawn.centers[cols])

    if not template_points:
        return np.zeros((0, 3)), np.zeros((0, 3))
    return np.concatenate(template_points), np.concatenate(drawn_points)
