"""
Pydantic data models for gesturematch.

Primitives (Segment, Arc, Circle) are immutable values; derived attributes
are computed once at construction. Templates are centroid-centered bundles
of primitives built through Template.from_primitives.
"""

import math
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gesturematch.errors import InvalidPrimitiveError
from gesturematch.geometry.vectors import as_array, as_point, canonicalize_normal

Point = Tuple[float, float, float]


def _coerce_point(value):
    """Accept lists, tuples and numpy arrays of three numbers."""
    if isinstance(value, (list, tuple, np.ndarray)):
        if len(value) != 3:
            raise ValueError(f"point must have 3 coordinates, got {len(value)}")
        return as_point(value)
    return value


class TemplateFamily(str, Enum):
    """Families of related symbols that share an in-game effect."""
    BRIMSTONE = "brimstone"
    TRIQUETRA = "triquetra"
    BORROMEAN = "borromean"
    PENTACLE = "pentacle"
    PENTAGRAM = "pentagram"
    QUICKSILVER = "quicksilver"
    DAGAZ = "dagaz"


class Segment(BaseModel):
    """A straight segment between endpoints a and b."""
    a: Point
    b: Point
    center: Point = (0.0, 0.0, 0.0)
    length: float = 0.0
    angle: float = 0.0  # XY-plane direction, normalized into (-pi/2, pi/2]

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("a", "b", "center", mode="before")
    @classmethod
    def _point(cls, value):
        return _coerce_point(value)

    @model_validator(mode="before")
    @classmethod
    def _derive(cls, data):
        if not isinstance(data, dict) or "a" not in data or "b" not in data:
            return data
        a = as_array(data["a"])
        b = as_array(data["b"])
        delta = b - a

        angle = math.atan2(delta[1], delta[0])
        while angle <= -math.pi / 2:
            angle += math.pi
        while angle > math.pi / 2:
            angle -= math.pi

        derived = dict(data)
        derived["center"] = as_point((a + b) / 2)
        derived["length"] = float(np.linalg.norm(delta))
        derived["angle"] = angle
        return derived

    def points(self):
        """Endpoints as a (2, 3) array."""
        return np.array([self.a, self.b], dtype=float)

    def with_endpoints(self, a=None, b=None):
        """Copy with one or both endpoints replaced."""
        return Segment(a=self.a if a is None else a, b=self.b if b is None else b)

    def translated(self, offset):
        offset = as_array(offset)
        return Segment(a=as_array(self.a) + offset, b=as_array(self.b) + offset)

    def scale_and_translate(self, scale, offset):
        offset = as_array(offset)
        return Segment(a=as_array(self.a) * scale + offset, b=as_array(self.b) * scale + offset)

    def rotated(self, rotation):
        """Rotate about the origin with a scipy Rotation."""
        a, b = rotation.apply(self.points())
        return Segment(a=a, b=b)


class Arc(BaseModel):
    """A circular arc sampled at both ends and its midpoint."""
    end1: Point
    midpoint: Point
    end2: Point

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("end1", "midpoint", "end2", mode="before")
    @classmethod
    def _point(cls, value):
        return _coerce_point(value)

    @model_validator(mode="after")
    def _check_distinct(self):
        if self.end1 == self.midpoint or self.midpoint == self.end2 or self.end1 == self.end2:
            raise InvalidPrimitiveError(
                f"arc points must be distinct: {self.end1}, {self.midpoint}, {self.end2}"
            )
        return self

    def points(self):
        """end1, midpoint, end2 as a (3, 3) array."""
        return np.array([self.end1, self.midpoint, self.end2], dtype=float)

    def translated(self, offset):
        e1, mid, e2 = self.points() + as_array(offset)
        return Arc(end1=e1, midpoint=mid, end2=e2)

    def scale_and_translate(self, scale, offset):
        e1, mid, e2 = self.points() * scale + as_array(offset)
        return Arc(end1=e1, midpoint=mid, end2=e2)

    def rotated(self, rotation):
        e1, mid, e2 = rotation.apply(self.points())
        return Arc(end1=e1, midpoint=mid, end2=e2)


class Circle(BaseModel):
    """
    A full circle with the three guide points that generated it.

    The normal is stored as a unit vector with a canonical sign, so normals
    of two circles can be compared directly.
    """
    p1: Point
    p2: Point
    p3: Point
    center: Point
    radius: float = Field(..., ge=0.0)
    normal: Point

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("p1", "p2", "p3", "center", mode="before")
    @classmethod
    def _point(cls, value):
        return _coerce_point(value)

    @field_validator("normal", mode="before")
    @classmethod
    def _unit_normal(cls, value):
        normal = as_array(value)
        length = np.linalg.norm(normal)
        if length == 0 or not np.isfinite(length):
            raise InvalidPrimitiveError(f"circle normal must be a non-zero vector, got {value}")
        return as_point(canonicalize_normal(normal / length))

    def guide_points(self):
        """p1, p2, p3 as a (3, 3) array."""
        return np.array([self.p1, self.p2, self.p3], dtype=float)

    def translated(self, offset):
        return self.scale_and_translate(1.0, offset)

    def scale_and_translate(self, scale, offset):
        """Scale radius and points about the origin, then translate."""
        offset = as_array(offset)
        p1, p2, p3 = self.guide_points() * scale + offset
        return Circle(
            p1=p1, p2=p2, p3=p3,
            center=as_array(self.center) * scale + offset,
            radius=self.radius * abs(scale),
            normal=self.normal,
        )

    def rotated(self, rotation):
        p1, p2, p3 = rotation.apply(self.guide_points())
        return Circle(
            p1=p1, p2=p2, p3=p3,
            center=rotation.apply(as_array(self.center)),
            radius=self.radius,
            normal=rotation.apply(as_array(self.normal)),
        )


def defining_points(segments, arcs, circles):
    """
    Points that define a figure's position.

    Two per segment, three per arc, and one per circle (its center).
    Returns an (N, 3) array.
    """
    points = []
    for segment in segments:
        points.extend([segment.a, segment.b])
    for arc in arcs:
        points.extend([arc.end1, arc.midpoint, arc.end2])
    for circle in circles:
        points.append(circle.center)
    return np.array(points, dtype=float).reshape(-1, 3)


def plane_points(segments, arcs, circles):
    """
    Points that span a figure's plane.

    Like defining_points, but circles contribute their three guide points,
    since a center alone says nothing about orientation.
    """
    points = []
    for segment in segments:
        points.extend([segment.a, segment.b])
    for arc in arcs:
        points.extend([arc.end1, arc.midpoint, arc.end2])
    for circle in circles:
        points.extend([circle.p1, circle.p2, circle.p3])
    return np.array(points, dtype=float).reshape(-1, 3)


def figure_size(segments, arcs, circles, origin=(0.0, 0.0, 0.0)):
    """
    Sum of distances from origin of every defining point, plus every radius.

    A plain sum, not an RMS distance; only ever used as a ratio.
    """
    points = defining_points(segments, arcs, circles) - as_array(origin)
    size = float(np.linalg.norm(points, axis=1).sum()) if len(points) else 0.0
    return size + sum(circle.radius for circle in circles)


class Template(BaseModel):
    """A canonical, centroid-centered symbol definition."""
    name: str
    family: TemplateFamily
    segments: Tuple[Segment, ...] = ()
    arcs: Tuple[Arc, ...] = ()
    circles: Tuple[Circle, ...] = ()
    size: float = 0.0
    min_score: float = 0.0
    color: str = "cyan"
    audio_tag: str = ""
    description: str = ""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_primitives(cls, name, family, segments=(), arcs=(), circles=(), **metadata):
        """
        Build a template, subtracting the centroid of its defining points
        from every point and computing its size.
        """
        offset = -centroid_of(segments, arcs, circles)
        segments = tuple(s.translated(offset) for s in segments)
        arcs = tuple(a.translated(offset) for a in arcs)
        circles = tuple(c.translated(offset) for c in circles)

        return cls(
            name=name,
            family=family,
            segments=segments,
            arcs=arcs,
            circles=circles,
            size=figure_size(segments, arcs, circles),
            **metadata,
        )

    @property
    def segment_count(self):
        return len(self.segments)

    @property
    def arc_count(self):
        return len(self.arcs)

    @property
    def circle_count(self):
        return len(self.circles)

    @property
    def point_count(self):
        """Number of scored points: 2 per segment, 3 per arc, 3 per circle."""
        return 2 * len(self.segments) + 3 * len(self.arcs) + 3 * len(self.circles)


def centroid_of(segments, arcs, circles):
    """Equally weighted mean of a figure's defining points."""
    points = defining_points(segments, arcs, circles)
    if len(points) == 0:
        return np.zeros(3)
    return points.mean(axis=0)


class DrawnFigure(BaseModel):
    """Primitives completed so far for one gesture, in drawing order."""
    segments: List[Segment] = Field(default_factory=list)
    arcs: List[Arc] = Field(default_factory=list)
    circles: List[Circle] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class MatchResult(BaseModel):
    """Best template match for a drawn figure."""
    score: float = float("-inf")
    raw_score: float = float("-inf")
    rmsd: Optional[float] = None
    template: Optional[Template] = None
    centroid: Optional[Point] = None
    matched_segments: List[Segment] = Field(default_factory=list)
    matched_arcs: List[Arc] = Field(default_factory=list)
    matched_circles: List[Circle] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def accepted(self):
        """True when a template matched at or above its min_score."""
        return self.template is not None and self.score >= 0
