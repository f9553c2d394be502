"""
Built-in symbol templates for gesturematch.

Each template is defined in a canonical X-Y frame and centered on the mean
of its defining points when built. The library is constructed once, on
first use, and never mutated afterwards.
"""

import functools
import math

from gesturematch.geometry.curves import circle_from_3_points
from gesturematch.models import Arc, Segment, Template, TemplateFamily


def _xy(x, y):
    return (x, y, 0.0)


def _polar(radius, degrees, center=(0.0, 0.0)):
    theta = math.radians(degrees)
    return (center[0] + radius * math.cos(theta), center[1] + radius * math.sin(theta), 0.0)


def _polyline(*points, closed=False):
    """Segments joining consecutive points."""
    pairs = list(zip(points, points[1:]))
    if closed:
        pairs.append((points[-1], points[0]))
    return [Segment(a=a, b=b) for a, b in pairs]


def _circle(center, radius, angles=(90, 210, 330)):
    """Circle from three guide points on its circumference."""
    p1, p2, p3 = (_polar(radius, angle, center) for angle in angles)
    return circle_from_3_points(p1, p2, p3).circle


def _star_points():
    """Pentagram vertices in drawing order, starting at the top."""
    return [_polar(1.0, 90 - 144 * k) for k in range(5)]


def _cross(top, bottom, bar_y, bar_half_width):
    return [
        Segment(a=_xy(0.0, top), b=_xy(0.0, bottom)),
        Segment(a=_xy(-bar_half_width, bar_y), b=_xy(bar_half_width, bar_y)),
    ]


def build_brimstone_up():
    triangle = _polyline(_xy(0.0, 1.0), _xy(-0.6, 0.0), _xy(0.6, 0.0), closed=True)
    return Template.from_primitives(
        "brimstone_up", TemplateFamily.BRIMSTONE,
        segments=triangle + _cross(0.0, -1.0, -0.5, 0.45),
        min_score=12.0, color="orange", audio_tag="#fire", description="to burn",
    )


def build_brimstone_down():
    triangle = _polyline(_xy(-0.6, 1.0), _xy(0.6, 1.0), _xy(0.0, 0.0), closed=True)
    return Template.from_primitives(
        "brimstone_down", TemplateFamily.BRIMSTONE,
        segments=triangle + _cross(0.0, -1.0, -0.5, 0.45),
        min_score=12.0, color="orange", audio_tag="#fire", description="to burn",
    )


def build_triquetra():
    # Each lobe runs between two inner vertices through an outer tip
    arcs = []
    for k in range(3):
        theta = 90 + 120 * k
        arcs.append(Arc(
            end1=_polar(0.5, theta - 60),
            midpoint=_polar(1.0, theta),
            end2=_polar(0.5, theta + 60),
        ))
    return Template.from_primitives(
        "triquetra", TemplateFamily.TRIQUETRA,
        arcs=arcs,
        min_score=10.0, color="green", audio_tag="#bind", description="to bind",
    )


def build_borromean_rings():
    circles = [_circle(_polar(0.45, angle)[:2], 0.6) for angle in (90, 210, 330)]
    return Template.from_primitives(
        "borromean_rings", TemplateFamily.BORROMEAN,
        circles=circles,
        min_score=10.0, color="blue", audio_tag="#link", description="to link",
    )


def build_pentacle():
    star = _star_points()
    return Template.from_primitives(
        "pentacle", TemplateFamily.PENTACLE,
        segments=_polyline(*star, closed=True),
        circles=[_circle((0.0, 0.0), 1.0)],
        min_score=12.0, color="gold", audio_tag="#protect", description="to protect",
    )


def build_pentagram():
    return Template.from_primitives(
        "pentagram", TemplateFamily.PENTAGRAM,
        segments=_polyline(*_star_points(), closed=True),
        min_score=14.0, color="red", audio_tag="#ward", description="to ward",
    )


def build_quicksilver():
    horns = Arc(end1=_xy(-0.45, 1.0), midpoint=_xy(0.0, 0.6), end2=_xy(0.45, 1.0))
    return Template.from_primitives(
        "quicksilver", TemplateFamily.QUICKSILVER,
        segments=_cross(-0.5, -1.3, -0.9, 0.35),
        arcs=[horns],
        circles=[_circle((0.0, 0.0), 0.5)],
        min_score=10.0, color="silver", audio_tag="#detect", description="to detect",
    )


def build_dagaz():
    segments = [
        Segment(a=_xy(-0.6, -0.6), b=_xy(-0.6, 0.6)),
        Segment(a=_xy(0.6, -0.6), b=_xy(0.6, 0.6)),
        Segment(a=_xy(-0.6, 0.6), b=_xy(0.6, -0.6)),
        Segment(a=_xy(-0.6, -0.6), b=_xy(0.6, 0.6)),
    ]
    return Template.from_primitives(
        "dagaz", TemplateFamily.DAGAZ,
        segments=segments,
        min_score=14.0, color="yellow", audio_tag="#illuminate", description="to illuminate",
    )


# Composite symbols come before the symbols they contain, so that exact
# ties resolve to the composite.
TEMPLATE_BUILDERS = (
    build_brimstone_up,
    build_brimstone_down,
    build_triquetra,
    build_borromean_rings,
    build_pentacle,
    build_pentagram,
    build_quicksilver,
    build_dagaz,
)


class TemplateLibrary:
    """Ordered, read-only collection of templates."""

    def __init__(self, templates):
        self._templates = tuple(templates)
        self._by_name = {}
        for template in self._templates:
            if template.name in self._by_name:
                raise ValueError(f"duplicate template name: {template.name}")
            self._by_name[template.name] = template

    def __iter__(self):
        return iter(self._templates)

    def __len__(self):
        return len(self._templates)

    def __contains__(self, name):
        return name in self._by_name

    def get(self, name):
        """Template by name; raises KeyError if unknown."""
        return self._by_name[name]

    def names(self):
        return [template.name for template in self._templates]

    def by_family(self, family):
        return [template for template in self._templates if template.family == TemplateFamily(family)]


@functools.lru_cache(maxsize=None)
def get_template_library():
    """The built-in template library, built on first call."""
    return TemplateLibrary(builder() for builder in TEMPLATE_BUILDERS)
