"""
Error kinds for gesturematch.

All are local construction-time failures raised synchronously to the caller.
They derive from Exception rather than ValueError so that pydantic passes
them through validators instead of wrapping them in a ValidationError.
"""


class GeometryError(Exception):
    """Base class for geometric failures."""


class DegenerateGeometryError(GeometryError):
    """Points are collinear or coincident where a plane or circle is needed."""


class InsufficientPointsError(GeometryError):
    """Fewer points than an operation requires."""


class InvalidPrimitiveError(GeometryError):
    """A primitive was constructed from invalid defining points."""
