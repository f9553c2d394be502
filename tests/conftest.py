"""Pytest fixtures for gesturematch tests."""

import tempfile

import numpy as np
import pytest
from scipy.spatial.transform import Rotation


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def default_config():
    """Create default matcher configuration."""
    from gesturematch.config import MatcherConfig
    return MatcherConfig()


@pytest.fixture
def library():
    """The built-in template library."""
    from gesturematch.templates.library import get_template_library
    return get_template_library()


@pytest.fixture
def pentagram_points():
    """Standard pentagram vertices in drawing order, top point first."""
    return [
        (0.0, 1.0, 0.0),
        (0.58779, -0.80902, 0.0),
        (-0.95106, 0.30902, 0.0),
        (0.95106, 0.30902, 0.0),
        (-0.58779, -0.80902, 0.0),
    ]


@pytest.fixture
def transform_figure():
    """
    Return a helper that rotates, scales and translates a figure's primitives,
    as if the user drew it somewhere else.
    """
    def _transform(segments=(), arcs=(), circles=(), axis=(0, 0, 1), angle=0.0,
                   scale=1.0, offset=(0.0, 0.0, 0.0)):
        axis = np.asarray(axis, dtype=float)
        rotation = Rotation.from_rotvec(axis / np.linalg.norm(axis) * angle)
        return (
            [s.rotated(rotation).scale_and_translate(scale, offset) for s in segments],
            [a.rotated(rotation).scale_and_translate(scale, offset) for a in arcs],
            [c.rotated(rotation).scale_and_translate(scale, offset) for c in circles],
        )
    return _transform
