"""Tests for aligning templates onto drawn figures."""

import math

import numpy as np
import pytest

from gesturematch.config import AlignmentConfig
from gesturematch.errors import DegenerateGeometryError
from gesturematch.geometry.vectors import rotation_about
from gesturematch.matching import alignment
from gesturematch.matching.alignment import align_template_to_drawn, best_twist, fitted_turn
from gesturematch.matching.rmsd import primitive_arrays, rmsd, rmsd_arrays
from gesturematch.models import Segment, centroid_of


def aligned_rmsd(drawn, template, config=None):
    segments, arcs, circles, _ = align_template_to_drawn(*drawn, template, config)
    return rmsd(*drawn, segments, arcs, circles)


class TestAlignTemplateToDrawn:
    """Tests for align_template_to_drawn."""

    def test_identity(self, library):
        """Test a template drawn as-is aligns onto itself."""
        template = library.get("pentagram")
        drawn = (list(template.segments), [], [])

        segments, arcs, circles, centroid = align_template_to_drawn(*drawn, template)

        assert centroid == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)
        # The star's fivefold symmetry means any multiple of 72 degrees fits
        assert rmsd(*drawn, segments, arcs, circles) < 1e-9
        for aligned, original in zip(segments, template.segments):
            assert aligned.length == pytest.approx(original.length)

    def test_tilt_recovered_without_refinement(self, library, transform_figure):
        """Test a pure tilt about X is undone by the normal rotation alone."""
        template = library.get("pentagram")
        drawn = transform_figure(template.segments, axis=(1, 0, 0), angle=0.7)

        config = AlignmentConfig(refine_rotation=False)

        assert aligned_rmsd(drawn, template, config) == pytest.approx(0.0, abs=1e-9)

    def test_twist_needs_refinement(self, library, transform_figure):
        """Test a turn within the drawing plane is only found by the twist search."""
        template = library.get("pentagram")
        drawn = transform_figure(template.segments, axis=(0, 0, 1), angle=0.3)

        unrefined = aligned_rmsd(drawn, template, AlignmentConfig(refine_rotation=False))
        refined = aligned_rmsd(drawn, template, AlignmentConfig())

        assert unrefined > 0.01
        assert refined < 1e-9

    def test_scale_and_translation(self, library, transform_figure):
        """Test the aligned copy lands on the drawn centroid at drawn scale."""
        template = library.get("dagaz")
        offset = (5.0, -2.0, 1.0)
        drawn = transform_figure(template.segments, axis=(1, 2, 3), angle=math.pi / 5,
                                 scale=3.0, offset=offset)

        segments, arcs, circles, centroid = align_template_to_drawn(*drawn, template)

        assert centroid == pytest.approx(offset)
        assert centroid_of(segments, arcs, circles) == pytest.approx(np.array(offset))
        assert segments[0].length == pytest.approx(3.0 * template.segments[0].length)
        assert rmsd(*drawn, segments, arcs, circles) < 1e-4

    def test_circles_and_arcs(self, library, transform_figure):
        template = library.get("quicksilver")
        drawn = transform_figure(template.segments, template.arcs, template.circles,
                                 axis=(-1, 1, 0.5), angle=1.1, scale=0.4, offset=(0, 1, 0))

        segments, arcs, circles, _ = align_template_to_drawn(*drawn, template)

        assert circles[0].radius == pytest.approx(0.4 * template.circles[0].radius, rel=1e-6)
        assert circles[0].normal == pytest.approx(drawn[2][0].normal, abs=1e-6)
        assert rmsd(*drawn, segments, arcs, circles) < 1e-4

    def test_normal_facing_away(self, library, transform_figure):
        """Test a figure whose plane faces -Z still aligns."""
        template = library.get("triquetra")
        drawn = transform_figure(arcs=template.arcs, axis=(1, 0, 0), angle=2.8)

        assert aligned_rmsd(drawn, template) < 1e-4

    def test_collinear_drawing_raises(self, library):
        template = library.get("dagaz")
        drawn = [Segment(a=(i, 0, 0), b=(i + 0.5, 0, 0)) for i in range(4)]

        with pytest.raises(DegenerateGeometryError):
            align_template_to_drawn(drawn, [], [], template)

    def test_exact_copy_aligns_to_rounding(self, library, transform_figure):
        """Test a rotated, scaled copy of a template aligns back to rounding error."""
        template = library.get("pentacle")
        drawn = transform_figure(template.segments, circles=template.circles, axis=(2, -1, 1),
                                 angle=2.2, scale=1.3, offset=(0.5, 0.5, -3))

        assert aligned_rmsd(drawn, template) < 1e-10

    def test_models_built_once(self, library, transform_figure, monkeypatch):
        """Test the twist search works on arrays and only the final transform builds models."""
        calls = []
        original = alignment.transform_primitives

        def counting(*args):
            calls.append(args)
            return original(*args)

        monkeypatch.setattr(alignment, "transform_primitives", counting)
        template = library.get("quicksilver")
        drawn = transform_figure(template.segments, template.arcs, template.circles,
                                 axis=(0, 1, 1), angle=0.9)

        align_template_to_drawn(*drawn, template)

        assert len(calls) == 1


class TestFittedTurn:
    """Tests for the closed-form in-plane rotation fit."""

    def test_recovers_angle(self):
        normal = np.array([1.0, 2.0, 2.0]) / 3.0
        rng = np.random.default_rng(7)
        source = rng.normal(size=(12, 3))
        target = rotation_about(normal, 0.7).apply(source)

        assert fitted_turn(source, target, normal) == pytest.approx(0.7, abs=1e-12)

    def test_ignores_offset_along_normal(self):
        """Test displacement along the normal does not change the fitted angle."""
        normal = np.array([0.0, 0.0, 1.0])
        source = np.array([[1.0, 0.0, 0.0], [0.0, 2.0, 0.0], [-1.0, -1.0, 0.0]])
        target = rotation_about(normal, -1.2).apply(source) + [0.0, 0.0, 0.4]

        assert fitted_turn(source, target, normal) == pytest.approx(-1.2, abs=1e-12)

    def test_noisy_pairs_give_least_squares_angle(self):
        normal = np.array([0.0, 0.0, 1.0])
        source = np.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]])
        target = np.array([[1.0, 0.1, 0.0], [-1.0, 0.1, 0.0]])

        # Symmetric offsets cancel
        assert fitted_turn(source, target, normal) == pytest.approx(0.0, abs=1e-12)


class TestBestTwist:
    """Tests for the search over rotations about the drawn normal."""

    def test_finds_turn_of_asymmetric_template(self, library):
        template = library.get("quicksilver")
        arrays = primitive_arrays(template.segments, template.arcs, template.circles)
        normal = np.array([0.0, 0.0, 1.0])
        drawn = arrays.transformed(rotation_about(normal, 1.0))

        angle = best_twist(drawn, arrays, normal)

        assert math.remainder(angle - 1.0, 2 * math.pi) == pytest.approx(0.0, abs=1e-9)
        assert rmsd_arrays(drawn, arrays.transformed(rotation_about(normal, angle))) < 1e-12

    def test_never_worse_than_scan(self, library):
        """Test refinement keeps the best sampled angle when it cannot improve on it."""
        template = library.get("dagaz")
        arrays = primitive_arrays(template.segments, template.arcs, template.circles)
        normal = np.array([0.0, 0.0, 1.0])
        drawn = arrays.transformed(rotation_about(normal, 0.2), 1.1)
        config = AlignmentConfig(rotation_steps=12)

        angle = best_twist(drawn, arrays, normal, config)
        refined = rmsd_arrays(drawn, arrays.transformed(rotation_about(normal, angle)))
        step = 2 * math.pi / config.rotation_steps
        sampled = min(
            rmsd_arrays(drawn, arrays.transformed(rotation_about(normal, k * step)))
            for k in range(config.rotation_steps)
        )

        assert refined <= sampled
