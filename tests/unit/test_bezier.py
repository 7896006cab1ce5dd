"""Tests for the curve model."""

import math

import pytest

from glyphfx.core.bezier import (
    arc_to_segments,
    curvature,
    evaluate,
    locate,
    safe_tangent,
    split,
    tangent,
)
from glyphfx.domain import Contour, Point, Segment
from glyphfx.exceptions import DegenerateTangentError

# Handle length for a quarter circle approximated by one cubic
KAPPA = 0.5522847498


@pytest.fixture
def quarter_arc() -> Contour:
    """Open quarter circle of radius 100 from (100, 0) to (0, 100)."""
    seg = Segment(
        Point(100, 0),
        Point(100, 100 * KAPPA),
        Point(100 * KAPPA, 100),
        Point(0, 100),
    )
    return Contour.from_segments([seg], closed=False)


@pytest.fixture
def open_path() -> Contour:
    """Open two-segment polyline (0,0) -> (100,0) -> (100,100)."""
    return Contour.polyline([(0, 0), (100, 0), (100, 100)])


class TestLocate:
    """Tests for global parameter mapping."""

    def test_interior(self, open_path: Contour) -> None:
        """Test integer part selects the segment."""
        assert locate(open_path, 1.25) == (1, 0.25)

    def test_open_clamps(self, open_path: Contour) -> None:
        """Test open contours clamp out-of-range parameters."""
        assert locate(open_path, -1.0) == (0, 0.0)
        assert locate(open_path, 5.0) == (1, 1.0)

    def test_end_of_open_contour(self, open_path: Contour) -> None:
        """Test t == N maps to the end of the last segment."""
        assert locate(open_path, 2.0) == (1, 1.0)

    def test_closed_wraps(self) -> None:
        """Test closed contours wrap the parameter modulo N."""
        contour = Contour.polyline([(0, 0), (100, 0), (100, 100), (0, 100)], closed=True)
        index, local = locate(contour, 4.5)
        assert index == 0
        assert local == pytest.approx(0.5)
        index, local = locate(contour, -0.5)
        assert index == 3
        assert local == pytest.approx(0.5)


class TestEvaluate:
    """Tests for position and tangent queries."""

    def test_evaluate_line(self, open_path: Contour) -> None:
        """Test evaluation along a straight segment."""
        assert evaluate(open_path, 0.5).is_close(Point(50, 0), 1e-9)
        assert evaluate(open_path, 1.5).is_close(Point(100, 50), 1e-9)

    def test_tangent_is_unit(self, quarter_arc: Contour) -> None:
        """Test tangents are unit vectors along the direction of travel."""
        t0 = tangent(quarter_arc, 0.0)
        assert t0.is_close(Point(0, 1), 1e-9)
        t1 = tangent(quarter_arc, 1.0)
        assert t1.is_close(Point(-1, 0), 1e-9)
        assert tangent(quarter_arc, 0.37).length() == pytest.approx(1.0)

    def test_degenerate_tangent_raises(self) -> None:
        """Test a vanishing derivative raises DegenerateTangentError."""
        seg = Segment(Point(0, 0), Point(0, 0), Point(100, 0), Point(100, 0))
        contour = Contour.from_segments([seg], closed=False)
        with pytest.raises(DegenerateTangentError):
            tangent(contour, 0.0)

    def test_safe_tangent_falls_back_to_secant(self) -> None:
        """Test safe_tangent recovers the direction where the derivative vanishes."""
        seg = Segment(Point(0, 0), Point(0, 0), Point(100, 0), Point(100, 0))
        contour = Contour.from_segments([seg], closed=False)
        assert safe_tangent(contour, 0.0).is_close(Point(1, 0), 1e-6)
        assert safe_tangent(contour, 1.0).is_close(Point(1, 0), 1e-6)


class TestCurvature:
    """Tests for signed curvature."""

    def test_line_has_zero_curvature(self, open_path: Contour) -> None:
        """Test straight segments have no curvature."""
        assert curvature(open_path, 0.5) == pytest.approx(0.0)

    def test_quarter_circle(self, quarter_arc: Contour) -> None:
        """Test curvature of a circular arc approximates 1/r."""
        k = curvature(quarter_arc, 0.5)
        assert k == pytest.approx(0.01, rel=0.05)

    def test_sign_follows_turn(self, quarter_arc: Contour) -> None:
        """Test clockwise travel has negative curvature."""
        assert curvature(quarter_arc.reversed(), 0.5) < 0


class TestSplitAndArcs:
    """Tests for subdivision and arc construction."""

    def test_split_matches_evaluation(self, quarter_arc: Contour) -> None:
        """Test split halves trace the original curve."""
        left, right = split(quarter_arc.segments[0], 0.5)
        original = quarter_arc.segments[0]
        assert left.point_at(0.5).is_close(original.point_at(0.25), 1e-9)
        assert right.point_at(0.5).is_close(original.point_at(0.75), 1e-9)

    def test_arc_segment_count(self) -> None:
        """Test arcs are split into pieces of at most 90 degrees."""
        assert len(arc_to_segments(Point(0, 0), 10, 0.0, math.pi / 2)) == 1
        assert len(arc_to_segments(Point(0, 0), 10, 0.0, -math.pi)) == 2
        assert len(arc_to_segments(Point(0, 0), 10, 0.0, 2 * math.pi)) == 4

    def test_arc_endpoints_and_radius(self) -> None:
        """Test arc pieces start and end on the circle."""
        segments = arc_to_segments(Point(50, 50), 20, math.pi / 2, -math.pi)
        assert segments[0].p0.is_close(Point(50, 70), 1e-9)
        assert segments[-1].p3.is_close(Point(50, 30), 1e-9)
        for seg in segments:
            mid = seg.point_at(0.5)
            assert mid.distance_to(Point(50, 50)) == pytest.approx(20, abs=0.01)

    def test_empty_arc(self) -> None:
        """Test zero sweep produces no segments."""
        assert arc_to_segments(Point(0, 0), 10, 0.0, 0.0) == []
