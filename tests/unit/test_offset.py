"""Tests for the offset engine (noodle stroking)."""

import math

import pytest

from glyphfx.config import CapStyle, GeometryConfig, JoinStyle, NoodleConfig
from glyphfx.core.offset import NoodleStroker, offset_segment, stroke, trim_inner_join
from glyphfx.domain import Contour, Point, Segment, WindingDirection
from glyphfx.exceptions import DegenerateInputError, InvalidParameterError

KAPPA = 0.5522847498


def circle(radius: float) -> Contour:
    """Counter-clockwise closed circle of four cubics centred on the origin."""
    k = radius * KAPPA
    r = radius
    segments = [
        Segment(Point(r, 0), Point(r, k), Point(k, r), Point(0, r)),
        Segment(Point(0, r), Point(-k, r), Point(-r, k), Point(-r, 0)),
        Segment(Point(-r, 0), Point(-r, -k), Point(-k, -r), Point(0, -r)),
        Segment(Point(0, -r), Point(k, -r), Point(r, -k), Point(r, 0)),
    ]
    return Contour.from_segments(segments, closed=True)


def distance_to_edge(point: Point, a: Point, b: Point) -> float:
    """Distance from ``point`` to the line segment ``a``-``b``."""
    ab = b - a
    t = max(0.0, min(1.0, (point - a).dot(ab) / ab.dot(ab)))
    return point.distance_to(a + ab * t)


def sample(contour: Contour, steps: int = 8) -> list[Point]:
    """Points along every segment of ``contour``."""
    return [seg.point_at(i / steps) for seg in contour.segments for i in range(steps + 1)]


@pytest.fixture
def line() -> Contour:
    """Open horizontal line of length 100."""
    return Contour.polyline([(0, 0), (100, 0)])


@pytest.fixture
def corner() -> Contour:
    """Open L turning left at (100, 0)."""
    return Contour.polyline([(0, 0), (100, 0), (100, 100)])


@pytest.fixture
def square() -> Contour:
    """Counter-clockwise closed square of side 100."""
    return Contour.polyline([(0, 0), (100, 0), (100, 100), (0, 100)], closed=True)


class TestOffsetSegment:
    """Tests for single-segment offsetting."""

    def test_line_offset_exact(self) -> None:
        """Test straight segments are offset exactly to the left."""
        pieces, residual = offset_segment(Segment.line(Point(0, 0), Point(100, 0)), 5.0)
        assert residual is None
        assert len(pieces) == 1
        assert pieces[0].p0 == Point(0, 5)
        assert pieces[0].p3 == Point(100, 5)

    def test_negative_distance_offsets_right(self) -> None:
        """Test negative distances offset to the right of travel."""
        pieces, _ = offset_segment(Segment.line(Point(0, 0), Point(100, 0)), -5.0)
        assert pieces[0].p0 == Point(0, -5)

    def test_curve_within_tolerance(self) -> None:
        """Test curved offsets stay within tolerance of the true offset."""
        arc = circle(100).segments[0]
        pieces, residual = offset_segment(arc, -10.0, tolerance=0.05)
        assert residual is None
        for piece in pieces:
            for i in range(9):
                radius = piece.point_at(i / 8).length()
                assert radius == pytest.approx(110.0, abs=0.15)

    def test_depth_cap_reports_residual(self) -> None:
        """Test hitting the recursion cap returns the residual error."""
        seg = Segment(Point(0, 0), Point(0, 100), Point(100, -100), Point(100, 0))
        pieces, residual = offset_segment(seg, 30.0, tolerance=1e-6, max_depth=1)
        assert residual is not None
        assert residual > 1e-6
        assert len(pieces) == 2


class TestTrimInnerJoin:
    """Tests for cutting overlapping offset pieces at their crossing."""

    def test_crossing_lines(self) -> None:
        """Test crossing pieces are cut back to the intersection."""
        prev = [Segment.line(Point(0, 5), Point(100, 5))]
        nxt = [Segment.line(Point(95, 0), Point(95, 100))]
        assert trim_inner_join(prev, nxt)
        assert prev[-1].p3.is_close(Point(95, 5), 1e-6)
        assert nxt[0].p0.is_close(Point(95, 5), 1e-6)
        assert prev[0].p0 == Point(0, 5)
        assert nxt[-1].p3 == Point(95, 100)

    def test_disjoint_pieces(self) -> None:
        """Test pieces that never cross are left alone."""
        prev = [Segment.line(Point(0, 5), Point(10, 5))]
        nxt = [Segment.line(Point(95, 0), Point(95, 100))]
        assert not trim_inner_join(prev, nxt)
        assert prev[0].p3 == Point(10, 5)

    def test_searches_past_last_piece(self) -> None:
        """Test the crossing may lie on an earlier piece of the incoming rail."""
        prev = [
            Segment.line(Point(0, 5), Point(96, 5)),
            Segment.line(Point(96, 5), Point(100, 5)),
        ]
        nxt = [Segment.line(Point(95, 0), Point(95, 100))]
        assert trim_inner_join(prev, nxt)
        assert len(prev) == 1
        assert prev[0].p3.is_close(Point(95, 5), 1e-6)


class TestNoodleStroker:
    """Tests for NoodleStroker."""

    def test_invalid_width(self) -> None:
        """Test non-positive widths are rejected."""
        with pytest.raises(InvalidParameterError, match="width"):
            NoodleStroker(NoodleConfig(width=0))
        with pytest.raises(InvalidParameterError, match="width"):
            NoodleStroker(NoodleConfig(width=-3))

    def test_invalid_miter_limit(self) -> None:
        """Test miter limits below 1 are rejected."""
        with pytest.raises(InvalidParameterError, match="miter_limit"):
            NoodleStroker(NoodleConfig(width=10, miter_limit=0.5))

    def test_degenerate_contour(self) -> None:
        """Test zero-length contours raise DegenerateInputError."""
        p = Point(10, 10)
        contour = Contour.from_segments([Segment(p, p, p, p)], closed=False)
        with pytest.raises(DegenerateInputError):
            NoodleStroker(NoodleConfig(width=10)).stroke(contour)

    def test_butt_line(self, line: Contour) -> None:
        """Test a butt-capped line becomes a counter-clockwise rectangle."""
        result = stroke(line, NoodleConfig(width=10, cap=CapStyle.BUTT))
        assert len(result.contours) == 1
        outline = result.contours[0]
        assert outline.closed
        assert outline.bounding_box() == pytest.approx((0, -5, 100, 5))
        assert outline.signed_area() == pytest.approx(1000.0)
        assert outline.direction() == WindingDirection.COUNTER_CLOCKWISE
        corners = {p.to_tuple() for p in outline.points()}
        assert {(0, 5), (100, 5), (100, -5), (0, -5)} <= corners

    def test_square_caps_extend_by_half_width(self, line: Contour) -> None:
        """Test square caps extend the outline past both endpoints."""
        outline = stroke(line, NoodleConfig(width=10, cap=CapStyle.SQUARE)).contours[0]
        assert outline.bounding_box() == pytest.approx((-5, -5, 105, 5))
        assert outline.signed_area() == pytest.approx(1100.0)

    def test_round_caps(self, line: Contour) -> None:
        """Test round caps add a half disc at each end."""
        outline = stroke(line, NoodleConfig(width=10, cap=CapStyle.ROUND)).contours[0]
        assert outline.bounding_box() == pytest.approx((-5, -5, 105, 5), abs=1e-6)
        assert outline.signed_area() == pytest.approx(1000.0 + math.pi * 25, rel=1e-3)

    def test_mixed_caps(self, line: Contour) -> None:
        """Test start and end caps can differ."""
        config = NoodleConfig(width=10, cap_start=CapStyle.SQUARE, cap_end=CapStyle.BUTT)
        outline = stroke(line, config).contours[0]
        assert outline.bounding_box() == pytest.approx((-5, -5, 100, 5))

    def test_clockwise_winding_option(self, line: Contour) -> None:
        """Test the outline follows the configured winding."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, winding=WindingDirection.CLOCKWISE)
        outline = stroke(line, config).contours[0]
        assert outline.direction() == WindingDirection.CLOCKWISE

    def test_miter_join(self, corner: Contour) -> None:
        """Test a miter join reaches the corner of the offset lines."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, join=JoinStyle.MITER)
        outline = stroke(corner, config).contours[0]
        assert outline.bounding_box() == pytest.approx((0, -5, 105, 100))
        assert outline.signed_area() == pytest.approx(2000.0)
        assert any(p.is_close(Point(105, -5), 1e-6) for p in outline.points())

    def test_miter_limit_falls_back_to_bevel(self, corner: Contour) -> None:
        """Test exceeding the miter limit produces a bevel."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, join=JoinStyle.MITER, miter_limit=1.2)
        outline = stroke(corner, config).contours[0]
        assert outline.signed_area() == pytest.approx(1987.5)
        assert not any(p.is_close(Point(105, -5), 1e-6) for p in outline.points())

    def test_bevel_join(self, corner: Contour) -> None:
        """Test bevel joins cut the outer corner."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, join=JoinStyle.BEVEL)
        outline = stroke(corner, config).contours[0]
        assert outline.signed_area() == pytest.approx(1987.5)

    def test_round_join(self, corner: Contour) -> None:
        """Test round joins add a quarter disc at the outer corner."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, join=JoinStyle.ROUND)
        outline = stroke(corner, config).contours[0]
        assert outline.signed_area() == pytest.approx(1975.0 + math.pi * 25 / 4, rel=1e-3)

    def test_circle_is_round(self, line: Contour, corner: Contour) -> None:
        """Test circle caps and joins draw the same outline as round ones."""
        for contour in (line, corner):
            circle_outline = stroke(
                contour, NoodleConfig(width=10, cap="circle", join="circle")
            ).contours[0]
            round_outline = stroke(
                contour, NoodleConfig(width=10, cap=CapStyle.ROUND, join=JoinStyle.ROUND)
            ).contours[0]
            assert circle_outline.to_dict() == round_outline.to_dict()

    def test_inner_corner_trimmed(self, corner: Contour) -> None:
        """Test the inside of a corner is cut at the crossing of the rails."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, join=JoinStyle.MITER)
        outline = stroke(corner, config).contours[0]
        points = outline.points()
        assert any(p.is_close(Point(95, 5), 1e-6) for p in points)
        assert not any(p.is_close(Point(100, 0), 1e-6) for p in points)

    def test_closed_square(self, square: Contour) -> None:
        """Test a closed contour becomes an outer and an inner rail."""
        result = stroke(square, NoodleConfig(width=10, join=JoinStyle.ROUND))
        assert len(result.contours) == 2
        outer, inner = result.contours
        assert outer.direction() == WindingDirection.COUNTER_CLOCKWISE
        assert inner.direction() == WindingDirection.CLOCKWISE
        assert outer.bounding_box() == pytest.approx((-5, -5, 105, 105), abs=1e-6)
        assert inner.bounding_box() == pytest.approx((5, 5, 95, 95), abs=1e-6)

    def test_closed_square_rails_at_half_width(self, square: Contour) -> None:
        """Test every rail point lies half the width from the source."""
        result = stroke(square, NoodleConfig(width=10, join=JoinStyle.ROUND))
        corners = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
        edges = list(zip(corners, corners[1:] + corners[:1], strict=True))
        for contour in result.contours:
            for point in sample(contour):
                distance = min(distance_to_edge(point, a, b) for a, b in edges)
                assert distance == pytest.approx(5.0, abs=0.05)

    def test_closed_square_miter_area(self, square: Contour) -> None:
        """Test mitered rails of a square enclose a ring of the right area."""
        outer, inner = stroke(square, NoodleConfig(width=10, join=JoinStyle.MITER)).contours
        assert outer.signed_area() == pytest.approx(110.0 * 110.0)
        assert inner.signed_area() == pytest.approx(-90.0 * 90.0)

    def test_circle_rails(self) -> None:
        """Test a stroked circle has rails at r - w/2 and r + w/2."""
        result = stroke(circle(100), NoodleConfig(width=10))
        outer, inner = result.contours
        for point in sample(outer):
            assert point.length() == pytest.approx(105.0, abs=0.2)
        for point in sample(inner):
            assert point.length() == pytest.approx(95.0, abs=0.2)
        assert result.warnings == []

    def test_angled_offset(self, line: Contour) -> None:
        """Test the offset direction can be rotated away from the normal."""
        config = NoodleConfig(width=10, cap=CapStyle.BUTT, angle=30.0)
        outline = stroke(line, config).contours[0]
        min_x, min_y, max_x, max_y = outline.bounding_box()
        assert min_x == pytest.approx(-2.5)
        assert max_x == pytest.approx(102.5)
        assert max_y == pytest.approx(5 * math.cos(math.radians(30)))
        assert min_y == pytest.approx(-5 * math.cos(math.radians(30)))

    def test_depth_cap_warning(self) -> None:
        """Test precision warnings are collected rather than raised."""
        seg = Segment(Point(0, 0), Point(0, 300), Point(300, -300), Point(300, 0))
        contour = Contour.from_segments([seg], closed=False)
        geometry = GeometryConfig(offset_tolerance=1e-4, offset_max_depth=1)
        result = NoodleStroker(NoodleConfig(width=40), geometry).stroke(contour)
        assert result.warnings
        assert len(result.contours) == 1

    def test_deterministic(self, corner: Contour) -> None:
        """Test stroking the same input twice gives identical output."""
        config = NoodleConfig(width=12, join=JoinStyle.ROUND)
        first = stroke(corner, config).contours
        second = stroke(corner, config).contours
        assert first == second
