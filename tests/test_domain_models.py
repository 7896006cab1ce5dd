"""Tests for domain models to verify they work correctly."""

import math

import pytest
from fontTools.pens.recordingPen import RecordingPen

from glyphfx.domain import (
    Component,
    Contour,
    ContourKind,
    EffectResult,
    Glyph,
    GlyphMetadata,
    Placement,
    Point,
    Segment,
    WindingDirection,
)
from glyphfx.exceptions import ContourError


def square(size: float = 100.0) -> Contour:
    """Counter-clockwise closed square with its corner at the origin."""
    return Contour.polyline([(0, 0), (size, 0), (size, size), (0, size)], closed=True)


class TestPoint:
    """Tests for Point class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point(100.0, 200.0)
        assert p.x == 100.0
        assert p.y == 200.0

    def test_vector_arithmetic(self) -> None:
        """Test addition, subtraction, scaling and negation."""
        a = Point(1.0, 2.0)
        b = Point(3.0, 5.0)
        assert a + b == Point(4.0, 7.0)
        assert b - a == Point(2.0, 3.0)
        assert a * 2 == Point(2.0, 4.0)
        assert 2 * a == Point(2.0, 4.0)
        assert -a == Point(-1.0, -2.0)

    def test_dot_and_cross(self) -> None:
        """Test dot and cross products of unit axes."""
        x = Point(1.0, 0.0)
        y = Point(0.0, 1.0)
        assert x.dot(y) == 0.0
        assert x.cross(y) == 1.0
        assert y.cross(x) == -1.0

    def test_perpendicular_is_left_normal(self) -> None:
        """Test perpendicular rotates counter-clockwise."""
        assert Point(1.0, 0.0).perpendicular() == Point(0.0, 1.0)

    def test_rotated(self) -> None:
        """Test rotation by 90 degrees."""
        r = Point(1.0, 0.0).rotated(math.pi / 2)
        assert r.is_close(Point(0.0, 1.0), 1e-12)

    def test_normalized_zero_vector(self) -> None:
        """Test normalizing the zero vector returns zero."""
        assert Point(0.0, 0.0).normalized() == Point(0.0, 0.0)

    def test_point_serialization(self) -> None:
        """Test point serialization and deserialization."""
        p1 = Point(100.0, 200.0)
        p2 = Point.from_dict(p1.to_dict())
        assert p2 == p1

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point(100.0, 200.0)
        with pytest.raises(AttributeError):
            p.x = 300.0  # type: ignore


class TestSegment:
    """Tests for Segment class."""

    def test_line_is_line(self) -> None:
        """Test straight segments are detected as lines."""
        seg = Segment.line(Point(0, 0), Point(90, 0))
        assert seg.is_line()
        assert seg.p1 == Point(30, 0)

    def test_curve_is_not_line(self) -> None:
        """Test a bulging cubic is not a line."""
        seg = Segment(Point(0, 0), Point(0, 50), Point(100, 50), Point(100, 0))
        assert not seg.is_line()

    def test_point_at_endpoints(self) -> None:
        """Test evaluation at t=0 and t=1 returns the anchors."""
        seg = Segment(Point(0, 0), Point(0, 50), Point(100, 50), Point(100, 0))
        assert seg.point_at(0.0) == Point(0, 0)
        assert seg.point_at(1.0) == Point(100, 0)

    def test_split_continuity(self) -> None:
        """Test split halves meet at the curve point."""
        seg = Segment(Point(0, 0), Point(0, 50), Point(100, 50), Point(100, 0))
        left, right = seg.split(0.3)
        assert left.p3 == right.p0
        assert left.p3.is_close(seg.point_at(0.3), 1e-9)

    def test_degenerate(self) -> None:
        """Test all-coincident control points form a degenerate segment."""
        p = Point(5, 5)
        assert Segment(p, p, p, p).is_degenerate()

    def test_bounds(self) -> None:
        """Test tight bounds include the curve extremum, not the handles."""
        seg = Segment(Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0))
        min_x, min_y, max_x, max_y = seg.bounds()
        assert (min_x, min_y, max_x) == (0, 0, 100)
        assert max_y == pytest.approx(75.0)


class TestContour:
    """Tests for Contour class."""

    def test_empty_contour_rejected(self) -> None:
        """Test a contour needs at least one segment."""
        with pytest.raises(ContourError):
            Contour(segments=())

    def test_polyline_closes(self) -> None:
        """Test closed polylines get a closing segment."""
        contour = square()
        assert len(contour) == 4
        assert contour.closed
        assert contour.end == contour.start

    def test_open_polyline(self) -> None:
        """Test open polylines keep their endpoints apart."""
        contour = Contour.polyline([(0, 0), (100, 0), (100, 100)])
        assert contour.kind is ContourKind.OPEN
        assert contour.start == Point(0, 0)
        assert contour.end == Point(100, 100)

    def test_signed_area_counterclockwise(self) -> None:
        """Test signed area for counter-clockwise square."""
        area = square().signed_area()
        assert area > 0
        assert abs(area - 10000.0) < 0.1
        assert square().direction() == WindingDirection.COUNTER_CLOCKWISE

    def test_signed_area_clockwise(self) -> None:
        """Test signed area for clockwise square."""
        contour = square().reversed()
        assert abs(contour.signed_area() + 10000.0) < 0.1
        assert contour.direction() == WindingDirection.CLOCKWISE

    def test_bounding_box(self) -> None:
        """Test bounding box calculation."""
        assert square().bounding_box() == (0, 0, 100, 100)

    def test_without_degenerate_segments(self) -> None:
        """Test zero-length segments are dropped."""
        p = Point(50, 0)
        contour = Contour.from_segments(
            [
                Segment.line(Point(0, 0), p),
                Segment(p, p, p, p),
                Segment.line(p, Point(100, 0)),
            ],
            closed=False,
        )
        cleaned = contour.without_degenerate_segments()
        assert cleaned is not None
        assert len(cleaned) == 2

    def test_all_degenerate_returns_none(self) -> None:
        """Test a contour of only degenerate segments cleans to None."""
        p = Point(1, 1)
        contour = Contour.from_segments([Segment(p, p, p, p)], closed=False)
        assert contour.without_degenerate_segments() is None

    def test_draw_closed_omits_closing_line(self) -> None:
        """Test drawing a closed polygon leaves the closing line implied."""
        pen = RecordingPen()
        square().draw(pen)
        ops = [op for op, _ in pen.value]
        assert ops == ["moveTo", "lineTo", "lineTo", "lineTo", "closePath"]

    def test_draw_open_curve(self) -> None:
        """Test drawing an open curved contour."""
        seg = Segment(Point(0, 0), Point(0, 50), Point(100, 50), Point(100, 0))
        pen = RecordingPen()
        Contour.from_segments([seg], closed=False).draw(pen)
        assert [op for op, _ in pen.value] == ["moveTo", "curveTo", "endPath"]

    def test_contour_serialization(self) -> None:
        """Test contour serialization round trip keeps kind and geometry."""
        contour = Contour.polyline([(0, 0), (10, 5), (20, 0)])
        restored = Contour.from_dict(contour.to_dict())
        assert restored == contour


class TestGlyph:
    """Tests for Glyph class."""

    def test_empty_glyph(self) -> None:
        """Test glyph with no contours."""
        glyph = Glyph(metadata=GlyphMetadata(name="space", width=250))
        assert glyph.is_empty()
        assert not glyph.has_open_contours()

    def test_open_contour_indices(self) -> None:
        """Test open contours are found in source order."""
        glyph = Glyph(
            metadata=GlyphMetadata(name="a"),
            contours=[
                square(),
                Contour.polyline([(0, 0), (10, 0)]),
                Contour.polyline([(0, 20), (10, 20)]),
            ],
        )
        assert glyph.has_open_contours()
        assert glyph.open_contour_indices() == [1, 2]

    def test_glyph_serialization(self) -> None:
        """Test glyph serialization round trip."""
        metadata = GlyphMetadata(
            name="A",
            unicodes=[65],
            width=600,
            extras={"anchors": [{"name": "top", "x": 300, "y": 700}]},
        )
        glyph = Glyph(
            metadata=metadata,
            contours=[square()],
            components=[Component("acute", (1, 0, 0, 1, 100, 0))],
        )
        restored = Glyph.from_dict(glyph.to_dict())
        assert restored.name == "A"
        assert restored.metadata.unicodes == [65]
        assert restored.metadata.extras == metadata.extras
        assert restored.contours == glyph.contours
        assert restored.components == glyph.components

    def test_metadata_extras_copied(self) -> None:
        """Test serialized metadata does not share extras with the original."""
        metadata = GlyphMetadata(name="A", extras={"lib": {"key": [1]}})
        data = metadata.to_dict()
        data["extras"]["lib"]["key"].append(2)
        assert metadata.extras["lib"]["key"] == [1]


class TestEffectTypes:
    """Tests for Placement and EffectResult."""

    def test_identity_placement(self) -> None:
        """Test a placement at the origin with no rotation is the identity."""
        transform = Placement(position=Point(0, 0), angle=0.0).transform()
        assert transform.transformPoint((3, 4)) == pytest.approx((3, 4))

    def test_placement_transform_order(self) -> None:
        """Test anchor, scale, rotation and translation compose in order."""
        placement = Placement(position=Point(100, 50), angle=math.pi / 2, scale_x=2.0)
        transform = placement.transform(anchor=Point(10, 0))
        # (20, 0) -> anchor-relative (10, 0) -> scaled (20, 0) -> rotated (0, 20)
        assert transform.transformPoint((20, 0)) == pytest.approx((100, 70))

    def test_effect_result_len(self) -> None:
        """Test EffectResult length counts its contours."""
        result = EffectResult(contours=[square(), square(50)])
        assert len(result) == 2
        assert result.warnings == []
        assert result.placements == []
