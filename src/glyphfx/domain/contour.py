"""Core geometric types for contour representation.

This module defines the fundamental geometric types used throughout glyphfx:
- Point: A 2D point, also used as a free vector
- Segment: A cubic Bezier segment (lines are stored as cubics)
- Contour: An open or closed sequence of segments
- ContourKind: Tag distinguishing open and closed contours
- WindingDirection: Enum for contour winding direction
"""

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from fontTools.misc.bezierTools import calcCubicBounds
from fontTools.pens.areaPen import AreaPen

from glyphfx.exceptions import ContourError

# Distance below which two points are considered coincident (font units)
POINT_EPSILON = 1e-9

# Control points further than this from the chord make a segment a curve
LINE_TOLERANCE = 1e-6


class WindingDirection(Enum):
    """Contour winding direction.

    PostScript/UFO convention: outer contours wind counter-clockwise,
    holes wind clockwise.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


class ContourKind(Enum):
    """Whether a contour is an open path or a closed loop.

    The two kinds differ in parameter arithmetic (clamping vs. wraparound)
    and in stroke construction (caps vs. a second rail), so algorithms branch
    on this tag explicitly.
    """

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable. Doubles as a free vector for the curve
    arithmetic in ``glyphfx.core``.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
    """

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Point":
        return Point(self.x * s, self.y * s)

    def __rmul__(self, s: float) -> "Point":
        return self.__mul__(s)

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def normalized(self) -> "Point":
        """Unit vector in the same direction, or the zero vector."""
        ln = self.length()
        if ln < POINT_EPSILON:
            return Point(0.0, 0.0)
        return Point(self.x / ln, self.y / ln)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Point") -> float:
        return self.x * other.y - self.y * other.x

    def perpendicular(self) -> "Point":
        """Rotate 90 degrees counter-clockwise: (x, y) -> (-y, x)."""
        return Point(-self.y, self.x)

    def rotated(self, angle: float) -> "Point":
        """Rotate counter-clockwise by ``angle`` radians."""
        c = math.cos(angle)
        s = math.sin(angle)
        return Point(self.x * c - self.y * s, self.x * s + self.y * c)

    def lerp(self, other: "Point", t: float) -> "Point":
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def angle(self) -> float:
        """Direction angle in radians."""
        return math.atan2(self.y, self.x)

    def is_close(self, other: "Point", tolerance: float = POINT_EPSILON) -> bool:
        return self.distance_to(other) <= tolerance

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class Segment:
    """A cubic Bezier segment.

    Straight lines are represented with their handles at 1/3 and 2/3 of the
    chord (see ``Segment.line``), which keeps the parametrization uniform and
    the derivative non-zero at the ends.

    Attributes:
        p0: Start anchor
        p1: First control point
        p2: Second control point
        p3: End anchor
    """

    p0: Point
    p1: Point
    p2: Point
    p3: Point

    @classmethod
    def line(cls, start: Point, end: Point) -> "Segment":
        """Create a straight segment from ``start`` to ``end``."""
        return cls(start, start.lerp(end, 1.0 / 3.0), start.lerp(end, 2.0 / 3.0), end)

    @property
    def points(self) -> tuple[Point, Point, Point, Point]:
        return (self.p0, self.p1, self.p2, self.p3)

    def point_at(self, t: float) -> Point:
        """Evaluate the curve at local parameter ``t`` in [0, 1]."""
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3.0 * mt * mt * t
        c = 3.0 * mt * t * t
        d = t * t * t
        return Point(
            a * self.p0.x + b * self.p1.x + c * self.p2.x + d * self.p3.x,
            a * self.p0.y + b * self.p1.y + c * self.p2.y + d * self.p3.y,
        )

    def derivative_at(self, t: float) -> Point:
        """First derivative B'(t)."""
        mt = 1.0 - t
        a = 3.0 * mt * mt
        b = 6.0 * mt * t
        c = 3.0 * t * t
        return Point(
            a * (self.p1.x - self.p0.x) + b * (self.p2.x - self.p1.x) + c * (self.p3.x - self.p2.x),
            a * (self.p1.y - self.p0.y) + b * (self.p2.y - self.p1.y) + c * (self.p3.y - self.p2.y),
        )

    def second_derivative_at(self, t: float) -> Point:
        """Second derivative B''(t)."""
        mt = 1.0 - t
        return Point(
            6.0 * mt * (self.p2.x - 2.0 * self.p1.x + self.p0.x)
            + 6.0 * t * (self.p3.x - 2.0 * self.p2.x + self.p1.x),
            6.0 * mt * (self.p2.y - 2.0 * self.p1.y + self.p0.y)
            + 6.0 * t * (self.p3.y - 2.0 * self.p2.y + self.p1.y),
        )

    def split(self, t: float) -> tuple["Segment", "Segment"]:
        """Split at ``t`` using De Casteljau's algorithm."""
        q0 = self.p0.lerp(self.p1, t)
        q1 = self.p1.lerp(self.p2, t)
        q2 = self.p2.lerp(self.p3, t)
        r0 = q0.lerp(q1, t)
        r1 = q1.lerp(q2, t)
        s = r0.lerp(r1, t)
        return Segment(self.p0, q0, r0, s), Segment(s, r1, q2, self.p3)

    def reversed(self) -> "Segment":
        return Segment(self.p3, self.p2, self.p1, self.p0)

    def chord_length(self) -> float:
        return self.p0.distance_to(self.p3)

    def polygon_length(self) -> float:
        """Length of the control polygon p0-p1-p2-p3."""
        return (
            self.p0.distance_to(self.p1)
            + self.p1.distance_to(self.p2)
            + self.p2.distance_to(self.p3)
        )

    def is_degenerate(self, tolerance: float = POINT_EPSILON) -> bool:
        """True when all four control points coincide."""
        return self.polygon_length() <= tolerance

    def is_line(self, tolerance: float = LINE_TOLERANCE) -> bool:
        """True when both handles lie on the chord, between the anchors."""
        chord = self.p3 - self.p0
        length = chord.length()
        if length < POINT_EPSILON:
            return self.is_degenerate(tolerance)
        direction = chord * (1.0 / length)
        for handle in (self.p1, self.p2):
            offset = handle - self.p0
            if abs(direction.cross(offset)) > tolerance:
                return False
            along = direction.dot(offset)
            if along < -tolerance or along > length + tolerance:
                return False
        return True

    def bounds(self) -> tuple[float, float, float, float]:
        """Tight bounding box (min_x, min_y, max_x, max_y)."""
        return calcCubicBounds(
            self.p0.to_tuple(), self.p1.to_tuple(), self.p2.to_tuple(), self.p3.to_tuple()
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"points": [p.to_tuple() for p in self.points]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Segment":
        """Deserialize from dictionary."""
        p0, p1, p2, p3 = (Point(x, y) for x, y in data["points"])
        return cls(p0, p1, p2, p3)


@dataclass(frozen=True)
class Contour:
    """An open or closed sequence of cubic segments.

    Contours are immutable: effects build new contours rather than editing
    existing ones, so untouched contours can be shared between glyph values.

    Attributes:
        segments: Segments in drawing order; segment i+1 starts where i ends
        kind: OPEN or CLOSED
    """

    segments: tuple[Segment, ...]
    kind: ContourKind = ContourKind.CLOSED

    def __post_init__(self) -> None:
        if not isinstance(self.segments, tuple):
            object.__setattr__(self, "segments", tuple(self.segments))
        if not self.segments:
            raise ContourError("Contour must have at least one segment")

    @classmethod
    def from_segments(cls, segments: Iterable[Segment], closed: bool) -> "Contour":
        kind = ContourKind.CLOSED if closed else ContourKind.OPEN
        return cls(segments=tuple(segments), kind=kind)

    @classmethod
    def polyline(cls, points: Iterable[Point | tuple[float, float]], closed: bool = False) -> "Contour":
        """Build a contour of straight segments through ``points``.

        For closed polylines a closing segment back to the first point is added
        unless the last point already equals the first.
        """
        pts = [p if isinstance(p, Point) else Point(*p) for p in points]
        if len(pts) < 2:
            raise ContourError("Polyline needs at least two points")
        if closed and not pts[-1].is_close(pts[0]):
            pts.append(pts[0])
        segments = [Segment.line(a, b) for a, b in zip(pts, pts[1:], strict=False)]
        return cls.from_segments(segments, closed=closed)

    @property
    def closed(self) -> bool:
        return self.kind is ContourKind.CLOSED

    @property
    def start(self) -> Point:
        return self.segments[0].p0

    @property
    def end(self) -> Point:
        return self.segments[-1].p3

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def points(self) -> list[Point]:
        """All control points in drawing order, without duplicated anchors."""
        result = [self.start]
        for seg in self.segments:
            result.extend((seg.p1, seg.p2, seg.p3))
        return result

    def reversed(self) -> "Contour":
        """Same path traversed backwards."""
        return Contour(
            segments=tuple(seg.reversed() for seg in reversed(self.segments)),
            kind=self.kind,
        )

    def without_degenerate_segments(self, tolerance: float = POINT_EPSILON) -> "Contour | None":
        """Drop zero-length segments, keeping the chain connected.

        Returns:
            The cleaned contour, or None if every segment is degenerate
        """
        kept = [seg for seg in self.segments if not seg.is_degenerate(tolerance)]
        if not kept:
            return None
        if len(kept) == len(self.segments):
            return self
        # Re-stitch anchors that drifted when a tiny segment was dropped
        stitched = [kept[0]]
        for seg in kept[1:]:
            prev = stitched[-1]
            if not prev.p3.is_close(seg.p0):
                seg = Segment(prev.p3, seg.p1, seg.p2, seg.p3)
            stitched.append(seg)
        if self.closed and not stitched[-1].p3.is_close(stitched[0].p0):
            last = stitched[-1]
            stitched[-1] = Segment(last.p0, last.p1, last.p2, stitched[0].p0)
        return Contour(segments=tuple(stitched), kind=self.kind)

    def draw(self, pen: Any) -> None:
        """Draw the contour into a fontTools segment pen.

        Straight segments are emitted as ``lineTo`` so that round trips
        through a font source keep line segments as lines.
        """
        pen.moveTo(self.start.to_tuple())
        last_index = len(self.segments) - 1
        for i, seg in enumerate(self.segments):
            if (
                self.closed
                and i == last_index
                and seg.is_line()
                and seg.p3.is_close(self.start)
            ):
                # Closing line is implied by closePath
                break
            if seg.is_line():
                pen.lineTo(seg.p3.to_tuple())
            else:
                pen.curveTo(seg.p1.to_tuple(), seg.p2.to_tuple(), seg.p3.to_tuple())
        if self.closed:
            pen.closePath()
        else:
            pen.endPath()

    def signed_area(self) -> float:
        """Signed area enclosed by the contour (closing it if open).

        Positive area: counter-clockwise winding
        Negative area: clockwise winding
        """
        pen = AreaPen()
        closed = Contour(segments=self.segments, kind=ContourKind.CLOSED)
        closed.draw(pen)
        return pen.value

    def direction(self) -> WindingDirection:
        if self.signed_area() >= 0:
            return WindingDirection.COUNTER_CLOCKWISE
        return WindingDirection.CLOCKWISE

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Tight bounding box of the contour.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        boxes = [seg.bounds() for seg in self.segments]
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the contour
        """
        return {
            "segments": [seg.to_dict() for seg in self.segments],
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contour":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a contour

        Returns:
            Contour instance
        """
        return cls(
            segments=tuple(Segment.from_dict(s) for s in data["segments"]),
            kind=ContourKind(data["kind"]),
        )
