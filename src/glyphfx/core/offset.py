"""Offset engine: constant-width stroking of contours (the noodle effect).

Components:
1. Segment offset (curvature-scaled Hermite refit with adaptive subdivision)
2. Joins between consecutive segments (miter/round/bevel outside, trimmed inside)
3. Caps at open endpoints (butt/round/square)
4. Outline assembly and orientation

Open contours become one closed outline: left rail forward, end cap, right
rail backward, start cap. Closed contours become two closed rails.
Self-intersections of the rails (tight curves, width beyond the local radius
of curvature) are not removed.
"""

import logging
import math
from collections.abc import Iterable

from glyphfx.config.settings import CapStyle, GeometryConfig, JoinStyle, NoodleConfig
from glyphfx.core.arclength import ArcLengthTable
from glyphfx.core.bezier import (
    arc_to_segments,
    end_tangent,
    safe_segment_tangent,
    segment_curvature,
    start_tangent,
)
from glyphfx.domain import Contour, ContourKind, EffectResult, Point, Segment, WindingDirection
from glyphfx.exceptions import (
    DegenerateInputError,
    InvalidParameterError,
    SubdivisionDepthExceededError,
)

logger = logging.getLogger(__name__)

# Contours shorter than this are rejected as degenerate (font units)
MIN_CONTOUR_LENGTH = 1e-6

# Gaps smaller than this between pieces are snapped rather than bridged
JOIN_EPSILON = 1e-7

# Floor for the offset speed factor (1 - d*k) where the offset folds over
_MIN_SPEED_FACTOR = 0.05

# Interior parameters at which offset fits are checked
_FIT_SAMPLES = (0.25, 0.5, 0.75)

# Offset pieces searched on each side of an inside join
_TRIM_SEARCH = 8
_NEWTON_ITERATIONS = 24
_NEWTON_TOLERANCE = 1e-7


class _PathBuilder:
    """Accumulates connected segments, bridging small gaps with lines."""

    def __init__(self, start: Point) -> None:
        self.start = start
        self.current = start
        self.segments: list[Segment] = []

    def line_to(self, point: Point) -> None:
        if point.is_close(self.current, JOIN_EPSILON):
            return
        self.segments.append(Segment.line(self.current, point))
        self.current = point

    def add(self, segment: Segment) -> None:
        if segment.p0.is_close(self.current, JOIN_EPSILON):
            segment = Segment(self.current, segment.p1, segment.p2, segment.p3)
        else:
            self.line_to(segment.p0)
        self.segments.append(segment)
        self.current = segment.p3

    def extend(self, segments: Iterable[Segment]) -> None:
        for segment in segments:
            self.add(segment)

    def close(self) -> Contour:
        """Connect back to the start and return a closed contour."""
        self.line_to(self.start)
        last = self.segments[-1]
        if last.p3 != self.start:
            self.segments[-1] = Segment(last.p0, last.p1, last.p2, self.start)
        return Contour(segments=tuple(self.segments), kind=ContourKind.CLOSED)


def _offset_vector(direction: Point, distance: float, rotation: float) -> Point:
    """Offset displacement for travel ``direction`` (left normal, rotated)."""
    normal = direction.perpendicular()
    if rotation:
        normal = normal.rotated(rotation)
    return normal * distance


def _offset_handle(derivative: Point, direction: Point, kappa: float, distance: float, rotation: float) -> Point:
    """Handle vector of the offset curve: O'(t) / 3.

    O'(t) = |B'(t)| (T - d * k * R(T)), with R the offset rotation.
    """
    speed = derivative.length()
    rotated = direction.rotated(rotation) if rotation else direction
    handle = (direction - rotated * (distance * kappa)) * (speed / 3.0)
    floor = _MIN_SPEED_FACTOR * speed / 3.0
    if handle.dot(direction) < floor:
        handle = direction * floor
    return handle


def _hermite_offset(segment: Segment, distance: float, rotation: float) -> Segment:
    """Cubic matching the offset curve's end positions and derivatives."""
    t0 = start_tangent(segment)
    t3 = end_tangent(segment)
    o0 = segment.p0 + _offset_vector(t0, distance, rotation)
    o3 = segment.p3 + _offset_vector(t3, distance, rotation)
    h0 = _offset_handle(
        segment.derivative_at(0.0), t0, segment_curvature(segment, 0.0), distance, rotation
    )
    h3 = _offset_handle(
        segment.derivative_at(1.0), t3, segment_curvature(segment, 1.0), distance, rotation
    )
    return Segment(o0, o0 + h0, o3 - h3, o3)


def _fit_error(segment: Segment, candidate: Segment, distance: float, rotation: float) -> float:
    """Largest distance between the candidate and true offset points."""
    error = 0.0
    for t in _FIT_SAMPLES:
        direction = safe_segment_tangent(segment, t)
        true_point = segment.point_at(t) + _offset_vector(direction, distance, rotation)
        error = max(error, true_point.distance_to(candidate.point_at(t)))
    return error


def offset_segment(
    segment: Segment,
    distance: float,
    tolerance: float = 0.1,
    max_depth: int = 10,
    rotation: float = 0.0,
) -> tuple[list[Segment], float | None]:
    """Offset one cubic segment by a signed distance.

    Positive distances offset to the left of the direction of travel.
    Straight segments are offset exactly; curves are refit piecewise until
    every piece is within ``tolerance`` of the true offset.

    Args:
        segment: Source segment
        distance: Signed offset distance
        tolerance: Maximum fit error
        max_depth: Recursion cap
        rotation: Rotation of the offset direction from the normal (radians)

    Returns:
        Tuple of (offset pieces, worst residual error if the depth cap was
        hit, else None)
    """
    pieces: list[Segment] = []
    capped: list[float] = []
    _offset_recursive(segment, distance, tolerance, 0, max_depth, rotation, pieces, capped)
    return pieces, (max(capped) if capped else None)


def _offset_recursive(
    segment: Segment,
    distance: float,
    tolerance: float,
    depth: int,
    max_depth: int,
    rotation: float,
    out: list[Segment],
    capped: list[float],
) -> None:
    if segment.is_line():
        shift = _offset_vector(start_tangent(segment), distance, rotation)
        out.append(
            Segment(segment.p0 + shift, segment.p1 + shift, segment.p2 + shift, segment.p3 + shift)
        )
        return

    candidate = _hermite_offset(segment, distance, rotation)
    error = _fit_error(segment, candidate, distance, rotation)
    if error <= tolerance:
        out.append(candidate)
        return
    if depth >= max_depth:
        capped.append(error)
        out.append(candidate)
        return

    left, right = segment.split(0.5)
    _offset_recursive(left, distance, tolerance, depth + 1, max_depth, rotation, out, capped)
    _offset_recursive(right, distance, tolerance, depth + 1, max_depth, rotation, out, capped)


def _intersect_segments(a: Segment, b: Segment) -> tuple[float, float, Point] | None:
    """Crossing of the end of ``a`` with the start of ``b`` (Newton's method).

    Returns:
        (u, v, point) with a(u) == b(v) == point, or None if the iteration
        diverges or lands outside both unit intervals
    """
    u, v = 1.0, 0.0
    for _ in range(_NEWTON_ITERATIONS):
        pa = a.point_at(u)
        f = pa - b.point_at(v)
        if f.length() < _NEWTON_TOLERANCE:
            if -1e-9 <= u <= 1.0 + 1e-9 and -1e-9 <= v <= 1.0 + 1e-9:
                return min(max(u, 0.0), 1.0), min(max(v, 0.0), 1.0), pa
            return None
        da = a.derivative_at(u)
        db = b.derivative_at(v)
        det = db.cross(da)
        if abs(det) < 1e-12:
            return None
        u = min(max(u + f.cross(db) / det, -1.0), 2.0)
        v = min(max(v + f.cross(da) / det, -1.0), 2.0)
    return None


def trim_inner_join(prev_piece: list[Segment], next_piece: list[Segment]) -> bool:
    """Cut two offset pieces back to the point where they cross.

    Both lists are modified in place: ``prev_piece`` ends and ``next_piece``
    starts at the crossing. Segments nearest the join are tried first.

    Returns:
        True if a crossing was found and both pieces were trimmed
    """
    if prev_piece is next_piece:
        return False

    last = len(prev_piece) - 1
    candidates = [
        (ia, ib)
        for ia in range(max(0, last + 1 - _TRIM_SEARCH), last + 1)
        for ib in range(min(_TRIM_SEARCH, len(next_piece)))
    ]
    candidates.sort(key=lambda pair: (last - pair[0]) + pair[1])

    for ia, ib in candidates:
        hit = _intersect_segments(prev_piece[ia], next_piece[ib])
        if hit is None:
            continue
        u, v, point = hit
        head = prev_piece[ia].split(u)[0] if u < 1.0 else prev_piece[ia]
        tail = next_piece[ib].split(v)[1] if v > 0.0 else next_piece[ib]
        prev_piece[ia] = Segment(head.p0, head.p1, head.p2, point)
        del prev_piece[ia + 1:]
        next_piece[ib] = Segment(point, tail.p1, tail.p2, tail.p3)
        del next_piece[:ib]
        if len(prev_piece) > 1 and prev_piece[-1].is_degenerate():
            prev_piece.pop()
        if len(next_piece) > 1 and next_piece[0].is_degenerate():
            next_piece.pop(0)
        return True
    return False


class NoodleStroker:
    """Turns contours into constant-width outlines.

    Example:
        stroker = NoodleStroker(NoodleConfig(width=20, cap=CapStyle.BUTT))
        result = stroker.stroke(contour)
        outline = result.contours[0]
    """

    def __init__(self, config: NoodleConfig, geometry: GeometryConfig | None = None) -> None:
        """Initialize the stroker and validate its parameters.

        Args:
            config: Stroke width, caps, join and miter limit
            geometry: Approximation tolerances (defaults if None)

        Raises:
            InvalidParameterError: If width is not positive or the miter
                limit is below 1
        """
        if not math.isfinite(config.width) or config.width <= 0:
            raise InvalidParameterError("width", f"must be > 0, got {config.width}")
        if not math.isfinite(config.miter_limit) or config.miter_limit < 1.0:
            raise InvalidParameterError(
                "miter_limit", f"must be >= 1, got {config.miter_limit}"
            )

        self.config = config
        self.geometry = geometry if geometry is not None else GeometryConfig()
        self.half_width = config.width / 2.0
        self.rotation = math.radians(config.angle)
        self.smooth_cos = math.cos(math.radians(self.geometry.smooth_angle))

    def stroke(self, contour: Contour) -> EffectResult:
        """Stroke a contour.

        Args:
            contour: Open or closed source contour

        Returns:
            EffectResult with one closed outline for an open contour, or two
            (outer then inner) for a closed contour

        Raises:
            DegenerateInputError: If the contour has (near) zero length
        """
        cleaned = contour.without_degenerate_segments()
        if cleaned is None:
            raise DegenerateInputError("Cannot stroke a zero-length contour")
        table = ArcLengthTable(
            cleaned, tolerance=self.geometry.tolerance, max_depth=self.geometry.max_depth
        )
        if table.length < MIN_CONTOUR_LENGTH:
            raise DegenerateInputError("Cannot stroke a zero-length contour")

        warnings: list[SubdivisionDepthExceededError] = list(table.warnings)
        segments = list(cleaned.segments)

        if cleaned.closed:
            left = self._rail(segments, 1.0, closed=True, warnings=warnings)
            right = self._rail(segments, -1.0, closed=True, warnings=warnings)
            contours = self._orient_rails(left.close(), right.close().reversed())
        else:
            contours = [self._outline_open(segments, warnings)]

        logger.debug(
            "Stroked contour: %d segments -> %d contours, %d warnings",
            len(segments), len(contours), len(warnings),
        )
        return EffectResult(contours=contours, warnings=warnings)

    def _offset_pieces(
        self,
        segment: Segment,
        distance: float,
        index: int,
        warnings: list[SubdivisionDepthExceededError],
    ) -> list[Segment]:
        pieces, residual = offset_segment(
            segment,
            distance,
            tolerance=self.geometry.offset_tolerance,
            max_depth=self.geometry.offset_max_depth,
            rotation=self.rotation,
        )
        if residual is not None:
            warning = SubdivisionDepthExceededError(
                f"offset of segment {index}", self.geometry.offset_max_depth, residual
            )
            logger.warning("%s", warning)
            warnings.append(warning)
        return pieces

    def _rail(
        self,
        segments: list[Segment],
        side: float,
        closed: bool,
        warnings: list[SubdivisionDepthExceededError],
    ) -> _PathBuilder:
        """Offset every segment to one side and join consecutive pieces."""
        distance = self.half_width * side
        pieces = [
            self._offset_pieces(segment, distance, i, warnings)
            for i, segment in enumerate(segments)
        ]

        count = len(pieces)
        connectors: list[list[Segment]] = [[] for _ in range(count)]
        for i in range(1, count):
            connectors[i] = self._join(pieces[i - 1], pieces[i], segments[i - 1], segments[i], side)
        closing: list[Segment] = []
        if closed:
            closing = self._join(pieces[-1], pieces[0], segments[-1], segments[0], side)

        builder = _PathBuilder(pieces[0][0].p0)
        for i, piece in enumerate(pieces):
            builder.extend(connectors[i])
            builder.extend(piece)
        builder.extend(closing)
        return builder

    def _join(
        self,
        prev_piece: list[Segment],
        next_piece: list[Segment],
        incoming: Segment,
        outgoing: Segment,
        side: float,
    ) -> list[Segment]:
        """Connector from ``prev_piece`` to ``next_piece`` around ``incoming.p3``.

        Inside joins trim both pieces back to their intersection when they
        cross, and otherwise pass through the source vertex.
        """
        vertex = incoming.p3
        t_in = end_tangent(incoming)
        t_out = start_tangent(outgoing)
        cross = t_in.cross(t_out)
        dot = t_in.dot(t_out)

        if dot >= self.smooth_cos:
            connector = _PathBuilder(prev_piece[-1].p3)
            connector.line_to(next_piece[0].p0)
            return connector.segments

        outside = cross * side < 0
        if abs(cross) < 1e-9 and dot < 0:
            # U-turn: outside on both sides
            outside = True

        if not outside:
            if trim_inner_join(prev_piece, next_piece):
                return []
            connector = _PathBuilder(prev_piece[-1].p3)
            connector.line_to(vertex)
            connector.line_to(next_piece[0].p0)
            return connector.segments

        connector = _PathBuilder(prev_piece[-1].p3)
        next_start = next_piece[0].p0
        join = self.config.join
        if join in (JoinStyle.ROUND, JoinStyle.CIRCLE):
            self._round_join(connector, vertex, t_in, next_start)
        elif join is JoinStyle.MITER:
            self._miter_join(connector, t_in, t_out, dot, next_start)
        else:
            connector.line_to(next_start)
        return connector.segments

    def _round_join(self, builder: _PathBuilder, vertex: Point, t_in: Point, next_start: Point) -> None:
        u0 = builder.current - vertex
        u1 = next_start - vertex
        sweep = math.atan2(u0.cross(u1), u0.dot(u1))
        if abs(abs(sweep) - math.pi) < 0.1:
            # Near-180 degree arcs must bulge forward, not back over the stroke
            mid = u0.rotated(sweep / 2.0)
            if mid.dot(t_in) < 0:
                sweep = sweep - 2.0 * math.pi if sweep > 0 else sweep + 2.0 * math.pi
        builder.extend(arc_to_segments(vertex, u0.length(), u0.angle(), sweep))
        builder.line_to(next_start)

    def _miter_join(
        self,
        builder: _PathBuilder,
        t_in: Point,
        t_out: Point,
        dot: float,
        next_start: Point,
    ) -> None:
        cos_half = math.sqrt(max(0.0, (1.0 + dot) / 2.0))
        denom = t_in.cross(t_out)
        if cos_half < 1e-12 or abs(denom) < 1e-12 or 1.0 / cos_half > self.config.miter_limit:
            builder.line_to(next_start)
            return
        prev_end = builder.current
        t = (next_start - prev_end).cross(t_out) / denom
        builder.line_to(prev_end + t_in * t)
        builder.line_to(next_start)

    def _cap(self, builder: _PathBuilder, point: Point, outward: Point, style: CapStyle, target: Point) -> None:
        """Connect the rail end at ``builder.current`` to ``target`` around ``point``."""
        if style is CapStyle.BUTT:
            builder.line_to(target)
        elif style is CapStyle.SQUARE:
            extension = outward * self.half_width
            builder.line_to(builder.current + extension)
            builder.line_to(target + extension)
            builder.line_to(target)
        else:
            radial = builder.current - point
            builder.extend(arc_to_segments(point, radial.length(), radial.angle(), -math.pi))
            builder.line_to(target)

    def _outline_open(self, segments: list[Segment], warnings: list[SubdivisionDepthExceededError]) -> Contour:
        left = self._rail(segments, 1.0, closed=False, warnings=warnings)
        right = self._rail(segments, -1.0, closed=False, warnings=warnings)

        builder = _PathBuilder(left.start)
        builder.extend(left.segments)

        end_point = segments[-1].p3
        self._cap(builder, end_point, end_tangent(segments[-1]), self.config.end_cap, right.current)
        builder.extend(seg.reversed() for seg in reversed(right.segments))

        start_point = segments[0].p0
        self._cap(builder, start_point, -start_tangent(segments[0]), self.config.start_cap, left.start)

        outline = builder.close()
        if outline.direction() != self.config.winding:
            outline = outline.reversed()
        return outline

    def _orient_rails(self, left: Contour, right: Contour) -> list[Contour]:
        """Order rails outer-first and wind them per the configured convention."""
        if abs(left.signed_area()) >= abs(right.signed_area()):
            outer, inner = left, right
        else:
            outer, inner = right, left
        inner_winding = (
            WindingDirection.CLOCKWISE
            if self.config.winding is WindingDirection.COUNTER_CLOCKWISE
            else WindingDirection.COUNTER_CLOCKWISE
        )
        if outer.direction() != self.config.winding:
            outer = outer.reversed()
        if inner.direction() != inner_winding:
            inner = inner.reversed()
        return [outer, inner]


def stroke(contour: Contour, config: NoodleConfig, geometry: GeometryConfig | None = None) -> EffectResult:
    """Stroke ``contour`` with a one-off ``NoodleStroker``."""
    return NoodleStroker(config, geometry).stroke(contour)
