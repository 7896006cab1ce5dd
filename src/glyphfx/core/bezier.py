"""Curve model: evaluation of contours at a global parameter.

A contour with N segments is parametrized by a global ``t`` in [0, N]: the
integer part selects the segment and the fractional part is the local Bezier
parameter. Closed contours wrap ``t`` modulo N; open contours clamp it.

All functions are pure, stateless, and designed for use in parallel processing.
"""

import math

from glyphfx.domain import Contour, Point, Segment
from glyphfx.exceptions import DegenerateTangentError

# Derivative length below which the tangent direction is undefined
TANGENT_EPSILON = 1e-9

# Initial and maximum parameter step for the secant fallback
_SECANT_STEP = 1e-4
_SECANT_MAX_STEP = 0.5


def locate(contour: Contour, t: float) -> tuple[int, float]:
    """Map a global parameter to (segment index, local parameter).

    Args:
        contour: Contour being evaluated
        t: Global parameter

    Returns:
        Tuple of (segment index, local t in [0, 1])
    """
    n = len(contour.segments)
    if contour.closed:
        t = math.fmod(t, n)
        if t < 0:
            t += n
    else:
        t = max(0.0, min(float(n), t))

    index = int(math.floor(t))
    if index >= n:
        # t == N on an open contour, or rounding on a closed one
        return n - 1, 1.0
    return index, t - index


def evaluate(contour: Contour, t: float) -> Point:
    """Position on the contour at global parameter ``t``."""
    index, local = locate(contour, t)
    return contour.segments[index].point_at(local)


def derivative(contour: Contour, t: float) -> Point:
    """First derivative with respect to the local parameter."""
    index, local = locate(contour, t)
    return contour.segments[index].derivative_at(local)


def tangent(contour: Contour, t: float) -> Point:
    """Unit tangent at global parameter ``t``.

    Raises:
        DegenerateTangentError: If the derivative vanishes at ``t``
            (e.g. both handles coincide with the anchor)
    """
    d = derivative(contour, t)
    length = d.length()
    if length < TANGENT_EPSILON:
        raise DegenerateTangentError(t)
    return Point(d.x / length, d.y / length)


def segment_tangent(segment: Segment, t: float) -> Point:
    """Unit tangent of a single segment at local ``t``.

    Raises:
        DegenerateTangentError: If the derivative vanishes at ``t``
    """
    d = segment.derivative_at(t)
    length = d.length()
    if length < TANGENT_EPSILON:
        raise DegenerateTangentError(t)
    return Point(d.x / length, d.y / length)


def _secant(sample, t: float, lo: float, hi: float) -> Point:
    """Secant direction between neighbouring samples of ``sample``."""
    step = _SECANT_STEP
    while step <= _SECANT_MAX_STEP:
        a = sample(max(lo, t - step))
        b = sample(min(hi, t + step))
        direction = b - a
        if direction.length() > TANGENT_EPSILON:
            return direction.normalized()
        step *= 4.0
    a = sample(lo)
    b = sample(hi)
    direction = (b - a).normalized()
    if direction.length() == 0.0:
        return Point(1.0, 0.0)
    return direction


def safe_tangent(contour: Contour, t: float) -> Point:
    """Unit tangent, falling back to the secant direction where degenerate."""
    try:
        return tangent(contour, t)
    except DegenerateTangentError:
        n = float(len(contour.segments))
        if contour.closed:
            return _secant(lambda u: evaluate(contour, u), t, t - n, t + n)
        return _secant(lambda u: evaluate(contour, u), t, 0.0, n)


def safe_segment_tangent(segment: Segment, t: float) -> Point:
    """Unit tangent of a segment, falling back to a secant where degenerate."""
    try:
        return segment_tangent(segment, t)
    except DegenerateTangentError:
        return _secant(segment.point_at, t, 0.0, 1.0)


def start_tangent(segment: Segment) -> Point:
    """Direction of travel leaving the segment's start anchor."""
    return safe_segment_tangent(segment, 0.0)


def end_tangent(segment: Segment) -> Point:
    """Direction of travel arriving at the segment's end anchor."""
    return safe_segment_tangent(segment, 1.0)


def segment_curvature(segment: Segment, t: float) -> float:
    """Signed curvature (B' x B'') / |B'|^3; zero where the tangent is undefined."""
    d1 = segment.derivative_at(t)
    speed = d1.length()
    if speed < TANGENT_EPSILON:
        return 0.0
    d2 = segment.second_derivative_at(t)
    return d1.cross(d2) / (speed * speed * speed)


def curvature(contour: Contour, t: float) -> float:
    """Signed curvature at global parameter ``t``.

    Positive curvature turns left (counter-clockwise).
    """
    index, local = locate(contour, t)
    return segment_curvature(contour.segments[index], local)


def split(segment: Segment, t: float) -> tuple[Segment, Segment]:
    """De Casteljau subdivision of ``segment`` at local ``t``."""
    return segment.split(t)


def arc_to_segments(center: Point, radius: float, start_angle: float, sweep: float) -> list[Segment]:
    """Approximate a circular arc with cubic segments of at most 90 degrees.

    Args:
        center: Arc centre
        radius: Arc radius
        start_angle: Start angle in radians
        sweep: Signed sweep in radians (positive is counter-clockwise)

    Returns:
        Cubic segments tracing the arc from start to end
    """
    if abs(sweep) < 1e-12 or radius <= 0.0:
        return []
    n_segs = max(1, int(math.ceil(abs(sweep) / (math.pi / 2) - 1e-9)))
    seg_angle = sweep / n_segs
    alpha = 4.0 * math.tan(seg_angle / 4.0) / 3.0

    result: list[Segment] = []
    for i in range(n_segs):
        a0 = start_angle + i * seg_angle
        a1 = a0 + seg_angle
        cos0, sin0 = math.cos(a0), math.sin(a0)
        cos1, sin1 = math.cos(a1), math.sin(a1)
        result.append(
            Segment(
                Point(center.x + radius * cos0, center.y + radius * sin0),
                Point(
                    center.x + radius * (cos0 - alpha * sin0),
                    center.y + radius * (sin0 + alpha * cos0),
                ),
                Point(
                    center.x + radius * (cos1 + alpha * sin1),
                    center.y + radius * (sin1 - alpha * cos1),
                ),
                Point(center.x + radius * cos1, center.y + radius * sin1),
            )
        )
    return result
