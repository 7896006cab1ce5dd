"""Arc-length parametrization of contours.

An ``ArcLengthTable`` is built once per contour by adaptive recursive
subdivision of each segment and read-only afterwards. It converts between
arc length and global curve parameter in both directions by binary search
and linear interpolation between bracketing samples.
"""

import logging
from bisect import bisect_left

from glyphfx.core.bezier import evaluate, safe_tangent
from glyphfx.domain import Contour, Point, Segment
from glyphfx.exceptions import OutOfRangeError, SubdivisionDepthExceededError

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01
DEFAULT_MAX_DEPTH = 16

# Relative slack accepted on range checks to absorb float round-off
_RANGE_SLACK = 1e-9


class ArcLengthTable:
    """Monotonic (parameter, cumulative length) samples for one contour.

    Samples live in two parallel append-only lists; nothing is mutated after
    construction, so a table can be read freely once built.

    Example:
        table = ArcLengthTable(contour)
        t = table.param_at_length(table.length / 2)
        midpoint = table.point_at_length(table.length / 2)
    """

    def __init__(
        self,
        contour: Contour,
        tolerance: float = DEFAULT_TOLERANCE,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Build the table.

        Args:
            contour: Contour to parametrize
            tolerance: Flatness bound (control polygon minus chord) per leaf
            max_depth: Recursion cap per segment
        """
        self.contour = contour
        self.tolerance = tolerance
        self.max_depth = max_depth
        self.params: list[float] = [0.0]
        self.lengths: list[float] = [0.0]
        self.warnings: list[SubdivisionDepthExceededError] = []

        for index, segment in enumerate(contour.segments):
            self._worst_capped_error = 0.0
            self._subdivide(segment, float(index), float(index + 1), 0)
            if self._worst_capped_error > 0.0:
                warning = SubdivisionDepthExceededError(
                    f"arc length of segment {index}", max_depth, self._worst_capped_error
                )
                logger.warning("%s", warning)
                self.warnings.append(warning)

    def _subdivide(self, segment: Segment, t0: float, t1: float, depth: int) -> None:
        chord = segment.chord_length()
        poly = segment.polygon_length()
        left, right = segment.split(0.5)
        # Leaves must be flat and evenly parametrized (equal half chords)
        excess = poly - chord
        skew = abs(left.chord_length() - right.chord_length())
        error = max(excess, skew)

        if error > self.tolerance:
            if depth < self.max_depth:
                mid = (t0 + t1) / 2.0
                self._subdivide(left, t0, mid, depth + 1)
                self._subdivide(right, mid, t1, depth + 1)
                return
            self._worst_capped_error = max(self._worst_capped_error, error)

        self.params.append(t1)
        self.lengths.append(self.lengths[-1] + (chord + poly) / 2.0)

    @property
    def length(self) -> float:
        """Total arc length of the contour."""
        return self.lengths[-1]

    @property
    def domain(self) -> float:
        """Upper end of the global parameter range (number of segments)."""
        return self.params[-1]

    def __len__(self) -> int:
        return len(self.params)

    def _check_length(self, s: float, clamp: bool) -> float:
        total = self.length
        slack = _RANGE_SLACK * max(1.0, total)
        if (s < -slack or s > total + slack) and not clamp:
            raise OutOfRangeError(s, total)
        return max(0.0, min(total, s))

    def param_at_length(self, s: float, clamp: bool = False) -> float:
        """Global parameter at arc length ``s``.

        Args:
            s: Arc length from the contour start
            clamp: Clamp out-of-range lengths instead of raising

        Returns:
            Global parameter in [0, N]

        Raises:
            OutOfRangeError: If ``s`` is outside [0, length] and not clamping
        """
        s = self._check_length(s, clamp)
        i = bisect_left(self.lengths, s)
        if i == 0:
            return self.params[0]
        if i >= len(self.lengths):
            return self.params[-1]

        s0 = self.lengths[i - 1]
        s1 = self.lengths[i]
        t0 = self.params[i - 1]
        t1 = self.params[i]
        span = s1 - s0
        if span <= 0.0:
            return t1
        return t0 + (t1 - t0) * (s - s0) / span

    def length_at_param(self, t: float) -> float:
        """Arc length from the start to global parameter ``t``.

        Closed contours wrap ``t``; open contours clamp it to [0, N].
        """
        n = self.domain
        if self.contour.closed:
            t = t % n if n > 0 else 0.0
        else:
            t = max(0.0, min(n, t))

        i = bisect_left(self.params, t)
        if i == 0:
            return self.lengths[0]
        if i >= len(self.params):
            return self.lengths[-1]

        t0 = self.params[i - 1]
        t1 = self.params[i]
        s0 = self.lengths[i - 1]
        s1 = self.lengths[i]
        return s0 + (s1 - s0) * (t - t0) / (t1 - t0)

    def point_at_length(self, s: float, clamp: bool = False) -> Point:
        """Position at arc length ``s``."""
        return evaluate(self.contour, self.param_at_length(s, clamp=clamp))

    def tangent_at_length(self, s: float, clamp: bool = False) -> Point:
        """Unit tangent at arc length ``s`` (secant fallback where degenerate)."""
        return safe_tangent(self.contour, self.param_at_length(s, clamp=clamp))


def length(contour: Contour, tolerance: float = DEFAULT_TOLERANCE) -> float:
    """Total arc length of ``contour``."""
    return ArcLengthTable(contour, tolerance=tolerance).length


def param_at_length(
    contour: Contour,
    s: float,
    clamp: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
) -> float:
    """Global parameter at arc length ``s`` (builds a throwaway table)."""
    return ArcLengthTable(contour, tolerance=tolerance).param_at_length(s, clamp=clamp)


def length_at_param(contour: Contour, t: float, tolerance: float = DEFAULT_TOLERANCE) -> float:
    """Arc length at global parameter ``t`` (builds a throwaway table)."""
    return ArcLengthTable(contour, tolerance=tolerance).length_at_param(t)
