"""Stamp placement: repeating a donor stamp along a target path.

The placer measures the target with an ``ArcLengthTable``, spreads stamp
centres evenly along it and builds one ``Placement`` per stamp. Each stamp
contour is the donor with that placement's affine transform applied to every
control point.

Instance count:
    n = max(1, round(L / s)), realized spacing s' = L / n, centres at i * s'.
    With end anchoring on an open target the first and last centres sit on
    the endpoints: n = max(2, round(L / s) + 1), centres at i * L / (n - 1).
"""

import logging
import math
from collections.abc import Sequence

from fontTools.misc.transform import Transform

from glyphfx.config.settings import GeometryConfig, PatternAxis, PatternConfig, PatternCopies
from glyphfx.core.arclength import ArcLengthTable
from glyphfx.core.bezier import evaluate, safe_tangent
from glyphfx.domain import Contour, EffectResult, Placement, Point, Segment
from glyphfx.exceptions import DegenerateInputError, InvalidDonorError, InvalidParameterError

logger = logging.getLogger(__name__)

# Targets shorter than this are rejected as degenerate (font units)
MIN_TARGET_LENGTH = 1e-6

# Donor extent below which stretching is undefined
MIN_STAMP_LENGTH = 1e-9


def transform_contour(contour: Contour, transform: Transform) -> Contour:
    """Apply an affine transform to every control point of ``contour``."""
    segments = []
    for seg in contour.segments:
        p0, p1, p2, p3 = (Point(*transform.transformPoint(p.to_tuple())) for p in seg.points)
        segments.append(Segment(p0, p1, p2, p3))
    return Contour(segments=tuple(segments), kind=contour.kind)


def _union_bounds(contours: Sequence[Contour]) -> tuple[float, float, float, float]:
    boxes = [c.bounding_box() for c in contours]
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


class StampFrame:
    """Donor stamp geometry resolved against the pattern options.

    Attributes:
        contours: Donor contours (all closed)
        anchor: Donor point placed on the path
        axis_angle: Pre-rotation turning the donor's path axis onto +x
        length: Donor extent along its path axis
    """

    def __init__(self, donor: Contour | Sequence[Contour], config: PatternConfig) -> None:
        if isinstance(donor, Contour):
            contours = [donor]
        else:
            contours = list(donor)
        if not contours:
            raise InvalidDonorError("Pattern donor has no contours")
        for i, contour in enumerate(contours):
            if not contour.closed:
                raise InvalidDonorError(f"Pattern donor contour {i} is not closed")

        min_x, min_y, max_x, max_y = _union_bounds(contours)
        width = max_x - min_x
        height = max_y - min_y

        axis = config.axis
        if axis is PatternAxis.AUTO:
            axis = PatternAxis.VERTICAL if height > width else PatternAxis.HORIZONTAL

        self.contours = contours
        self.axis = axis
        self.bounds = (min_x, min_y, max_x, max_y)
        if axis is PatternAxis.VERTICAL:
            self.axis_angle = -math.pi / 2.0
            self.length = height
        else:
            self.axis_angle = 0.0
            self.length = width

        if config.center_pattern:
            self.anchor = Point((min_x + max_x) / 2.0, (min_y + max_y) / 2.0)
        else:
            self.anchor = Point(0.0, 0.0)


class StampPlacer:
    """Lays transformed copies of a donor stamp along target contours.

    Example:
        placer = StampPlacer(PatternConfig(spacing=20))
        result = placer.place(target, donor)
        for placement in result.placements:
            print(placement.position, placement.angle_degrees)
    """

    def __init__(self, config: PatternConfig, geometry: GeometryConfig | None = None) -> None:
        """Initialize the placer and validate its parameters.

        Raises:
            InvalidParameterError: If spacing or a scale factor is not positive
        """
        for name in ("spacing", "scale_x", "scale_y"):
            value = getattr(config, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameterError(name, f"must be > 0, got {value}")
        for name in ("normal_offset", "tangent_offset"):
            value = getattr(config, name)
            if not math.isfinite(value):
                raise InvalidParameterError(name, f"must be finite, got {value}")

        self.config = config
        self.geometry = geometry if geometry is not None else GeometryConfig()

    def stamp_offsets(self, length: float, closed: bool) -> tuple[list[float], float]:
        """Arc lengths of the stamp centres along a target of ``length``.

        Args:
            length: Target arc length L
            closed: Whether the target is a closed loop

        Returns:
            Tuple of (centre arc lengths, realized spacing s')
        """
        config = self.config
        if config.copies is PatternCopies.SINGLE:
            return [0.0 if closed else length / 2.0], length

        if config.anchor_ends and not closed:
            n = max(2, round(length / config.spacing) + 1)
            step = length / (n - 1)
            return [i * step for i in range(n)], step

        if config.anchor_ends:
            logger.debug("End anchoring ignored on a closed target")
        n = max(1, round(length / config.spacing))
        step = length / n
        return [i * step for i in range(n)], step

    def placements(self, target: Contour, frame: StampFrame) -> list[Placement]:
        """Compute one placement per stamp along ``target``.

        Raises:
            DegenerateInputError: If the target has (near) zero length
        """
        return self._layout(target, frame)[0]

    def _layout(self, target: Contour, frame: StampFrame) -> tuple[list[Placement], list]:
        cleaned = target.without_degenerate_segments()
        if cleaned is None:
            raise DegenerateInputError("Cannot place stamps on a zero-length target")
        table = ArcLengthTable(
            cleaned, tolerance=self.geometry.tolerance, max_depth=self.geometry.max_depth
        )
        total = table.length
        if total < MIN_TARGET_LENGTH:
            raise DegenerateInputError("Cannot place stamps on a zero-length target")

        config = self.config
        offsets, slot = self.stamp_offsets(total, cleaned.closed)

        if config.stretch:
            if frame.length < MIN_STAMP_LENGTH:
                raise InvalidDonorError("Pattern donor has no extent along its path axis")
            scale_x = slot / frame.length
        else:
            scale_x = config.scale_x

        result = []
        for offset in offsets:
            s = offset + config.tangent_offset
            if cleaned.closed:
                s = s % total
            else:
                s = max(0.0, min(total, s))
            t = table.param_at_length(s, clamp=True)
            position = evaluate(cleaned, t)
            direction = safe_tangent(cleaned, t)
            if config.normal_offset:
                position = position + direction.perpendicular() * config.normal_offset
            result.append(
                Placement(
                    position=position,
                    angle=direction.angle(),
                    scale_x=scale_x,
                    scale_y=config.scale_y,
                    offset=offset,
                    slot=slot,
                )
            )
        return result, list(table.warnings)

    def place(self, target: Contour, donor: Contour | Sequence[Contour]) -> EffectResult:
        """Stamp ``donor`` along ``target``.

        Args:
            target: Path the stamps follow (open or closed)
            donor: Closed stamp contour, or several closed contours forming
                one stamp

        Returns:
            EffectResult with the stamp contours (donor contour order within
            each stamp, stamps in path order) and their placements

        Raises:
            InvalidDonorError: If the donor is empty or has an open contour
            DegenerateInputError: If the target has (near) zero length
        """
        frame = StampFrame(donor, self.config)
        placements, warnings = self._layout(target, frame)

        contours = []
        for placement in placements:
            transform = placement.transform(frame.anchor, frame.axis_angle)
            contours.extend(transform_contour(c, transform) for c in frame.contours)

        logger.debug(
            "Placed %d stamps (%d contours) along target", len(placements), len(contours)
        )
        return EffectResult(
            contours=contours, warnings=warnings, placements=placements
        )


def place(
    target: Contour,
    donor: Contour | Sequence[Contour],
    config: PatternConfig,
    geometry: GeometryConfig | None = None,
) -> EffectResult:
    """Stamp ``donor`` along ``target`` with a one-off ``StampPlacer``."""
    return StampPlacer(config, geometry).place(target, donor)
