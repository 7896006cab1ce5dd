"""Effect output types.

This module defines the values produced by the stroke and pattern engines
before they are written back into a glyph.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from fontTools.misc.transform import Transform

from glyphfx.domain.contour import Contour, Point
from glyphfx.exceptions import SubdivisionDepthExceededError


@dataclass(frozen=True)
class Placement:
    """Transform for one stamp instance along a target path.

    Attributes:
        position: Stamp centre on the target path (after normal offset)
        angle: Rotation in radians (the path tangent angle)
        scale_x: Scale along the path direction
        scale_y: Scale across the path direction
        offset: Arc length of the stamp centre along the target
        slot: Arc length allotted to this stamp (the realized spacing)
    """

    position: Point
    angle: float
    scale_x: float = 1.0
    scale_y: float = 1.0
    offset: float = 0.0
    slot: float = 0.0

    def transform(self, anchor: Point = Point(0.0, 0.0), axis_angle: float = 0.0) -> Transform:
        """Affine transform mapping donor space onto the target path.

        The donor is first moved so ``anchor`` sits at the origin, rotated by
        ``axis_angle`` so its path axis lies along +x, scaled, rotated to the
        tangent angle and finally moved to ``position``.

        Args:
            anchor: Donor point that lands on the path
            axis_angle: Pre-rotation aligning the donor's long axis with +x

        Returns:
            fontTools Transform (outermost operation first in the chain)
        """
        return (
            Transform()
            .translate(self.position.x, self.position.y)
            .rotate(self.angle)
            .scale(self.scale_x, self.scale_y)
            .rotate(axis_angle)
            .translate(-anchor.x, -anchor.y)
        )

    @property
    def angle_degrees(self) -> float:
        return math.degrees(self.angle)

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "angle": self.angle,
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
            "offset": self.offset,
            "slot": self.slot,
        }


@dataclass
class EffectResult:
    """Contours replacing one input contour.

    Attributes:
        contours: Output contours in drawing order
        warnings: Precision warnings (depth caps hit while approximating)
        placements: Stamp placements, for pattern results
    """

    contours: list[Contour]
    warnings: list[SubdivisionDepthExceededError] = field(default_factory=list)
    placements: list[Placement] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.contours)
