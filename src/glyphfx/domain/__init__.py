"""Domain models for glyphfx.

This module contains the core domain models representing glyphs, contours
and effect output. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of fonttools implementation details

Key classes:
- Point: A 2D point (also used as a vector)
- Segment: A cubic Bezier segment
- Contour: An open or closed sequence of segments
- Glyph: A single glyph with its contours and components
- Placement: Transform for one pattern stamp
- EffectResult: Contours replacing one input contour
"""

from glyphfx.domain.contour import Contour, ContourKind, Point, Segment, WindingDirection
from glyphfx.domain.effect import EffectResult, Placement
from glyphfx.domain.glyph import Component, Glyph, GlyphMetadata

__all__: list[str] = [
    # Enums
    "ContourKind",
    "WindingDirection",
    # Core types
    "Component",
    "Contour",
    "EffectResult",
    "Glyph",
    "GlyphMetadata",
    "Placement",
    "Point",
    "Segment",
]
