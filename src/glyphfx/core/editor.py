"""Contour editor: writing effect output back into a glyph.

Purely structural. Glyphs and contours are immutable values, so editing
builds a new glyph whose untouched contours are the very same (immutable)
objects as the input's, and whose metadata is a fresh copy.
"""

from collections.abc import Mapping

from glyphfx.domain import EffectResult, Glyph, GlyphMetadata
from glyphfx.exceptions import ContourError


def _copy_metadata(metadata: GlyphMetadata) -> GlyphMetadata:
    return GlyphMetadata.from_dict(metadata.to_dict())


def apply(glyph: Glyph, target_index: int, result: EffectResult) -> Glyph:
    """Replace one contour with an effect's output contours.

    Args:
        glyph: Input glyph (not modified)
        target_index: Index of the contour to replace
        result: Effect output; its contours are inserted in order

    Returns:
        New glyph with the replacement applied

    Raises:
        ContourError: If ``target_index`` is out of range
    """
    return apply_many(glyph, {target_index: result})


def apply_many(glyph: Glyph, results: Mapping[int, EffectResult]) -> Glyph:
    """Replace several contours in one pass.

    Indices refer to the input glyph's contours, so replacing contour 0 with
    several contours does not shift the meaning of index 1.

    Raises:
        ContourError: If any index is out of range
    """
    count = len(glyph.contours)
    for index in results:
        if not 0 <= index < count:
            raise ContourError(
                f"Contour index {index} out of range for glyph '{glyph.name}' ({count} contours)"
            )

    contours = []
    for index, contour in enumerate(glyph.contours):
        if index in results:
            contours.extend(results[index].contours)
        else:
            contours.append(contour)

    return Glyph(
        metadata=_copy_metadata(glyph.metadata),
        contours=tuple(contours),
        components=glyph.components,
    )
