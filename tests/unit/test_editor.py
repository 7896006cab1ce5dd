"""Tests for the contour editor."""

import pytest

from glyphfx.core import editor
from glyphfx.domain import Component, Contour, EffectResult, Glyph, GlyphMetadata
from glyphfx.exceptions import ContourError


@pytest.fixture
def glyph() -> Glyph:
    """Glyph with three open strokes and a component."""
    metadata = GlyphMetadata(name="E", unicodes=[69], width=500, extras={"note": "draft"})
    contours = [
        Contour.polyline([(0, 0), (0, 700)]),
        Contour.polyline([(0, 700), (400, 700)]),
        Contour.polyline([(0, 350), (300, 350)]),
    ]
    return Glyph(metadata=metadata, contours=contours, components=[Component("dotaccent")])


def boxes(count: int) -> EffectResult:
    """Effect result with ``count`` closed contours."""
    return EffectResult(
        contours=[
            Contour.polyline([(i, 0), (i + 1, 0), (i + 1, 1)], closed=True) for i in range(count)
        ]
    )


class TestApply:
    """Tests for replacing contours in a glyph."""

    def test_replace_one(self, glyph: Glyph) -> None:
        """Test output contours are inserted at the target position."""
        result = boxes(2)
        edited = editor.apply(glyph, 1, result)
        assert len(edited.contours) == 4
        assert edited.contours[0] is glyph.contours[0]
        assert edited.contours[1:3] == tuple(result.contours)
        assert edited.contours[3] is glyph.contours[2]

    def test_input_unchanged(self, glyph: Glyph) -> None:
        """Test the input glyph is not modified."""
        before = glyph.to_dict()
        editor.apply(glyph, 0, boxes(1))
        assert glyph.to_dict() == before

    def test_metadata_copied(self, glyph: Glyph) -> None:
        """Test the edited glyph gets its own metadata with the same values."""
        edited = editor.apply(glyph, 0, boxes(1))
        assert edited.metadata is not glyph.metadata
        assert edited.metadata == glyph.metadata
        assert edited.components == glyph.components

    def test_empty_result_removes_contour(self, glyph: Glyph) -> None:
        """Test an empty result deletes the target contour."""
        edited = editor.apply(glyph, 2, EffectResult(contours=[]))
        assert len(edited.contours) == 2

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_index_out_of_range(self, glyph: Glyph, index: int) -> None:
        """Test out-of-range indices raise ContourError."""
        with pytest.raises(ContourError, match="out of range"):
            editor.apply(glyph, index, boxes(1))


class TestApplyMany:
    """Tests for replacing several contours in one pass."""

    def test_indices_refer_to_input(self, glyph: Glyph) -> None:
        """Test expanding an early contour does not shift later indices."""
        first = boxes(3)
        last = boxes(1)
        edited = editor.apply_many(glyph, {0: first, 2: last})
        assert len(edited.contours) == 5
        assert edited.contours[:3] == tuple(first.contours)
        assert edited.contours[3] is glyph.contours[1]
        assert edited.contours[4] == last.contours[0]

    def test_no_results(self, glyph: Glyph) -> None:
        """Test an empty mapping copies the glyph unchanged."""
        edited = editor.apply_many(glyph, {})
        assert edited.contours == glyph.contours
        assert edited is not glyph
