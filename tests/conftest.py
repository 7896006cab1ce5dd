"""Shared fixtures: small UFO sources built on the fly with ufoLib."""

from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fontTools.pens.pointPen import SegmentToPointPen
from fontTools.ufoLib import UFOWriter

# name -> {"contours": [(points, closed)], "width", "unicodes", "components", "anchors"}
GlyphRecipe = dict[str, Any]


def _draw(recipe: GlyphRecipe) -> Callable[[Any], None]:
    def draw_points(point_pen: Any) -> None:
        pen = SegmentToPointPen(point_pen)
        for points, closed in recipe.get("contours", []):
            pen.moveTo(points[0])
            for pt in points[1:]:
                pen.lineTo(pt)
            if closed:
                pen.closePath()
            else:
                pen.endPath()
        for base, transformation in recipe.get("components", []):
            point_pen.addComponent(base, transformation)

    return draw_points


def write_ufo(
    path: Path, glyphs: dict[str, GlyphRecipe], upm: int = 1000, format_version: int = 3
) -> Path:
    """Write a UFO source with line-only glyphs in the given order."""
    writer = UFOWriter(str(path), formatVersion=format_version)
    writer.writeInfo(SimpleNamespace(familyName="Test", styleName="Regular", unitsPerEm=upm))
    glyph_set = writer.getGlyphSet()
    for name, recipe in glyphs.items():
        glyph_object = SimpleNamespace(
            width=recipe.get("width", 500),
            unicodes=recipe.get("unicodes", []),
        )
        if "anchors" in recipe:
            glyph_object.anchors = recipe["anchors"]
        glyph_set.writeGlyph(name, glyph_object, _draw(recipe))
    glyph_set.writeContents()
    writer.writeLayerContents()
    writer.writeLib({"public.glyphOrder": list(glyphs)})
    writer.close()
    return path


SAMPLE_GLYPHS: dict[str, GlyphRecipe] = {
    "space": {"width": 250, "unicodes": [0x20]},
    "l": {
        "width": 300,
        "unicodes": [0x6C],
        "contours": [([(100, 0), (100, 700)], False)],
    },
    "o": {
        "width": 500,
        "unicodes": [0x6F],
        "contours": [([(50, 0), (450, 0), (450, 500), (50, 500)], True)],
    },
    "L": {
        "width": 500,
        "unicodes": [0x4C],
        "contours": [
            ([(100, 700), (100, 0), (400, 0)], False),
        ],
        "anchors": [{"name": "top", "x": 250, "y": 700}],
    },
    "dot": {
        "width": 100,
        "contours": [([(-10, -10), (10, -10), (10, 10), (-10, 10)], True)],
    },
    "i": {
        "width": 300,
        "unicodes": [0x69],
        "contours": [([(150, 0), (150, 500)], False)],
        "components": [("dot", (1, 0, 0, 1, 150, 650))],
    },
}


@pytest.fixture
def make_ufo(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a UFO into the test's temporary directory."""

    def factory(
        glyphs: dict[str, GlyphRecipe] | None = None,
        name: str = "Test.ufo",
        upm: int = 1000,
        format_version: int = 3,
    ) -> Path:
        glyphs = SAMPLE_GLYPHS if glyphs is None else glyphs
        return write_ufo(tmp_path / name, glyphs, upm, format_version)

    return factory


@pytest.fixture
def sample_ufo(make_ufo: Callable[..., Path]) -> Path:
    """UFO with an empty glyph, open strokes, a closed glyph, a donor and a component."""
    return make_ufo()
