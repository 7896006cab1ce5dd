"""Font writer for saving modified UFO sources.

This module provides the UfoWriter class for writing modified glyphs back
into a UFO, either in place or into a copy of the source.
"""

import logging
import shutil
from pathlib import Path
from typing import Any

from fontTools.ufoLib import UFOLibError, UFOReader, UFOWriter

from glyphfx.domain.glyph import Glyph
from glyphfx.exceptions import FontSaveError
from glyphfx.io.converter import domain_glyph_to_ufo, draw_glyph_points

logger = logging.getLogger(__name__)


class UfoWriter:
    """Writes modified glyphs into a UFO source.

    When the output path differs from the source, the whole source is copied
    there first and only the copy is modified.

    Example:
        writer = UfoWriter(Path("in.ufo"), Path("out.ufo"))
        writer.update_glyph(modified_glyph)
        writer.save()
    """

    def __init__(self, source_path: Path, output_path: Path | None = None) -> None:
        """Initialize the font writer.

        Args:
            source_path: Path of the UFO the glyphs were read from
            output_path: Destination UFO (None = modify the source in place)
        """
        self._source_path = source_path
        self._output_path = output_path if output_path is not None else source_path
        self._pending: dict[str, Glyph] = {}

    @property
    def output_path(self) -> Path:
        return self._output_path

    def update_glyph(self, glyph: Glyph) -> None:
        """Queue a glyph for writing; the last update of a name wins."""
        self._pending[glyph.name] = glyph

    def _prepare_output(self) -> None:
        if self._output_path.resolve() == self._source_path.resolve():
            return
        if self._output_path.exists():
            shutil.rmtree(self._output_path)
        shutil.copytree(self._source_path, self._output_path)

    def _source_format_version(self) -> tuple[int, int]:
        # Output keeps the source UFO format version
        reader = UFOReader(str(self._source_path), validate=False)
        try:
            return reader.formatVersionTuple
        finally:
            reader.close()

    def save(self) -> None:
        """Write all queued glyphs.

        Raises:
            FontSaveError: If the UFO cannot be copied or written
        """
        try:
            format_version = self._source_format_version()
            self._prepare_output()
            writer = UFOWriter(str(self._output_path), formatVersion=format_version, validate=False)
            try:
                glyph_set: Any = writer.getGlyphSet()
                for name, glyph in self._pending.items():
                    glyph_set.writeGlyph(
                        name,
                        domain_glyph_to_ufo(glyph),
                        lambda pen, glyph=glyph: draw_glyph_points(glyph, pen),
                    )
                glyph_set.writeContents()
                writer.writeLayerContents()
            finally:
                writer.close()
        except (UFOLibError, OSError) as e:
            raise FontSaveError(str(self._output_path), str(e)) from e

        logger.debug("Wrote %d glyphs to %s", len(self._pending), self._output_path)

    @staticmethod
    def get_output_path(input_path: Path, suffix: str = "-fx") -> Path:
        """Generate a sibling output path.

        Converts: Font.ufo -> Font-fx.ufo

        Args:
            input_path: Source UFO path
            suffix: Text inserted before the extension

        Returns:
            Path next to the source
        """
        return input_path.parent / f"{input_path.stem}{suffix}{input_path.suffix}"
