"""Font reader for loading UFO font sources.

This module provides the UfoReader class for loading UFO directories
and extracting glyph data into domain models.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from fontTools.ufoLib import UFOLibError, UFOReader

from glyphfx.domain.glyph import Glyph
from glyphfx.exceptions import FontLoadError
from glyphfx.io.converter import ufo_glyph_to_domain

logger = logging.getLogger(__name__)

DEFAULT_UPM = 1000


class _FontInfo:
    """Attribute bag for ``UFOReader.readInfo``."""

    unitsPerEm: float | None = None


class UfoReader:
    """Loads UFO sources and extracts glyph data.

    Glyphs are read from the default layer. Glyph order follows
    ``public.glyphOrder`` in the font lib, with any unlisted glyphs appended
    in sorted order.

    Example:
        with UfoReader(Path("font.ufo")) as reader:
            for glyph in reader.iter_glyphs():
                print(glyph.name)
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the .ufo directory
        """
        self._font_path = font_path
        self._reader: UFOReader | None = None
        self._glyph_set: Any = None
        self._upm: int = DEFAULT_UPM
        self._glyph_order: list[str] = []

    @property
    def path(self) -> Path:
        return self._font_path

    def load(self) -> None:
        """Open the UFO and read its glyph order and metrics.

        Raises:
            FileNotFoundError: If the UFO does not exist
            FontLoadError: If the UFO cannot be parsed
        """
        if not self._font_path.exists():
            raise FileNotFoundError(f"Font source not found: {self._font_path}")

        try:
            self._reader = UFOReader(str(self._font_path), validate=False)
            self._glyph_set = self._reader.getGlyphSet()

            info = _FontInfo()
            self._reader.readInfo(info)
            if info.unitsPerEm:
                self._upm = int(info.unitsPerEm)

            lib = self._reader.readLib()
        except (UFOLibError, OSError) as e:
            self.close()
            raise FontLoadError(str(self._font_path), str(e)) from e

        names = set(self._glyph_set.keys())
        order = [n for n in lib.get("public.glyphOrder", []) if n in names]
        listed = set(order)
        order.extend(sorted(n for n in names if n not in listed))
        self._glyph_order = order
        logger.debug("Loaded %s: %d glyphs, upm %d", self._font_path, len(order), self._upm)

    def _require_loaded(self) -> None:
        if self._reader is None:
            raise RuntimeError("Font not loaded. Call load() first.")

    @property
    def units_per_em(self) -> int:
        """Return the font's units per em (1000 if unset).

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        self._require_loaded()
        return self._upm

    @property
    def glyph_count(self) -> int:
        """Return total number of glyphs in the default layer.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        self._require_loaded()
        return len(self._glyph_order)

    @property
    def glyph_names(self) -> list[str]:
        """Glyph names in font order."""
        self._require_loaded()
        return list(self._glyph_order)

    def iter_glyphs(self) -> Iterator[Glyph]:
        """Iterate over all glyphs, converting to domain model.

        Yields glyphs in font order. Glyphs that fail to parse are logged
        and skipped.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        self._require_loaded()
        for name in self._glyph_order:
            glyph = self.get_glyph(name)
            if glyph is not None:
                yield glyph

    def get_glyph(self, name: str) -> Glyph | None:
        """Get a specific glyph by name.

        Args:
            name: Name of the glyph to retrieve

        Returns:
            Glyph domain model, or None if glyph not found or unreadable

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        self._require_loaded()
        if name not in self._glyph_set:
            return None

        try:
            return ufo_glyph_to_domain(name, self._glyph_set)
        except Exception as e:
            logger.warning("Could not read glyph '%s': %s", name, e)
            return None

    def close(self) -> None:
        """Close the UFO and free resources."""
        if self._reader is not None:
            self._reader.close()
            self._reader = None
            self._glyph_set = None

    def __enter__(self) -> "UfoReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
