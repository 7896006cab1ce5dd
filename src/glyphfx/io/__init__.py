"""Font I/O layer for glyphfx.

This module handles reading and writing UFO font sources using
fontTools.ufoLib. It provides a clean abstraction layer between fontTools
and the domain models.

Key responsibilities:
- Load UFO sources and their glyph order
- Convert GLIF outlines to domain contours and back
- Write modified glyphs in place or into a copy of the source

Key classes:
- UfoReader: Load UFOs and extract glyphs
- UfoWriter: Save modified glyphs
"""

from glyphfx.io.reader import UfoReader
from glyphfx.io.writer import UfoWriter

__all__ = [
    "UfoReader",
    "UfoWriter",
]
