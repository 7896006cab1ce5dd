"""glyphfx - Geometric path effects for UFO font sources.

glyphfx is a CLI tool that applies path effects to the outlines of glyphs
with open contours:

- noodle: strokes each contour into a constant-width outline with round,
  square or butt caps and miter, round or bevel joins
- pattern: repeats the contours of a donor glyph as stamps along each path

Example:
    $ glyphfx noodle Sketch.ufo --width 40 -o Sketch-noodle.ufo
    $ glyphfx pattern Sketch.ufo --pattern-glyph dot --spacing 60 --stretch
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
