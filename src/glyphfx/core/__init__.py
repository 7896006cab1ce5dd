"""Core processing algorithms for glyphfx.

This module contains the geometric engine:

- Curve model (evaluation, tangents, curvature, subdivision)
- Arc-length parametrization (length tables and their inversion)
- Offset engine (noodle stroking with caps and joins)
- Stamp placer (pattern along a path)
- Contour editor (writing effect output back into glyphs)

All services are designed to be:
- Stateless (safe for use in worker processes)
- Pure (inputs are never modified)

Key functions:
- evaluate / tangent / curvature: Curve model queries at a global parameter
- apply_noodle / apply_pattern: Validated effect entry points
- apply_effect: Run the configured effect over a glyph
- process_glyph: Picklable per-glyph task

Key classes:
- ArcLengthTable: Arc length <-> parameter conversion
- NoodleStroker: Constant-width stroking
- StampPlacer: Pattern placement
- FontProcessor: Batch processing of a UFO
"""

from glyphfx.core import editor
from glyphfx.core.arclength import ArcLengthTable
from glyphfx.core.bezier import (
    arc_to_segments,
    curvature,
    evaluate,
    safe_tangent,
    split,
    tangent,
)
from glyphfx.core.effects import (
    apply_effect,
    apply_noodle,
    apply_pattern,
    coerce_config,
    select_targets,
)
from glyphfx.core.offset import NoodleStroker, offset_segment
from glyphfx.core.pattern import StampFrame, StampPlacer, transform_contour
from glyphfx.core.processor import FontProcessor, process_glyph

__all__ = [
    # Arc length
    "ArcLengthTable",
    # Processor classes
    "FontProcessor",
    # Effect engines
    "NoodleStroker",
    "StampFrame",
    "StampPlacer",
    # Effect entry points
    "apply_effect",
    "apply_noodle",
    "apply_pattern",
    # Curve model
    "arc_to_segments",
    "coerce_config",
    "curvature",
    "editor",
    "evaluate",
    "offset_segment",
    "process_glyph",
    "safe_tangent",
    "select_targets",
    "split",
    "tangent",
    "transform_contour",
]
