"""Configuration management for glyphfx.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- GeometryConfig: Approximation tolerances and recursion caps
- NoodleConfig: Stroke width, caps and joins
- PatternConfig: Donor glyph, spacing and stamp options
- ProcessingConfig: Batch processing settings
- LoggingConfig: Logging settings
- GlyphFxSettings: Main application settings
"""

from glyphfx.config.settings import (
    CapStyle,
    EffectKind,
    GeometryConfig,
    GlyphFxSettings,
    JoinStyle,
    LoggingConfig,
    NoodleConfig,
    PatternAxis,
    PatternConfig,
    PatternCopies,
    ProcessingConfig,
    TargetSelection,
    get_default_settings,
)

__all__ = [
    "CapStyle",
    "EffectKind",
    "GeometryConfig",
    "GlyphFxSettings",
    "JoinStyle",
    "LoggingConfig",
    "NoodleConfig",
    "PatternAxis",
    "PatternConfig",
    "PatternCopies",
    "ProcessingConfig",
    "TargetSelection",
    "get_default_settings",
]
