"""Configuration settings for glyphfx."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from glyphfx.domain.contour import WindingDirection


class EffectKind(str, Enum):
    """Path effect selector."""

    NOODLE = "noodle"
    PATTERN = "pattern"


class CapStyle(str, Enum):
    """End treatment of an open stroke."""

    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"
    CIRCLE = "circle"  # same as ROUND


class JoinStyle(str, Enum):
    """Corner treatment between stroke segments."""

    MITER = "miter"
    ROUND = "round"
    BEVEL = "bevel"
    CIRCLE = "circle"  # same as ROUND


class PatternCopies(str, Enum):
    """How many stamps to lay along the target."""

    SINGLE = "single"
    REPEATED = "repeated"


class PatternAxis(str, Enum):
    """Which donor axis follows the path tangent."""

    AUTO = "auto"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class TargetSelection(str, Enum):
    """Which contours of a selected glyph receive the effect."""

    OPEN = "open"
    ALL = "all"


class GeometryConfig(BaseModel):
    """Configuration for curve approximation with scale-relative tolerances.

    All tolerance values are specified at a reference UPM of 1000 and will be
    scaled proportionally for fonts with different UPM values.
    """

    reference_upm: int = Field(
        default=1000,
        description="Reference UPM for tolerance values",
    )
    tolerance: float = Field(
        default=0.01,
        ge=1e-5,
        le=5.0,
        description="Arc-length flatness tolerance (polygon minus chord, at reference UPM)",
    )
    max_depth: int = Field(
        default=16,
        ge=1,
        le=30,
        description="Recursion cap for arc-length subdivision",
    )
    offset_tolerance: float = Field(
        default=0.1,
        ge=1e-4,
        le=10.0,
        description="Maximum offset-curve fit error (at reference UPM)",
    )
    offset_max_depth: int = Field(
        default=10,
        ge=1,
        le=20,
        description="Recursion cap for offset-curve refitting",
    )
    smooth_angle: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Corners turning less than this many degrees get no join geometry",
    )

    def scale_tolerance(self, base_value: float, upm: int) -> float:
        """Scale a tolerance value for the given UPM.

        Args:
            base_value: The tolerance value at reference UPM
            upm: The actual UPM of the font

        Returns:
            Scaled tolerance value
        """
        return base_value * (upm / self.reference_upm)

    def get_tolerance(self, upm: int) -> float:
        """Get arc-length tolerance scaled for UPM."""
        return self.scale_tolerance(self.tolerance, upm)

    def get_offset_tolerance(self, upm: int) -> float:
        """Get offset fit tolerance scaled for UPM."""
        return self.scale_tolerance(self.offset_tolerance, upm)

    def for_upm(self, upm: int) -> "GeometryConfig":
        """Copy with tolerances rescaled to ``upm``."""
        return self.model_copy(
            update={
                "reference_upm": upm,
                "tolerance": self.get_tolerance(upm),
                "offset_tolerance": self.get_offset_tolerance(upm),
            }
        )


class NoodleConfig(BaseModel):
    """Configuration for the noodle (constant-width stroke) effect.

    ``width`` is deliberately unconstrained here: the stroker validates it and
    reports ``InvalidParameterError`` with glyph context.
    """

    width: float = Field(
        default=10.0,
        description="Stroke width in font units",
    )
    cap: CapStyle = Field(
        default=CapStyle.ROUND,
        description="Cap style for both ends of open contours",
    )
    cap_start: CapStyle | None = Field(
        default=None,
        description="Cap style at the start of open contours (defaults to cap)",
    )
    cap_end: CapStyle | None = Field(
        default=None,
        description="Cap style at the end of open contours (defaults to cap)",
    )
    join: JoinStyle = Field(
        default=JoinStyle.ROUND,
        description="Join style for interior corners",
    )
    miter_limit: float = Field(
        default=4.0,
        description="Miter length to width ratio above which miters become bevels",
    )
    angle: float = Field(
        default=0.0,
        ge=-89.0,
        le=89.0,
        description="Angle of the offset direction from the normal, in degrees",
    )
    winding: WindingDirection = Field(
        default=WindingDirection.COUNTER_CLOCKWISE,
        description="Winding of the outer output contour",
    )

    @property
    def start_cap(self) -> CapStyle:
        return self.cap_start if self.cap_start is not None else self.cap

    @property
    def end_cap(self) -> CapStyle:
        return self.cap_end if self.cap_end is not None else self.cap


class PatternConfig(BaseModel):
    """Configuration for the pattern-along-path effect.

    ``spacing`` is unconstrained here for the same reason as
    ``NoodleConfig.width``.
    """

    pattern_glyph: str | None = Field(
        default=None,
        description="Name of the donor glyph",
    )
    spacing: float = Field(
        default=100.0,
        description="Centre-to-centre arc-length distance between stamps",
    )
    stretch: bool = Field(
        default=False,
        description="Stretch each stamp to exactly fill its slot",
    )
    anchor_ends: bool = Field(
        default=False,
        description="Pin the first and last stamps to the endpoints of open targets",
    )
    copies: PatternCopies = Field(
        default=PatternCopies.REPEATED,
        description="Single stamp or repeated stamps",
    )
    scale_x: float = Field(
        default=1.0,
        description="Donor scale along the path",
    )
    scale_y: float = Field(
        default=1.0,
        description="Donor scale across the path",
    )
    normal_offset: float = Field(
        default=0.0,
        description="Offset of each stamp along the path normal",
    )
    tangent_offset: float = Field(
        default=0.0,
        description="Arc-length shift of each stamp along the path",
    )
    center_pattern: bool = Field(
        default=True,
        description="Anchor the donor at its bounding-box centre (else at its origin)",
    )
    axis: PatternAxis = Field(
        default=PatternAxis.AUTO,
        description="Donor axis that follows the path tangent",
    )


class ProcessingConfig(BaseModel):
    """Configuration for font processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )
    fail_fast: bool = Field(
        default=False,
        description="Abort the batch on the first failing glyph",
    )
    targets: TargetSelection = Field(
        default=TargetSelection.OPEN,
        description="Contours receiving the effect in glyphs with open contours",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GlyphFxSettings(BaseModel):
    """Main application settings."""

    effect: EffectKind = EffectKind.NOODLE
    noodle: NoodleConfig = Field(default_factory=NoodleConfig)
    pattern: PatternConfig = Field(default_factory=PatternConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GlyphFxSettings:
    """Get default application settings."""
    return GlyphFxSettings()
