"""Exception hierarchy for glyphfx."""


class GlyphFxError(Exception):
    """Base exception for all glyphfx errors."""

    pass


class FontError(GlyphFxError):
    """Errors related to font loading or saving."""

    pass


class FontLoadError(FontError):
    """Error loading a font source."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class FontSaveError(FontError):
    """Error saving a font source."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save font '{path}': {reason}")


class GlyphError(GlyphFxError):
    """Errors related to glyph processing."""

    pass


class GlyphNotFoundError(GlyphError):
    """Requested glyph not found in font."""

    def __init__(self, glyph_name: str) -> None:
        self.glyph_name = glyph_name
        super().__init__(f"Glyph '{glyph_name}' not found in font")


class GlyphProcessingError(GlyphError):
    """Error processing a specific glyph."""

    def __init__(self, glyph_name: str, reason: str) -> None:
        self.glyph_name = glyph_name
        self.reason = reason
        super().__init__(f"Error processing glyph '{glyph_name}': {reason}")


class GeometryError(GlyphFxError):
    """Errors in geometric calculations."""

    pass


class ContourError(GeometryError):
    """Error with contour data or operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class DegenerateTangentError(GeometryError):
    """Direction is undefined at a curve parameter.

    Always recovered by the caller through a secant fallback.
    """

    def __init__(self, t: float) -> None:
        self.t = t
        super().__init__(f"Tangent is undefined at t={t:.6g}")


class OutOfRangeError(GeometryError):
    """Arc length outside the contour's [0, length] domain."""

    def __init__(self, value: float, length: float) -> None:
        self.value = value
        self.length = length
        super().__init__(f"Arc length {value:.6g} outside [0, {length:.6g}]")


class SubdivisionDepthExceededError(GeometryError):
    """Adaptive subdivision hit its recursion cap.

    Used as a precision warning: the current approximation is accepted and the
    instance is collected in ``EffectResult.warnings`` rather than raised.
    """

    def __init__(self, operation: str, max_depth: int, error: float | None = None) -> None:
        self.operation = operation
        self.max_depth = max_depth
        self.error = error
        detail = f" (residual error {error:.4g})" if error is not None else ""
        super().__init__(f"{operation}: subdivision depth {max_depth} exceeded{detail}")


class EffectError(GlyphFxError):
    """An effect invocation was rejected.

    Carries the glyph/contour identity so a batch can report which input
    failed without halting.
    """

    def __init__(
        self,
        message: str,
        glyph_name: str | None = None,
        contour_index: int | None = None,
    ) -> None:
        self.message = message
        self.glyph_name = glyph_name
        self.contour_index = contour_index
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.glyph_name is not None:
            where.append(f"glyph '{self.glyph_name}'")
        if self.contour_index is not None:
            where.append(f"contour {self.contour_index}")
        if where:
            return f"{self.message} ({', '.join(where)})"
        return self.message

    def with_context(
        self,
        glyph_name: str | None = None,
        contour_index: int | None = None,
    ) -> "EffectError":
        """Attach glyph/contour identity, keeping any already set."""
        if self.glyph_name is None:
            self.glyph_name = glyph_name
        if self.contour_index is None:
            self.contour_index = contour_index
        self.args = (self._format(),)
        return self


class DegenerateInputError(EffectError, GeometryError):
    """Zero-length or single-point contour."""

    pass


class InvalidParameterError(EffectError):
    """Non-positive width/spacing, malformed enum, or similar."""

    def __init__(
        self,
        parameter: str,
        reason: str,
        glyph_name: str | None = None,
        contour_index: int | None = None,
    ) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(
            f"Invalid parameter '{parameter}': {reason}",
            glyph_name=glyph_name,
            contour_index=contour_index,
        )


class InvalidDonorError(EffectError):
    """Pattern donor is empty or not closed."""

    pass

