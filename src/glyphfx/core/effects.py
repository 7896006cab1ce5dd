"""Effect entry points.

Validates effect parameters, runs the stroke or pattern engine on the
selected contours and tags any rejection with the glyph name and contour
index it came from.

Parameters may be given as config models, plain mappings or keyword
overrides; malformed values (unknown cap names, wrong types) are reported as
``InvalidParameterError`` rather than pydantic's ``ValidationError``.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from glyphfx.config.settings import (
    EffectKind,
    GeometryConfig,
    GlyphFxSettings,
    NoodleConfig,
    PatternConfig,
    TargetSelection,
)
from glyphfx.core import editor
from glyphfx.core.offset import NoodleStroker
from glyphfx.core.pattern import StampPlacer
from glyphfx.domain import Contour, EffectResult, Glyph
from glyphfx.exceptions import (
    EffectError,
    InvalidDonorError,
    InvalidParameterError,
    SubdivisionDepthExceededError,
)

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def coerce_config(
    model: type[ConfigT],
    config: ConfigT | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> ConfigT:
    """Build a validated config model from a model, mapping or overrides.

    Raises:
        InvalidParameterError: Naming the first offending field
    """
    if config is None:
        data: dict[str, Any] = {}
    elif isinstance(config, BaseModel):
        data = config.model_dump()
    else:
        data = dict(config)
    data.update(overrides)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        parameter = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InvalidParameterError(parameter, first["msg"]) from e


def apply_noodle(
    contour: Contour,
    config: NoodleConfig | Mapping[str, Any] | None = None,
    geometry: GeometryConfig | None = None,
    *,
    glyph_name: str | None = None,
    contour_index: int | None = None,
    **options: Any,
) -> EffectResult:
    """Stroke one contour.

    Args:
        contour: Source contour
        config: Stroke settings (model or mapping)
        geometry: Approximation tolerances
        glyph_name: Glyph identity attached to errors
        contour_index: Contour identity attached to errors
        **options: Overrides for ``config`` fields (e.g. ``width=20``)

    Returns:
        EffectResult with the outline contour(s)

    Raises:
        InvalidParameterError: Bad width, miter limit or style name
        DegenerateInputError: Zero-length contour
    """
    try:
        noodle = coerce_config(NoodleConfig, config, **options)
        return NoodleStroker(noodle, geometry).stroke(contour)
    except EffectError as e:
        raise e.with_context(glyph_name, contour_index)


def apply_pattern(
    contour: Contour,
    donor: Contour | Sequence[Contour],
    config: PatternConfig | Mapping[str, Any] | None = None,
    geometry: GeometryConfig | None = None,
    *,
    glyph_name: str | None = None,
    contour_index: int | None = None,
    **options: Any,
) -> EffectResult:
    """Stamp a donor along one contour.

    Args:
        contour: Target path
        donor: Closed donor contour(s), already resolved from the donor glyph
        config: Pattern settings (model or mapping)
        geometry: Approximation tolerances
        glyph_name: Glyph identity attached to errors
        contour_index: Contour identity attached to errors
        **options: Overrides for ``config`` fields (e.g. ``spacing=20``)

    Returns:
        EffectResult with one contour per donor contour per stamp

    Raises:
        InvalidParameterError: Bad spacing, scale or option name
        InvalidDonorError: Donor empty or not closed
        DegenerateInputError: Zero-length target
    """
    try:
        pattern = coerce_config(PatternConfig, config, **options)
        return StampPlacer(pattern, geometry).place(contour, donor)
    except EffectError as e:
        raise e.with_context(glyph_name, contour_index)


def select_targets(glyph: Glyph, targets: TargetSelection = TargetSelection.OPEN) -> list[int]:
    """Indices of the contours an effect applies to.

    Only glyphs with at least one open contour are affected. Within them,
    ``OPEN`` selects the open contours and ``ALL`` every contour.
    """
    if not glyph.has_open_contours():
        return []
    if targets is TargetSelection.ALL:
        return list(range(len(glyph.contours)))
    return glyph.open_contour_indices()


def apply_effect(
    glyph: Glyph,
    settings: GlyphFxSettings,
    indices: Sequence[int] | None = None,
    donor: Sequence[Contour] | None = None,
) -> tuple[Glyph, list[SubdivisionDepthExceededError]]:
    """Run the configured effect over a glyph's target contours.

    Args:
        glyph: Input glyph (not modified)
        settings: Effect selector and parameters
        indices: Contours to replace (defaults to ``select_targets``)
        donor: Donor contours, required for the pattern effect

    Returns:
        Tuple of (edited glyph, precision warnings)

    Raises:
        EffectError: First rejected contour, tagged with glyph and index
    """
    if indices is None:
        indices = select_targets(glyph, settings.processing.targets)
    if not indices:
        return glyph, []

    if settings.effect is EffectKind.PATTERN and donor is None:
        raise InvalidDonorError("Pattern effect needs a donor", glyph_name=glyph.name)

    results: dict[int, EffectResult] = {}
    warnings: list[SubdivisionDepthExceededError] = []
    for index in indices:
        contour = glyph.contours[index]
        if settings.effect is EffectKind.NOODLE:
            result = apply_noodle(
                contour,
                settings.noodle,
                settings.geometry,
                glyph_name=glyph.name,
                contour_index=index,
            )
        else:
            result = apply_pattern(
                contour,
                donor,
                settings.pattern,
                settings.geometry,
                glyph_name=glyph.name,
                contour_index=index,
            )
        results[index] = result
        warnings.extend(result.warnings)

    logger.debug(
        "Applied %s to glyph '%s': %d contours replaced", settings.effect.value, glyph.name, len(results)
    )
    return editor.apply_many(glyph, results), warnings
