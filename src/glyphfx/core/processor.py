"""Parallel processing orchestration for the path-effect pipeline.

This module coordinates the full workflow with parallel processing of
individual glyphs using ProcessPoolExecutor.

Key components:
- process_glyph: Top-level picklable function for parallel execution
- FontProcessor: Main orchestrator class for font processing
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from glyphfx.config import EffectKind, GlyphFxSettings
from glyphfx.core.effects import apply_effect, select_targets
from glyphfx.core.pattern import StampFrame
from glyphfx.domain import Contour, Glyph
from glyphfx.exceptions import GlyphNotFoundError, GlyphProcessingError, InvalidDonorError
from glyphfx.io import UfoReader, UfoWriter
from glyphfx.utils import ProcessingLogger, ProcessingStats, configure_logging

ProgressCallback = Callable[[int, int, str, bool], None]


def process_glyph(
    glyph_dict: dict[str, Any],
    settings_dict: dict[str, Any],
    upm: int,
    donor_dicts: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Apply the configured effect to a single glyph.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes glyph, applies the effect, and returns result.

    Args:
        glyph_dict: Serialized glyph (from Glyph.to_dict())
        settings_dict: Serialized GlyphFxSettings
        upm: Font units per em (tolerances are scaled to it)
        donor_dicts: Serialized donor contours for the pattern effect

    Returns:
        Dictionary containing either:
        - Success: {"glyph": glyph_dict, "contours_replaced": int,
          "warnings": list[str], "duration_ms": float}
        - Error: {"error": str, "error_type": str, "glyph_name": str,
          "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        glyph = Glyph.from_dict(glyph_dict)

        settings = GlyphFxSettings.model_validate(settings_dict)
        settings = settings.model_copy(update={"geometry": settings.geometry.for_upm(upm)})

        donor = None
        if donor_dicts is not None:
            donor = [Contour.from_dict(d) for d in donor_dicts]

        indices = select_targets(glyph, settings.processing.targets)
        transformed_glyph, warnings = apply_effect(glyph, settings, indices, donor)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "glyph": transformed_glyph.to_dict(),
            "contours_replaced": len(indices),
            "warnings": [str(w) for w in warnings],
            "duration_ms": duration_ms,
        }

    except Exception as e:
        # Capture full traceback for debugging
        duration_ms = (time.time() - start_time) * 1000
        tb = traceback.format_exc()
        return {
            "error": str(e),
            "error_type": type(e).__name__,
            "glyph_name": glyph_dict.get("metadata", {}).get("name", "unknown"),
            "traceback": tb,
            "duration_ms": duration_ms,
        }


class FontProcessor:
    """Orchestrates parallel path-effect processing of a UFO.

    Manages the complete workflow:
    1. Load the UFO
    2. Resolve the pattern donor glyph (pattern effect only)
    3. Filter glyphs requiring processing (those with open contours)
    4. Process glyphs in parallel using worker processes
    5. Merge results back in font order and save

    Example:
        settings = GlyphFxSettings(noodle=NoodleConfig(width=40))
        processor = FontProcessor(settings)
        stats = processor.process(
            font_path=Path("Font.ufo"),
            output_path=Path("Font-noodle.ufo"),
            max_workers=4
        )
    """

    def __init__(self, config: GlyphFxSettings, quiet: bool = False) -> None:
        """Initialize font processor with configuration.

        Args:
            config: Settings with effect, geometry and processing config
            quiet: Suppress console logging except errors
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=quiet,
        )

    def _resolve_donor(self, reader: UfoReader) -> list[Contour]:
        """Load and check the pattern donor glyph's contours.

        Raises:
            GlyphNotFoundError: If no donor is configured or it is missing
            InvalidDonorError: If the donor has no contours or an open one
        """
        name = self.config.pattern.pattern_glyph
        if not name:
            raise GlyphNotFoundError("<pattern glyph not set>")
        glyph = reader.get_glyph(name)
        if glyph is None:
            raise GlyphNotFoundError(name)

        try:
            StampFrame(list(glyph.contours), self.config.pattern)
        except InvalidDonorError as e:
            raise e.with_context(glyph_name=name)

        self.logger.info("Pattern donor resolved", glyph=name, contours=len(glyph.contours))
        return list(glyph.contours)

    def process(
        self,
        font_path: Path,
        output_path: Path | None = None,
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ProcessingStats:
        """Process a UFO with parallel glyph processing.

        Args:
            font_path: Path to the input UFO
            output_path: Path for the output UFO (None = modify in place)
            max_workers: Maximum worker processes (None = config, then auto;
                1 = run in-process)
            progress_callback: Optional callback(completed, total, glyph_name, success)
                for progress updates

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            FileNotFoundError: If the UFO does not exist
            FontLoadError: If the UFO cannot be parsed
            GlyphNotFoundError: If the pattern donor glyph is missing
            InvalidDonorError: If the pattern donor is unusable
            GlyphProcessingError: On the first failed glyph with fail_fast
            KeyboardInterrupt: If processing is cancelled by user
        """
        processing_logger = ProcessingLogger(self.logger)
        stats = processing_logger.stats
        stats.start_time = time.time()

        # Use config default if max_workers not specified
        if max_workers is None:
            max_workers = self.config.processing.max_workers

        self.logger.info(
            "Starting font processing",
            input=str(font_path),
            output=str(output_path or font_path),
            effect=self.config.effect.value,
            max_workers=max_workers,
        )

        reader = UfoReader(font_path)
        reader.load()

        try:
            upm = reader.units_per_em

            self.logger.info("Font loaded", upm=upm, glyph_count=reader.glyph_count)

            donor: list[Contour] | None = None
            if self.config.effect is EffectKind.PATTERN:
                donor = self._resolve_donor(reader)

            tasks: list[tuple[int, Glyph]] = []
            for index, glyph in enumerate(reader.iter_glyphs()):
                if glyph.is_empty():
                    processing_logger.log_glyph_skipped(glyph.name, "empty glyph")
                elif donor is not None and glyph.name == self.config.pattern.pattern_glyph:
                    processing_logger.log_glyph_skipped(glyph.name, "pattern donor")
                elif not select_targets(glyph, self.config.processing.targets):
                    processing_logger.log_glyph_skipped(glyph.name, "no open contours")
                else:
                    processing_logger.log_glyph_start(glyph.name, len(glyph.contours))
                    tasks.append((index, glyph))

            self.logger.info(
                "Filtered glyphs",
                total=reader.glyph_count,
                to_process=len(tasks),
                skipped=stats.skipped_count,
            )

            processed: dict[int, Glyph] = {}
            if tasks:
                processed = self._process_glyphs_parallel(
                    tasks=tasks,
                    upm=upm,
                    donor=donor,
                    max_workers=max_workers,
                    processing_logger=processing_logger,
                    progress_callback=progress_callback,
                )
            else:
                self.logger.info("No glyphs to process")

            # Results arrive in completion order; write them in font order
            ordered = [processed[index] for index in sorted(processed)]
            self._save_font(font_path, output_path, ordered)

        finally:
            reader.close()

        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            contours_replaced=stats.contours_replaced,
            warnings=stats.warning_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return stats

    def _handle_result(
        self,
        glyph_name: str,
        result: dict[str, Any],
        processing_logger: ProcessingLogger,
    ) -> Glyph | None:
        """Record one task result; return the transformed glyph on success."""
        if "error" in result:
            processing_logger.log_glyph_error(
                glyph_name=result["glyph_name"],
                error=GlyphProcessingError(glyph_name, result["error"]),
                traceback=result.get("traceback"),
            )
            return None

        for warning in result.get("warnings", []):
            processing_logger.log_glyph_warning(glyph_name, warning)
        processing_logger.log_glyph_complete(
            glyph_name=glyph_name,
            contours_replaced=result["contours_replaced"],
            duration_ms=result.get("duration_ms", 0.0),
        )
        return Glyph.from_dict(result["glyph"])

    def _process_glyphs_parallel(
        self,
        tasks: list[tuple[int, Glyph]],
        upm: int,
        donor: list[Contour] | None,
        max_workers: int | None,
        processing_logger: ProcessingLogger,
        progress_callback: ProgressCallback | None = None,
    ) -> dict[int, Glyph]:
        """Process glyphs in parallel using ProcessPoolExecutor.

        Args:
            tasks: (font order index, glyph) pairs
            upm: Font units per em
            donor: Pattern donor contours, if any
            max_workers: Maximum worker processes (1 = in-process)
            processing_logger: Logger owning the run's statistics
            progress_callback: Optional callback(completed, total, glyph_name, success)
                for progress updates

        Returns:
            Dictionary mapping font order index to transformed glyph

        Raises:
            GlyphProcessingError: On the first failure when fail_fast is set
        """
        processed: dict[int, Glyph] = {}
        stats = processing_logger.stats

        # Serialize configuration for workers
        settings_dict = self.config.model_dump(mode="json")
        donor_dicts = [c.to_dict() for c in donor] if donor is not None else None
        fail_fast = self.config.processing.fail_fast

        total = len(tasks)
        completed = 0

        self.logger.info(
            "Starting parallel processing",
            glyph_count=total,
            max_workers=max_workers,
        )

        def record(index: int, glyph_name: str, result: dict[str, Any]) -> None:
            nonlocal completed
            glyph = self._handle_result(glyph_name, result, processing_logger)
            if glyph is not None:
                processed[index] = glyph
            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total, glyph_name, glyph is not None)
            if glyph is None and fail_fast:
                raise GlyphProcessingError(glyph_name, result["error"])

        if max_workers == 1:
            for index, glyph in tasks:
                result = process_glyph(glyph.to_dict(), settings_dict, upm, donor_dicts)
                record(index, glyph.name, result)
            return processed

        pending_futures: dict[Future, tuple[int, str]] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            # Submit all tasks
            for index, glyph in tasks:
                future = executor.submit(
                    process_glyph,
                    glyph.to_dict(),
                    settings_dict,
                    upm,
                    donor_dicts,
                )
                pending_futures[future] = (index, glyph.name)

            try:
                # Collect results as they complete
                for future in as_completed(list(pending_futures)):
                    index, glyph_name = pending_futures.pop(future)

                    try:
                        result = future.result()
                    except Exception as e:
                        # Executor-level error
                        result = {
                            "error": str(e),
                            "error_type": type(e).__name__,
                            "glyph_name": glyph_name,
                            "traceback": traceback.format_exc(),
                        }

                    record(index, glyph_name, result)

            except GlyphProcessingError:
                self.logger.info("Aborting batch after failure", pending=len(pending_futures))
                for f in pending_futures:
                    f.cancel()
                executor.shutdown(wait=True, cancel_futures=True)
                raise

            except KeyboardInterrupt:
                # Cancel pending futures
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return processed

    def _save_font(
        self,
        font_path: Path,
        output_path: Path | None,
        glyphs: list[Glyph],
    ) -> None:
        """Save the modified glyphs.

        Args:
            font_path: Source UFO path
            output_path: Destination (None = in place)
            glyphs: Processed glyphs in font order
        """
        writer = UfoWriter(font_path, output_path)

        for glyph in glyphs:
            writer.update_glyph(glyph)

        writer.save()

        self.logger.info(
            "Font saved",
            output=str(writer.output_path),
            updated_glyphs=len(glyphs),
        )
