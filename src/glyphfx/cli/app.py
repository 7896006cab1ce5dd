"""CLI application entry point for glyphfx.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from glyphfx import __version__
from glyphfx.cli.output import (
    console,
    create_progress,
    print_error,
    print_font_info,
    print_glyph_errors,
    print_header,
    print_interrupted,
    print_processing_info,
    print_step,
    print_summary,
    print_targets_found,
)
from glyphfx.config import (
    CapStyle,
    EffectKind,
    GlyphFxSettings,
    JoinStyle,
    LoggingConfig,
    NoodleConfig,
    PatternAxis,
    PatternConfig,
    PatternCopies,
    ProcessingConfig,
    TargetSelection,
)
from glyphfx.core import FontProcessor, NoodleStroker, StampPlacer, select_targets
from glyphfx.exceptions import FontLoadError, FontSaveError, GlyphFxError
from glyphfx.io import UfoReader

# Create the Typer app
app = typer.Typer(
    name="glyphfx",
    help="Apply noodle and pattern-along-path effects to the open contours of a UFO.",
    add_completion=False,
    no_args_is_help=True,
)

InputUfo = Annotated[
    Path,
    typer.Argument(
        help="Path to the input .ufo directory",
        show_default=False,
    ),
]
OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output UFO (default: modify the input in place)",
    ),
]
TargetsOption = Annotated[
    TargetSelection,
    typer.Option(
        "--targets",
        help="Contours to transform in glyphs with open contours (open|all)",
    ),
]
WorkersOption = Annotated[
    int | None,
    typer.Option(
        "--workers",
        "-j",
        help="Number of parallel workers (default: auto, 1 = no subprocesses)",
        min=1,
    ),
]
FailFastOption = Annotated[
    bool,
    typer.Option(
        "--fail-fast",
        help="Stop at the first glyph that fails",
    ),
]
LogFileOption = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write detailed logs to file",
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Logging level (DEBUG|INFO|WARNING|ERROR)",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Verbose console output",
    ),
]
QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Minimal console output",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]glyphfx[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Apply geometric path effects to glyph outlines."""


@app.command()
def noodle(
    input_ufo: InputUfo,
    width: Annotated[
        float,
        typer.Option(
            "--width",
            "-w",
            help="Stroke width in font units",
            show_default=False,
        ),
    ],
    output: OutputOption = None,
    cap: Annotated[
        CapStyle,
        typer.Option("--cap", help="Cap style for both ends"),
    ] = CapStyle.ROUND,
    cap_start: Annotated[
        CapStyle | None,
        typer.Option("--cap-start", help="Cap style at the start (default: --cap)"),
    ] = None,
    cap_end: Annotated[
        CapStyle | None,
        typer.Option("--cap-end", help="Cap style at the end (default: --cap)"),
    ] = None,
    join: Annotated[
        JoinStyle,
        typer.Option("--join", help="Join style for corners"),
    ] = JoinStyle.ROUND,
    miter_limit: Annotated[
        float,
        typer.Option("--miter-limit", help="Miter length to width ratio before beveling"),
    ] = 4.0,
    angle: Annotated[
        float,
        typer.Option(
            "--angle",
            help="Angle of the stroke direction from the normal, in degrees",
            min=-89.0,
            max=89.0,
        ),
    ] = 0.0,
    targets: TargetsOption = TargetSelection.OPEN,
    workers: WorkersOption = None,
    fail_fast: FailFastOption = False,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Stroke open contours into constant-width outlines.

    Example:
        glyphfx noodle Sketch.ufo --width 40 --cap square -o Sketch-noodle.ufo
    """
    settings = GlyphFxSettings(
        effect=EffectKind.NOODLE,
        noodle=NoodleConfig(
            width=width,
            cap=cap,
            cap_start=cap_start,
            cap_end=cap_end,
            join=join,
            miter_limit=miter_limit,
            angle=angle,
        ),
        processing=ProcessingConfig(max_workers=workers, fail_fast=fail_fast, targets=targets),
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )
    _run(input_ufo, output, settings, verbose=verbose, quiet=quiet)


@app.command()
def pattern(
    input_ufo: InputUfo,
    pattern_glyph: Annotated[
        str,
        typer.Option(
            "--pattern-glyph",
            "-p",
            help="Glyph whose closed contours are stamped along each path",
            show_default=False,
        ),
    ],
    spacing: Annotated[
        float,
        typer.Option(
            "--spacing",
            "-s",
            help="Centre-to-centre distance between stamps",
            show_default=False,
        ),
    ],
    output: OutputOption = None,
    stretch: Annotated[
        bool,
        typer.Option("--stretch", help="Stretch stamps to fill their slots exactly"),
    ] = False,
    anchor_ends: Annotated[
        bool,
        typer.Option("--anchor-ends", help="Pin first and last stamps to open path ends"),
    ] = False,
    mode: Annotated[
        PatternCopies,
        typer.Option("--mode", help="One stamp per path or repeated stamps"),
    ] = PatternCopies.REPEATED,
    sx: Annotated[
        float,
        typer.Option("--sx", help="Stamp scale along the path"),
    ] = 1.0,
    sy: Annotated[
        float,
        typer.Option("--sy", help="Stamp scale across the path"),
    ] = 1.0,
    noffset: Annotated[
        float,
        typer.Option("--noffset", help="Offset of stamps along the path normal"),
    ] = 0.0,
    toffset: Annotated[
        float,
        typer.Option("--toffset", help="Shift of stamps along the path"),
    ] = 0.0,
    center: Annotated[
        bool,
        typer.Option("--center/--no-center", help="Anchor stamps at their centre (else origin)"),
    ] = True,
    axis: Annotated[
        PatternAxis,
        typer.Option("--axis", help="Stamp axis that follows the path"),
    ] = PatternAxis.AUTO,
    targets: TargetsOption = TargetSelection.OPEN,
    workers: WorkersOption = None,
    fail_fast: FailFastOption = False,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Repeat a donor glyph along open contours.

    Example:
        glyphfx pattern Sketch.ufo -p dot --spacing 60 --stretch
    """
    settings = GlyphFxSettings(
        effect=EffectKind.PATTERN,
        pattern=PatternConfig(
            pattern_glyph=pattern_glyph,
            spacing=spacing,
            stretch=stretch,
            anchor_ends=anchor_ends,
            copies=mode,
            scale_x=sx,
            scale_y=sy,
            normal_offset=noffset,
            tangent_offset=toffset,
            center_pattern=center,
            axis=axis,
        ),
        processing=ProcessingConfig(max_workers=workers, fail_fast=fail_fast, targets=targets),
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )
    _run(input_ufo, output, settings, verbose=verbose, quiet=quiet)


def _check_parameters(settings: GlyphFxSettings) -> None:
    """Validate effect parameters before any glyph is touched.

    Raises:
        InvalidParameterError: If a parameter is out of range
    """
    if settings.effect is EffectKind.NOODLE:
        NoodleStroker(settings.noodle, settings.geometry)
    else:
        StampPlacer(settings.pattern, settings.geometry)


def _run(
    input_ufo: Path,
    output: Path | None,
    settings: GlyphFxSettings,
    verbose: bool,
    quiet: bool,
) -> None:
    """Shared driver for the effect commands."""
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not input_ufo.exists():
        print_error(
            f"Input not found: {input_ufo}",
            details=f"The path '{input_ufo}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_ufo.is_dir():
        print_error(
            f"Input path is not a UFO: {input_ufo}",
            details="Please provide a path to a .ufo directory.",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__, settings)

    try:
        _check_parameters(settings)

        if not quiet:
            print_step("Loading font")

        try:
            with UfoReader(input_ufo) as reader:
                glyph_count = reader.glyph_count
                upm = reader.units_per_em
                target_glyphs = [
                    glyph.name
                    for glyph in reader.iter_glyphs()
                    if select_targets(glyph, settings.processing.targets)
                ]
        except FileNotFoundError as e:
            raise FontLoadError(str(input_ufo), str(e)) from e

        if not quiet:
            print_font_info(font_path=str(input_ufo), glyph_count=glyph_count, upm=upm)
            print_step("Scanning glyphs")
            print_targets_found(
                count=len(target_glyphs),
                glyph_names=target_glyphs,
                targets=settings.processing.targets,
                verbose=verbose,
            )

        if not target_glyphs:
            if not quiet:
                console.print("\nNo glyphs with open contours found. Nothing to process.")
            raise typer.Exit(code=0)

        workers = settings.processing.max_workers
        if not quiet:
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Processing")
            print_processing_info(actual_workers, is_auto=(workers is None))

        actual_output_path = output if output is not None else input_ufo

        processor = FontProcessor(settings, quiet=quiet)

        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task(
                        f"Processing {len(target_glyphs)} glyphs",
                        total=len(target_glyphs),
                    )

                    def update_progress(completed: int, *_: object) -> None:
                        progress.update(task_id, completed=completed)

                    stats = processor.process(
                        font_path=input_ufo,
                        output_path=output,
                        progress_callback=update_progress,
                    )
            else:
                stats = processor.process(font_path=input_ufo, output_path=output)
        except KeyboardInterrupt:
            if not quiet:
                print_interrupted()
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        if not quiet:
            print_summary(str(actual_output_path), stats)
            if stats.errors:
                print_glyph_errors(stats.errors)

    except FontLoadError as e:
        print_error(f"Could not load font: {e.reason}")
        raise typer.Exit(code=1)
    except FontSaveError as e:
        print_error(f"Could not save font: {e.reason}")
        raise typer.Exit(code=1)
    except GlyphFxError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
