"""Console reporting for the glyphfx commands.

Everything the CLI shows goes through the shared Rich ``console``; the
structured log file is written separately by ``configure_logging``.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from glyphfx.config import EffectKind, GlyphFxSettings, TargetSelection
from glyphfx.utils.logging import ProcessingStats

console = Console()

BULLET = "•"
MARK_OK = "✓"
MARK_FAIL = "✗"
MARK_WARN = "!"

# Glyph names listed before "(+N more)"
NAME_LIST_LIMIT = 20


def describe_effect(settings: GlyphFxSettings) -> str:
    """One-line summary of the selected effect and its main parameters.

    Example:
        "noodle width 30 round/round caps miter joins"
        "pattern of 'dot' every 100 stretched"
    """
    if settings.effect is EffectKind.NOODLE:
        noodle = settings.noodle
        caps = f"{noodle.start_cap.value}/{noodle.end_cap.value} caps"
        text = f"noodle width {noodle.width:g} {caps} {noodle.join.value} joins"
        if noodle.angle:
            text += f" at {noodle.angle:g}°"
        return text

    pattern = settings.pattern
    text = f"pattern of '{pattern.pattern_glyph}' every {pattern.spacing:g}"
    if pattern.stretch:
        text += " stretched"
    if pattern.anchor_ends:
        text += " anchored"
    return text


def create_progress() -> Progress:
    """Progress bar counting finished glyphs."""
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str, settings: GlyphFxSettings) -> None:
    console.print(f"\n[bold]glyphfx[/bold] {version} {BULLET} {describe_effect(settings)}")


def print_step(message: str) -> None:
    console.print(f"\n[bold]{message}[/bold]")


def print_font_info(font_path: str, glyph_count: int, upm: int) -> None:
    """Show the source UFO and its size."""
    # Text keeps square brackets in paths from being read as markup
    line = Text("  ")
    line.append(font_path)
    line.append(f" ({glyph_count:,} glyphs, {upm:,} UPM)", style="dim")
    console.print(line)


def print_targets_found(
    count: int,
    glyph_names: list[str],
    targets: TargetSelection,
    verbose: bool,
) -> None:
    """Report the glyphs the effect will touch.

    Args:
        count: Number of glyphs with at least one target contour
        glyph_names: Their names, in font order
        targets: Which contours of those glyphs are edited
        verbose: List the names as well
    """
    scope = "open contours" if targets is TargetSelection.OPEN else "all contours"
    console.print(f"  {count} glyphs to edit ({scope})")
    if verbose and glyph_names:
        shown = ", ".join(glyph_names[:NAME_LIST_LIMIT])
        hidden = len(glyph_names) - NAME_LIST_LIMIT
        if hidden > 0:
            shown += f" (+{hidden} more)"
        console.print(f"  [dim]{shown}[/dim]")


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:.0f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    mode = "in-process" if workers == 1 else f"{workers} worker processes"
    if is_auto:
        mode += " (one per CPU)"
    console.print(f"  {mode}")


def print_summary(output_path: str, stats: ProcessingStats) -> None:
    """Summarise a finished run.

    The per-glyph timing line is only shown when at least one glyph was
    processed.
    """
    console.print(
        f"\n[bold green]{MARK_OK} Complete[/bold green] "
        f"in {_format_duration(stats.duration_seconds)}"
    )
    line = Text("  ")
    line.append(output_path, style="bold")
    console.print(line)

    failed_style = "red" if stats.error_count else "dim"
    console.print(
        f"  {stats.processed_count} edited {BULLET} {stats.skipped_count} untouched {BULLET} "
        f"[{failed_style}]{stats.error_count} failed[/{failed_style}] {BULLET} "
        f"{stats.contours_replaced} contours replaced"
    )
    if stats.warning_count:
        console.print(
            f"  [yellow]{MARK_WARN} {stats.warning_count} approximation warnings[/yellow] "
            "[dim](details in the log file)[/dim]"
        )
    if stats.processed_count:
        console.print(
            f"  [dim]{stats.avg_glyph_ms:.1f}ms per glyph "
            f"({stats.min_glyph_ms:.1f} to {stats.max_glyph_ms:.1f}ms)[/dim]"
        )


def print_glyph_errors(errors: list[tuple[str, str]], limit: int = 10) -> None:
    """List failed glyphs and their errors."""
    for glyph_name, message in errors[:limit]:
        console.print(f"  [red]{MARK_FAIL}[/red] {glyph_name}: {message}")
    if len(errors) > limit:
        console.print(f"  (+{len(errors) - limit} more in the log file)")


def print_error(message: str, details: str | None = None) -> None:
    console.print(f"\n[bold red]{MARK_FAIL} {message}[/bold red]")
    if details:
        console.print(f"  {details}")


def print_interrupted() -> None:
    """Report a Ctrl+C during processing; the UFO is only written at the end."""
    console.print(f"\n[yellow]{MARK_WARN} Interrupted[/yellow], the UFO was not written")
