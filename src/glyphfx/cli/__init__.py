"""Command-line interface for glyphfx.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- noodle and pattern subcommands
- Progress bars for glyph processing
- Verbose/quiet output modes
- Detailed error reporting
"""

from glyphfx.cli.app import app, cli, main

__all__ = ["app", "cli", "main"]
