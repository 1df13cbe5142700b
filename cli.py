#!/usr/bin/env python3
"""
Notekeeper CLI.

Command-line client for the note store.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                                   # Show help

    # One-shot note commands
    python cli.py notes list                               # Pinned first, newest first
    python cli.py notes list -q groceries                  # Search title and content
    python cli.py notes add -t "Groceries" -c "milk"       # Create
    python cli.py notes edit 3f2a -c "milk, eggs"          # Edit by id prefix
    python cli.py notes pin 3f2a                           # Pin / unpin
    python cli.py notes color 3f2a yellow                  # Recolor
    python cli.py notes delete 3f2a                        # Delete

    # Interactive mode
    python cli.py shell                                    # Start interactive shell

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import asyncio
import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from notekeeper.cli.commands import notes_app  # noqa: E402

app = typer.Typer(
    name="cli",
    help="Notekeeper CLI - create, edit, pin, color, search and delete notes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(notes_app, name="notes")


def _validate_project_root() -> None:
    """Validate that the project root marker can be found."""
    from notekeeper.core.config import find_project_root

    try:
        find_project_root()
    except RuntimeError:
        console.print("[red]Error: .project_root not found. Run from project root.[/red]")
        raise typer.Exit(1)


@app.command()
def shell() -> None:
    """
    Start interactive shell mode.

    Keeps one session open so several operations can be in flight at once.
    """
    from notekeeper.cli.shell import run_shell

    asyncio.run(run_shell())


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Notekeeper CLI.

    Notes are kept in the store configured in config/settings/store.yaml.
    """
    _validate_project_root()

    from notekeeper.core.logging import setup_logging

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging()


if __name__ == "__main__":
    app()
