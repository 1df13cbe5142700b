"""
CLI Commands.

Organized by domain/feature area.
"""

from notekeeper.cli.commands.notes import app as notes_app

__all__ = [
    "notes_app",
]
