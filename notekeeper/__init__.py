"""
Notekeeper.

- core/: Configuration, logging, exceptions, resilience
- schemas/: Note record and mutation inputs (Pydantic)
- services/: Color normalizer, ordering policy, note state manager
- store/: Remote note store clients (in-memory, PostgREST)
- events/: Operation notification channel
- cli/: Terminal client (Typer + Rich)
"""

__version__ = "0.1.0"
