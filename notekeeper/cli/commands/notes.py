"""
Note Commands.

One-shot commands against the configured note store. Each command loads
the collection, performs a single operation through the note state
manager, waits for it to reconcile, and prints the resulting notification.

Note ids may be abbreviated to any unique prefix.
"""

import asyncio
from collections.abc import Awaitable, Callable

import typer
from rich.console import Console

from notekeeper.cli.render import render_notes, render_notification
from notekeeper.core.config import get_app_config
from notekeeper.core.exceptions import NotFoundFailure, ValidationFailure
from notekeeper.services.colors import NOTE_COLORS
from notekeeper.services.note_state import NoteStateManager, OperationResult

app = typer.Typer(help="Create, edit, pin, color, search and delete notes")
console = Console()

Action = Callable[[NoteStateManager], Awaitable[OperationResult]]


def resolve_id(manager: NoteStateManager, prefix: str) -> str:
    """
    Expand an abbreviated note id.

    Raises:
        NotFoundFailure: If no note id starts with the prefix
        ValidationFailure: If more than one does
    """
    matches = [note.id for note in manager.notes if note.id.startswith(prefix)]
    if not matches:
        raise NotFoundFailure(f"Note {prefix} not found")
    if len(matches) > 1:
        raise ValidationFailure(
            f"Note id {prefix} is ambiguous",
            details={"candidates": matches},
        )
    return matches[0]


def open_manager() -> NoteStateManager:
    """
    Create a manager from config that prints its notifications.

    The memory backend lives only as long as one process, so one-shot
    commands refuse it and point at the shell instead.
    """
    if get_app_config().store.backend == "memory":
        console.print(
            "[red]Error: the memory store does not outlive a single command.[/red]\n"
            "Set backend: postgrest in config/settings/store.yaml, "
            "or run [bold]cli.py shell[/bold] to work with in-memory notes.",
        )
        raise typer.Exit(1)
    manager = NoteStateManager.from_config()
    manager.notifications.subscribe(lambda event: render_notification(console, event))
    return manager


async def _execute(action: Action) -> None:
    """Load, run one action, and exit non-zero if anything failed."""
    manager = open_manager()
    try:
        loaded = await manager.load()
        if not loaded.ok:
            raise typer.Exit(1)
        result = await action(manager)
        if not result.ok:
            raise typer.Exit(1)
    except (ValidationFailure, NotFoundFailure) as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        await manager.close()


@app.command("list")
def list_notes(
    query: str = typer.Option("", "--query", "-q", help="Only show notes containing this text"),
) -> None:
    """
    List notes, pinned first then newest first.

    Examples:
        cli.py notes list
        cli.py notes list -q groceries
    """
    asyncio.run(_list(query))


async def _list(query: str) -> None:
    manager = open_manager()
    try:
        loaded = await manager.load()
        if not loaded.ok:
            raise typer.Exit(1)
        manager.search_query = query
        render_notes(console, manager)
    finally:
        await manager.close()


@app.command()
def add(
    title: str = typer.Option("", "--title", "-t", help="Note title"),
    content: str = typer.Option("", "--content", "-c", help="Note body"),
    color: str = typer.Option("default", "--color", help=f"One of {', '.join(NOTE_COLORS)} or a swatch hex"),
    pin: bool = typer.Option(False, "--pin", help="Pin the note"),
) -> None:
    """
    Create a note. A title or content is required.

    Examples:
        cli.py notes add -t "Groceries" -c "milk, eggs" --color yellow
    """
    draft = {"title": title, "content": content, "color": color, "pinned": pin}
    asyncio.run(_execute(lambda manager: manager.create(draft)))


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="Note id or unique prefix"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    content: str | None = typer.Option(None, "--content", "-c", help="New body"),
) -> None:
    """Change a note's title and/or content."""
    changes = {}
    if title is not None:
        changes["title"] = title
    if content is not None:
        changes["content"] = content
    asyncio.run(_execute(_set_fields(note_id, changes)))


@app.command()
def pin(note_id: str = typer.Argument(..., help="Note id or unique prefix")) -> None:
    """Pin a note to the top."""
    asyncio.run(_execute(_set_fields(note_id, {"pinned": True})))


@app.command()
def unpin(note_id: str = typer.Argument(..., help="Note id or unique prefix")) -> None:
    """Unpin a note."""
    asyncio.run(_execute(_set_fields(note_id, {"pinned": False})))


@app.command()
def color(
    note_id: str = typer.Argument(..., help="Note id or unique prefix"),
    value: str = typer.Argument(..., help="Color name or swatch hex"),
) -> None:
    """Change a note's color."""
    asyncio.run(_execute(_set_fields(note_id, {"color": value})))


@app.command()
def delete(note_id: str = typer.Argument(..., help="Note id or unique prefix")) -> None:
    """Delete a note."""

    async def action(manager: NoteStateManager) -> OperationResult:
        return await manager.delete(resolve_id(manager, note_id))

    asyncio.run(_execute(action))


def _set_fields(note_id: str, changes: dict) -> Action:
    async def action(manager: NoteStateManager) -> OperationResult:
        return await manager.update(resolve_id(manager, note_id), changes)

    return action
