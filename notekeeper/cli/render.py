"""
Terminal Rendering.

Rich renderables for notes and notifications, laid out like the web page:
a "Pinned" section, then "Others" (only labelled when something is pinned).
"""

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from notekeeper.events.schemas import Notification
from notekeeper.schemas.note import Note
from notekeeper.services.colors import NoteColor
from notekeeper.services.note_state import NoteStateManager

COLOR_STYLES: dict[NoteColor, str] = {
    NoteColor.DEFAULT: "white",
    NoteColor.YELLOW: "yellow",
    NoteColor.GREEN: "green",
    NoteColor.BLUE: "blue",
    NoteColor.PINK: "magenta",
    NoteColor.PURPLE: "purple",
}

SHORT_ID_LENGTH = 8


def short_id(note_id: str) -> str:
    return note_id[:SHORT_ID_LENGTH]


def note_panel(note: Note, pending: bool = False) -> Panel:
    """Render one note as a card."""
    body = Text(note.content or "", overflow="fold")
    subtitle = f"{short_id(note.id)} · {note.created_at:%Y-%m-%d %H:%M}"
    if pending:
        subtitle += " · saving…"

    title = Text()
    if note.pinned:
        title.append("📌 ")
    if note.title:
        title.append(note.title, style="bold")

    return Panel(
        body,
        title=title if title.plain else None,
        title_align="left",
        subtitle=subtitle,
        subtitle_align="right",
        border_style=COLOR_STYLES[note.color],
        width=36,
    )


def render_notes(console: Console, manager: NoteStateManager) -> None:
    """Print the current filtered view in display order."""
    if not manager.visible_notes:
        if manager.search_query.strip():
            console.print("[bold]No notes found[/bold]")
            console.print("[dim]Try adjusting your search terms[/dim]")
        else:
            console.print("[bold]No notes yet[/bold]")
            console.print("[dim]Create your first note to get started[/dim]")
        return

    pinned = manager.pinned_notes
    others = manager.other_notes

    if pinned:
        console.print("[dim]Pinned[/dim]")
        console.print(Columns([note_panel(n, manager.is_pending(n.id)) for n in pinned]))
        if others:
            console.print("[dim]Others[/dim]")

    if others:
        console.print(Columns([note_panel(n, manager.is_pending(n.id)) for n in others]))


def render_notification(console: Console, notification: Notification) -> None:
    """Print a notification as a one-line toast."""
    if notification.ok:
        console.print(f"[green]✓ {notification.title}[/green]")
    else:
        console.print(f"[red]✗ {notification.title}: {notification.description}[/red]")
