"""
Interactive Shell Mode.

REPL that keeps one note state manager alive for the whole session, the
terminal counterpart of the notes page. Mutations are fire-and-forget:
the optimistic change is visible immediately and the store's answer
arrives later as a notification line.

Input is read on a worker thread so in-flight operations keep
reconciling while the prompt waits.
"""

import asyncio
import shlex
from collections.abc import Awaitable, Callable

from rich.console import Console
from rich.table import Table

from notekeeper.cli.commands.notes import resolve_id
from notekeeper.cli.render import render_notes, render_notification, short_id
from notekeeper.core.exceptions import ApplicationError
from notekeeper.services.note_state import NoteStateManager

console = Console()

FIELD_NAMES = ("title", "content", "color", "pinned")


def parse_assignments(args: list[str]) -> dict[str, str]:
    """Parse ``field=value`` arguments into a change mapping."""
    changes: dict[str, str] = {}
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep or name not in FIELD_NAMES:
            raise ValueError(f"Expected field=value with field in {', '.join(FIELD_NAMES)}, got {arg!r}")
        changes[name] = value
    return changes


def parse_new(args: list[str]) -> dict[str, object]:
    """Parse ``<title> [content] [--color C] [--pin]`` into a draft mapping."""
    draft: dict[str, object] = {"pinned": False}
    positional: list[str] = []
    rest = iter(args)
    for arg in rest:
        if arg == "--pin":
            draft["pinned"] = True
        elif arg == "--color":
            draft["color"] = next(rest, "default")
        else:
            positional.append(arg)

    if positional:
        draft["title"] = positional[0]
    if len(positional) > 1:
        draft["content"] = " ".join(positional[1:])
    return draft


class InteractiveShell:
    """
    Interactive shell over a single NoteStateManager.

    Usage:
        shell = InteractiveShell(NoteStateManager.from_config())
        await shell.run()
    """

    def __init__(self, manager: NoteStateManager, out: Console | None = None) -> None:
        self.manager = manager
        self.console = out or console
        self.running = False
        self.commands: dict[str, Callable[[list[str]], Awaitable[None]]] = {
            "help": self._cmd_help,
            "list": self._cmd_list,
            "search": self._cmd_search,
            "new": self._cmd_new,
            "edit": self._cmd_edit,
            "pin": self._cmd_pin,
            "unpin": self._cmd_unpin,
            "color": self._cmd_color,
            "delete": self._cmd_delete,
            "reload": self._cmd_reload,
            "clear": self._cmd_clear,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }
        self.manager.notifications.subscribe(
            lambda event: render_notification(self.console, event),
        )

    async def run(self) -> None:
        """Run the interactive shell."""
        self.running = True
        self.console.print("[bold]Notes[/bold]  Type [cyan]help[/cyan] for commands, [cyan]quit[/cyan] to exit.")
        await self.manager.load()

        while self.running:
            try:
                user_input = (await asyncio.to_thread(self.console.input, "[bold cyan]>[/bold cyan] ")).strip()
            except (EOFError, KeyboardInterrupt):
                break

            if user_input:
                await self.execute(user_input)

        await self.manager.close()
        self.console.print("[dim]Goodbye![/dim]")

    async def execute(self, line: str) -> None:
        """Parse and run a single command line."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]Error: {e}[/red]")
            return

        command, args = parts[0].lower(), parts[1:]
        handler = self.commands.get(command)
        if handler is None:
            self.console.print(f"[red]Unknown command: {command}[/red]")
            self.console.print("Type [cyan]help[/cyan] for available commands.")
            return

        try:
            await handler(args)
        except ApplicationError as e:
            self.console.print(f"[red]Error: {e.message}[/red]")
        except ValueError as e:
            self.console.print(f"[red]Error: {e}[/red]")

    async def _cmd_help(self, args: list[str]) -> None:
        """Display help information."""
        table = Table(title="Available Commands", show_header=True)
        table.add_column("Command", style="cyan")
        table.add_column("Description")

        table.add_row("list", "Show notes matching the current search")
        table.add_row("search <text>", "Set the search query (no text clears it)")
        table.add_row("new <title> [content] [--color C] [--pin]", "Create a note")
        table.add_row("edit <id> field=value ...", "Change title, content, color or pinned")
        table.add_row("pin <id> / unpin <id>", "Pin or unpin a note")
        table.add_row("color <id> <color>", "Change a note's color")
        table.add_row("delete <id>", "Delete a note")
        table.add_row("reload", "Fetch notes from the store again")
        table.add_row("clear", "Clear the screen")
        table.add_row("quit / exit", "Exit the shell")

        self.console.print(table)

    async def _cmd_list(self, args: list[str]) -> None:
        render_notes(self.console, self.manager)

    async def _cmd_search(self, args: list[str]) -> None:
        self.manager.search_query = " ".join(args)
        render_notes(self.console, self.manager)

    async def _cmd_new(self, args: list[str]) -> None:
        self.manager.request_create(parse_new(args))
        render_notes(self.console, self.manager)

    async def _cmd_edit(self, args: list[str]) -> None:
        if not args:
            raise ValueError("Usage: edit <id> field=value ...")
        note_id = resolve_id(self.manager, args[0])
        self.manager.request_update(note_id, parse_assignments(args[1:]))

    async def _cmd_pin(self, args: list[str]) -> None:
        await self._set(args, pinned=True)

    async def _cmd_unpin(self, args: list[str]) -> None:
        await self._set(args, pinned=False)

    async def _cmd_color(self, args: list[str]) -> None:
        if len(args) != 2:
            raise ValueError("Usage: color <id> <color>")
        await self._set(args[:1], color=args[1])

    async def _cmd_delete(self, args: list[str]) -> None:
        if len(args) != 1:
            raise ValueError("Usage: delete <id>")
        note_id = resolve_id(self.manager, args[0])
        self.manager.request_delete(note_id)
        self.console.print(f"[dim]Deleting {short_id(note_id)}…[/dim]")

    async def _cmd_reload(self, args: list[str]) -> None:
        await self.manager.drain()
        result = await self.manager.load()
        if result.ok:
            render_notes(self.console, self.manager)

    async def _cmd_clear(self, args: list[str]) -> None:
        """Clear the screen."""
        self.console.clear()

    async def _cmd_quit(self, args: list[str]) -> None:
        """Exit the shell."""
        self.running = False

    async def _set(self, args: list[str], **changes: object) -> None:
        if len(args) != 1:
            raise ValueError("Expected exactly one note id")
        self.manager.request_update(resolve_id(self.manager, args[0]), changes)


async def run_shell() -> None:
    """Run the interactive shell against the configured store."""
    shell = InteractiveShell(NoteStateManager.from_config())
    await shell.run()
