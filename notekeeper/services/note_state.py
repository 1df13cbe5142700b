"""
Note State Manager.

Owns the in-memory note collection for a session and keeps it consistent
with the remote store under optimistic updates.

Every mutation follows the same protocol:
    1. validate input (ValidationFailure / NotFoundFailure, nothing touched)
    2. snapshot, apply the optimistic change, re-sort
    3. await the remote call
    4. reconcile with the canonical record, or restore the snapshot

Steps 2 and 4 each run without a suspension point, so on a single event
loop they are atomic with respect to other operations. Interleaving only
happens while step 3 is awaited.

Usage:
    manager = NoteStateManager(store)
    await manager.load()

    # awaitable form
    result = await manager.create({"title": "Groceries", "content": "milk"})

    # fire-and-forget form; outcome arrives on manager.notifications
    manager.request_update(note.id, {"pinned": True})
"""

import asyncio
from collections.abc import Callable, Coroutine, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import uuid4

from notekeeper.core.exceptions import (
    CreateFailure,
    DeleteFailure,
    LoadFailure,
    NotFoundFailure,
    RemoteFailure,
    UpdateFailure,
    ValidationFailure,
)
from notekeeper.core.utils import utc_now
from notekeeper.events.channel import NotificationChannel
from notekeeper.events.schemas import Notification
from notekeeper.schemas.note import Note, NoteChanges, NoteDraft, parse_changes, parse_draft
from notekeeper.services.base import BaseService
from notekeeper.services.ordering import partition_pinned, sort_notes
from notekeeper.store.base import NoteStore

DEFAULT_PLACEHOLDER_PREFIX = "temp-"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one manager operation: Ok(note) or Err(failure)."""

    operation: str
    note: Note | None = None
    error: RemoteFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NoteStateManager(BaseService):
    """
    Authoritative note collection plus the derived, filtered view.

    Mutations must be issued from the event loop thread. The request_*
    methods additionally need a running loop, since they schedule the
    remote half of the operation as a task.
    """

    def __init__(
        self,
        store: NoteStore,
        notifications: NotificationChannel | None = None,
        placeholder_prefix: str = DEFAULT_PLACEHOLDER_PREFIX,
        request_timeout: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(request_timeout)
        self.store = store
        self.notifications = notifications if notifications is not None else NotificationChannel()
        self.placeholder_prefix = placeholder_prefix
        self._clock = clock
        self._notes: tuple[Note, ...] = ()
        self._search_query = ""
        self._tasks: set[asyncio.Task] = set()
        self._open_snapshots = 0
        self._resolved: dict[str, str | None] = {}

    @classmethod
    def from_config(
        cls,
        store: NoteStore | None = None,
        notifications: NotificationChannel | None = None,
    ) -> "NoteStateManager":
        """Build a manager from store.yaml, creating the store unless given."""
        from notekeeper.core.config import get_app_config
        from notekeeper.store.factory import create_store

        config = get_app_config().store
        return cls(
            store if store is not None else create_store(config),
            notifications=notifications,
            placeholder_prefix=config.placeholder_prefix,
            request_timeout=config.request_timeout_seconds,
        )

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def notes(self) -> tuple[Note, ...]:
        """Every note, in display order."""
        return self._notes

    @property
    def search_query(self) -> str:
        return self._search_query

    @search_query.setter
    def search_query(self, query: str) -> None:
        self._search_query = query or ""

    @property
    def visible_notes(self) -> list[Note]:
        """Notes matching the current search query, in display order."""
        return self.filter_notes(self._search_query)

    @property
    def pinned_notes(self) -> list[Note]:
        return partition_pinned(self.visible_notes)[0]

    @property
    def other_notes(self) -> list[Note]:
        return partition_pinned(self.visible_notes)[1]

    @property
    def in_flight(self) -> int:
        """Number of scheduled operations still awaiting the store."""
        return len(self._tasks)

    def filter_notes(self, query: str) -> list[Note]:
        """
        Derive a view of notes whose title or content contains ``query``.

        Matching is case-insensitive. A blank query matches every note.
        Never mutates the collection.
        """
        if not query.strip():
            return sort_notes(self._notes)
        return sort_notes(note for note in self._notes if note.matches(query))

    def get(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def is_pending(self, note_id: str) -> bool:
        """True for a locally created note the store has not confirmed yet."""
        return note_id.startswith(self.placeholder_prefix) and self.get(note_id) is not None

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    async def load(self) -> OperationResult:
        """
        Replace local state with the store's collection.

        On failure the previous state is kept and a failure is notified.
        """
        self._log_operation("Loading notes")
        try:
            fetched = await self._execute_remote_operation(
                "list_notes", self.store.list_notes(), LoadFailure,
            )
        except LoadFailure as e:
            await self._notify(Notification.failure(e))
            return OperationResult("load", error=e)

        unique = {note.id: note for note in fetched}
        self._commit(unique.values())
        self._log_debug("Notes loaded", count=len(self._notes))
        return OperationResult("load")

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create(self, draft: NoteDraft | Mapping[str, Any]) -> OperationResult:
        """
        Create a note optimistically and wait for the store's answer.

        Raises:
            ValidationFailure: If the draft is invalid or empty
        """
        placeholder, parsed = self._begin_create(draft)
        return await self._finish_create(placeholder, parsed)

    def request_create(self, draft: NoteDraft | Mapping[str, Any]) -> asyncio.Task:
        """
        Create a note optimistically; the remote call runs in the background.

        The placeholder is visible as soon as this returns.

        Raises:
            ValidationFailure: If the draft is invalid or empty
        """
        placeholder, parsed = self._begin_create(draft)
        return self._spawn(self._finish_create(placeholder, parsed))

    def _begin_create(self, draft: NoteDraft | Mapping[str, Any]) -> tuple[Note, NoteDraft]:
        parsed = parse_draft(draft)
        now = self._clock()
        placeholder = Note(
            id=f"{self.placeholder_prefix}{uuid4()}",
            title=parsed.title,
            content=parsed.content,
            color=parsed.color,
            pinned=parsed.pinned,
            created_at=now,
            updated_at=now,
        )
        self._commit((placeholder, *self._notes))
        self._log_operation("Creating note", note_id=placeholder.id)
        return placeholder, parsed

    async def _finish_create(self, placeholder: Note, draft: NoteDraft) -> OperationResult:
        try:
            note = await self._execute_remote_operation(
                "create_note", self.store.create_note(draft.model_dump()), CreateFailure,
            )
        except CreateFailure as e:
            self._resolve_placeholder(placeholder.id, None)
            self._commit(n for n in self._notes if n.id != placeholder.id)
            self._logger.warning("Create rolled back", extra={"note_id": placeholder.id})
            await self._notify(Notification.failure(e, note_id=placeholder.id))
            return OperationResult("create", error=e)

        self._resolve_placeholder(placeholder.id, note.id)
        stale = {placeholder.id, note.id}
        self._commit((note, *(n for n in self._notes if n.id not in stale)))
        self._log_debug("Create reconciled", placeholder_id=placeholder.id, note_id=note.id)
        await self._notify(Notification.success("create", note_id=note.id))
        return OperationResult("create", note=note)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update(
        self, note_id: str, changes: NoteChanges | Mapping[str, Any],
    ) -> OperationResult:
        """
        Apply a sparse change-set optimistically and wait for the store.

        Raises:
            ValidationFailure: If the changes are invalid, would empty the note,
                or target a note still pending creation
            NotFoundFailure: If no note with that id is held locally
        """
        pending = self._begin_update(note_id, changes)
        if pending is None:
            return OperationResult("update", note=self.get(note_id))
        return await self._finish_update(note_id, *pending)

    def request_update(
        self, note_id: str, changes: NoteChanges | Mapping[str, Any],
    ) -> asyncio.Task:
        """
        Apply a sparse change-set optimistically; the remote call runs in the background.

        Raises:
            ValidationFailure: If the changes are invalid, would empty the note,
                or target a note still pending creation
            NotFoundFailure: If no note with that id is held locally
        """
        pending = self._begin_update(note_id, changes)
        if pending is None:
            return self._spawn(self._unchanged(note_id))
        return self._spawn(self._finish_update(note_id, *pending))

    def _begin_update(
        self, note_id: str, changes: NoteChanges | Mapping[str, Any],
    ) -> tuple[tuple[Note, ...], dict[str, Any]] | None:
        parsed = parse_changes(changes)
        current = self._settled(note_id)

        fields = parsed.fields()
        if not fields:
            return None

        optimistic = current.model_copy(update=fields)
        if optimistic.is_empty:
            raise ValidationFailure(
                "A note needs a title or content",
                details={"note_id": note_id},
            )

        snapshot = self._take_snapshot()
        self._commit(optimistic if n.id == note_id else n for n in self._notes)
        self._log_operation("Updating note", note_id=note_id, fields=list(fields))
        return snapshot, fields

    async def _finish_update(
        self, note_id: str, snapshot: tuple[Note, ...], fields: dict[str, Any],
    ) -> OperationResult:
        try:
            note = await self._execute_remote_operation(
                "update_note", self.store.update_note(note_id, fields), UpdateFailure,
            )
        except UpdateFailure as e:
            self._restore(snapshot)
            self._logger.warning("Update rolled back", extra={"note_id": note_id})
            await self._notify(Notification.failure(e, note_id=note_id))
            return OperationResult("update", error=e)
        finally:
            self._release_snapshot()

        if self.get(note_id) is None:
            self._log_debug("Note gone before update reconciled", note_id=note_id)
        else:
            self._commit(note if n.id == note_id else n for n in self._notes)
            self._log_debug("Update reconciled", note_id=note_id)
        await self._notify(Notification.success("update", note_id=note_id))
        return OperationResult("update", note=note)

    async def _unchanged(self, note_id: str) -> OperationResult:
        return OperationResult("update", note=self.get(note_id))

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete(self, note_id: str) -> OperationResult:
        """
        Remove a note optimistically and wait for the store.

        Raises:
            NotFoundFailure: If no note with that id is held locally
            ValidationFailure: If the note is still pending creation
        """
        snapshot = self._begin_delete(note_id)
        return await self._finish_delete(note_id, snapshot)

    def request_delete(self, note_id: str) -> asyncio.Task:
        """
        Remove a note optimistically; the remote call runs in the background.

        Raises:
            NotFoundFailure: If no note with that id is held locally
            ValidationFailure: If the note is still pending creation
        """
        snapshot = self._begin_delete(note_id)
        return self._spawn(self._finish_delete(note_id, snapshot))

    def _begin_delete(self, note_id: str) -> tuple[Note, ...]:
        self._settled(note_id)

        snapshot = self._take_snapshot()
        self._commit(n for n in self._notes if n.id != note_id)
        self._log_operation("Deleting note", note_id=note_id)
        return snapshot

    async def _finish_delete(self, note_id: str, snapshot: tuple[Note, ...]) -> OperationResult:
        try:
            await self._execute_remote_operation(
                "delete_note", self.store.delete_note(note_id), DeleteFailure,
            )
        except DeleteFailure as e:
            self._restore(snapshot)
            self._logger.warning("Delete rolled back", extra={"note_id": note_id})
            await self._notify(Notification.failure(e, note_id=note_id))
            return OperationResult("delete", error=e)
        finally:
            self._release_snapshot()

        await self._notify(Notification.success("delete", note_id=note_id))
        return OperationResult("delete")

    # -------------------------------------------------------------------------
    # Task bookkeeping
    # -------------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, OperationResult]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled operation has reconciled or rolled back."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def close(self) -> None:
        """Drain outstanding operations and release the store."""
        await self.drain()
        await self.store.close()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _settled(self, note_id: str) -> Note:
        """Return the held note, refusing ids that are absent or still pending."""
        current = self.get(note_id)
        if current is None:
            raise NotFoundFailure(f"Note {note_id} not found")
        if self.is_pending(note_id):
            raise ValidationFailure(
                f"Note {note_id} is still being saved",
                details={"note_id": note_id},
            )
        return current

    def _take_snapshot(self) -> tuple[Note, ...]:
        self._open_snapshots += 1
        return self._notes

    def _release_snapshot(self) -> None:
        self._open_snapshots -= 1
        if self._open_snapshots == 0:
            self._resolved.clear()

    def _resolve_placeholder(self, placeholder_id: str, note_id: str | None) -> None:
        """Remember how a placeholder ended while older snapshots may still hold it."""
        if self._open_snapshots:
            self._resolved[placeholder_id] = note_id

    def _restore(self, snapshot: tuple[Note, ...]) -> None:
        """
        Put a pre-mutation snapshot back.

        Placeholders in the snapshot whose create finished since it was taken
        are carried over as the note currently held for them (or dropped if
        the create failed or the note is gone), never restored as placeholders.
        """
        if not any(note.id in self._resolved for note in snapshot):
            self._notes = snapshot
            return

        restored: dict[str, Note] = {}
        for note in snapshot:
            if note.id not in self._resolved:
                restored[note.id] = note
                continue
            canonical_id = self._resolved[note.id]
            current = self.get(canonical_id) if canonical_id is not None else None
            if current is not None:
                restored[current.id] = current
        self._commit(restored.values())

    def _commit(self, notes: Iterable[Note]) -> None:
        self._notes = tuple(sort_notes(notes))

    async def _notify(self, notification: Notification) -> None:
        await self.notifications.publish(notification)
