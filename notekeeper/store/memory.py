"""
In-Memory Note Store.

Store client that keeps rows in a dict but behaves like the hosted backend:
it assigns ids and timestamps, bumps ``updated_at`` on update, returns
notes pinned-first/newest-first, and raises StoreError for an update of an
unknown id. Deleting an unknown id is a no-op, as a filtered DELETE is.
"""

import asyncio
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import uuid4

from notekeeper.core.exceptions import StoreError
from notekeeper.core.logging import get_logger
from notekeeper.core.utils import utc_now
from notekeeper.schemas.note import Note
from notekeeper.services.ordering import sort_notes
from notekeeper.store.base import NoteStore, whitelist_fields

logger = get_logger(__name__)


class InMemoryNoteStore(NoteStore):
    """
    Process-local note store.

    Args:
        notes: Initial rows
        latency: Seconds each call sleeps before answering
        clock: Timestamp source for new and updated rows
    """

    def __init__(
        self,
        notes: Iterable[Note] = (),
        latency: float = 0.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rows: dict[str, Note] = {note.id: note for note in notes}
        self.latency = latency
        self._clock = clock

    @property
    def rows(self) -> dict[str, Note]:
        return dict(self._rows)

    async def _wait(self) -> None:
        await asyncio.sleep(self.latency)

    async def list_notes(self) -> list[Note]:
        await self._wait()
        return sort_notes(self._rows.values())

    async def create_note(self, fields: Mapping[str, Any]) -> Note:
        await self._wait()
        payload = whitelist_fields(fields)
        now = self._clock()
        note = Note(id=str(uuid4()), created_at=now, updated_at=now, **payload)
        self._rows[note.id] = note
        logger.debug("Row inserted", extra={"note_id": note.id})
        return note

    async def update_note(self, note_id: str, fields: Mapping[str, Any]) -> Note:
        await self._wait()
        current = self._rows.get(note_id)
        if current is None:
            raise StoreError(f"Note {note_id} not found", status_code=404)

        payload = whitelist_fields(fields)
        updated = Note.model_validate({
            **current.model_dump(),
            **payload,
            "updated_at": max(self._clock(), current.updated_at),
        })
        self._rows[note_id] = updated
        return updated

    async def delete_note(self, note_id: str) -> None:
        await self._wait()
        self._rows.pop(note_id, None)
