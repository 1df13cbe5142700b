"""
Base Note Store.

Interface every remote store client implements. The state manager depends
on this interface only; it never sees transport details.

Every method either returns the canonical record(s) produced by the
backend or raises StoreError.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from notekeeper.schemas.note import EDITABLE_FIELDS, Note
from notekeeper.services.colors import normalize_color


def whitelist_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    Reduce a field mapping to the editable columns, in wire form.

    Unknown keys are dropped. Color goes out as its palette name.
    """
    payload: dict[str, Any] = {}
    if "title" in fields:
        payload["title"] = fields["title"] or None
    if "content" in fields:
        payload["content"] = fields["content"] or ""
    if "color" in fields:
        payload["color"] = normalize_color(fields["color"]).value
    if "pinned" in fields:
        payload["pinned"] = bool(fields["pinned"])
    return {key: payload[key] for key in EDITABLE_FIELDS if key in payload}


class NoteStore(ABC):
    """Remote CRUD for notes."""

    @abstractmethod
    async def list_notes(self) -> list[Note]:
        """Fetch every note, pinned first then newest first."""

    @abstractmethod
    async def create_note(self, fields: Mapping[str, Any]) -> Note:
        """Insert a note and return the stored record."""

    @abstractmethod
    async def update_note(self, note_id: str, fields: Mapping[str, Any]) -> Note:
        """Apply a partial update and return the stored record."""

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Delete a note."""

    async def close(self) -> None:
        """Release transport resources, if any."""
