# Pydantic schemas package
from notekeeper.schemas.note import (
    Note,
    NoteChanges,
    NoteDraft,
    parse_changes,
    parse_draft,
)
from notekeeper.services.colors import NoteColor

__all__ = [
    "Note",
    "NoteChanges",
    "NoteColor",
    "NoteDraft",
    "parse_changes",
    "parse_draft",
]
