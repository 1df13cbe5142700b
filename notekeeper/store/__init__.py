# Remote note store clients
from notekeeper.store.base import NoteStore
from notekeeper.store.memory import InMemoryNoteStore
from notekeeper.store.postgrest import PostgrestNoteStore

__all__ = [
    "InMemoryNoteStore",
    "NoteStore",
    "PostgrestNoteStore",
]
