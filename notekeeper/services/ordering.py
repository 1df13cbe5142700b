"""
Ordering Policy.

The one ordering rule for every list of notes shown to the user:
pinned notes first, then newest ``created_at`` first within each group.
No other field affects order; ties keep their incoming relative order.
"""

from collections.abc import Iterable
from functools import cmp_to_key

from notekeeper.schemas.note import Note


def compare_notes(a: Note, b: Note) -> int:
    """
    Three-way comparator for two notes.

    Returns:
        Negative if ``a`` sorts first, positive if ``b`` does, 0 on a tie
    """
    if a.pinned and not b.pinned:
        return -1
    if b.pinned and not a.pinned:
        return 1
    if a.created_at > b.created_at:
        return -1
    if a.created_at < b.created_at:
        return 1
    return 0


sort_key = cmp_to_key(compare_notes)


def sort_notes(notes: Iterable[Note]) -> list[Note]:
    """Return a new list of notes in display order (stable)."""
    return sorted(notes, key=sort_key)


def partition_pinned(notes: Iterable[Note]) -> tuple[list[Note], list[Note]]:
    """Split notes into (pinned, others), each in display order."""
    ordered = sort_notes(notes)
    pinned = [note for note in ordered if note.pinned]
    others = [note for note in ordered if not note.pinned]
    return pinned, others
