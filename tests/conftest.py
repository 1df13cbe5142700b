"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Notes are built relative to a fixed instant so ordering assertions never
depend on wall-clock time.
"""

from datetime import datetime, timedelta, timezone

import pytest

from notekeeper.schemas.note import Note

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_note(
    id: str = "note-1",
    title: str | None = None,
    content: str = "body",
    color: str = "default",
    pinned: bool = False,
    created: int = 0,
    updated: int | None = None,
) -> Note:
    """
    Build a Note whose timestamps are ``created`` / ``updated`` minutes after T0.
    """
    created_at = T0 + timedelta(minutes=created)
    updated_at = T0 + timedelta(minutes=updated if updated is not None else created)
    return Note(
        id=id,
        title=title,
        content=content,
        color=color,
        pinned=pinned,
        created_at=created_at,
        updated_at=updated_at,
    )


class FakeClock:
    """Clock that advances one second per reading, starting an hour after T0."""

    def __init__(self, start: datetime = T0 + timedelta(hours=1)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


# =============================================================================
# Note Fixtures
# =============================================================================


@pytest.fixture
def note_factory():
    """Provide make_note for building notes inline."""
    return make_note


@pytest.fixture
def clock() -> FakeClock:
    """Provide a deterministic, monotonic clock."""
    return FakeClock()
