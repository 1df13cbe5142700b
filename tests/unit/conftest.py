"""
Unit Test Fixtures.

Fixtures for unit tests - the remote store is replaced by an in-process
double whose calls can be held open, released in any order, or failed.
Unit tests never touch the network.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any
from unittest.mock import MagicMock

import pytest

from notekeeper.core.exceptions import StoreError
from notekeeper.events.channel import NotificationChannel
from notekeeper.events.schemas import Notification
from notekeeper.schemas.note import Note
from notekeeper.services.note_state import NoteStateManager
from notekeeper.store.memory import InMemoryNoteStore


# =============================================================================
# Store Double
# =============================================================================


class GatedNoteStore(InMemoryNoteStore):
    """
    In-memory store with test controls.

    - ``calls`` records every call as (operation, *args)
    - ``fail`` holds operation names that raise StoreError
    - ``hold()`` makes the next call wait until the returned event is set
    """

    def __init__(self, notes: Iterable[Note] = (), clock: Callable | None = None) -> None:
        if clock is None:
            super().__init__(notes)
        else:
            super().__init__(notes, clock=clock)
        self.calls: list[tuple[Any, ...]] = []
        self.fail: set[str] = set()
        self._held: deque[asyncio.Event] = deque()

    def seed(self, *notes: Note) -> None:
        for note in notes:
            self._rows[note.id] = note

    def hold(self) -> asyncio.Event:
        gate = asyncio.Event()
        self._held.append(gate)
        return gate

    async def _call(self, operation: str, fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        self.calls.append((operation, *args))
        gate = self._held.popleft() if self._held else None
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if operation in self.fail:
            raise StoreError(f"{operation} failed", status_code=500)
        return await fn(*args)

    async def list_notes(self) -> list[Note]:
        return await self._call("list", super().list_notes)

    async def create_note(self, fields):
        return await self._call("create", super().create_note, dict(fields))

    async def update_note(self, note_id, fields):
        return await self._call("update", super().update_note, note_id, dict(fields))

    async def delete_note(self, note_id):
        return await self._call("delete", super().delete_note, note_id)


# =============================================================================
# Manager Fixtures
# =============================================================================


@pytest.fixture
def store(clock) -> GatedNoteStore:
    """Empty gated store sharing the test clock."""
    return GatedNoteStore(clock=clock)


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def events(channel: NotificationChannel) -> list[Notification]:
    """Every notification published on the channel, in order."""
    received: list[Notification] = []
    channel.subscribe(received.append)
    return received


@pytest.fixture
def manager(store, channel, clock, events) -> NoteStateManager:
    """Manager over the gated store, without a request timeout."""
    return NoteStateManager(store, notifications=channel, clock=clock)


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
