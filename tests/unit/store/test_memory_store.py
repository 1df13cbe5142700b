"""
Unit Tests for the In-Memory Note Store.
"""

import pytest

from notekeeper.core.exceptions import StoreError
from notekeeper.services.colors import NoteColor
from notekeeper.store.base import whitelist_fields
from notekeeper.store.memory import InMemoryNoteStore


class TestWhitelistFields:
    """Tests for the wire-form payload builder."""

    def test_drops_unknown_keys(self):
        assert whitelist_fields({"content": "x", "id": "evil", "user_id": "u"}) == {"content": "x"}

    def test_wire_forms(self):
        payload = whitelist_fields(
            {"title": "", "content": None, "color": NoteColor.PINK, "pinned": 1},
        )

        assert payload == {"title": None, "content": "", "color": "pink", "pinned": True}

    def test_normalizes_hex_color(self):
        assert whitelist_fields({"color": "#FEFCE8"}) == {"color": "yellow"}


class TestInMemoryNoteStore:
    """Tests for InMemoryNoteStore."""

    @pytest.fixture
    def memory_store(self, clock):
        return InMemoryNoteStore(clock=clock)

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, memory_store):
        note = await memory_store.create_note({"title": "t", "content": "c"})

        assert note.id
        assert note.created_at == note.updated_at
        assert memory_store.rows[note.id] == note

    @pytest.mark.asyncio
    async def test_list_is_ordered(self, note_factory):
        store = InMemoryNoteStore([
            note_factory("old", created=1),
            note_factory("new", created=2),
            note_factory("pin", pinned=True, created=0),
        ])

        notes = await store.list_notes()

        assert [note.id for note in notes] == ["pin", "new", "old"]

    @pytest.mark.asyncio
    async def test_update_merges_and_bumps_updated_at(self, clock, note_factory):
        original = note_factory("a", title="keep", content="old")
        store = InMemoryNoteStore([original], clock=clock)

        updated = await store.update_note("a", {"content": "new"})

        assert updated.title == "keep"
        assert updated.content == "new"
        assert updated.created_at == original.created_at
        assert updated.updated_at > original.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, memory_store):
        with pytest.raises(StoreError) as exc_info:
            await memory_store.update_note("missing", {"content": "x"})

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, memory_store):
        note = await memory_store.create_note({"content": "x"})

        await memory_store.delete_note(note.id)
        await memory_store.delete_note(note.id)

        assert memory_store.rows == {}
