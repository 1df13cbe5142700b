"""
Unit Tests for the PostgREST Note Store.

httpx.AsyncClient.request is patched; no network access.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from notekeeper.core.exceptions import StoreError
from notekeeper.core.resilience import create_circuit_breaker
from notekeeper.store.postgrest import LIST_ORDER, SINGLE_OBJECT, PostgrestNoteStore

ROW = {
    "id": "abc",
    "title": "Groceries",
    "content": "milk",
    "color": "#fefce8",
    "pinned": False,
    "created_at": "2026-01-01T12:00:00+00:00",
    "updated_at": "2026-01-01T12:00:00+00:00",
    "user_id": "u-1",
}


@pytest.fixture
def pg_store():
    return PostgrestNoteStore("http://store.test/rest/v1/", api_key="secret-key")


def mock_request(*responses):
    """Patch AsyncClient.request to answer with the given responses in order."""
    return patch.object(httpx.AsyncClient, "request", AsyncMock(side_effect=list(responses)))


class TestRequests:
    """Tests for the PostgREST wire format."""

    @pytest.mark.asyncio
    async def test_list_notes(self, pg_store):
        with mock_request(httpx.Response(200, json=[ROW])) as request:
            notes = await pg_store.list_notes()

        assert [note.id for note in notes] == ["abc"]
        assert notes[0].color == "yellow"
        method, path = request.call_args.args
        assert (method, path) == ("GET", "/notes")
        assert request.call_args.kwargs["params"] == {"select": "*", "order": LIST_ORDER}

    @pytest.mark.asyncio
    async def test_create_note_sends_full_payload(self, pg_store):
        with mock_request(httpx.Response(201, json=ROW)) as request:
            note = await pg_store.create_note({"title": "Groceries", "content": "milk", "extra": 1})

        assert note.id == "abc"
        kwargs = request.call_args.kwargs
        assert request.call_args.args[0] == "POST"
        assert kwargs["json"] == {
            "title": "Groceries",
            "content": "milk",
            "color": "default",
            "pinned": False,
        }
        assert kwargs["headers"]["Accept"] == SINGLE_OBJECT
        assert kwargs["headers"]["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_note_sends_only_given_fields(self, pg_store):
        with mock_request(httpx.Response(200, json={**ROW, "pinned": True})) as request:
            note = await pg_store.update_note("abc", {"pinned": True})

        assert note.pinned is True
        kwargs = request.call_args.kwargs
        assert request.call_args.args[0] == "PATCH"
        assert kwargs["params"] == {"id": "eq.abc", "select": "*"}
        assert kwargs["json"] == {"pinned": True}

    @pytest.mark.asyncio
    async def test_delete_note_accepts_empty_body(self, pg_store):
        with mock_request(httpx.Response(204)) as request:
            assert await pg_store.delete_note("abc") is None

        assert request.call_args.args[0] == "DELETE"
        assert request.call_args.kwargs["params"] == {"id": "eq.abc"}

    @pytest.mark.asyncio
    async def test_auth_headers(self, pg_store):
        with mock_request(httpx.Response(200, json=[])):
            await pg_store.list_notes()

        headers = pg_store._client.headers
        assert headers["apikey"] == "secret-key"
        assert headers["Authorization"] == "Bearer secret-key"
        assert str(pg_store._client.base_url).rstrip("/") == "http://store.test/rest/v1"
        await pg_store.close()
        assert pg_store._client is None


class TestErrors:
    """Tests for error mapping to StoreError."""

    @pytest.mark.asyncio
    async def test_error_status(self, pg_store):
        with mock_request(httpx.Response(500, text="boom")):
            with pytest.raises(StoreError) as exc_info:
                await pg_store.list_notes()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error(self, pg_store):
        with mock_request(httpx.ConnectError("connection refused")):
            with pytest.raises(StoreError, match="request failed"):
                await pg_store.list_notes()

    @pytest.mark.asyncio
    async def test_malformed_body(self, pg_store):
        with mock_request(httpx.Response(200, content=b"<html>")):
            with pytest.raises(StoreError, match="malformed"):
                await pg_store.list_notes()

    @pytest.mark.asyncio
    async def test_list_must_be_array(self, pg_store):
        with mock_request(httpx.Response(200, json=ROW)):
            with pytest.raises(StoreError):
                await pg_store.list_notes()

    @pytest.mark.asyncio
    async def test_invalid_row(self, pg_store):
        with mock_request(httpx.Response(200, json={**ROW, "id": ""})):
            with pytest.raises(StoreError, match="invalid note"):
                await pg_store.update_note("abc", {"content": "x"})

    @pytest.mark.asyncio
    async def test_open_breaker_short_circuits(self):
        """Once the breaker opens, calls fail without reaching the network."""
        store = PostgrestNoteStore(
            "http://store.test/rest/v1",
            breaker=create_circuit_breaker("test_store", fail_max=1, timeout_duration=60),
        )

        with mock_request(httpx.Response(503), httpx.Response(200, json=[])) as request:
            with pytest.raises(StoreError):
                await store.list_notes()
            with pytest.raises(StoreError, match="unavailable"):
                await store.list_notes()

        assert request.call_count == 1
