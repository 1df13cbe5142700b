"""
PostgREST Note Store.

Async HTTP client for a hosted PostgREST endpoint (e.g. Supabase's
``/rest/v1``) serving a ``notes`` table.

Features:
- apikey / bearer headers from config/.env
- Single-object responses (``application/vnd.pgrst.object+json``) for
  create and update, so zero or many matching rows is an error
- Circuit breaker and a semaphore around every request
- Structured logging of requests/responses

Any transport error, error status, or malformed body raises StoreError.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

import aiobreaker
import httpx
from pydantic import ValidationError as PydanticValidationError

from notekeeper.core.exceptions import StoreError
from notekeeper.core.logging import get_logger, log_with_source
from notekeeper.core.resilience import create_circuit_breaker
from notekeeper.schemas.note import Note
from notekeeper.store.base import NoteStore, whitelist_fields

logger = get_logger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"
LIST_ORDER = "pinned.desc,created_at.desc"


class PostgrestNoteStore(NoteStore):
    """
    Note store backed by a PostgREST table.

    Usage:
        store = PostgrestNoteStore("https://xyz.supabase.co/rest/v1", api_key=key)
        notes = await store.list_notes()
        await store.close()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        table: str = "notes",
        timeout: float | None = 30.0,
        max_concurrent_requests: int = 8,
        breaker: aiobreaker.CircuitBreaker | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)
        self._breaker = breaker or create_circuit_breaker("note_store")
        self._client: httpx.AsyncClient | None = None

    def _default_headers(self) -> dict[str, str]:
        headers = {"X-Client-Info": "notekeeper"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._default_headers(),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        **kwargs: Any,
    ) -> httpx.Response:
        response = await client.request(method, f"/{self.table}", **kwargs)
        if response.status_code >= 400:
            raise StoreError(
                f"Remote store returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        single: bool = False,
    ) -> Any:
        """
        Send a request through the breaker and decode the JSON body.

        Returns:
            Decoded body, or None for an empty response

        Raises:
            StoreError: On any failure
        """
        client = await self._get_client()

        headers: dict[str, str] = {}
        if single:
            headers["Accept"] = SINGLE_OBJECT
            headers["Prefer"] = "return=representation"

        log_with_source(logger, "store", "debug", "Store request", method=method, params=params)

        try:
            async with self._semaphore:
                response = await self._breaker.call_async(
                    self._send, client, method, params=params, json=json, headers=headers,
                )
        except aiobreaker.CircuitBreakerError as e:
            log_with_source(logger, "store", "error", "Store unavailable", method=method, error=str(e))
            raise StoreError("Remote store unavailable") from e
        except httpx.HTTPError as e:
            log_with_source(logger, "store", "error", "Store request failed", method=method, error=str(e))
            raise StoreError(f"Remote store request failed: {e}") from e

        log_with_source(
            logger,
            "store",
            "debug",
            "Store response",
            method=method,
            status_code=response.status_code,
        )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError("Remote store returned a malformed body") from e

    @staticmethod
    def _to_note(row: Any) -> Note:
        try:
            return Note.model_validate(row)
        except PydanticValidationError as e:
            raise StoreError(f"Remote store returned an invalid note: {e}") from e

    async def list_notes(self) -> list[Note]:
        rows = await self._request("GET", params={"select": "*", "order": LIST_ORDER})
        if not isinstance(rows, list):
            raise StoreError("Remote store returned a malformed note list")
        return [self._to_note(row) for row in rows]

    async def create_note(self, fields: Mapping[str, Any]) -> Note:
        payload = {"title": None, "content": "", "color": "default", "pinned": False}
        payload.update(whitelist_fields(fields))
        row = await self._request("POST", params={"select": "*"}, json=payload, single=True)
        return self._to_note(row)

    async def update_note(self, note_id: str, fields: Mapping[str, Any]) -> Note:
        row = await self._request(
            "PATCH",
            params={"id": f"eq.{note_id}", "select": "*"},
            json=whitelist_fields(fields),
            single=True,
        )
        return self._to_note(row)

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{note_id}"})
