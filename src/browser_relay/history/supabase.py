"""History store backed by a Supabase (PostgREST) table."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from ..config import HistoryConfig
from ..models import HistoryEntry
from .base import HistoryStore, HistoryStoreError

LOGGER = logging.getLogger(__name__)


class SupabaseHistoryStore(HistoryStore):
    """Store exchanges through the Supabase REST interface."""

    def __init__(self, config: HistoryConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        if not config.url or not config.api_key:
            raise ValueError("Supabase history requires both url and api_key")
        self._table = config.table
        self._client = httpx.Client(
            base_url=f"{config.url.rstrip('/')}/rest/v1",
            timeout=10,
            headers={
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def add(self, entry: HistoryEntry) -> None:
        response = self._request(
            "POST",
            f"/{self._table}",
            json=[entry.model_dump(mode="json")],
            headers={"Prefer": "return=minimal"},
        )
        LOGGER.debug("Stored history entry for %s (%s)", entry.username, response.status_code)

    def list_for(self, username: str) -> List[HistoryEntry]:
        response = self._request(
            "GET",
            f"/{self._table}",
            params={
                "select": "*",
                "username": f"eq.{username}",
                "order": "created_at.desc",
            },
        )
        return [HistoryEntry.model_validate(row) for row in response.json()]

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: object) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise HistoryStoreError(f"History backend request failed: {exc}") from exc
        return response
