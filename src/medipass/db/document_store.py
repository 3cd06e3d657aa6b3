"""Supabase-backed DocumentStore.

Each collection maps to a table with the same name and two columns::

    create table sharing (
        id text primary key,
        document jsonb not null
    );

``put`` on the ``sharing`` collection is a plain insert, so a duplicate
sharing id fails with ``SupabaseConflictError`` instead of overwriting an
existing grant. Collections listed in ``upsert_collections`` (the medical
record collection by default) are written with merge-duplicates.

``increment`` relies on a SQL function installed alongside the tables::

    create function increment_document_field(
        p_table text, p_id text, p_field text, p_by int
    ) returns int ...

which performs ``document = jsonb_set(document, {p_field}, ...)`` in a
single UPDATE and returns the new value (NULL when no row matched).
"""

from __future__ import annotations

from typing import Any, Iterable

from .supabase_client import SupabaseClient

INCREMENT_RPC = "increment_document_field"


class SupabaseDocumentStore:
    """DocumentStore over PostgREST tables keyed by ``id``."""

    def __init__(
        self,
        client: SupabaseClient,
        *,
        upsert_collections: Iterable[str] = ("medicalInfo",),
    ) -> None:
        self._client = client
        self._upsert_collections = frozenset(upsert_collections)

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        await self._client.insert(
            collection,
            {"id": key, "document": document},
            upsert=collection in self._upsert_collections,
        )

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        rows = await self._client.select(
            collection, {"id": key}, columns="document", limit=1,
        )
        if not rows:
            return None
        return rows[0].get("document")

    async def increment(
        self, collection: str, key: str, field: str, by: int = 1,
    ) -> int | None:
        result = await self._client.rpc(
            INCREMENT_RPC,
            {"p_table": collection, "p_id": key, "p_field": field, "p_by": by},
        )
        return int(result) if result is not None else None

    async def aclose(self) -> None:
        await self._client.aclose()
