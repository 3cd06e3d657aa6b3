"""In-memory collaborator implementations for local development.

These are used when ENVIRONMENT=local and throughout the test suite. They
satisfy the protocol interfaces but keep everything in dicts (no
persistence across restarts).
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any


class InMemoryDocumentStore:
    """Dict-of-dicts document store.

    Documents are deep-copied in and out so callers never share mutable
    state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        async with self._lock:
            self._collections.setdefault(collection, {})[key] = copy.deepcopy(document)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        doc = self._collections.get(collection, {}).get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def increment(
        self, collection: str, key: str, field: str, by: int = 1,
    ) -> int | None:
        async with self._lock:
            doc = self._collections.get(collection, {}).get(key)
            if doc is None:
                return None
            doc[field] = int(doc.get(field, 0)) + by
            return doc[field]

    def keys(self, collection: str) -> list[str]:
        """Test helper: keys currently stored in ``collection``."""
        return list(self._collections.get(collection, {}))
