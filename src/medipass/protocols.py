"""Collaborator protocols for dependency injection.

Concrete implementations (InMemory for local dev and tests, Supabase for
deployed environments) must satisfy these. The app factory acquires one
store at startup and passes it to every component that needs it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    """Keyed JSON document storage grouped into collections.

    Implementations raise on failure; callers wrap errors as they see fit.
    """

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None: ...

    async def get(self, collection: str, key: str) -> dict[str, Any] | None: ...

    async def increment(
        self, collection: str, key: str, field: str, by: int = 1,
    ) -> int | None:
        """Atomically add ``by`` to a numeric field.

        Returns the new value, or None when the document does not exist.
        """
        ...
