"""Supabase client error hierarchy.

Kept small and dependency-free so the stores can raise them without
leaking httpx.Response objects (or the service-role key).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SupabaseError(Exception):
    """Base error for a failed PostgREST request."""

    status_code: int
    message: str
    code: str | None = None
    details: str | None = None

    def __str__(self) -> str:
        bits: list[str] = [f"SupabaseError(status={self.status_code})", self.message]
        if self.code:
            bits.append(f"code={self.code}")
        if self.details:
            bits.append(f"details={self.details}")
        return " ".join(bits)


class SupabaseAuthError(SupabaseError):
    """401/403: bad service key or row-level security denial."""


class SupabaseNotFoundError(SupabaseError):
    """404: missing table, view or RPC function."""


class SupabaseConflictError(SupabaseError):
    """409: unique violation, e.g. a sharing id that already exists."""


def error_for_status(status_code: int) -> type[SupabaseError]:
    if status_code in (401, 403):
        return SupabaseAuthError
    if status_code == 404:
        return SupabaseNotFoundError
    if status_code == 409:
        return SupabaseConflictError
    return SupabaseError
