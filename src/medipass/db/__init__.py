"""Supabase persistence for MediPass documents."""

from .document_store import SupabaseDocumentStore
from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
)
from .supabase_client import SupabaseClient

__all__ = [
    "SupabaseAuthError",
    "SupabaseClient",
    "SupabaseConflictError",
    "SupabaseDocumentStore",
    "SupabaseError",
    "SupabaseNotFoundError",
]
