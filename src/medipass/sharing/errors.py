"""Sharing error hierarchy.

Every failure is local to a single compose/create/resolve call and is
raised as an ordinary exception so HTTP handlers (or any other caller) can
turn it into a user-facing message.
"""

from __future__ import annotations

from datetime import datetime


class SharingError(Exception):
    """Base class for sharing failures."""


class MissingRecordError(SharingError):
    """The composer was given no medical record."""

    def __init__(self) -> None:
        super().__init__('No medical record to compose a disclosure from')


class InvalidSelectionError(SharingError, ValueError):
    """A disclosure selection flag is missing or not a boolean."""


class InvalidTtlError(SharingError, ValueError):
    """TTL is not a positive, finite number of hours."""

    def __init__(self, ttl_hours: object) -> None:
        self.ttl_hours = ttl_hours
        super().__init__(
            f'ttl_hours must be a positive finite number, got {ttl_hours!r}'
        )


class PersistenceError(SharingError):
    """The backing document store failed a read or write."""

    def __init__(self, operation: str, key: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.key = key
        detail = f': {type(cause).__name__}' if cause is not None else ''
        super().__init__(f'Document store {operation} failed for {key}{detail}')


class GrantNotFound(SharingError):
    """No sharing grant exists under the given identifier."""


class GrantExpired(SharingError):
    """Grant exists but its expiry instant has passed."""

    def __init__(self, sharing_id: str, expired_at: datetime) -> None:
        self.sharing_id = sharing_id
        self.expired_at = expired_at
        super().__init__(f'Grant expired at {expired_at.isoformat()}')
