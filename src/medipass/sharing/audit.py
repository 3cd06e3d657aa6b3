"""Sharing audit events and identifier redaction.

Records grant creation, successful link resolution and denied resolution
attempts as structured events.

Sharing ids are the only thing a link holder needs, so they never appear
in full in audit data or logs. Only a prefix long enough to correlate
events (``share_<millis>``) is kept, never the random suffix.

This module provides:
  1. ``ShareAuditEvent``: structured audit record.
  2. ``ShareAuditEmitter``: protocol for event sinks.
  3. ``InMemoryShareAuditEmitter``: test implementation.
  4. ``LoggingShareAuditEmitter``: writes events through structlog.
  5. ``redact_sharing_id``: safely truncate ids for logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from medipass.observability import get_logger

from .model import SHARING_ID_PREFIX

REDACTED = '<redacted>'

SHARE_CREATED = 'share.created'
SHARE_ACCESSED = 'share.accessed'
SHARE_DENIED = 'share.denied'


def redact_sharing_id(sharing_id: str | None) -> str:
    """Drop the random suffix of a sharing id.

    ``share_1760778000000_k3j9x0a1b`` becomes ``share_1760778000000_...``.
    Anything that does not look like a sharing id is fully redacted.
    """
    if not sharing_id or not sharing_id.startswith(SHARING_ID_PREFIX):
        return REDACTED
    head, sep, _ = sharing_id.rpartition('_')
    if not sep or head == SHARING_ID_PREFIX.rstrip('_'):
        return REDACTED
    return f'{head}_...'


@dataclass(frozen=True, slots=True)
class ShareAuditEvent:
    """Structured audit event for sharing operations.

    Attributes:
        event_type: share.created, share.accessed or share.denied.
        sharing_ref: Redacted sharing id.
        owner_id: Grant owner, when known.
        categories: Disclosed categories, when known.
        detail: Additional context (e.g. denial reason).
        timestamp: When the event occurred.
    """

    event_type: str
    sharing_ref: str = REDACTED
    owner_id: str = ''
    categories: tuple[str, ...] = ()
    detail: str = ''
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        """Serialize to a dict safe for JSON logging."""
        return {
            'event_type': self.event_type,
            'sharing_ref': self.sharing_ref,
            'owner_id': self.owner_id,
            'categories': list(self.categories),
            'detail': self.detail,
            'timestamp': self.timestamp.isoformat(),
        }


class ShareAuditEmitter(Protocol):
    """Abstract audit event sink."""

    async def emit(self, event: ShareAuditEvent) -> None: ...


class InMemoryShareAuditEmitter:
    """Test audit emitter that stores events in memory."""

    def __init__(self) -> None:
        self.events: list[ShareAuditEvent] = []

    async def emit(self, event: ShareAuditEvent) -> None:
        self.events.append(event)

    def find(self, event_type: str | None = None) -> list[ShareAuditEvent]:
        if event_type is None:
            return list(self.events)
        return [e for e in self.events if e.event_type == event_type]


class LoggingShareAuditEmitter:
    """Emit audit events as structured log lines on the ``medipass.audit`` logger."""

    def __init__(self) -> None:
        self._logger = get_logger('medipass.audit')

    async def emit(self, event: ShareAuditEvent) -> None:
        payload = event.to_dict()
        self._logger.info(payload.pop('event_type'), **payload)
