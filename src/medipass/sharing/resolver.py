"""Grant resolution: turn a sharing id from a link into its disclosure.

Resolution reads the grant, enforces expiry against the current instant
and then bumps ``accessCount``. The bump is best-effort: a failed
increment is logged and the reader still gets the payload. Reads are
unlimited until the grant expires.

Expired grants are left in place. Nothing here deletes them.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from medipass.observability import get_logger
from medipass.observability.metrics import SHARE_RESOLUTIONS_TOTAL
from medipass.protocols import DocumentStore

from .audit import (
    SHARE_ACCESSED,
    SHARE_DENIED,
    ShareAuditEmitter,
    ShareAuditEvent,
    redact_sharing_id,
)
from .errors import GrantExpired, GrantNotFound, PersistenceError
from .model import SHARING_COLLECTION, SharingRecord

logger = get_logger(__name__)

ACCESS_COUNT_FIELD = 'accessCount'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GrantResolver:
    """Resolve sharing ids against the same store the ledger writes to."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        clock: Callable[[], datetime] | None = None,
        audit: ShareAuditEmitter | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utcnow
        self._audit = audit

    async def resolve(self, sharing_id: str) -> SharingRecord:
        """Return the active grant for ``sharing_id``.

        The returned record reflects the access count after this read
        when the increment succeeded.

        Raises:
            GrantNotFound: No grant under this id.
            GrantExpired: Grant exists but ``now >= expires_at``.
            PersistenceError: The store read failed or returned a document
                that is not a valid grant.
        """
        ref = redact_sharing_id(sharing_id)
        try:
            doc = await self._store.get(SHARING_COLLECTION, sharing_id)
        except Exception as exc:
            logger.warning('grant_read_failed', sharing_ref=ref, error=type(exc).__name__)
            SHARE_RESOLUTIONS_TOTAL.labels(outcome='error').inc()
            raise PersistenceError('get', SHARING_COLLECTION, exc) from exc

        if doc is None:
            await self._deny(ref, 'not_found')
            raise GrantNotFound(ref)

        try:
            record = SharingRecord.from_document(sharing_id, doc)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error('grant_document_invalid', sharing_ref=ref, error=type(exc).__name__)
            SHARE_RESOLUTIONS_TOTAL.labels(outcome='error').inc()
            raise PersistenceError('get', SHARING_COLLECTION, exc) from exc

        now = self._clock()
        if not record.is_active(now):
            await self._deny(ref, 'expired', owner_id=record.owner_id)
            raise GrantExpired(ref, record.expires_at)

        count = await self._bump_access_count(sharing_id, ref)
        if count is not None and count > record.access_count:
            record = replace(record, access_count=count)

        SHARE_RESOLUTIONS_TOTAL.labels(outcome='active').inc()
        logger.info('grant_resolved', sharing_ref=ref, access_count=record.access_count)
        await self._emit(ShareAuditEvent(
            event_type=SHARE_ACCESSED,
            sharing_ref=ref,
            owner_id=record.owner_id,
            categories=tuple(record.payload),
            timestamp=now,
        ))
        return record

    async def _bump_access_count(self, sharing_id: str, ref: str) -> int | None:
        try:
            return await self._store.increment(
                SHARING_COLLECTION, sharing_id, ACCESS_COUNT_FIELD,
            )
        except Exception as exc:
            logger.warning(
                'grant_access_count_failed', sharing_ref=ref, error=type(exc).__name__,
            )
            return None

    async def _deny(self, ref: str, reason: str, *, owner_id: str = '') -> None:
        logger.info('grant_denied', sharing_ref=ref, reason=reason)
        SHARE_RESOLUTIONS_TOTAL.labels(outcome=reason).inc()
        await self._emit(ShareAuditEvent(
            event_type=SHARE_DENIED,
            sharing_ref=ref,
            owner_id=owner_id,
            detail=reason,
            timestamp=self._clock(),
        ))

    async def _emit(self, event: ShareAuditEvent) -> None:
        if self._audit is None:
            return
        try:
            await self._audit.emit(event)
        except Exception:
            logger.exception('grant_audit_failed', sharing_ref=event.sharing_ref)
