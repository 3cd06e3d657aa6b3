"""Sharing ledger: creates time-limited sharing grants.

Creation is the only write the ledger performs. A grant is built in
memory, written to the ``sharing`` collection in a single ``put`` and
returned only once that write has succeeded. A failed write surfaces as
``PersistenceError`` and the caller never sees a record.

The ledger does not retry. A caller that retries after a failure (or
after abandoning a slow call) goes through ``create_grant`` again and
gets a fresh sharing id, so a possibly-written earlier attempt is never
overwritten.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from medipass.observability import get_logger
from medipass.observability.metrics import (
    SHARE_GRANT_WRITE_FAILURES_TOTAL,
    SHARE_GRANTS_CREATED_TOTAL,
)
from medipass.protocols import DocumentStore

from .audit import SHARE_CREATED, ShareAuditEmitter, ShareAuditEvent, redact_sharing_id
from .composer import RedactedDisclosure
from .errors import PersistenceError
from .model import (
    SHARING_COLLECTION,
    TTL_CHOICES,
    SharingRecord,
    compute_expiry,
    generate_sharing_id,
    validate_ttl_hours,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ttl_label(ttl: float) -> str:
    return str(int(ttl)) if ttl in TTL_CHOICES else 'custom'


class SharingLedger:
    """Owns grant creation against an injected document store.

    Args:
        store: Document store shared with the rest of the app.
        clock: Returns the current UTC instant. Defaults to the system clock.
        audit: Optional audit sink for ``share.created`` events.
    """

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

    async def create_grant(
        self,
        owner_id: str,
        payload: RedactedDisclosure,
        ttl_hours: float,
    ) -> SharingRecord:
        """Create and persist a grant exposing ``payload`` for ``ttl_hours``.

        Raises:
            InvalidTtlError: ``ttl_hours`` is not positive and finite.
            PersistenceError: The store rejected the write.
        """
        ttl = validate_ttl_hours(ttl_hours)

        created_at = self._clock()
        record = SharingRecord(
            sharing_id=generate_sharing_id(created_at),
            owner_id=owner_id,
            payload=payload,
            created_at=created_at,
            expires_at=compute_expiry(created_at, ttl),
            access_count=0,
        )
        ref = redact_sharing_id(record.sharing_id)

        try:
            await self._store.put(
                SHARING_COLLECTION, record.sharing_id, record.to_document(),
            )
        except Exception as exc:
            logger.warning(
                'grant_write_failed',
                sharing_ref=ref,
                owner_id=owner_id,
                error=type(exc).__name__,
            )
            SHARE_GRANT_WRITE_FAILURES_TOTAL.inc()
            raise PersistenceError('put', SHARING_COLLECTION, exc) from exc

        SHARE_GRANTS_CREATED_TOTAL.labels(ttl_hours=_ttl_label(ttl)).inc()
        categories = tuple(payload)
        logger.info(
            'grant_created',
            sharing_ref=ref,
            owner_id=owner_id,
            ttl_hours=ttl,
            expires_at=record.expires_at.isoformat(),
            categories=list(categories),
        )
        if self._audit is not None:
            # Grant already persisted; audit errors are only logged.
            try:
                await self._audit.emit(ShareAuditEvent(
                    event_type=SHARE_CREATED,
                    sharing_ref=ref,
                    owner_id=owner_id,
                    categories=categories,
                    timestamp=created_at,
                ))
            except Exception:
                logger.exception('grant_audit_failed', sharing_ref=ref)
        return record
