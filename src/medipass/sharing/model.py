"""Sharing grant domain model.

A grant (``SharingRecord``) backs one shareable link. It is written once
by the ledger and never updated except for ``access_count``, which the
resolution path bumps on each successful read.

Stored document shape (collection ``sharing``, keyed by sharing id)::

    {
        "userId": "<owner id>",
        "data": {<redacted disclosure>},
        "createdAt": "2026-10-18T09:00:00+00:00",
        "expiresAt": "2026-10-19T09:00:00+00:00",
        "accessCount": 0
    }

Identifier policy:
  ``share_<epoch millis>_<9 chars of [a-z0-9]>``. The timestamp keeps ids
  sortable and debuggable; the suffix (36**9 values) makes collisions
  between concurrent grants negligible and enumeration within a TTL
  window impractical. It is a lookup key, not a security token.

Expiry is an absolute UTC instant, checked lazily by whoever reads the
grant. There is no background sweep and no revoked state.
"""

from __future__ import annotations

import math
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

from .composer import RedactedDisclosure
from .errors import InvalidTtlError

# ── Constants ─────────────────────────────────────────────────────────

SHARING_COLLECTION = 'sharing'
SHARING_ID_PREFIX = 'share_'
SUFFIX_LENGTH = 9
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

TTL_CHOICES: tuple[int, ...] = (1, 24, 72, 168)
DEFAULT_TTL_HOURS = 24
MIN_TTL = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Identifier and TTL helpers ────────────────────────────────────────


def generate_sharing_id(now: datetime | None = None) -> str:
    """Return a fresh sharing identifier.

    Each call draws a new random suffix, so a retried share request never
    reuses an identifier.
    """
    now = now or _utcnow()
    millis = int(now.timestamp() * 1000)
    suffix = ''.join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f'{SHARING_ID_PREFIX}{millis}_{suffix}'


def validate_ttl_hours(ttl_hours: object) -> float:
    """Return ``ttl_hours`` as a float or raise ``InvalidTtlError``."""
    if isinstance(ttl_hours, bool) or not isinstance(ttl_hours, (int, float)):
        raise InvalidTtlError(ttl_hours)
    try:
        value = float(ttl_hours)
    except OverflowError as exc:
        raise InvalidTtlError(ttl_hours) from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidTtlError(ttl_hours)
    return value


def compute_expiry(created_at: datetime, ttl_hours: float) -> datetime:
    """Absolute expiry instant for a grant created at ``created_at``.

    TTLs shorter than the clock resolution round up to one microsecond.
    """
    ttl = validate_ttl_hours(ttl_hours)
    try:
        return created_at + max(timedelta(hours=ttl), MIN_TTL)
    except OverflowError as exc:
        raise InvalidTtlError(ttl_hours) from exc


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_instant(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(str(value).replace('Z', '+00:00')))


# ── Domain model ──────────────────────────────────────────────────────


class GrantStatus(str, Enum):
    ACTIVE = 'active'
    EXPIRED = 'expired'


@dataclass(frozen=True)
class SharingRecord:
    """Persisted sharing grant.

    Attributes:
        sharing_id: Opaque identifier embedded in the link.
        owner_id: Subject who created the grant.
        payload: Redacted disclosure exposed to link holders.
        created_at: Creation instant (UTC).
        expires_at: Instant the grant stops resolving (UTC).
        access_count: Successful reads so far.
    """

    sharing_id: str
    owner_id: str
    payload: RedactedDisclosure
    created_at: datetime
    expires_at: datetime
    access_count: int = field(default=0)

    def __post_init__(self) -> None:
        if self.expires_at <= self.created_at:
            raise ValueError('expires_at must be later than created_at')
        if self.access_count < 0:
            raise ValueError('access_count cannot be negative')

    def status(self, now: datetime | None = None) -> GrantStatus:
        now = now or _utcnow()
        if now >= self.expires_at:
            return GrantStatus.EXPIRED
        return GrantStatus.ACTIVE

    def is_active(self, now: datetime | None = None) -> bool:
        return self.status(now) is GrantStatus.ACTIVE

    @property
    def ttl(self) -> timedelta:
        return self.expires_at - self.created_at

    def to_document(self) -> dict[str, Any]:
        return {
            'userId': self.owner_id,
            'data': self.payload.to_dict(),
            'createdAt': self.created_at.isoformat(),
            'expiresAt': self.expires_at.isoformat(),
            'accessCount': self.access_count,
        }

    @classmethod
    def from_document(cls, sharing_id: str, doc: Mapping[str, Any]) -> SharingRecord:
        return cls(
            sharing_id=sharing_id,
            owner_id=str(doc['userId']),
            payload=RedactedDisclosure.from_dict(doc.get('data') or {}),
            created_at=_parse_instant(doc['createdAt']),
            expires_at=_parse_instant(doc['expiresAt']),
            access_count=int(doc.get('accessCount', 0)),
        )
