"""Time-limited sharing of redacted medical records.

Route factories live in ``.routes`` and ``.access`` and are imported by
the app factory directly.
"""

from .audit import (
    InMemoryShareAuditEmitter,
    LoggingShareAuditEmitter,
    ShareAuditEmitter,
    ShareAuditEvent,
    redact_sharing_id,
)
from .composer import DisclosureSelection, RedactedDisclosure, compose
from .errors import (
    GrantExpired,
    GrantNotFound,
    InvalidSelectionError,
    InvalidTtlError,
    MissingRecordError,
    PersistenceError,
    SharingError,
)
from .ledger import SharingLedger
from .model import (
    DEFAULT_TTL_HOURS,
    TTL_CHOICES,
    GrantStatus,
    SharingRecord,
    generate_sharing_id,
    validate_ttl_hours,
)
from .resolver import GrantResolver

__all__ = [
    'DEFAULT_TTL_HOURS',
    'DisclosureSelection',
    'GrantExpired',
    'GrantNotFound',
    'GrantResolver',
    'GrantStatus',
    'InMemoryShareAuditEmitter',
    'InvalidSelectionError',
    'InvalidTtlError',
    'LoggingShareAuditEmitter',
    'MissingRecordError',
    'PersistenceError',
    'RedactedDisclosure',
    'ShareAuditEmitter',
    'ShareAuditEvent',
    'SharingError',
    'SharingLedger',
    'SharingRecord',
    'TTL_CHOICES',
    'compose',
    'generate_sharing_id',
    'redact_sharing_id',
    'validate_ttl_hours',
]
