"""Medical record persistence on top of the document store.

One document per owner in the ``medicalInfo`` collection. Saving replaces
the whole record and stamps ``updatedAt``; concurrent writers are not
reconciled (last write wins).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from medipass.observability import get_logger
from medipass.protocols import DocumentStore
from medipass.sharing.errors import PersistenceError

from .model import MedicalRecord

logger = get_logger(__name__)

MEDICAL_INFO_COLLECTION = 'medicalInfo'


class MedicalRecordRepository:
    """Load and save one medical record per owner."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get(self, owner_id: str) -> MedicalRecord | None:
        try:
            doc = await self._store.get(MEDICAL_INFO_COLLECTION, owner_id)
        except Exception as exc:
            raise PersistenceError('get', MEDICAL_INFO_COLLECTION, exc) from exc
        if doc is None:
            return None
        return MedicalRecord.model_validate(doc)

    async def save(self, owner_id: str, record: MedicalRecord) -> MedicalRecord:
        stamped = record.model_copy(update={'updated_at': self._clock()})
        try:
            await self._store.put(
                MEDICAL_INFO_COLLECTION, owner_id, stamped.to_document(),
            )
        except Exception as exc:
            logger.warning(
                'medical_record_write_failed',
                owner_id=owner_id,
                error=type(exc).__name__,
            )
            raise PersistenceError('put', MEDICAL_INFO_COLLECTION, exc) from exc
        logger.info(
            'medical_record_saved',
            owner_id=owner_id,
            allergies=len(stamped.allergies),
            medications=len(stamped.medications),
            conditions=len(stamped.conditions),
            emergency_contacts=len(stamped.emergency_contacts),
        )
        return stamped
