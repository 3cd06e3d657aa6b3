"""Share creation endpoint.

  POST /api/v1/shares  → 201 { sharingId, shareUrl, createdAt, expiresAt }

Flow: load the caller's medical record, redact it with the requested
selection, create a grant through the ledger and return the link. The
client renders ``shareUrl`` as a QR code.

Selection flags the client leaves out are defaulted to false here, in the
request schema, so the composer always receives a fully specified
selection.

Error responses:
  - 400 invalid_ttl: expiresInHours is not a positive finite number.
  - 404 record_not_found: caller has no saved medical record.
  - 503 persistence_error: the document store failed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel

from medipass.observability import get_logger
from medipass.records.model import DocumentReference
from medipass.records.repository import MedicalRecordRepository
from medipass.records.routes import persistence_unavailable, record_not_found
from medipass.security.auth_guard import get_auth_identity
from medipass.security.token_verify import AuthIdentity
from medipass.settings import MediPassSettings

from .composer import DisclosureSelection, compose
from .errors import InvalidTtlError, MissingRecordError, PersistenceError
from .ledger import SharingLedger

logger = get_logger(__name__)


# ── Request schemas ──────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SelectionBody(_CamelModel):
    """Category flags; omitted flags are not shared."""

    personal_info: StrictBool = False
    allergies: StrictBool = False
    medications: StrictBool = False
    conditions: StrictBool = False
    emergency_contacts: StrictBool = False
    documents: StrictBool = False

    def to_selection(self) -> DisclosureSelection:
        return DisclosureSelection(
            personal_info=self.personal_info,
            allergies=self.allergies,
            medications=self.medications,
            conditions=self.conditions,
            emergency_contacts=self.emergency_contacts,
            documents=self.documents,
        )


class CreateShareRequest(_CamelModel):
    """Request body for grant creation."""

    selection: SelectionBody
    # Range checked by the ledger. None means the configured default.
    expires_in_hours: float | None = Field(default=None, allow_inf_nan=True)
    documents: list[DocumentReference] = Field(default_factory=list)


# ── Route factory ────────────────────────────────────────────────────


def create_share_router(
    ledger: SharingLedger,
    records: MedicalRecordRepository,
    settings: MediPassSettings,
) -> APIRouter:
    """Create the share-creation router with injected dependencies."""
    router = APIRouter(tags=['shares'])

    @router.post('/api/v1/shares', status_code=201)
    async def create_share(
        body: CreateShareRequest,
        identity: AuthIdentity = Depends(get_auth_identity),
    ):
        ttl_hours = body.expires_in_hours
        if ttl_hours is None:
            ttl_hours = settings.default_ttl_hours
        try:
            record = await records.get(identity.user_id)
            disclosure = compose(record, body.selection.to_selection(), body.documents)
            grant = await ledger.create_grant(
                identity.user_id, disclosure, ttl_hours,
            )
        except MissingRecordError:
            return record_not_found()
        except InvalidTtlError as exc:
            return JSONResponse(
                status_code=400,
                content={'error': 'invalid_ttl', 'detail': str(exc)},
            )
        except PersistenceError as exc:
            logger.warning('share_create_failed', owner_id=identity.user_id)
            return persistence_unavailable(exc)

        return {
            'sharingId': grant.sharing_id,
            'shareUrl': settings.share_url(grant.sharing_id),
            'createdAt': grant.created_at.isoformat(),
            'expiresAt': grant.expires_at.isoformat(),
            'categories': list(grant.payload),
        }

    return router
