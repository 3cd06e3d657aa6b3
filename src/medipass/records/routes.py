"""Medical record endpoints for the authenticated owner.

  GET /api/v1/medical-info   → the caller's record (404 if never saved)
  PUT /api/v1/medical-info   → replace the caller's record

The owner id always comes from the verified token, never from the body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from medipass.security.auth_guard import get_auth_identity
from medipass.security.token_verify import AuthIdentity
from medipass.sharing.errors import PersistenceError

from .model import MedicalRecord
from .repository import MedicalRecordRepository


def record_not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            'error': 'record_not_found',
            'detail': 'No medical information has been saved yet.',
        },
    )


def persistence_unavailable(exc: PersistenceError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={'error': 'persistence_error', 'detail': str(exc)},
    )


def create_medical_info_router(records: MedicalRecordRepository) -> APIRouter:
    """Create the medical-info router with an injected repository."""
    router = APIRouter(tags=['medical-info'])

    @router.get('/api/v1/medical-info')
    async def get_medical_info(
        identity: AuthIdentity = Depends(get_auth_identity),
    ):
        try:
            record = await records.get(identity.user_id)
        except PersistenceError as exc:
            return persistence_unavailable(exc)
        if record is None:
            return record_not_found()
        return record.to_document()

    @router.put('/api/v1/medical-info')
    async def put_medical_info(
        body: MedicalRecord,
        identity: AuthIdentity = Depends(get_auth_identity),
    ):
        try:
            saved = await records.save(identity.user_id, body)
        except PersistenceError as exc:
            return persistence_unavailable(exc)
        return saved.to_document()

    return router
