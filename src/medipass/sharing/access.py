"""Public shared-link resolution endpoint.

  GET /share/{sharing_id}  → { sharingId, data, expiresAt, accessCount }

No authentication: holding the link is the access grant.

Error responses:
  - 404 share_not_found: unknown id.
  - 410 share_expired: the grant's expiry instant has passed.
  - 503 persistence_error: the document store failed.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .errors import GrantExpired, GrantNotFound, PersistenceError
from .resolver import GrantResolver


def create_share_access_router(resolver: GrantResolver) -> APIRouter:
    """Create the public share-access router."""
    router = APIRouter(tags=['share-access'])

    @router.get('/share/{sharing_id}')
    async def read_share(sharing_id: str):
        try:
            grant = await resolver.resolve(sharing_id)
        except GrantNotFound:
            return JSONResponse(
                status_code=404,
                content={
                    'error': 'share_not_found',
                    'detail': 'Share link not found.',
                },
            )
        except GrantExpired as exc:
            return JSONResponse(
                status_code=410,
                content={
                    'error': 'share_expired',
                    'detail': f'Share link expired at {exc.expired_at.isoformat()}.',
                },
            )
        except PersistenceError:
            return JSONResponse(
                status_code=503,
                content={
                    'error': 'persistence_error',
                    'detail': 'Shared data is temporarily unavailable.',
                },
            )

        return {
            'sharingId': grant.sharing_id,
            'data': grant.payload.to_dict(),
            'expiresAt': grant.expires_at.isoformat(),
            'accessCount': grant.access_count,
        }

    return router
