"""Auth guard middleware.

Verifies the Bearer token on every non-public request and stores the
result on ``request.state.auth_identity``. Public paths (health and the
shared-link resolution route) pass through untouched: anyone holding a
link may read its disclosure without an account.
"""

from __future__ import annotations

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .token_verify import (
    AuthIdentity,
    TokenVerificationError,
    TokenVerifier,
    extract_bearer_token,
)

DEFAULT_PUBLIC_PATHS: frozenset[str] = frozenset({
    '/health',
    '/metrics',
    '/docs',
    '/docs/oauth2-redirect',
    '/openapi.json',
})
# Only link resolution is open by prefix.
DEFAULT_PUBLIC_PREFIXES: tuple[str, ...] = ('/share/',)


def _unauthorized(code: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={'error': 'unauthorized', 'code': code, 'detail': detail},
        headers={'WWW-Authenticate': 'Bearer'},
    )


class AuthGuardMiddleware(BaseHTTPMiddleware):
    """Reject protected requests without a valid Bearer token."""

    def __init__(
        self,
        app,
        token_verifier: TokenVerifier,
        public_paths: frozenset[str] = DEFAULT_PUBLIC_PATHS,
        public_prefixes: tuple[str, ...] = DEFAULT_PUBLIC_PREFIXES,
    ) -> None:
        super().__init__(app)
        self._verifier = token_verifier
        self._public_paths = public_paths
        self._public_prefixes = public_prefixes

    def _is_public(self, path: str) -> bool:
        if path in self._public_paths:
            return True
        return path.startswith(self._public_prefixes)

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.auth_identity = None

        if request.method == 'OPTIONS' or self._is_public(request.url.path):
            return await call_next(request)

        token = extract_bearer_token(request)
        if not token:
            return _unauthorized('no_credentials', 'Authentication required')

        try:
            request.state.auth_identity = self._verifier.verify(token)
        except TokenVerificationError as exc:
            return _unauthorized(exc.code, exc.detail)

        return await call_next(request)


def get_auth_identity(request: Request) -> AuthIdentity:
    """FastAPI dependency returning the authenticated identity.

    Raises:
        HTTPException: 401 if the request carries no verified identity.
    """
    identity: AuthIdentity | None = getattr(request.state, 'auth_identity', None)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={
                'error': 'unauthorized',
                'code': 'no_credentials',
                'detail': 'Authentication required',
            },
            headers={'WWW-Authenticate': 'Bearer'},
        )
    return identity
