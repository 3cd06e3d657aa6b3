"""Tests for AuthGuardMiddleware public-path matching.

Validates:
  - Fixed public endpoints are open only on their exact path.
  - Lookalike paths (``/healthcheck-admin``) still need a token.
  - Shared-link resolution stays open under ``/share/``.
"""

from __future__ import annotations

import time

import jwt
import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from medipass.security.auth_guard import AuthGuardMiddleware
from medipass.security.token_verify import StaticKeyProvider, TokenVerifier

TEST_SECRET = 'test-jwt-secret-for-unit-tests-only'


def _make_app() -> FastAPI:
    app = FastAPI()
    verifier = TokenVerifier(StaticKeyProvider(TEST_SECRET), algorithms=['HS256'])
    app.add_middleware(AuthGuardMiddleware, token_verifier=verifier)

    async def whoami(request: Request):
        identity = request.state.auth_identity
        return {'user_id': identity.user_id if identity else None}

    for path in (
        '/health',
        '/healthcheck-admin',
        '/metrics',
        '/metrics-internal',
        '/docs-private',
        '/share/{sharing_id}',
        '/shares-admin',
    ):
        app.add_api_route(path, whoami)
    return app


@pytest.fixture
def client():
    return AsyncClient(transport=ASGITransport(app=_make_app()), base_url='http://test')


def _auth() -> dict[str, str]:
    token = jwt.encode(
        {'sub': 'user-1', 'aud': 'authenticated', 'exp': int(time.time()) + 60},
        TEST_SECRET,
        algorithm='HS256',
    )
    return {'Authorization': f'Bearer {token}'}


class TestPublicPaths:

    @pytest.mark.asyncio
    @pytest.mark.parametrize('path', ['/health', '/metrics', '/share/share_1_abc'])
    async def test_open_without_token(self, client, path):
        async with client:
            resp = await client.get(path)
        assert resp.status_code == 200
        assert resp.json() == {'user_id': None}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'path', ['/healthcheck-admin', '/metrics-internal', '/docs-private', '/shares-admin'],
    )
    async def test_lookalike_paths_need_token(self, client, path):
        async with client:
            resp = await client.get(path)
        assert resp.status_code == 401
        assert resp.json()['code'] == 'no_credentials'

    @pytest.mark.asyncio
    async def test_lookalike_path_with_token(self, client):
        async with client:
            resp = await client.get('/healthcheck-admin', headers=_auth())
        assert resp.status_code == 200
        assert resp.json() == {'user_id': 'user-1'}
