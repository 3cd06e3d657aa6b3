"""Tests for Supabase access-token verification.

Validates:
  - HS256 and RS256 signature verification.
  - Audience, expiry and required-claim enforcement.
  - Bearer token extraction.
  - Verifier factory selection.
"""

from __future__ import annotations

import time
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from medipass.security.token_verify import (
    AuthIdentity,
    JWKSKeyProvider,
    StaticKeyProvider,
    TokenVerificationError,
    TokenVerifier,
    create_token_verifier,
    extract_bearer_token,
)

TEST_SECRET = 'test-jwt-secret-for-unit-tests-only'

_rsa_private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
RSA_PRIVATE_PEM = _rsa_private_key.private_bytes(
    encoding=serialization.Encoding.PEM,
    format=serialization.PrivateFormat.TraditionalOpenSSL,
    encryption_algorithm=serialization.NoEncryption(),
)
RSA_PUBLIC_PEM = _rsa_private_key.public_key().public_bytes(
    encoding=serialization.Encoding.PEM,
    format=serialization.PublicFormat.SubjectPublicKeyInfo,
)


def _claims(**overrides) -> dict:
    claims = {
        'sub': 'user-1',
        'email': 'Ada@Example.com',
        'aud': 'authenticated',
        'exp': int(time.time()) + 3600,
    }
    claims.update(overrides)
    return claims


def _hs256_verifier() -> TokenVerifier:
    return TokenVerifier(StaticKeyProvider(TEST_SECRET), algorithms=['HS256'])


class TestHS256:

    def test_valid_token(self):
        token = jwt.encode(_claims(), TEST_SECRET, algorithm='HS256')
        identity = _hs256_verifier().verify(token)
        assert isinstance(identity, AuthIdentity)
        assert identity.user_id == 'user-1'
        assert identity.email == 'ada@example.com'
        assert identity.raw_claims['aud'] == 'authenticated'

    def test_expired(self):
        token = jwt.encode(_claims(exp=int(time.time()) - 10), TEST_SECRET, algorithm='HS256')
        with pytest.raises(TokenVerificationError) as exc_info:
            _hs256_verifier().verify(token)
        assert exc_info.value.code == 'token_expired'

    def test_wrong_audience(self):
        token = jwt.encode(_claims(aud='anon'), TEST_SECRET, algorithm='HS256')
        with pytest.raises(TokenVerificationError) as exc_info:
            _hs256_verifier().verify(token)
        assert exc_info.value.code == 'invalid_audience'

    def test_missing_sub(self):
        claims = _claims()
        del claims['sub']
        token = jwt.encode(claims, TEST_SECRET, algorithm='HS256')
        with pytest.raises(TokenVerificationError) as exc_info:
            _hs256_verifier().verify(token)
        assert exc_info.value.code == 'invalid_token'

    def test_garbage(self):
        with pytest.raises(TokenVerificationError) as exc_info:
            _hs256_verifier().verify('not-a-jwt')
        assert exc_info.value.code == 'invalid_token'

    @pytest.mark.parametrize('token', ['', '   '])
    def test_empty(self, token):
        with pytest.raises(TokenVerificationError) as exc_info:
            _hs256_verifier().verify(token)
        assert exc_info.value.code == 'empty_token'


class TestRS256:

    def test_valid_token(self):
        provider = MagicMock()
        provider.get_signing_key.return_value = RSA_PUBLIC_PEM
        token = jwt.encode(_claims(), RSA_PRIVATE_PEM, algorithm='RS256')

        identity = TokenVerifier(provider).verify(token)
        assert identity.user_id == 'user-1'
        provider.get_signing_key.assert_called_once_with(token)

    def test_hs256_token_rejected_by_rs256_verifier(self):
        provider = MagicMock()
        provider.get_signing_key.return_value = RSA_PUBLIC_PEM
        token = jwt.encode(_claims(), TEST_SECRET, algorithm='HS256')
        with pytest.raises(TokenVerificationError):
            TokenVerifier(provider).verify(token)


class TestExtractBearerToken:

    def _request(self, header: str | None):
        request = MagicMock()
        request.headers = {'authorization': header} if header is not None else {}
        return request

    def test_bearer(self):
        assert extract_bearer_token(self._request('Bearer abc.def')) == 'abc.def'

    @pytest.mark.parametrize('header', [None, '', 'Basic abc', 'bearer abc'])
    def test_not_bearer(self, header):
        assert extract_bearer_token(self._request(header)) is None


class TestFactory:

    def test_secret_selects_hs256(self):
        verifier = create_token_verifier(jwt_secret=TEST_SECRET)
        token = jwt.encode(_claims(), TEST_SECRET, algorithm='HS256')
        assert verifier.verify(token).user_id == 'user-1'

    def test_url_selects_jwks(self):
        verifier = create_token_verifier(supabase_url='https://x.supabase.co/')
        assert isinstance(verifier._key_provider, JWKSKeyProvider)

    def test_nothing_configured(self):
        with pytest.raises(ValueError):
            create_token_verifier()
