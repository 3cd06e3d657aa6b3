"""Tests for MediPassSettings and app factory validation."""

from __future__ import annotations

import pytest

from medipass.db import SupabaseDocumentStore
from medipass.inmemory import InMemoryDocumentStore
from medipass.main import create_app
from medipass.settings import DEFAULT_CORS_ORIGINS, DEFAULT_SHARE_BASE_URL, MediPassSettings


class TestDefaults:

    def test_local_defaults_are_valid(self):
        settings = MediPassSettings()
        assert settings.is_local
        assert settings.validate() == []
        assert settings.share_base_url == DEFAULT_SHARE_BASE_URL
        assert settings.default_ttl_hours == 24

    def test_share_url(self):
        settings = MediPassSettings(share_base_url='https://medipass.app/')
        assert settings.share_url('share_1_abc') == 'https://medipass.app/share/share_1_abc'


class TestValidate:

    def test_deployed_requires_supabase(self):
        errors = MediPassSettings(environment='production').validate()
        assert any('supabase_url' in e for e in errors)
        assert any('supabase_service_role_key' in e for e in errors)

    def test_deployed_requires_https_links(self):
        settings = MediPassSettings(
            environment='production',
            supabase_url='https://x.supabase.co',
            supabase_service_role_key='svc',
            share_base_url='http://medipass.app',
        )
        assert settings.validate() == ['production: share_base_url must use https']

    @pytest.mark.parametrize('ttl', [0, -1])
    def test_default_ttl_must_be_positive(self, ttl):
        assert MediPassSettings(default_ttl_hours=ttl).validate()

    def test_share_base_url_must_be_http(self):
        assert MediPassSettings(share_base_url='medipass.app').validate()

    def test_log_format_checked(self):
        assert MediPassSettings(log_format='xml').validate() == [
            'log_format must be one of: json, console',
        ]

    def test_log_level_checked(self):
        assert MediPassSettings(log_level='LOUD').validate()


class TestFromEnv:

    def test_reads_variables(self):
        settings = MediPassSettings.from_env({
            'ENVIRONMENT': 'staging',
            'SUPABASE_URL': 'https://x.supabase.co',
            'SUPABASE_SERVICE_ROLE_KEY': 'svc',
            'SUPABASE_JWT_SECRET': 'secret',
            'SHARE_BASE_URL': 'https://staging.medipass.app',
            'SHARE_DEFAULT_TTL_HOURS': '72',
            'CORS_ORIGINS': 'https://a.example, https://b.example',
            'LOG_LEVEL': 'DEBUG',
            'LOG_FORMAT': 'console',
        })
        assert settings.environment == 'staging'
        assert settings.supabase_url == 'https://x.supabase.co'
        assert settings.default_ttl_hours == 72
        assert settings.cors_origins == ('https://a.example', 'https://b.example')
        assert settings.log_level == 'DEBUG'
        assert settings.log_format == 'console'
        assert settings.validate() == []

    def test_empty_env_uses_defaults(self):
        settings = MediPassSettings.from_env({})
        assert settings == MediPassSettings()
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS


class TestCreateApp:

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValueError, match='validation failed'):
            create_app(MediPassSettings(environment='production'))

    def test_no_verifier_source_rejected(self):
        with pytest.raises(ValueError):
            create_app(MediPassSettings())

    def test_local_uses_in_memory_store(self):
        app = create_app(MediPassSettings(supabase_jwt_secret='secret'))
        assert isinstance(app.state.deps.document_store, InMemoryDocumentStore)

    def test_deployed_uses_supabase_store(self):
        app = create_app(MediPassSettings(
            environment='production',
            supabase_url='https://x.supabase.co',
            supabase_service_role_key='svc',
            supabase_jwt_secret='secret',
        ))
        assert isinstance(app.state.deps.document_store, SupabaseDocumentStore)

    def test_one_store_shared_by_components(self, store):
        app = create_app(MediPassSettings(supabase_jwt_secret='secret'), document_store=store)
        assert app.state.deps.document_store is store
