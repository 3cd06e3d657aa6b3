"""Tests for structlog configuration.

Validates:
  - JSON lines carry event, level, logger name and timestamp.
  - Full sharing ids are redacted before rendering.
  - The request id context var is attached to entries.
  - Level filtering and format validation.
"""

from __future__ import annotations

import io
import json

import pytest

from medipass.observability.logging import (
    configure_logging,
    get_logger,
    redact_sharing_ids,
    request_id_ctx,
)


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


@pytest.fixture
def stream():
    buf = io.StringIO()
    configure_logging(level='INFO', log_format='json', stream=buf)
    return buf


class TestJsonOutput:

    def test_entry_fields(self, stream):
        get_logger('medipass.test').info('grant_created', ttl_hours=24.0)

        [entry] = _lines(stream)
        assert entry['event'] == 'grant_created'
        assert entry['level'] == 'info'
        assert entry['logger'] == 'medipass.test'
        assert entry['ttl_hours'] == 24.0
        assert entry['timestamp'].endswith('Z')

    def test_sharing_id_redacted(self, stream):
        get_logger('medipass.test').info(
            'grant_resolved', sharing_id='share_1760778000000_k3j9x0a1b',
        )

        [entry] = _lines(stream)
        assert entry['sharing_id'] == 'share_1760778000000_...'
        assert 'k3j9x0a1b' not in stream.getvalue()

    def test_request_id_attached(self, stream):
        token = request_id_ctx.set('req-42')
        try:
            get_logger('medipass.test').info('medical_record_saved')
        finally:
            request_id_ctx.reset(token)
        get_logger('medipass.test').info('medipass_shutdown')

        first, second = _lines(stream)
        assert first['request_id'] == 'req-42'
        assert 'request_id' not in second

    def test_exception_rendered(self, stream):
        try:
            raise RuntimeError('audit sink down')
        except RuntimeError:
            get_logger('medipass.test').exception('grant_audit_failed')

        [entry] = _lines(stream)
        assert entry['event'] == 'grant_audit_failed'
        assert 'exception' in entry


class TestConfiguration:

    def test_level_filters_lower_entries(self):
        buf = io.StringIO()
        configure_logging(level='warning', log_format='json', stream=buf)
        logger = get_logger('medipass.test')
        logger.info('grant_created')
        logger.warning('grant_write_failed')

        assert [e['event'] for e in _lines(buf)] == ['grant_write_failed']

    def test_console_format(self):
        buf = io.StringIO()
        configure_logging(level='INFO', log_format='console', stream=buf)
        get_logger('medipass.test').info('medipass_startup', environment='local')
        assert 'medipass_startup' in buf.getvalue()

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(log_format='xml')

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(level='LOUD')


class TestRedactProcessor:

    @pytest.mark.parametrize(
        'value,expected',
        [
            ('share_1760778000000_abcdefghi', 'share_1760778000000_...'),
            ('not-a-share-id', '<redacted>'),
            (12345, '<redacted>'),
        ],
    )
    def test_values(self, value, expected):
        event = redact_sharing_ids(None, 'info', {'event': 'x', 'sharing_id': value})
        assert event['sharing_id'] == expected

    def test_other_keys_untouched(self):
        event = redact_sharing_ids(None, 'info', {'event': 'x', 'owner_id': 'user-1'})
        assert event == {'event': 'x', 'owner_id': 'user-1'}
