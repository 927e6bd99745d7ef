"""Tests for fetching archive sources over HTTP."""

import io

import httpx
import pytest

from server.apps.tiering.infrastructure.fetch import SourceFetcher
from server.common.errors import NotFoundError, UpstreamFetchError


def test_fetch_streams_body(make_fetcher):
    """Test the body and content type of a source are captured."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b'remote bytes',
            headers={'content-type': 'image/png'},
        )

    destination = io.BytesIO()
    fetched = make_fetcher(handler).fetch('https://files.test/a.png', destination)

    assert destination.getvalue() == b'remote bytes'
    assert fetched.content_type == 'image/png'
    assert fetched.size_bytes == len(b'remote bytes')


def test_fetch_defaults_content_type(make_fetcher):
    """Test a missing content type falls back to octet-stream."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'data')

    fetched = make_fetcher(handler).fetch('https://files.test/a', io.BytesIO())

    assert fetched.content_type == 'application/octet-stream'


def test_fetch_non_success_status(make_fetcher):
    """Test error statuses become upstream fetch errors."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(UpstreamFetchError, match='Status: 404') as exc_info:
        make_fetcher(handler).fetch('https://files.test/missing', io.BytesIO())

    assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.status == 'NOT_FOUND'


def test_fetch_does_not_follow_redirects(make_fetcher):
    """Test a redirect answer fails instead of reaching its target."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.host)
        return httpx.Response(
            302,
            headers={'location': 'http://169.254.169.254/latest/meta-data/'},
        )

    destination = io.BytesIO()
    with pytest.raises(UpstreamFetchError, match='Status: 302'):
        make_fetcher(handler).fetch('https://files.test/a', destination)

    assert requested == ['files.test']
    assert destination.getvalue() == b''


def test_fetch_transport_error(make_fetcher):
    """Test unreachable sources become upstream fetch errors."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    with pytest.raises(UpstreamFetchError):
        make_fetcher(handler).fetch('https://files.test/a', io.BytesIO())


def test_default_client_uses_configured_timeout(settings, monkeypatch):
    """Test the fetcher builds its own client with the configured timeout."""
    settings.TIERING_FETCH_TIMEOUT = 5
    created = {}
    real_client = httpx.Client

    def client_factory(**kwargs):
        created.update(kwargs)
        return real_client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
            **kwargs,
        )

    monkeypatch.setattr(httpx, 'Client', client_factory)

    SourceFetcher().fetch('https://files.test/a', io.BytesIO())

    assert created['timeout'] == 5
    assert created['follow_redirects'] is False
