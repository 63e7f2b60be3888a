"""Unit tests for the JWT authenticated transport."""

from unittest.mock import MagicMock

import jwt
import pytest
import requests

from amo_upload.clients.auth import AMOTransport, AuthToken, create_token
from amo_upload.exceptions import HTTPError, RemoteError


def make_response(status=200, body=b'{"ok": true}', url="https://addons.example.com/x"):
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.url = url
    return response


class Clock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def transport(credentials, clock):
    transport = AMOTransport(credentials, clock=clock)
    transport.session.request = MagicMock(return_value=make_response())
    return transport


def sent_token(transport: AMOTransport) -> str:
    headers = transport.session.request.call_args.kwargs["headers"]
    scheme, token = headers["Authorization"].split(" ", 1)
    assert scheme == "JWT"
    return token


class TestCreateToken:
    """Tests for create_token."""

    def test_claims(self, credentials):
        token = create_token(credentials, ttl=60, now=1000)
        claims = jwt.decode(
            token.value,
            credentials.secret,
            algorithms=["HS256"],
            options={"verify_exp": False, "verify_iat": False},
        )
        assert claims["iss"] == credentials.key
        assert claims["iat"] == 1000
        assert claims["exp"] == 1060
        assert claims["jti"]
        assert token.expires_at == 1060

    def test_unique_jti(self, credentials):
        options = {"verify_signature": False}
        first = jwt.decode(create_token(credentials, now=1000).value, options=options)
        second = jwt.decode(create_token(credentials, now=1000).value, options=options)
        assert first["jti"] != second["jti"]

    def test_secret_not_in_repr(self, credentials):
        assert credentials.secret not in repr(credentials)
        assert "value" not in repr(AuthToken(value="abc.def.ghi", expires_at=1.0))


class TestAuthToken:
    """Tests for token expiry margin."""

    def test_expires_ten_seconds_early(self):
        token = AuthToken(value="t", expires_at=1060)
        assert not token.is_expired(1049)
        assert token.is_expired(1050)
        assert token.is_expired(1100)


class TestAMOTransport:
    """Tests for AMOTransport."""

    def test_request_joins_prefix_and_decodes_json(self, transport):
        assert transport.request("/api/v5/addons/upload/") == {"ok": True}
        kwargs = transport.session.request.call_args.kwargs
        assert kwargs["url"] == "https://addons.example.com/api/v5/addons/upload/"
        assert kwargs["method"] == "GET"
        assert kwargs["timeout"] == transport.timeout

    def test_token_reused_until_expiry(self, transport, clock):
        transport.request("/a")
        first = sent_token(transport)
        clock.now += 30
        transport.request("/b")
        assert sent_token(transport) == first

    def test_token_refreshed_near_expiry(self, transport, clock):
        transport.request("/a")
        first = sent_token(transport)
        clock.now += 50
        transport.request("/b")
        assert sent_token(transport) != first

    def test_forced_refresh(self, transport):
        first = transport.refresh_token()
        assert transport.refresh_token(force=True) is not first

    def test_extra_headers_are_merged(self, transport):
        transport.request("/a", headers={"Accept-Language": "en-US"})
        headers = transport.session.request.call_args.kwargs["headers"]
        assert headers["Accept-Language"] == "en-US"
        assert headers["Authorization"].startswith("JWT ")

    def test_not_found_keeps_status_and_body(self, transport):
        transport.session.request.return_value = make_response(
            404, b'{"detail": "Not found."}'
        )
        with pytest.raises(RemoteError) as exc_info:
            transport.request("/api/v5/addons/addon/x/versions/9.9/")
        assert exc_info.value.status == 404
        assert exc_info.value.is_not_found
        assert exc_info.value.body == {"detail": "Not found."}
        assert exc_info.value.response is not None

    def test_error_without_json_body(self, transport):
        transport.session.request.return_value = make_response(502, b"Bad gateway")
        with pytest.raises(RemoteError) as exc_info:
            transport.request("/a")
        assert exc_info.value.status == 502
        assert exc_info.value.body is None

    def test_no_retry_on_error(self, transport):
        transport.session.request.return_value = make_response(500, b"{}")
        with pytest.raises(RemoteError):
            transport.request("/a")
        assert transport.session.request.call_count == 1

    def test_empty_body(self, transport):
        transport.session.request.return_value = make_response(204, b"")
        assert transport.request("/a", method="DELETE") is None

    def test_invalid_json_body(self, transport):
        transport.session.request.return_value = make_response(200, b"<html>")
        with pytest.raises(HTTPError):
            transport.request("/a")

    def test_connection_error(self, transport):
        transport.session.request.side_effect = requests.exceptions.ConnectionError(
            "refused"
        )
        with pytest.raises(HTTPError) as exc_info:
            transport.request("/a")
        assert not isinstance(exc_info.value, RemoteError)

    def test_timeout(self, transport):
        transport.session.request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(HTTPError, match="timeout"):
            transport.request("/a")

    def test_stream_is_authenticated(self, transport):
        transport.stream("https://addons.example.com/downloads/file/1/a.xpi")
        kwargs = transport.session.request.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["url"] == "https://addons.example.com/downloads/file/1/a.xpi"
        assert kwargs["headers"]["Authorization"].startswith("JWT ")

    def test_context_manager_closes_session(self, credentials):
        with AMOTransport(credentials) as transport:
            transport.session.close = MagicMock()
        transport.session.close.assert_called_once()

    def test_stream_error_closes_response(self, transport):
        response = make_response(403, b'{"detail": "Forbidden"}')
        response.close = MagicMock()
        transport.session.request.return_value = response
        with pytest.raises(RemoteError) as exc_info:
            transport.stream("https://addons.example.com/downloads/file/1/a.xpi")
        assert exc_info.value.status == 403
        response.close.assert_called_once()

    def test_request_error_keeps_response_open(self, transport):
        response = make_response(404, b'{"detail": "Not found."}')
        response.close = MagicMock()
        transport.session.request.return_value = response
        with pytest.raises(RemoteError):
            transport.request("/a")
        response.close.assert_not_called()
