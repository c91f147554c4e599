"""Tests for weg.li client"""

from __future__ import annotations

import logging

import pytest

from wegli.domain.config.retry import DEFAULT_RETRY_POLICY, RateLimitPolicy, RetryPolicy
from wegli.domain.errors import (
    ConversionError,
    DeserializationError,
    RateLimitedError,
    UnexpectedStatusError,
)
from wegli.infrastructure.http_client import RequestExecutor
from wegli.infrastructure.wegli.client import API_KEY_HEADER, WegliClient

from fakes import FakeSession, make_response
from payloads import CHARGE, DISTRICT, EXPORTS, NOTICE, payload


def _client(*responses, **kwargs):
    session = FakeSession(*responses)
    executor = RequestExecutor(session, sleep=lambda seconds: None)
    client = WegliClient(
        api_url=kwargs.pop("api_url", "https://api.example.test"),
        api_token="secret",
        executor=executor,
        **kwargs,
    )
    return client, session


class TestWegliClientInit:
    """Tests for WegliClient initialization"""

    def test_init_with_explicit_params(self):
        """Test initialization with explicit parameters"""
        policy = RetryPolicy(max_retries=1)
        client = WegliClient(
            api_url="https://custom.example/api/", api_token="token-123", retry_policy=policy
        )

        assert client.api_url == "https://custom.example/api"
        assert client.api_token == "token-123"
        assert client.retry_policy is policy
        assert isinstance(client.executor, RequestExecutor)

    def test_init_from_env_vars(self, monkeypatch):
        """Test initialization from environment variables"""
        monkeypatch.setenv("WEGLI_API_URL", "https://env.example/api")
        monkeypatch.setenv("WEGLI_API_TOKEN", "env-token")

        client = WegliClient()

        assert client.api_url == "https://env.example/api"
        assert client.api_token == "env-token"

    def test_init_defaults(self, monkeypatch):
        """Test default URL and retry policy"""
        monkeypatch.delenv("WEGLI_API_URL", raising=False)

        client = WegliClient(api_token="token")

        assert client.api_url == "https://www.weg.li/api"
        assert client.retry_policy == DEFAULT_RETRY_POLICY

    def test_init_no_token_raises_error(self, monkeypatch):
        """Test that missing token raises ValueError"""
        monkeypatch.delenv("WEGLI_API_TOKEN", raising=False)

        with pytest.raises(ValueError, match="API token is required"):
            WegliClient()

    def test_rate_limit_setting_reaches_executor(self):
        client = WegliClient(api_token="token", rate_limit="retry")
        assert client.executor.rate_limit is RateLimitPolicy.RETRY


class TestResourceEndpoints:
    """Tests for the resource methods"""

    def test_get_charge(self):
        client, session = _client(make_response(200, CHARGE))

        charge = client.get_charge("101000")

        assert charge.tbnr == "101000"
        request = session.sent[0]
        assert request.method == "GET"
        assert request.url == "https://api.example.test/charges/101000"
        assert request.headers[API_KEY_HEADER] == "secret"
        assert request.headers["Accept"] == "application/json"

    def test_get_charges(self):
        client, session = _client(make_response(200, [CHARGE, payload(CHARGE, tbnr="101006")]))

        charges = client.get_charges()

        assert [c.tbnr for c in charges] == ["101000", "101006"]
        assert session.sent[0].url == "https://api.example.test/charges"

    def test_get_notice(self):
        client, session = _client(make_response(200, NOTICE))

        notice = client.get_notice("abc123")

        assert notice.token == "abc123"
        assert session.sent[0].url == "https://api.example.test/notices/abc123"

    def test_get_notices(self):
        client, session = _client(make_response(200, [NOTICE]))

        assert [n.token for n in client.get_notices()] == ["abc123"]
        assert session.sent[0].url == "https://api.example.test/notices"

    def test_get_district(self):
        client, session = _client(make_response(200, DISTRICT))

        district = client.get_district("91443")

        assert district.name == "Scheinfeld"
        assert session.sent[0].url == "https://api.example.test/districts/91443"

    def test_get_districts(self):
        client, session = _client(make_response(200, [DISTRICT]))

        assert client.get_districts()[0].zip == "91443"
        assert session.sent[0].url == "https://api.example.test/districts"

    @pytest.mark.parametrize(
        "method,path",
        [("get_user_exports", "exports"), ("get_public_exports", "exports/public")],
    )
    def test_get_exports(self, method, path):
        client, session = _client(make_response(200, EXPORTS))

        exports = getattr(client, method)()

        assert len(exports) == 2
        assert session.sent[0].url == f"https://api.example.test/{path}"

    def test_timeout_is_passed_to_transport(self):
        session = FakeSession(make_response(200, DISTRICT))
        client = WegliClient(api_token="t", executor=RequestExecutor(session, timeout=2.5))

        client.get_district("91443")

        assert session.send_kwargs[0]["timeout"] == 2.5


class TestErrorPropagation:
    """Tests for errors surfacing from the client"""

    def test_invalid_json(self):
        client, _ = _client(make_response(200, content=b"<html>maintenance</html>"))

        with pytest.raises(DeserializationError):
            client.get_charges()

    def test_wrong_shape(self):
        client, _ = _client(make_response(200, CHARGE))

        with pytest.raises(DeserializationError):
            client.get_charges()

    def test_conversion_error(self):
        client, _ = _client(make_response(200, payload(DISTRICT, latitude="north")))

        with pytest.raises(ConversionError):
            client.get_district("91443")

    def test_not_found_is_not_retried_forever(self):
        client, session = _client(
            *[make_response(404)] * 3, retry_policy=RetryPolicy(max_retries=2, initial_backoff_ms=0)
        )

        with pytest.raises(UnexpectedStatusError) as exc_info:
            client.get_notice("missing")

        assert exc_info.value.status_code == 404
        assert len(session.sent) == 3

    def test_server_error_recovers(self, caplog):
        client, session = _client(make_response(500), make_response(200, DISTRICT))

        with caplog.at_level(logging.WARNING):
            district = client.get_district("91443")

        assert district.zip == "91443"
        assert len(session.sent) == 2
        assert "received unexpected response code 500" in caplog.text

    def test_rate_limit_is_terminal_by_default(self):
        client, session = _client(
            make_response(429, headers={"Retry-After": "30"}), make_response(200, [])
        )

        with pytest.raises(RateLimitedError) as exc_info:
            client.get_notices()

        assert exc_info.value.retry_after == 30
        assert len(session.sent) == 1
