import json
from dataclasses import replace

import httpx
import pytest

from exam_buddy.server.errors import (
    ConfigurationError,
    QuotaExhausted,
    RateLimited,
    TransportFailure,
    UpstreamFailure,
)
from exam_buddy.server.gateway_client import GatewayClient


def _client(settings, handler):
    return GatewayClient(settings, transport=httpx.MockTransport(handler))


def test_sends_one_chat_completion_request(settings, chat):
    seen = []

    def handler(request):
        seen.append(request)
        return chat("hello")

    content = _client(settings, handler).complete("some/model", "SYS", "USER")

    assert content == "hello"
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://gateway.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key-123456"
    body = json.loads(request.content)
    assert body == {
        "model": "some/model",
        "messages": [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "USER"},
        ],
        "temperature": 0.7,
    }


def test_missing_api_key_fails_before_network(settings):
    def handler(request):
        raise AssertionError("network must not be touched")

    with pytest.raises(ConfigurationError) as info:
        _client(replace(settings, api_key=None), handler).complete("m", "s", "u")
    assert "LLM_GATEWAY_API_KEY" in info.value.detail
    # the key name is for logs, not for the browser
    assert "LLM_GATEWAY_API_KEY" not in info.value.message


@pytest.mark.parametrize(
    "status, kind",
    [(429, RateLimited), (402, QuotaExhausted), (500, UpstreamFailure), (404, UpstreamFailure)],
)
def test_status_mapping(settings, status, kind):
    client = _client(settings, lambda request: httpx.Response(status, text="upstream says no"))
    with pytest.raises(kind):
        client.complete("m", "s", "u")


def test_upstream_failure_carries_body(settings):
    client = _client(settings, lambda request: httpx.Response(503, text="overloaded"))
    with pytest.raises(UpstreamFailure) as info:
        client.complete("m", "s", "u")
    assert info.value.status == 503
    assert info.value.detail == "overloaded"


def test_non_json_success_body(settings):
    client = _client(settings, lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(UpstreamFailure):
        client.complete("m", "s", "u")


def test_missing_choices_returns_none(settings):
    client = _client(settings, lambda request: httpx.Response(200, json={"choices": []}))
    assert client.complete("m", "s", "u") is None


def test_transport_error_is_not_retried_by_default(settings):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportFailure):
        _client(settings, handler).complete("m", "s", "u")
    assert len(calls) == 1


def test_transport_error_retries_when_configured(settings, chat, monkeypatch):
    monkeypatch.setattr("exam_buddy.server.gateway_client.time.sleep", lambda s: None)
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ReadTimeout("timed out", request=request)
        return chat("finally")

    cfg = replace(settings, transport_retries=2)
    assert _client(cfg, handler).complete("m", "s", "u") == "finally"
    assert len(calls) == 3


def test_rate_limit_is_never_retried(settings):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429)

    cfg = replace(settings, transport_retries=3)
    with pytest.raises(RateLimited):
        _client(cfg, handler).complete("m", "s", "u")
    assert len(calls) == 1


def test_transport_failure_is_an_upstream_failure():
    assert issubclass(TransportFailure, UpstreamFailure)
