import dataclasses
import json

import httpx
import pytest

from monk_manager.domain.exceptions import (
    AuthenticationError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
    RequestFailedError,
    RequestTimeoutError,
)
from monk_manager.domain.models import Message
from monk_manager.providers.anthropic_client import DEFAULT_SYSTEM_PROMPT, AnthropicClient


def _ok(*texts):
    return httpx.Response(200, json={"content": [{"type": "text", "text": t} for t in texts]})


def test_explain_returns_first_content_text(make_client):
    client = make_client(lambda request: _ok("A is a value binding."))
    assert client.explain("let a = 1;", "generic") == "A is a value binding."


def test_multi_part_response_keeps_first_block(make_client):
    client = make_client(lambda request: _ok("first", "second"))
    assert client.explain("x", "python") == "first"


def test_explain_request_shape(make_client):
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["payload"] = json.loads(request.content)
        return _ok("ok")

    make_client(handler).explain("fn main() {}", "rust")

    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["headers"]["x-api-key"] == "test-key"
    assert captured["headers"]["anthropic-version"] == "2023-06-01"
    payload = captured["payload"]
    assert payload["model"] == "m1"
    assert payload["max_tokens"] == 100
    assert payload["temperature"] == 0.5
    assert payload["system"] == DEFAULT_SYSTEM_PROMPT
    assert len(payload["messages"]) == 1
    msg = payload["messages"][0]
    assert msg["role"] == "user"
    assert "rust code" in msg["content"]
    assert "```rust\nfn main() {}\n```" in msg["content"]


def test_chat_sends_history_in_order_with_context(make_client):
    captured = {}

    def handler(request):
        captured["payload"] = json.loads(request.content)
        return _ok("newest reply")

    history = [
        Message("user", "q1"),
        Message("assistant", "a1"),
        Message("user", "q2"),
    ]
    reply = make_client(handler).chat(history, "Current directory: /tmp/proj")

    assert reply == "newest reply"
    payload = captured["payload"]
    assert [m["content"] for m in payload["messages"]] == ["q1", "a1", "q2"]
    assert [m["role"] for m in payload["messages"]] == ["user", "assistant", "user"]
    assert payload["system"].endswith("Project context: Current directory: /tmp/proj")


def test_chat_without_context_uses_default_system(make_client):
    captured = {}

    def handler(request):
        captured["payload"] = json.loads(request.content)
        return _ok("hi")

    make_client(handler).chat([Message("user", "hello")])
    assert captured["payload"]["system"] == DEFAULT_SYSTEM_PROMPT


def test_chat_does_not_mutate_history(make_client):
    history = [Message("user", "q1")]
    make_client(lambda request: _ok("a1")).chat(history)
    assert history == [Message("user", "q1")]


def test_api_base_url_override(make_client, model_config):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return _ok("ok")

    config = dataclasses.replace(model_config, api_base_url="http://localhost:8080/")
    make_client(handler, config).explain("x", "py")
    assert seen["url"] == "http://localhost:8080/v1/messages"


@pytest.mark.parametrize(
    "status, expected",
    [
        (401, AuthenticationError),
        (429, RateLimitError),
        (400, ProviderError),
        (404, ProviderError),
        (500, ProviderError),
        (529, ProviderError),
    ],
)
def test_status_mapping(make_client, status, expected):
    client = make_client(lambda request: httpx.Response(status, text='{"error": "nope"}'))
    with pytest.raises(expected):
        client.explain("x", "py")
    with pytest.raises(expected):
        client.chat([Message("user", "hi")])


def test_error_body_is_surfaced(make_client):
    client = make_client(lambda request: httpx.Response(500, text="overloaded"))
    with pytest.raises(ProviderError) as exc:
        client.explain("x", "py")
    assert "overloaded" in str(exc.value)
    assert exc.value.http_status == 500


def test_empty_error_body_becomes_unknown_error(make_client):
    client = make_client(lambda request: httpx.Response(503))
    with pytest.raises(ProviderError) as exc:
        client.explain("x", "py")
    assert "Unknown error" in str(exc.value)


def test_empty_content_is_invalid_response(make_client):
    client = make_client(lambda request: httpx.Response(200, json={"content": []}))
    with pytest.raises(InvalidResponseError):
        client.explain("let a = 1;", "generic")


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"id": "msg_1"}',
        b'["content"]',
        b'{"content": [{"type": "tool_use"}]}',
    ],
)
def test_malformed_body_is_invalid_response(make_client, body):
    client = make_client(lambda request: httpx.Response(200, content=body))
    with pytest.raises(InvalidResponseError):
        client.chat([Message("user", "hi")])


def test_socket_timeout_maps_to_timeout(make_client):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestTimeoutError):
        make_client(handler).explain("x", "py")


def test_connection_error_maps_to_request_failed(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RequestFailedError):
        make_client(handler).explain("x", "py")


def test_shared_client_created_once(monkeypatch, model_config):
    created = []

    class Resp:
        status_code = 200
        is_success = True
        text = ""

        def json(self):
            return {"content": [{"text": "ok"}]}

    class Client:
        def __init__(self, *a, **kw):
            created.append(kw)

        def post(self, *a, **kw):
            return Resp()

        def close(self):
            pass

    monkeypatch.setattr("httpx.Client", Client)
    client = AnthropicClient(model_config)
    assert client.explain("x", "py") == "ok"
    assert client.chat([Message("user", "hi")]) == "ok"
    assert len(created) == 1
    assert created[0]["timeout"] == 60.0
