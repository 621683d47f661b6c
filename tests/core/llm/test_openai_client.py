"""Unit tests for the OpenAI Responses client, using httpx.MockTransport (no network)."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from app.core.llm.openai_client import (
    JsonValue,
    Message,
    OpenAIClient,
    OpenAIConfig,
    OpenAIUpstreamError,
    PlainText,
    classify_output,
    extract_output_text,
)

_MESSAGES = [Message(role="system", content="rules"), Message(role="user", content="{}")]


def _client(handler) -> OpenAIClient:
    config = OpenAIConfig(
        api_key="sk-test",
        base_url="https://llm.example/v1/",
        model="gpt-4o-mini",
        timeout_seconds=5.0,
    )
    return OpenAIClient(config=config, transport=httpx.MockTransport(handler))


def _complete(client: OpenAIClient, **kwargs):
    return asyncio.run(client.complete(_MESSAGES, **kwargs))


def test_json_body_is_parsed() -> None:
    client = _client(lambda request: httpx.Response(200, text='{"a":1}'))
    assert _complete(client) == JsonValue({"a": 1})


def test_non_json_body_is_returned_as_text() -> None:
    client = _client(lambda request: httpx.Response(200, text="hello"))
    result = _complete(client)
    assert result == PlainText("hello")
    assert result.unwrap() == "hello"


def test_error_status_raises_with_status_and_body() -> None:
    client = _client(lambda request: httpx.Response(500, text="server error"))

    with pytest.raises(OpenAIUpstreamError) as exc_info:
        _complete(client)

    assert "500" in str(exc_info.value)
    assert "server error" in str(exc_info.value)
    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "server error"


def test_error_status_prefers_provider_error_message() -> None:
    body = json.dumps({"error": {"message": "Incorrect API key provided"}})
    client = _client(lambda request: httpx.Response(401, text=body))

    with pytest.raises(OpenAIUpstreamError) as exc_info:
        _complete(client)

    assert str(exc_info.value) == "OpenAI 401: Incorrect API key provided"
    assert exc_info.value.body == body


def test_transport_failure_raises_upstream_error_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(OpenAIUpstreamError) as exc_info:
        _complete(_client(handler))

    assert exc_info.value.status_code is None


def test_request_shape() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"output_text": '{"ok": true}'})

    result = _complete(_client(handler), response_format="json_object", temperature=0.2)

    assert result == JsonValue({"ok": True})
    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == "https://llm.example/v1/responses"
    assert request.headers["Authorization"] == "Bearer sk-test"
    payload = json.loads(request.content)
    assert payload == {
        "model": "gpt-4o-mini",
        "input": [
            {"role": "system", "content": "rules"},
            {"role": "user", "content": "{}"},
        ],
        "text": {"format": {"type": "json_object"}},
        "temperature": 0.2,
        "stream": False,
    }


def test_text_format_sends_empty_text_options() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"output_text": "pong"})

    result = _complete(_client(handler), response_format="text")

    assert result == PlainText("pong")
    assert seen[0]["text"] == {}


def test_extracts_text_from_output_segments() -> None:
    body = {
        "output": [
            {"content": [{"text": [{"value": '{"title":'}, {"value": '"Calm"}'}]}]},
            {"content": [{"type": "output_text", "text": "second"}]},
        ]
    }
    assert extract_output_text(body) == '{"title":\n"Calm"}\nsecond'


def test_extract_falls_back_to_content_then_none() -> None:
    assert extract_output_text({"output_text": "  ", "content": "legacy"}) == "legacy"
    assert extract_output_text({"a": 1}) is None
    assert extract_output_text([1, 2]) is None


def test_json_looking_text_that_fails_to_parse_stays_text() -> None:
    assert classify_output("{not json") == PlainText("{not json")
    assert classify_output('  [1, 2]') == JsonValue([1, 2])
