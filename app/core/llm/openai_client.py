from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

import httpx

ResponseFormat = Literal["text", "json_object"]
Role = Literal["system", "user", "assistant"]


class OpenAIError(Exception):
    """Base error for OpenAI client failures (safe to map to 502)."""


class OpenAIUnavailableError(OpenAIError):
    """Raised when OpenAI is not configured (e.g., missing API key)."""


class OpenAIUpstreamError(OpenAIError):
    """Raised when the OpenAI call fails at the transport level or returns a non-success status.

    `status_code` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class JsonValue:
    """Model output that looked like JSON and parsed as JSON (object or array)."""

    value: Any

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class PlainText:
    """Model output relayed as a bare string (not JSON-shaped, or unparseable)."""

    text: str

    def unwrap(self) -> str:
        return self.text


CompletionResult: TypeAlias = JsonValue | PlainText


def extract_output_text(body: Any) -> str | None:
    """
    Pull the generated text out of a Responses API envelope.

    Lookup order: `output_text`, then every `output[].content[].text` segment
    (joined by newlines), then a legacy top-level `content` string.
    """

    if not isinstance(body, dict):
        return None

    output_text = body.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text

    texts: list[str] = []
    output = body.get("output")
    if isinstance(output, list):
        for item in output:
            contents = item.get("content") if isinstance(item, dict) else None
            if not isinstance(contents, list):
                continue
            for content in contents:
                text = content.get("text") if isinstance(content, dict) else None
                if isinstance(text, str):
                    texts.append(text)
                elif isinstance(text, list):
                    texts.extend(
                        seg["value"]
                        for seg in text
                        if isinstance(seg, dict) and isinstance(seg.get("value"), str)
                    )
    if texts:
        return "\n".join(texts)

    content = body.get("content")
    if isinstance(content, str):
        return content
    return None


def classify_output(text: str) -> CompletionResult:
    """Parse `text` as JSON when it starts with an object/array delimiter; otherwise keep it as text."""

    if text.lstrip()[:1] in ("{", "["):
        try:
            return JsonValue(json.loads(text))
        except ValueError:
            return PlainText(text)
    return PlainText(text)


def _error_message(*, body_text: str) -> str:
    try:
        body = json.loads(body_text)
    except ValueError:
        return body_text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
    return body_text


class OpenAIClient:
    """
    Minimal OpenAI Responses API client.

    Design notes:
    - No logging in this module (prompts/outputs are personal wellness data).
    - Exactly one request per call; streaming disabled; no retries.
    - Returns a tagged result so callers handle JSON and plain text explicitly.
    """

    def __init__(
        self,
        *,
        config: OpenAIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def model(self) -> str:
        return self._config.model

    async def complete(
        self,
        messages: list[Message],
        *,
        response_format: ResponseFormat = "json_object",
        temperature: float = 0.3,
        model: str | None = None,
    ) -> CompletionResult:
        url = f"{self._config.base_url.rstrip('/')}/responses"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": model or self._config.model,
            "input": [m.to_payload() for m in messages],
            # Object form asks the API to enforce JSON; an empty object means plain text.
            "text": (
                {"format": {"type": "json_object"}} if response_format == "json_object" else {}
            ),
            "temperature": temperature,
            "stream": False,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise OpenAIUpstreamError("OpenAI request timed out") from exc
        except httpx.HTTPError as exc:
            raise OpenAIUpstreamError("OpenAI request failed") from exc

        body_text = resp.text
        if not resp.is_success:
            raise OpenAIUpstreamError(
                f"OpenAI {resp.status_code}: {_error_message(body_text=body_text)}",
                status_code=resp.status_code,
                body=body_text,
            )

        try:
            envelope = json.loads(body_text)
        except ValueError:
            envelope = None

        text = extract_output_text(envelope)
        return classify_output(text if text is not None else body_text)
