from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from app.domain.exceptions import DeserializationError, NetworkError


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str
    model: str
    max_tokens: int
    timeout_seconds: float


class _ChatMessage(BaseModel):
    role: str | None = None
    content: str | None = None


class _ChatChoice(BaseModel):
    message: _ChatMessage


class _ChatCompletionResponse(BaseModel):
    """Only the fields we read; anything else in the response is ignored."""

    choices: list[_ChatChoice] | None = None


def parse_completion_response(body: str | bytes) -> str:
    """
    Extract the generated text from a chat-completions response body.

    Returns the first choice's message content, or "" when there are no choices.
    Malformed JSON or an unexpected shape raises DeserializationError.
    """

    try:
        parsed = _ChatCompletionResponse.model_validate_json(body)
    except ValidationError as exc:
        raise DeserializationError("LLM response did not match the expected shape") from exc

    if not parsed.choices:
        return ""
    return parsed.choices[0].message.content or ""


class OpenAIClient:
    """
    Minimal client for the OpenAI chat-completions endpoint.

    - No logging in this module (prompts embed contact details).
    - One request per call: no retries, no backoff, no caching.
    - `transport` is injectable so tests can serve canned responses.
    """

    def __init__(self, *, config: OpenAIConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport

    def build_payload(self, *, prompt: str) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def complete(self, *, prompt: str) -> str:
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }

        payload = self.build_payload(prompt=prompt)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise NetworkError("LLM request timed out") from exc
        except httpx.HTTPError as exc:
            raise NetworkError("LLM request failed") from exc

        if not resp.is_success:
            # Upstream error bodies may echo the prompt; do not surface them.
            raise NetworkError(f"LLM service returned HTTP {resp.status_code}")

        return parse_completion_response(resp.content)
