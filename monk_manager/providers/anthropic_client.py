"""Anthropic provider adapter.

This module:

1. Receives explain/chat calls in terms of the shared Message model.
2. Builds the Anthropic Messages API request (model/system/messages/max_tokens/temperature).
3. Sends it over one shared httpx.Client and maps transport/HTTP failures onto
   the AIError taxonomy.
4. Parses the response and returns the text of the first content block.

Responses with several content blocks are truncated to the first one; an empty
`content` list is an InvalidResponseError, never an empty answer.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from monk_manager.domain.exceptions import (
    InvalidResponseError,
    error_from_status,
    error_from_transport,
)
from monk_manager.domain.models import Message, ModelConfig
from monk_manager.providers.registry import ANTHROPIC_CONFIG, ProviderConfig

logger = logging.getLogger(__name__)

# Socket-level bound, independent of AIService's own call timeout
HTTP_TIMEOUT = 60.0

DEFAULT_SYSTEM_PROMPT = (
    "You are an AI programming assistant. You're helping the user with their code project."
)


class AnthropicClient:
    """Anthropic client implementation.

    - name: provider name (for logs).
    - explain / chat: the AIClient entry points, both returning plain text.
    """

    name = "anthropic"

    def __init__(
        self,
        config: ModelConfig,
        *,
        provider: ProviderConfig = ANTHROPIC_CONFIG,
        http_client: Optional[httpx.Client] = None,
    ):
        self._config = config
        self._provider = provider
        self._http = http_client or httpx.Client(timeout=HTTP_TIMEOUT, trust_env=False)

    @property
    def url(self) -> str:
        base = (self._config.api_base_url or self._provider.base_url).rstrip("/")
        return f"{base}{self._provider.endpoint}"

    def explain(self, code: str, language: str) -> str:
        messages = [Message(role="user", content=self._build_prompt(code, language))]
        return self._send(messages, DEFAULT_SYSTEM_PROMPT)

    def chat(self, history: Sequence[Message], project_context: Optional[str] = None) -> str:
        return self._send(list(history), self._build_system_prompt(project_context))

    def close(self) -> None:
        self._http.close()

    # ---- helpers ----

    @staticmethod
    def _build_prompt(code: str, language: str) -> str:
        return (
            f"You are an expert programmer. Please explain the following {language} code "
            f"in a clear and concise way:\n\n```{language}\n{code}\n```"
        )

    @staticmethod
    def _build_system_prompt(project_context: Optional[str]) -> str:
        if project_context:
            return f"{DEFAULT_SYSTEM_PROMPT} Project context: {project_context}"
        return DEFAULT_SYSTEM_PROMPT

    def _build_payload(self, messages: Sequence[Message], system: str) -> Dict[str, Any]:
        return {
            "model": self._config.model_name,
            "system": system,
            "messages": [self._message_to_payload(m) for m in messages],
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
        }

    def _headers(self) -> Dict[str, str]:
        headers = {
            "x-api-key": self._config.api_key,
            "content-type": "application/json",
        }
        if self._provider.api_version:
            headers["anthropic-version"] = self._provider.api_version
        return headers

    @staticmethod
    def _message_to_payload(message: Message) -> Dict[str, str]:
        return {"role": message.role, "content": message.content}

    def _send(self, messages: Sequence[Message], system: str) -> str:
        payload = self._build_payload(messages, system)
        logger.debug(
            "Sending request to Anthropic",
            extra={"extra": {"model": payload["model"], "messages": len(payload["messages"])}},
        )
        try:
            resp = self._http.post(self.url, json=payload, headers=self._headers())
        except httpx.RequestError as e:
            # DNS failure, refused connection, socket timeout, ...
            raise error_from_transport(e, HTTP_TIMEOUT) from e
        if not resp.is_success:
            detail = self._read_error_body(resp)
            logger.error(
                "Anthropic API error",
                extra={"extra": {"status": resp.status_code, "error": detail}},
            )
            raise error_from_status(resp.status_code, detail)
        return self._parse_response(resp)

    @staticmethod
    def _read_error_body(resp: httpx.Response) -> str:
        try:
            return resp.text or "Unknown error"
        except (httpx.HTTPError, UnicodeDecodeError):
            return "Unknown error"

    @staticmethod
    def _parse_response(resp: httpx.Response) -> str:
        """Return the text of the first content block."""

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidResponseError(f"Failed to parse Anthropic API response: {e}") from e
        if not isinstance(data, dict):
            raise InvalidResponseError("Response body is not a JSON object")
        content: List[Any] = data.get("content")
        if not isinstance(content, list):
            raise InvalidResponseError("Missing content in Anthropic API response")
        if not content:
            raise InvalidResponseError("Empty content in Anthropic API response")
        first = content[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise InvalidResponseError("First content block has no text")
        return text
