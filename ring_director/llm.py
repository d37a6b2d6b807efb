"""LLM client: HTTP connection to a chat-completion backend.

The orchestrator injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str, system: str = "") -> str: ...

`stage` identifies who is speaking (e.g. "responder", "promo",
"commentary"). `system` carries the persona prompt. The engine treats the
returned text as opaque; it is never parsed.

Two implementations are provided:

    HttpLLM   real HTTP client, supports Ollama and OpenAI-compatible chat
              backends. Selected by provider_format.
    EchoLLM   returns the prompt back unchanged. Useful for smoke-testing
              the show wiring without a running model.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str, system: str = "") -> str: ...


ProviderFormat = Literal["ollama", "openai"]

# Sampling used for every in-character line.
TEMPERATURE = 0.9
TOP_P = 0.95
MAX_TOKENS = 200


class HttpLLM:
    """Async HTTP client for chat backends.

    Supported formats:
      "ollama"  POST /api/chat              {"model", "messages", "stream": false, "options"}
                Response: {"message": {"content": "..."}}
      "openai"  POST /v1/chat/completions   {"model", "messages", "temperature", ...}
                Response: {"choices": [{"message": {"content": "..."}}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:11434".
        model:           Model identifier.
        provider_format: Wire format to use. Defaults to "ollama".
        api_key:         Bearer token, or empty string if not required.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        model: str,
        provider_format: ProviderFormat = "ollama",
        api_key: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._model = model
        self._format = provider_format
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @staticmethod
    def _messages(prompt: str, system: str) -> list[dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _build_request(self, prompt: str, system: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        messages = self._messages(prompt, system)
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            return url, {
                "model": self._model,
                "messages": messages,
                "temperature": TEMPERATURE,
                "top_p": TOP_P,
                "max_tokens": MAX_TOKENS,
            }

        url = f"{self._base_url}/api/chat"
        return url, {
            "model": self._model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": TEMPERATURE, "top_p": TOP_P, "num_predict": MAX_TOKENS},
        }

    def _parse_response(self, data: dict) -> str:
        """Extract the reply text from the response body."""
        if self._format == "openai":
            choices = data.get("choices")
            if not choices or "content" not in (choices[0].get("message") or {}):
                raise LLMError("Unexpected response format from OpenAI-compatible backend")
            return choices[0]["message"]["content"]

        message = data.get("message")
        if not isinstance(message, dict) or "content" not in message:
            raise LLMError("Unexpected response format from Ollama backend")
        return message["content"]

    async def __call__(self, stage: str, prompt: str, system: str = "") -> str:
        url, body = self._build_request(prompt, system)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {type(e).__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e

        text = self._parse_response(data).strip()
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


class EchoLLM:
    """Returns the prompt text as-is. No network calls."""

    async def __call__(self, stage: str, prompt: str, system: str = "") -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
