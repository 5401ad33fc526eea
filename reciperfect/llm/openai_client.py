"""OpenAI HTTP client utilities for translation and speech providers.

Responsibilities:
- Send minimal chat-completions and speech requests to OpenAI's REST API.
- Raise provider exceptions carrying a deterministic failure kind.
"""

from __future__ import annotations

import json
import re
from typing import Any

import requests


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI provider request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class OpenAIClient:
    """Requests-based OpenAI client for chat-completions and speech endpoints."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize OpenAI HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
    ) -> str:
        """Return the first assistant text response from a chat-completions request."""

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        raw_payload = self._post(endpoint_path="/chat/completions", payload=payload)
        return self._extract_message_text(raw_payload.decode("utf-8"))

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        payload = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
        }
        audio_bytes = self._post(endpoint_path="/audio/speech", payload=payload)
        if not audio_bytes:
            raise OpenAIProviderError("OpenAI speech response is empty.")
        return audio_bytes

    def _post(self, *, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and map failures into `OpenAIProviderError`."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`.",
                failure_kind="invalid_api_key",
            )
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.Timeout as exc:
            raise OpenAIProviderError(
                "OpenAI request timed out.", failure_kind="timeout"
            ) from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {self._short_message(str(exc))}",
                failure_kind="transport",
            ) from exc
        return bytes(response.content)

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Redact key-like tokens, normalize whitespace, and cap message length."""

        redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        compact = " ".join(redacted.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> OpenAIProviderError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = ""
        if response is not None:
            body = bytes(response.content).decode("utf-8", errors="replace").strip()

        provider_code: str | None = None
        message = body
        try:
            error_payload = json.loads(body).get("error") if body else None
        except (json.JSONDecodeError, AttributeError):
            error_payload = None
        if isinstance(error_payload, dict):
            if isinstance(error_payload.get("code"), str):
                provider_code = error_payload["code"]
            if isinstance(error_payload.get("message"), str):
                message = error_payload["message"]
        message = cls._short_message(message)

        lowered = message.lower()
        if status_code == 401:
            failure_kind = "invalid_api_key"
        elif provider_code == "insufficient_quota" or (status_code == 429 and "quota" in lowered):
            failure_kind = "insufficient_quota"
        elif status_code == 429:
            failure_kind = "rate_limited"
        elif provider_code == "model_not_found":
            failure_kind = "invalid_model"
        elif status_code in {408, 504}:
            failure_kind = "timeout"
        else:
            failure_kind = "http_error"

        detail = f"OpenAI request failed (HTTP {status_code})"
        return OpenAIProviderError(
            f"{detail}: {message}" if message else f"{detail}.",
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )

    @staticmethod
    def _extract_message_text(raw_payload: str) -> str:
        """Extract first assistant message text from a chat-completions JSON payload."""

        try:
            payload = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            raise OpenAIProviderError("OpenAI returned invalid JSON payload.") from exc

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise OpenAIProviderError("OpenAI response missing non-empty `choices` list.")

        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise OpenAIProviderError("OpenAI response message content is empty.")
        return content.strip()
