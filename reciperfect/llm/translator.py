"""Translation providers and the per-segment translation adapter.

Responsibilities:
- Define a protocol for single-line translation providers.
- Provide AWS Translate and OpenAI-backed implementations.
- Capture provider failures as `SegmentFailure` values at the adapter boundary.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..aws_client import aws_error_to_provider_error, create_aws_client
from ..models.datatypes import SegmentFailure
from .openai_client import OpenAIClient
from .prompts import PromptLibrary


class Translator(Protocol):
    """Protocol for translation providers."""

    def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """Translate one line, raising on provider failure."""


class AwsTranslator:
    """AWS Translate-backed line translator."""

    def __init__(self, region_name: str = "us-west-2", client: Any | None = None) -> None:
        """Initialize the translator with an optional preconfigured Translate client."""

        self.region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        """Return the Translate client, creating it on first use."""

        if self._client is None:
            self._client = create_aws_client("translate", self.region_name)
        return self._client

    def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """Translate one line with `TranslateText`."""

        try:
            response = self.client.translate_text(
                Text=text,
                SourceLanguageCode=source_language,
                TargetLanguageCode=target_language,
            )
        except Exception as exc:
            raise aws_error_to_provider_error("translate", exc) from exc
        return str(response.get("TranslatedText", ""))


class OpenAITranslator:
    """OpenAI chat-completions line translator."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        client: OpenAIClient | None = None,
    ) -> None:
        """Initialize translator settings and OpenAI client dependencies."""

        self.model = model
        self.client = client if client is not None else OpenAIClient(api_key=api_key)
        self.prompts = PromptLibrary()

    def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """Translate one line with a deterministic chat-completions request."""

        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.translation_system_prompt(),
            user_prompt=self.prompts.translate_prompt(
                source_text=text,
                source_language=source_language,
                target_language=target_language,
            ),
            temperature=0.0,
        )


class SegmentTranslator:
    """Wrap a translation provider so failures never cross the segment boundary.

    The adapter performs exactly one provider call per segment and does not
    retry.
    """

    stage = "translate"

    def __init__(self, translator: Translator) -> None:
        """Initialize the adapter around one translation provider."""

        self.translator = translator

    def translate(
        self, text: str, source_language: str, target_language: str
    ) -> str | SegmentFailure:
        """Return translated text, or a `SegmentFailure` describing the error."""

        try:
            translated = self.translator.translate_text(text, source_language, target_language)
        except Exception as exc:
            return SegmentFailure(
                stage=self.stage,
                detail=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )
        normalized = translated.strip() if isinstance(translated, str) else ""
        if not normalized:
            return SegmentFailure(
                stage=self.stage,
                detail="Provider returned an empty translation.",
                error_type="EmptyTranslation",
            )
        return normalized
