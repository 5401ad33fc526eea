"""Provider factory helpers for extraction, translation, and speech stages.

Responsibilities:
- Resolve provider identifiers to concrete collaborator implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .io.textract_extractor import BlockExtractor, TextractBlockExtractor
from .llm.translator import AwsTranslator, OpenAITranslator, Translator
from .tts.synthesizer import OpenAITTSSynthesizer, PollySynthesizer, SpeechSynthesizer


class ProviderFactory:
    """Factory for provider-backed collaborators used by the file processor."""

    @staticmethod
    def create_extractor(provider_id: str, region_name: str) -> BlockExtractor:
        """Create a block extractor for a configured provider identifier."""

        if provider_id == "aws":
            return TextractBlockExtractor(region_name=region_name)
        raise ValueError(f"Unsupported extractor provider `{provider_id}`.")

    @staticmethod
    def create_translator(
        provider_id: str,
        region_name: str,
        model: str,
        api_key: str | None = None,
    ) -> Translator:
        """Create a translator for a configured provider identifier."""

        if provider_id == "aws":
            return AwsTranslator(region_name=region_name)
        if provider_id == "openai":
            return OpenAITranslator(model=model, api_key=api_key)
        raise ValueError(f"Unsupported translator provider `{provider_id}`.")

    @staticmethod
    def create_synthesizer(
        provider_id: str,
        region_name: str,
        model: str,
        api_key: str | None = None,
    ) -> SpeechSynthesizer:
        """Create a speech synthesizer for a configured provider identifier."""

        if provider_id == "aws":
            return PollySynthesizer(region_name=region_name)
        if provider_id == "openai":
            return OpenAITTSSynthesizer(model=model, api_key=api_key)
        raise ValueError(f"Unsupported TTS provider `{provider_id}`.")
