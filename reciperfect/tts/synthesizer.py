"""Speech providers and the per-segment synthesis adapter.

Responsibilities:
- Define a protocol for line-level speech synthesis returning a byte stream.
- Provide AWS Polly and OpenAI-backed implementations.
- Capture provider failures as `SegmentFailure` values at the adapter boundary.
"""

from __future__ import annotations

import io
from typing import Any, Protocol

from ..aws_client import AwsProviderError, aws_error_to_provider_error, create_aws_client
from ..llm.openai_client import OpenAIClient
from ..models.datatypes import AudioStream, SegmentFailure
from .voices import VoiceProfile


class SpeechSynthesizer(Protocol):
    """Protocol for speech synthesis providers."""

    def synthesize_speech(
        self, text: str, voice: str, language: str, output_format: str
    ) -> AudioStream:
        """Synthesize one line, raising on provider failure."""


class PollySynthesizer:
    """AWS Polly-backed speech synthesizer returning the response audio stream."""

    def __init__(self, region_name: str = "us-west-2", client: Any | None = None) -> None:
        """Initialize the synthesizer with an optional preconfigured Polly client."""

        self.region_name = region_name
        self._client = client

    @property
    def client(self) -> Any:
        """Return the Polly client, creating it on first use."""

        if self._client is None:
            self._client = create_aws_client("polly", self.region_name)
        return self._client

    def synthesize_speech(
        self, text: str, voice: str, language: str, output_format: str
    ) -> AudioStream:
        """Synthesize one line with `SynthesizeSpeech`."""

        try:
            response = self.client.synthesize_speech(
                Text=text,
                OutputFormat=output_format,
                VoiceId=voice,
                LanguageCode=language,
            )
        except Exception as exc:
            raise aws_error_to_provider_error("polly", exc) from exc
        stream = response.get("AudioStream") if isinstance(response, dict) else None
        if stream is None:
            raise AwsProviderError("Polly response did not include an audio stream.")
        return stream


class OpenAITTSSynthesizer:
    """OpenAI speech synthesizer wrapping response bytes in an in-memory stream."""

    def __init__(
        self,
        model: str = "gpt-4o-mini-tts",
        api_key: str | None = None,
        client: OpenAIClient | None = None,
    ) -> None:
        """Initialize OpenAI-backed TTS synthesizer settings."""

        self.model = model
        self.client = client if client is not None else OpenAIClient(api_key=api_key)

    def synthesize_speech(
        self, text: str, voice: str, language: str, output_format: str
    ) -> AudioStream:
        """Synthesize one line; OpenAI infers the language from the text."""

        _ = language
        audio_bytes = self.client.synthesize_speech(
            model=self.model,
            voice=voice,
            text=text,
            response_format=output_format,
        )
        return io.BytesIO(audio_bytes)


class SegmentSynthesizer:
    """Wrap a speech provider so failures never cross the segment boundary."""

    stage = "synthesize"

    def __init__(self, synthesizer: SpeechSynthesizer) -> None:
        """Initialize the adapter around one speech provider."""

        self.synthesizer = synthesizer

    def synthesize(self, text: str, voice: VoiceProfile) -> AudioStream | SegmentFailure:
        """Return an audio byte stream, or a `SegmentFailure` describing the error."""

        try:
            return self.synthesizer.synthesize_speech(
                text, voice.voice_id, voice.language, voice.output_format
            )
        except Exception as exc:
            return SegmentFailure(
                stage=self.stage,
                detail=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )
