"""Unit tests for translation/synthesis providers and segment failure capture."""

from __future__ import annotations

import io

from botocore.exceptions import ClientError

from reciperfect.aws_client import AwsProviderError
from reciperfect.llm.openai_client import OpenAIClient
from reciperfect.llm.translator import (
    AwsTranslator,
    OpenAITranslator,
    SegmentTranslator,
)
from reciperfect.models.datatypes import SegmentFailure
from reciperfect.tts.synthesizer import (
    OpenAITTSSynthesizer,
    PollySynthesizer,
    SegmentSynthesizer,
)
from reciperfect.tts.voices import VoiceProfile, audio_extension
from tests.fakes import FakeSynthesizer, FakeTranslator


class _RecordingAwsClient:
    """boto3 client double recording Translate and Polly keyword arguments."""

    def __init__(self, response: dict[str, object] | None = None, error: Exception | None = None):
        """Store the canned response or error."""

        self.response = response or {}
        self.error = error
        self.calls: list[dict[str, object]] = []

    def translate_text(self, **kwargs: object) -> dict[str, object]:
        """Record a TranslateText call."""

        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response

    def synthesize_speech(self, **kwargs: object) -> dict[str, object]:
        """Record a SynthesizeSpeech call."""

        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class _StubOpenAIClient(OpenAIClient):
    """OpenAI client double returning canned chat and speech payloads."""

    def __init__(self) -> None:
        """Initialize without credentials and record calls."""

        super().__init__(api_key="test-key")
        self.calls: list[dict[str, object]] = []

    def chat_completion_text(self, **kwargs: object) -> str:
        """Record chat parameters and return a fixed translation."""

        self.calls.append(kwargs)
        return "Mezclar harina y agua"

    def synthesize_speech(self, **kwargs: object) -> bytes:
        """Record speech parameters and return fixed audio bytes."""

        self.calls.append(kwargs)
        return b"ID3-audio"


def _throttled() -> ClientError:
    """Build a throttling `ClientError` as raised by botocore."""

    return ClientError(
        {
            "Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"},
            "ResponseMetadata": {"HTTPStatusCode": 400},
        },
        "TranslateText",
    )


def test_aws_translator_sends_language_codes() -> None:
    """AWS translator should pass text and language codes to TranslateText."""

    client = _RecordingAwsClient(response={"TranslatedText": "Agregar sal"})
    translator = AwsTranslator(client=client)

    assert translator.translate_text("Add salt", "auto", "es") == "Agregar sal"
    assert client.calls == [
        {"Text": "Add salt", "SourceLanguageCode": "auto", "TargetLanguageCode": "es"}
    ]


def test_aws_translator_maps_client_errors() -> None:
    """Botocore errors should surface as `AwsProviderError` with a failure kind."""

    translator = AwsTranslator(client=_RecordingAwsClient(error=_throttled()))

    try:
        translator.translate_text("Add salt", "auto", "es")
    except AwsProviderError as exc:
        assert exc.failure_kind == "throttled"
        assert exc.provider_code == "ThrottlingException"
    else:
        raise AssertionError("AwsProviderError was not raised")


def test_openai_translator_builds_prompt_with_languages() -> None:
    """OpenAI translator should include the line and target language in its prompt."""

    client = _StubOpenAIClient()
    translator = OpenAITranslator(model="gpt-4.1-mini", client=client)

    result = translator.translate_text("Mix flour and water", "en", "es")

    assert result == "Mezclar harina y agua"
    user_prompt = str(client.calls[0]["user_prompt"])
    assert "Mix flour and water" in user_prompt
    assert "`es`" in user_prompt
    assert "`en`" in user_prompt
    assert client.calls[0]["temperature"] == 0.0


def test_segment_translator_returns_text_on_success() -> None:
    """Adapter should return stripped translated text on success."""

    adapter = SegmentTranslator(FakeTranslator())

    assert adapter.translate("Add salt", "auto", "es") == "es:Add salt"


def test_segment_translator_captures_provider_error_without_retry() -> None:
    """Adapter should capture the failure and call the provider exactly once."""

    provider = FakeTranslator(failing_texts=frozenset({"Add salt"}))
    adapter = SegmentTranslator(provider)

    result = adapter.translate("Add salt", "auto", "es")

    assert isinstance(result, SegmentFailure)
    assert result.stage == "translate"
    assert result.error_type == "RuntimeError"
    assert "quota exceeded" in result.detail
    assert len(provider.calls) == 1


def test_segment_translator_treats_blank_translation_as_failure() -> None:
    """An empty provider response should become a segment failure."""

    class _BlankTranslator:
        def translate_text(self, text: str, source_language: str, target_language: str) -> str:
            return "   "

    result = SegmentTranslator(_BlankTranslator()).translate("Add salt", "auto", "es")

    assert isinstance(result, SegmentFailure)
    assert result.error_type == "EmptyTranslation"


def test_polly_synthesizer_returns_audio_stream() -> None:
    """Polly synthesizer should pass voice settings and return the audio stream."""

    stream = io.BytesIO(b"mp3-bytes")
    client = _RecordingAwsClient(response={"AudioStream": stream})
    synthesizer = PollySynthesizer(client=client)

    result = synthesizer.synthesize_speech("Agregar sal", "Lupe", "es-US", "mp3")

    assert result is stream
    assert client.calls == [
        {
            "Text": "Agregar sal",
            "OutputFormat": "mp3",
            "VoiceId": "Lupe",
            "LanguageCode": "es-US",
        }
    ]


def test_polly_synthesizer_rejects_missing_stream() -> None:
    """A Polly response without `AudioStream` should raise a provider error."""

    synthesizer = PollySynthesizer(client=_RecordingAwsClient(response={}))

    try:
        synthesizer.synthesize_speech("Agregar sal", "Lupe", "es-US", "mp3")
    except AwsProviderError as exc:
        assert "audio stream" in str(exc)
    else:
        raise AssertionError("AwsProviderError was not raised")


def test_openai_synthesizer_wraps_bytes_in_stream() -> None:
    """OpenAI synthesizer should return a readable stream over response bytes."""

    client = _StubOpenAIClient()
    synthesizer = OpenAITTSSynthesizer(model="gpt-4o-mini-tts", client=client)

    stream = synthesizer.synthesize_speech("Agregar sal", "alloy", "es", "mp3")

    assert stream.read() == b"ID3-audio"
    assert client.calls[0]["response_format"] == "mp3"
    assert client.calls[0]["voice"] == "alloy"


def test_segment_synthesizer_captures_failure() -> None:
    """Synthesis failures should be returned as `SegmentFailure` values."""

    voice = VoiceProfile(voice_id="Lupe", language="es-US")
    adapter = SegmentSynthesizer(FakeSynthesizer(failing_texts=frozenset({"es:Add salt"})))

    failure = adapter.synthesize("es:Add salt", voice)
    success = adapter.synthesize("es:Stir", voice)

    assert isinstance(failure, SegmentFailure)
    assert failure.stage == "synthesize"
    assert not isinstance(success, SegmentFailure)
    assert success.read() == b"<es:Stir>"


def test_audio_extension_maps_provider_formats() -> None:
    """Provider output formats should map to stable file extensions."""

    assert audio_extension("mp3") == ".mp3"
    assert audio_extension("ogg_vorbis") == ".ogg"
    assert audio_extension("PCM") == ".pcm"
    assert audio_extension("webm") == ".webm"
    assert VoiceProfile(voice_id="Lupe", language="es-US", output_format="wav").extension == ".wav"
