"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent provider voice identity, language, and output format.
- Map provider output formats to audio file extensions.
"""

from __future__ import annotations

from dataclasses import dataclass


_FORMAT_EXTENSIONS = {
    "mp3": ".mp3",
    "ogg_vorbis": ".ogg",
    "opus": ".opus",
    "aac": ".aac",
    "flac": ".flac",
    "wav": ".wav",
    "pcm": ".pcm",
}


def audio_extension(output_format: str) -> str:
    """Return the file extension used for an audio output format."""

    normalized = output_format.strip().lower()
    try:
        return _FORMAT_EXTENSIONS[normalized]
    except KeyError:
        return f".{normalized}"


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by speech providers.

    Attributes:
        voice_id: Provider-native voice identifier.
        language: Language code passed to the provider.
        output_format: Provider audio output format.
    """

    voice_id: str
    language: str
    output_format: str = "mp3"

    @property
    def extension(self) -> str:
        """Return the audio file extension for this profile's format."""

        return audio_extension(self.output_format)
