"""Text-to-speech provider abstractions.

This package contains voice profile types, speech providers, and the
failure-capturing segment adapter used by the file processor.
"""

from .synthesizer import (
    OpenAITTSSynthesizer,
    PollySynthesizer,
    SegmentSynthesizer,
    SpeechSynthesizer,
)
from .voices import VoiceProfile, audio_extension

__all__ = [
    "OpenAITTSSynthesizer",
    "PollySynthesizer",
    "SegmentSynthesizer",
    "SpeechSynthesizer",
    "VoiceProfile",
    "audio_extension",
]
