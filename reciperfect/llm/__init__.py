"""Translation providers and adapters.

This package defines the translation protocol, AWS and OpenAI providers, and
the failure-capturing segment adapter used by the file processor.
"""

from .openai_client import OpenAIClient, OpenAIProviderError
from .prompts import PromptLibrary
from .translator import AwsTranslator, OpenAITranslator, SegmentTranslator, Translator

__all__ = [
    "AwsTranslator",
    "OpenAIClient",
    "OpenAIProviderError",
    "OpenAITranslator",
    "PromptLibrary",
    "SegmentTranslator",
    "Translator",
]
