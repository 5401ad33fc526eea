"""Shared typed data models for Reciperfect.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    LINE_BLOCK_TYPE,
    AudioAssembly,
    AudioStatus,
    AudioStream,
    ExtractionBlock,
    FileTask,
    FileTaskStatus,
    ProcessingResult,
    SegmentFailure,
    TextSegment,
    TranslationStatus,
)

__all__ = [
    "LINE_BLOCK_TYPE",
    "AudioAssembly",
    "AudioStatus",
    "AudioStream",
    "ExtractionBlock",
    "FileTask",
    "FileTaskStatus",
    "ProcessingResult",
    "SegmentFailure",
    "TextSegment",
    "TranslationStatus",
]
