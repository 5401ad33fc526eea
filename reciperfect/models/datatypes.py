"""Core datatypes shared across Reciperfect modules.

Responsibilities:
- Represent the records exchanged between extraction, filtering, translation,
  synthesis, audio assembly, and publishing.
- Make required and optional manifest fields explicit.

Key types:
- `ExtractionBlock`, `TextSegment`, `SegmentFailure`, `ProcessingResult`,
  `FileTask`, `AudioAssembly`, and the `AudioStream` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol


LINE_BLOCK_TYPE = "LINE"


class TranslationStatus(str, Enum):
    """Translation progress of one text segment."""

    PENDING = "pending"
    OK = "ok"
    FAILED = "failed"


class AudioStatus(str, Enum):
    """Audio progress of one text segment.

    `SKIPPED` means no synthesis attempt was possible (translation failed);
    `FAILED` means synthesis or append was attempted and errored.
    """

    PENDING = "pending"
    APPENDED = "appended"
    SKIPPED = "skipped"
    FAILED = "failed"


class FileTaskStatus(str, Enum):
    """Lifecycle status of a file owned by the ingestion queue."""

    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class AudioStream(Protocol):
    """Sequential byte source consumed exactly once by the audio assembler."""

    def read(self, size: int = -1) -> bytes:
        """Read up to `size` bytes, returning `b""` at end of stream."""


@dataclass(frozen=True, slots=True)
class ExtractionBlock:
    """One raw block returned by the extraction collaborator.

    Attributes:
        block_type: Classification tag such as `PAGE`, `LINE`, or `WORD`.
        text: Detected text, or `None` for blocks without text.
    """

    block_type: str
    text: str | None = None


@dataclass(frozen=True, slots=True)
class SegmentFailure:
    """Captured failure of one remote segment call.

    Attributes:
        stage: Adapter stage that failed (`translate` or `synthesize`).
        detail: Human-readable failure detail.
        error_type: Exception class name of the captured error.
    """

    stage: str
    detail: str
    error_type: str = "Exception"

    def describe(self) -> str:
        """Return the error detail recorded on the segment and in manifests."""

        return f"{self.stage} failed: {self.detail}"


@dataclass(slots=True)
class TextSegment:
    """One candidate line of recipe text.

    Attributes:
        ordinal: Dense zero-based position after filtering, the sole audio ordering key.
        source_text: Extracted line text.
        block_type: Extraction classification of the source block.
        translated_text: Translated text, once translation succeeded.
        translation_status: Translation progress.
        audio_status: Audio progress.
        error_detail: Last recorded error detail, if any.
    """

    ordinal: int
    source_text: str
    block_type: str = LINE_BLOCK_TYPE
    translated_text: str | None = None
    translation_status: TranslationStatus = TranslationStatus.PENDING
    audio_status: AudioStatus = AudioStatus.PENDING
    error_detail: str | None = None

    def record_translation(self, translated_text: str) -> None:
        """Mark the segment as translated."""

        self.translated_text = translated_text
        self.translation_status = TranslationStatus.OK

    def record_translation_failure(self, failure: SegmentFailure) -> None:
        """Mark translation failed; synthesis can no longer be attempted."""

        self.translation_status = TranslationStatus.FAILED
        self.audio_status = AudioStatus.SKIPPED
        self.error_detail = failure.describe()

    def record_audio_failure(self, failure: SegmentFailure) -> None:
        """Mark an attempted synthesis or append as failed."""

        self.audio_status = AudioStatus.FAILED
        self.error_detail = failure.describe()


@dataclass(frozen=True, slots=True)
class ProcessingResult:
    """Per-file manifest combining text records and the audio reference.

    Attributes:
        source_path: Local path of the processed file.
        source_url: Public URL of the processed file.
        audio_url: Public URL of the assembled audio, or `None` when nothing was appended.
        audio_path: Local path of the assembled audio, or `None` when nothing was appended.
        target_language: Translation target language code recorded in manifests.
        segments: Segments in ordinal order.
    """

    source_path: Path
    source_url: str
    audio_url: str | None
    audio_path: Path | None
    target_language: str
    segments: tuple[TextSegment, ...] = field(default_factory=tuple)

    @property
    def appended_count(self) -> int:
        """Return the number of segments whose audio was appended."""

        return sum(1 for segment in self.segments if segment.audio_status is AudioStatus.APPENDED)

    @property
    def failed_count(self) -> int:
        """Return the number of segments carrying an error detail."""

        return sum(1 for segment in self.segments if segment.error_detail is not None)


@dataclass(slots=True)
class FileTask:
    """A file path pending or in processing.

    Attributes:
        path: Unique key of the task.
        enqueued_at: Epoch timestamp of the enqueue.
        status: Current lifecycle status.
        error_detail: Failure detail once the task failed.
    """

    path: Path
    enqueued_at: float
    status: FileTaskStatus = FileTaskStatus.QUEUED
    error_detail: str | None = None

    @property
    def is_active(self) -> bool:
        """Return whether the task is still queued or processing."""

        return self.status in {FileTaskStatus.QUEUED, FileTaskStatus.PROCESSING}


@dataclass(frozen=True, slots=True)
class AudioAssembly:
    """Snapshot of the assembler state for one output audio stream."""

    destination: Path | None
    is_open: bool
    appended_count: int
    last_ordinal: int | None
    bytes_written: int
