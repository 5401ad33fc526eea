"""Per-file orchestration from extraction to manifest publishing.

Responsibilities:
- Run `extract -> filter -> segments -> publish` for one file.
- Translate, synthesize, and append each segment in ordinal order, isolating
  segment failures on the segment record.
- Release the audio output on every path and publish the resulting manifest.

Key types:
- `ProcessorSettings`: language, voice, and URL settings for one service.
- `FileProcessor`: orchestration facade invoked by the ingestion queue.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..audio.assembler import OrderedAudioAssembler
from ..config import ReciperfectConfig
from ..errors import AudioStreamError, PipelineStageError
from ..io.textract_extractor import BlockExtractor
from ..llm.translator import SegmentTranslator
from ..models.datatypes import (
    AudioStatus,
    ExtractionBlock,
    ProcessingResult,
    SegmentFailure,
    TextSegment,
)
from ..telemetry.logger import RunLogger
from ..text.segment_filter import SegmentFilter
from ..tts.synthesizer import SegmentSynthesizer
from ..tts.voices import VoiceProfile
from .manifesting import audio_destination, manifest_payload, public_url, relative_name
from .telemetry import PipelineTelemetryMixin


class Publisher(Protocol):
    """Protocol for the manifest publish collaborator."""

    def publish(self, payload: dict[str, Any]) -> int:
        """Publish one manifest payload, raising on failure."""


@dataclass(frozen=True, slots=True)
class ProcessorSettings:
    """Language, voice, and URL settings shared by every processed file.

    Attributes:
        source_language: Translation source language code.
        target_language: Translation target language code.
        voice: Speech voice profile, including output format.
        file_url_prefix: Public URL prefix for source files.
        audio_url_prefix: Public URL prefix for assembled audio.
        output_dir: Directory for assembled audio, or `None` to write beside the source.
    """

    source_language: str
    target_language: str
    voice: VoiceProfile
    file_url_prefix: str
    audio_url_prefix: str
    output_dir: Path | None = None

    @classmethod
    def from_config(cls, config: ReciperfectConfig) -> ProcessorSettings:
        """Build processor settings from validated service configuration."""

        return cls(
            source_language=config.source_language,
            target_language=config.target_language,
            voice=VoiceProfile(
                voice_id=config.tts_voice,
                language=config.tts_language,
                output_format=config.audio_format,
            ),
            file_url_prefix=config.file_url_prefix,
            audio_url_prefix=config.resolved_audio_url_prefix,
            output_dir=config.upload_dir,
        )


class FileProcessor(PipelineTelemetryMixin):
    """Turn one scanned recipe file into translated records and ordered audio."""

    def __init__(
        self,
        *,
        extractor: BlockExtractor,
        segment_filter: SegmentFilter,
        translator: SegmentTranslator,
        synthesizer: SegmentSynthesizer,
        publisher: Publisher,
        settings: ProcessorSettings,
        assembler_factory: Callable[[], OrderedAudioAssembler] | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        """Initialize injected collaborators and optional telemetry hooks."""

        self.extractor = extractor
        self.segment_filter = segment_filter
        self.translator = translator
        self.synthesizer = synthesizer
        self.publisher = publisher
        self.settings = settings
        self._assembler_factory = assembler_factory
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback

    def process(self, source_path: Path) -> ProcessingResult:
        """Process one file and return its published manifest.

        Raises:
            PipelineStageError: On file-fatal extraction failures, unexpected
                segment-loop failures, and publish failures.
        """

        blocks = self._run_stage("extract", lambda: self._extract(source_path), path=source_path)
        segments = self._run_stage("filter", lambda: self._filter(blocks), path=source_path)
        audio_path = self._run_stage(
            "segments",
            lambda: self._process_segments(source_path, segments),
            path=source_path,
        )
        result = ProcessingResult(
            source_path=source_path,
            source_url=public_url(
                self.settings.file_url_prefix,
                relative_name(source_path, self.settings.output_dir),
            ),
            audio_url=(
                public_url(
                    self.settings.audio_url_prefix,
                    relative_name(audio_path, self.settings.output_dir),
                )
                if audio_path is not None
                else None
            ),
            audio_path=audio_path,
            target_language=self.settings.target_language,
            segments=tuple(segments),
        )
        self._run_stage("publish", lambda: self._publish(result), path=source_path)
        return result

    def _extract(self, source_path: Path) -> list[ExtractionBlock]:
        """Read the file and obtain raw blocks from the extraction collaborator."""

        try:
            document = source_path.read_bytes()
        except OSError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Failed to read `{source_path}`: {exc}",
                hint="Verify the uploaded file still exists and is readable.",
            ) from exc
        try:
            return list(self.extractor.extract_blocks(document))
        except Exception as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Failed to extract text from `{source_path}`: {exc}",
                hint="Verify the file is a supported image or PDF and re-add it to retry.",
            ) from exc

    def _filter(self, blocks: list[ExtractionBlock]) -> list[TextSegment]:
        """Apply the segment filter to raw blocks."""

        try:
            return self.segment_filter.filter(blocks)
        except Exception as exc:
            raise PipelineStageError(
                stage="filter",
                detail=f"Failed to filter extracted blocks: {exc}",
            ) from exc

    def _process_segments(self, source_path: Path, segments: list[TextSegment]) -> Path | None:
        """Translate, synthesize, and append every segment; return the audio path.

        Returns `None` and removes the empty output when no segment audio was
        appended.
        """

        destination = audio_destination(
            source_path, self.settings.voice.extension, self.settings.output_dir
        )
        assembler = (
            self._assembler_factory()
            if self._assembler_factory is not None
            else OrderedAudioAssembler(run_logger=self._run_logger)
        )
        try:
            assembler.open(destination)
        except OSError as exc:
            raise PipelineStageError(
                stage="segments",
                detail=f"Failed to open audio output `{destination}`: {exc}",
                hint="Verify the upload directory is writable.",
            ) from exc

        try:
            for segment in segments:
                self._process_segment(segment, assembler)
        except Exception as exc:
            raise PipelineStageError(
                stage="segments",
                detail=f"Segment processing interrupted for `{source_path}`: {exc}",
            ) from exc
        finally:
            self._close_assembler(assembler, destination)

        if assembler.state.appended_count == 0:
            destination.unlink(missing_ok=True)
            return None
        return destination

    def _process_segment(self, segment: TextSegment, assembler: OrderedAudioAssembler) -> None:
        """Run translate, synthesize, and append for one segment."""

        translated = self.translator.translate(
            segment.source_text,
            self.settings.source_language,
            self.settings.target_language,
        )
        if isinstance(translated, SegmentFailure):
            segment.record_translation_failure(translated)
            self._log_segment_failure(translated, segment)
            return
        segment.record_translation(translated)
        if self._run_logger is not None:
            self._run_logger.log_translation(segment.ordinal, segment.source_text, translated)

        audio = self.synthesizer.synthesize(translated, self.settings.voice)
        if isinstance(audio, SegmentFailure):
            segment.record_audio_failure(audio)
            self._log_segment_failure(audio, segment)
            return

        try:
            assembler.append(segment.ordinal, audio)
        except AudioStreamError as exc:
            cause = exc.__cause__ if exc.__cause__ is not None else exc
            failure = SegmentFailure(
                stage="append",
                detail=str(exc),
                error_type=type(cause).__name__,
            )
            segment.record_audio_failure(failure)
            self._log_segment_failure(failure, segment)
            return
        segment.audio_status = AudioStatus.APPENDED

    def _close_assembler(self, assembler: OrderedAudioAssembler, destination: Path) -> None:
        """Close the audio output; a failing close leaves a possibly incomplete file."""

        try:
            assembler.close()
        except OSError as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(
                    "segments", type(exc).__name__, audio_path=destination
                )

    def _publish(self, result: ProcessingResult) -> int:
        """Publish the manifest for one processed file."""

        try:
            return self.publisher.publish(manifest_payload(result))
        except Exception as exc:
            raise PipelineStageError(
                stage="publish",
                detail=f"Failed to publish manifest for `{result.source_path}`: {exc}",
                hint="The audio file was kept; re-add the source file to publish again.",
            ) from exc

    def _log_segment_failure(self, failure: SegmentFailure, segment: TextSegment) -> None:
        """Emit a segment-recoverable failure event."""

        if self._run_logger is not None:
            self._run_logger.log_segment_failure(
                failure.stage, segment.ordinal, failure.error_type
            )
