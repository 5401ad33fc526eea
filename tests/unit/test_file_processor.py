"""Unit tests for per-file orchestration, segment isolation, and publishing."""

from __future__ import annotations

from pathlib import Path

import pytest

from reciperfect.errors import PipelineStageError
from reciperfect.llm.translator import SegmentTranslator
from reciperfect.models.datatypes import (
    AudioStatus,
    ExtractionBlock,
    FileTaskStatus,
    TranslationStatus,
)
from reciperfect.pipeline.ingestion import IngestionQueue
from reciperfect.pipeline.processor import FileProcessor
from reciperfect.text.segment_filter import SegmentFilter
from reciperfect.tts.synthesizer import SegmentSynthesizer
from tests.fakes import (
    BrokenStream,
    FakeExtractor,
    FakeSynthesizer,
    FakeTranslator,
    RecordingPublisher,
    StickyStream,
    line,
    make_settings,
)


def _processor(
    blocks: list[ExtractionBlock],
    *,
    output_dir: Path | None = None,
    keywords: list[str] | None = None,
    translator: FakeTranslator | None = None,
    synthesizer: object | None = None,
    publisher: RecordingPublisher | None = None,
    extract_error: Exception | None = None,
    stage_events: list[tuple[str, int, int]] | None = None,
) -> FileProcessor:
    """Build a processor over in-memory collaborators."""

    return FileProcessor(
        extractor=FakeExtractor(blocks, error=extract_error),
        segment_filter=SegmentFilter(
            keywords=keywords if keywords is not None else ["Qty"], min_length=2
        ),
        translator=SegmentTranslator(translator or FakeTranslator()),
        synthesizer=SegmentSynthesizer(synthesizer or FakeSynthesizer()),
        publisher=publisher if publisher is not None else RecordingPublisher(),
        settings=make_settings(output_dir),
        stage_progress_callback=(
            (lambda stage, index, total: stage_events.append((stage, index, total)))
            if stage_events is not None
            else None
        ),
    )


def test_process_appends_audio_in_ordinal_order_and_publishes(recipe_file: Path) -> None:
    """All segments succeed: audio holds every segment in order and the manifest is published."""

    publisher = RecordingPublisher()
    stage_events: list[tuple[str, int, int]] = []
    processor = _processor(
        [line("Whisk eggs"), line("Qty 2"), line("Add milk"), line("Fry gently")],
        publisher=publisher,
        stage_events=stage_events,
    )

    result = processor.process(recipe_file)

    audio_path = recipe_file.with_suffix(".mp3")
    assert result.audio_path == audio_path
    assert audio_path.read_bytes() == b"<es:Whisk eggs><es:Add milk><es:Fry gently>"
    assert result.source_url == "http://files.local/pancakes.jpg"
    assert result.audio_url == "http://audio.local/pancakes.mp3"
    assert result.appended_count == 3
    assert result.failed_count == 0
    assert [stage for stage, _, _ in stage_events] == ["extract", "filter", "segments", "publish"]
    assert publisher.payloads == [
        {
            "url": "http://files.local/pancakes.jpg",
            "mp3": "http://audio.local/pancakes.mp3",
            "records": [
                {
                    "BlockType": "LINE",
                    "Text": "Whisk eggs",
                    "Translations": [
                        {"TargetLanguageCode": "es", "TranslatedText": "es:Whisk eggs"}
                    ],
                },
                {
                    "BlockType": "LINE",
                    "Text": "Add milk",
                    "Translations": [
                        {"TargetLanguageCode": "es", "TranslatedText": "es:Add milk"}
                    ],
                },
                {
                    "BlockType": "LINE",
                    "Text": "Fry gently",
                    "Translations": [
                        {"TargetLanguageCode": "es", "TranslatedText": "es:Fry gently"}
                    ],
                },
            ],
        }
    ]


def test_process_skips_failed_synthesis_without_gap(recipe_file: Path) -> None:
    """A synthesis failure on ordinal 1 leaves ordinals 0 and 2 adjacent in the audio."""

    synthesizer = FakeSynthesizer(failing_texts=frozenset({"es:Add milk"}))
    processor = _processor(
        [line("Whisk eggs"), line("Add milk"), line("Fry gently")],
        synthesizer=synthesizer,
    )

    result = processor.process(recipe_file)

    assert result.audio_path is not None
    assert result.audio_path.read_bytes() == b"<es:Whisk eggs><es:Fry gently>"
    failed = result.segments[1]
    assert failed.translation_status is TranslationStatus.OK
    assert failed.audio_status is AudioStatus.FAILED
    assert failed.error_detail is not None
    assert failed.error_detail.startswith("synthesize failed:")
    assert [segment.audio_status for segment in result.segments] == [
        AudioStatus.APPENDED,
        AudioStatus.FAILED,
        AudioStatus.APPENDED,
    ]


def test_process_continues_after_translation_failure(recipe_file: Path) -> None:
    """A translation failure skips audio for that segment and later segments still run."""

    translator = FakeTranslator(failing_texts=frozenset({"Whisk eggs"}))
    publisher = RecordingPublisher()
    processor = _processor(
        [line("Whisk eggs"), line("Add milk")],
        translator=translator,
        publisher=publisher,
    )

    result = processor.process(recipe_file)

    first, second = result.segments
    assert first.translation_status is TranslationStatus.FAILED
    assert first.audio_status is AudioStatus.SKIPPED
    assert second.audio_status is AudioStatus.APPENDED
    assert result.audio_path is not None
    assert result.audio_path.read_bytes() == b"<es:Add milk>"

    record = publisher.payloads[0]["records"][0]
    assert record["Text"] == "Whisk eggs"
    assert "Translations" not in record
    assert record["Error"].startswith("translate failed:")


def test_process_records_stream_failure_and_keeps_later_segments(recipe_file: Path) -> None:
    """A stream that breaks mid-append is recorded and does not block later segments."""

    class _BreakingSynthesizer(FakeSynthesizer):
        def synthesize_speech(self, text: str, voice: str, language: str, output_format: str):
            if text == "es:Add milk":
                return BrokenStream(first_chunk=b"<cut")
            return super().synthesize_speech(text, voice, language, output_format)

    processor = _processor(
        [line("Add milk"), line("Fry gently")],
        synthesizer=_BreakingSynthesizer(),
    )

    result = processor.process(recipe_file)

    assert result.segments[0].audio_status is AudioStatus.FAILED
    assert result.segments[0].error_detail is not None
    assert result.segments[0].error_detail.startswith("append failed:")
    assert result.segments[1].audio_status is AudioStatus.APPENDED
    assert result.audio_path is not None
    assert result.audio_path.read_bytes() == b"<cut<es:Fry gently>"


def test_process_with_no_segments_publishes_empty_manifest(recipe_file: Path) -> None:
    """Zero kept segments yields empty records, no audio URL, and no audio file."""

    publisher = RecordingPublisher()
    processor = _processor(
        [ExtractionBlock(block_type="PAGE"), line("Qty 4"), line("ok")],
        publisher=publisher,
    )

    result = processor.process(recipe_file)

    assert result.audio_path is None
    assert result.audio_url is None
    assert not recipe_file.with_suffix(".mp3").exists()
    assert publisher.payloads == [
        {"url": "http://files.local/pancakes.jpg", "mp3": None, "records": []}
    ]


def test_process_all_segments_failing_removes_empty_audio(recipe_file: Path) -> None:
    """When every synthesis fails no audio file is left and records still publish."""

    publisher = RecordingPublisher()
    processor = _processor(
        [line("Whisk eggs")],
        synthesizer=FakeSynthesizer(failing_texts=frozenset({"es:Whisk eggs"})),
        publisher=publisher,
    )

    result = processor.process(recipe_file)

    assert result.audio_url is None
    assert not recipe_file.with_suffix(".mp3").exists()
    assert publisher.payloads[0]["mp3"] is None
    assert len(publisher.payloads[0]["records"]) == 1


def test_process_extract_failure_is_file_fatal(recipe_file: Path) -> None:
    """Extraction errors abort the file before any audio or publish happens."""

    publisher = RecordingPublisher()
    processor = _processor(
        [],
        extract_error=RuntimeError("unsupported document"),
        publisher=publisher,
    )

    with pytest.raises(PipelineStageError) as exc_info:
        processor.process(recipe_file)

    assert exc_info.value.stage == "extract"
    assert "unsupported document" in exc_info.value.detail
    assert publisher.payloads == []
    assert not recipe_file.with_suffix(".mp3").exists()


def test_process_missing_file_is_extract_failure(tmp_path: Path) -> None:
    """A file removed before processing fails the extract stage."""

    processor = _processor([line("Whisk eggs")])

    with pytest.raises(PipelineStageError) as exc_info:
        processor.process(tmp_path / "gone.jpg")

    assert exc_info.value.stage == "extract"


def test_process_publish_failure_keeps_audio(recipe_file: Path) -> None:
    """Publish failures are file-fatal but leave the assembled audio in place."""

    publisher = RecordingPublisher(error=RuntimeError("HTTP 503"))
    processor = _processor([line("Whisk eggs")], publisher=publisher)

    with pytest.raises(PipelineStageError) as exc_info:
        processor.process(recipe_file)

    assert exc_info.value.stage == "publish"
    assert exc_info.value.hint is not None
    assert recipe_file.with_suffix(".mp3").read_bytes() == b"<es:Whisk eggs>"


def test_process_writes_audio_to_output_dir(recipe_file: Path, tmp_path: Path) -> None:
    """Configured output directories receive the audio under the source base name."""

    output_dir = tmp_path / "audio"
    processor = _processor([line("Whisk eggs")], output_dir=output_dir)

    result = processor.process(recipe_file)

    assert result.audio_path == output_dir / "pancakes.mp3"
    assert (output_dir / "pancakes.mp3").read_bytes() == b"<es:Whisk eggs>"


def test_process_overwrites_previous_audio_on_reprocess(recipe_file: Path) -> None:
    """Processing the same file twice replaces its audio rather than appending."""

    processor = _processor([line("Whisk eggs")])

    processor.process(recipe_file)
    processor.process(recipe_file)

    assert recipe_file.with_suffix(".mp3").read_bytes() == b"<es:Whisk eggs>"


def test_process_filters_keyword_lines_and_renumbers_ordinals(recipe_file: Path) -> None:
    """A footer line matching a filter keyword drops out and later lines close the gap."""

    publisher = RecordingPublisher()
    processor = _processor(
        [line("Mix flour and water"), line("U of M Extension"), line("Add salt")],
        keywords=["U of M"],
        publisher=publisher,
    )

    result = processor.process(recipe_file)

    assert [(segment.ordinal, segment.source_text) for segment in result.segments] == [
        (0, "Mix flour and water"),
        (1, "Add salt"),
    ]
    assert result.audio_url == "http://audio.local/pancakes.mp3"
    assert result.audio_path is not None
    assert result.audio_path.read_bytes() == b"<es:Mix flour and water><es:Add salt>"
    assert len(publisher.payloads[0]["records"]) == 2
    assert publisher.payloads[0]["mp3"] is not None


def test_queue_marks_file_done_when_extraction_finds_nothing(recipe_file: Path) -> None:
    """An empty but successful extraction completes the task with an empty manifest."""

    publisher = RecordingPublisher()
    processor = _processor([], publisher=publisher)
    queue = IngestionQueue(processor.process)

    assert queue.enqueue(recipe_file)
    task = queue.process_next(timeout=1.0)

    assert task is not None
    assert task.status is FileTaskStatus.DONE
    assert task.error_detail is None
    assert publisher.payloads == [
        {"url": "http://files.local/pancakes.jpg", "mp3": None, "records": []}
    ]
    assert not recipe_file.with_suffix(".mp3").exists()


def test_process_keeps_subdirectory_in_audio_path_and_urls(upload_dir: Path) -> None:
    """Same-named scans in different subdirectories get separate audio and URLs."""

    first = upload_dir / "a" / "x.jpg"
    second = upload_dir / "b" / "x.jpg"
    for path in (first, second):
        path.parent.mkdir()
        path.write_bytes(b"scan")
    processor = _processor([line("Whisk eggs")], output_dir=upload_dir)

    first_result = processor.process(first)
    second_result = processor.process(second)

    assert first_result.audio_path == upload_dir / "a" / "x.mp3"
    assert second_result.audio_path == upload_dir / "b" / "x.mp3"
    assert first_result.source_url == "http://files.local/a/x.jpg"
    assert first_result.audio_url == "http://audio.local/a/x.mp3"
    assert second_result.source_url == "http://files.local/b/x.jpg"
    assert second_result.audio_url == "http://audio.local/b/x.mp3"
    assert (upload_dir / "a" / "x.mp3").read_bytes() == b"<es:Whisk eggs>"
    assert (upload_dir / "b" / "x.mp3").read_bytes() == b"<es:Whisk eggs>"


def test_process_tolerates_source_stream_close_failure(recipe_file: Path) -> None:
    """A synthesized stream that cannot be closed still counts as appended audio."""

    class _StickySynthesizer(FakeSynthesizer):
        def synthesize_speech(self, text: str, voice: str, language: str, output_format: str):
            return StickyStream(f"<{text}>".encode("utf-8"))

    processor = _processor([line("Whisk eggs")], synthesizer=_StickySynthesizer())

    result = processor.process(recipe_file)

    assert result.segments[0].audio_status is AudioStatus.APPENDED
    assert result.segments[0].error_detail is None
    assert result.audio_path is not None
    assert result.audio_path.read_bytes() == b"<es:Whisk eggs>"
