"""Manifest payload helpers for the record store.

Responsibilities:
- Derive public file and audio URLs from configured prefixes.
- Serialize a `ProcessingResult` into the record store JSON document.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..models.datatypes import ProcessingResult, TextSegment, TranslationStatus


def public_url(prefix: str, file_name: str) -> str:
    """Join a configured URL prefix and a file name."""

    return f"{prefix}{file_name}"


def relative_name(path: Path, root: Path | None) -> str:
    """Return `path` relative to `root` in URL form, or its bare name outside `root`."""

    if root is None:
        return path.name
    try:
        return path.absolute().relative_to(root.absolute()).as_posix()
    except ValueError:
        return path.name


def audio_destination(source_path: Path, extension: str, output_dir: Path | None = None) -> Path:
    """Return the deterministic audio path for a source file.

    The audio file shares the source base name. Under `output_dir` it keeps
    the source's subdirectory relative to that directory, so `a/x.jpg` and
    `b/x.jpg` get distinct outputs; with no directory it lands next to the
    source.
    """

    if output_dir is None:
        return source_path.parent / f"{source_path.stem}{extension}"
    relative = Path(relative_name(source_path, output_dir))
    return output_dir / relative.parent / f"{relative.stem}{extension}"


def segment_record(segment: TextSegment, target_language: str) -> dict[str, Any]:
    """Serialize one segment into a manifest record."""

    record: dict[str, Any] = {
        "BlockType": segment.block_type,
        "Text": segment.source_text,
    }
    if segment.translation_status is TranslationStatus.OK and segment.translated_text is not None:
        record["Translations"] = [
            {
                "TargetLanguageCode": target_language,
                "TranslatedText": segment.translated_text,
            }
        ]
    if segment.error_detail is not None:
        record["Error"] = segment.error_detail
    return record


def manifest_payload(result: ProcessingResult) -> dict[str, Any]:
    """Serialize a processing result into the published manifest document."""

    return {
        "url": result.source_url,
        "mp3": result.audio_url,
        "records": [
            segment_record(segment, result.target_language)
            for segment in sorted(result.segments, key=lambda item: item.ordinal)
        ],
    }
