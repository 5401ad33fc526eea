"""Basic smoke tests for project wiring."""

from pathlib import Path

import reciperfect
from reciperfect.config import DEFAULT_FILTER_KEYWORDS, ReciperfectConfig


def test_package_exports_entry_points() -> None:
    """Top-level package should expose the processor, queue, and service."""

    assert reciperfect.FileProcessor is not None
    assert reciperfect.IngestionQueue is not None
    assert reciperfect.WatchService is not None
    assert reciperfect.__version__


def test_config_dataclass_defaults() -> None:
    """Config should keep the documented defaults."""

    config = ReciperfectConfig(
        upload_dir=Path("uploads"),
        publish_url="http://records.local/add",
        file_url_prefix="http://files.local/",
    )

    assert config.min_segment_length == 2
    assert config.filter_keywords == DEFAULT_FILTER_KEYWORDS
    assert config.audio_format == "mp3"
    assert config.source_language == "auto"
    assert config.resolved_audio_url_prefix == "http://files.local/"
    config.validate()
