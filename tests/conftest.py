"""Shared pytest fixtures for the full Reciperfect test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from reciperfect.config import ReciperfectConfig


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Provide an existing, empty upload directory."""

    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


@pytest.fixture
def base_config(upload_dir: Path) -> ReciperfectConfig:
    """Provide a valid config bound to the temporary upload directory."""

    return ReciperfectConfig(
        upload_dir=upload_dir,
        publish_url="http://records.local/record/add",
        file_url_prefix="http://files.local/",
        poll_interval_seconds=0.05,
    )


@pytest.fixture
def recipe_file(upload_dir: Path) -> Path:
    """Provide a scanned recipe placeholder inside the upload directory."""

    path = upload_dir / "pancakes.jpg"
    path.write_bytes(b"\xff\xd8fake-jpeg")
    return path
