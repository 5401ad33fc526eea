"""Input/output collaborators for Reciperfect.

This package contains the extraction client, the manifest publisher, and the
upload-directory watcher.
"""

from .publisher import ManifestPublisher, PublishError
from .textract_extractor import BlockExtractor, TextractBlockExtractor
from .watcher import DirectoryWatcher

__all__ = [
    "BlockExtractor",
    "DirectoryWatcher",
    "ManifestPublisher",
    "PublishError",
    "TextractBlockExtractor",
]
