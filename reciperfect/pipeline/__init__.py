"""Reciperfect pipeline package.

This package contains the file processor, the ingestion queue, manifest
helpers, and the watch service wiring them together.
"""

from .ingestion import IngestionQueue
from .manifesting import manifest_payload
from .processor import FileProcessor, ProcessorSettings
from .service import WatchService, build_file_processor

__all__ = [
    "FileProcessor",
    "IngestionQueue",
    "ProcessorSettings",
    "WatchService",
    "build_file_processor",
    "manifest_payload",
]
