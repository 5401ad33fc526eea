"""Top-level package for Reciperfect.

This package watches an upload directory for scanned recipes, translates each
extracted line, narrates it, and publishes a manifest with one ordered audio
file per recipe. The per-file entry point is `FileProcessor`; the long-running
entry point is `WatchService`.
"""

from .pipeline import FileProcessor, IngestionQueue, WatchService

__all__ = ["FileProcessor", "IngestionQueue", "WatchService", "__version__"]

__version__ = "0.2.0"
