"""Watch service wiring the directory watcher, ingestion queue, and processor.

Responsibilities:
- Build a `FileProcessor` from validated configuration.
- Run one watcher thread and one queue worker thread.
- Stop by letting the in-flight file finish; queued files are abandoned.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from ..config import ReciperfectConfig
from ..io.publisher import ManifestPublisher
from ..io.watcher import DirectoryWatcher
from ..llm.translator import SegmentTranslator
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..text.segment_filter import SegmentFilter
from ..tts.synthesizer import SegmentSynthesizer
from ..tts.voices import audio_extension
from .ingestion import IngestionQueue
from .processor import FileProcessor, ProcessorSettings


def build_file_processor(
    config: ReciperfectConfig,
    run_logger: RunLogger | None = None,
    stage_progress_callback: Callable[[str, int, int], None] | None = None,
) -> FileProcessor:
    """Create a file processor with provider collaborators resolved from config."""

    extractor = ProviderFactory.create_extractor(config.provider_extractor, config.aws_region)
    translator = ProviderFactory.create_translator(
        config.provider_translator,
        config.aws_region,
        config.model_translate,
        config.api_key,
    )
    synthesizer = ProviderFactory.create_synthesizer(
        config.provider_tts,
        config.aws_region,
        config.model_tts,
        config.api_key,
    )
    return FileProcessor(
        extractor=extractor,
        segment_filter=SegmentFilter(
            keywords=config.filter_keywords,
            min_length=config.min_segment_length,
        ),
        translator=SegmentTranslator(translator),
        synthesizer=SegmentSynthesizer(synthesizer),
        publisher=ManifestPublisher(config.publish_url, config.publish_timeout_seconds),
        settings=ProcessorSettings.from_config(config),
        run_logger=run_logger,
        stage_progress_callback=stage_progress_callback,
    )


class WatchService:
    """Feed files added to the upload directory through the file processor."""

    def __init__(
        self,
        config: ReciperfectConfig,
        processor: FileProcessor | None = None,
        run_logger: RunLogger | None = None,
        ignore_initial: bool = False,
    ) -> None:
        """Initialize watcher and queue; `processor` defaults to config-built providers."""

        self.config = config
        self._run_logger = run_logger
        self.processor = (
            processor if processor is not None else build_file_processor(config, run_logger)
        )
        self.queue = IngestionQueue(self.processor.process, run_logger=run_logger)
        self.watcher = DirectoryWatcher(
            config.upload_dir,
            on_added=self.queue.enqueue,
            ignored_suffixes=[audio_extension(config.audio_format)],
            poll_interval_seconds=config.poll_interval_seconds,
            ignore_initial=ignore_initial,
            run_logger=run_logger,
        )
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def is_running(self) -> bool:
        """Return whether watcher and worker threads are alive."""

        return any(thread.is_alive() for thread in self._threads)

    def start(self) -> None:
        """Start the watcher and queue worker threads."""

        if self.is_running:
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(
                target=self.watcher.run,
                args=(self._stop_event,),
                name="reciperfect-watcher",
                daemon=True,
            ),
            threading.Thread(
                target=self.queue.run,
                args=(self._stop_event, self.config.poll_interval_seconds),
                name="reciperfect-worker",
                daemon=True,
            ),
        ]
        for thread in self._threads:
            thread.start()
        if self._run_logger is not None:
            self._run_logger.emit("INFO", "listening", "watch", directory=self.config.upload_dir)

    def stop(self, wait: bool = True) -> None:
        """Stop polling and let the in-flight file finish when `wait` is set."""

        self._stop_event.set()
        self.queue.stop()
        if wait:
            for thread in self._threads:
                thread.join()
        if self._run_logger is not None:
            self._run_logger.emit(
                "INFO", "stopped", "watch", abandoned=self.queue.pending_count
            )

    def run_forever(self) -> None:
        """Run until interrupted with Ctrl+C."""

        self.start()
        try:
            while self.is_running:
                time.sleep(self.config.poll_interval_seconds)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
