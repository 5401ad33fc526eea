"""Ordered audio assembly for one output file.

Responsibilities:
- Own the single output audio stream for one file's processing.
- Append per-segment audio strictly in increasing ordinal order.
- Guarantee release of the output stream, including after partial failure.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import BinaryIO

from ..errors import AudioOrderError, AudioStreamError
from ..models.datatypes import AudioAssembly, AudioStream
from ..telemetry.logger import RunLogger


class OrderedAudioAssembler:
    """Concatenate segment audio streams into one output file in ordinal order.

    Appends are serialized by a lock and each append fully drains its source
    stream before returning, so bytes from two segments never interleave.
    """

    def __init__(
        self, chunk_size: int = 64 * 1024, run_logger: RunLogger | None = None
    ) -> None:
        """Initialize the assembler with a read chunk size and optional logger."""

        if chunk_size <= 0:
            raise ValueError("`chunk_size` must be a positive integer.")
        self.chunk_size = chunk_size
        self._run_logger = run_logger
        self._lock = threading.Lock()
        self._output: BinaryIO | None = None
        self._destination: Path | None = None
        self._appended_count = 0
        self._last_ordinal: int | None = None
        self._bytes_written = 0

    def __enter__(self) -> OrderedAudioAssembler:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def state(self) -> AudioAssembly:
        """Return a snapshot of the current assembly state."""

        return AudioAssembly(
            destination=self._destination,
            is_open=self._output is not None,
            appended_count=self._appended_count,
            last_ordinal=self._last_ordinal,
            bytes_written=self._bytes_written,
        )

    def open(self, destination: Path) -> OrderedAudioAssembler:
        """Create or truncate `destination` and open it for ordered appends."""

        with self._lock:
            if self._output is not None:
                raise AudioOrderError(
                    f"Assembler is already open for `{self._destination}`."
                )
            destination.parent.mkdir(parents=True, exist_ok=True)
            self._output = destination.open("wb")
            self._destination = destination
            self._appended_count = 0
            self._last_ordinal = None
            self._bytes_written = 0
        return self

    def append(self, ordinal: int, stream: AudioStream) -> int:
        """Drain one segment stream into the output and return bytes written.

        Raises:
            AudioOrderError: If the assembler is closed or `ordinal` is not
                greater than the previously appended ordinal.
            AudioStreamError: If reading the source or writing the output fails.
                The ordinal is still consumed and the output may hold a
                partial segment.
        """

        with self._lock:
            if self._output is None:
                raise AudioOrderError("Assembler is not open.")
            if self._last_ordinal is not None and ordinal <= self._last_ordinal:
                raise AudioOrderError(
                    f"Ordinal {ordinal} appended after ordinal {self._last_ordinal}."
                )
            self._last_ordinal = ordinal
            written = 0
            try:
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    self._output.write(chunk)
                    written += len(chunk)
            except Exception as exc:
                self._bytes_written += written
                raise AudioStreamError(
                    f"Failed to append audio for ordinal {ordinal}: {exc}",
                    ordinal=ordinal,
                    bytes_written=written,
                ) from exc
            finally:
                self._release_stream(ordinal, stream)
            self._bytes_written += written
            self._appended_count += 1
            return written

    def _release_stream(self, ordinal: int, stream: AudioStream) -> None:
        """Close a drained source stream; a failing close only loses the source handle."""

        close = getattr(stream, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.emit(
                    "WARNING",
                    "stream_close_failed",
                    "append",
                    ordinal=ordinal,
                    error_type=type(exc).__name__,
                )

    def close(self) -> None:
        """Flush and release the output stream; safe to call repeatedly."""

        with self._lock:
            output = self._output
            self._output = None
            if output is not None:
                output.close()
