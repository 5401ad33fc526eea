"""Domain exceptions for pipeline, queue, and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific file-processing stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ExtractionError(RuntimeError):
    """Raised when the extraction collaborator returns no usable blocks."""


class AudioOrderError(ValueError):
    """Raised when audio is appended out of ordinal order or to a closed output."""


class AudioStreamError(RuntimeError):
    """Raised when draining one segment stream into the output audio fails."""

    def __init__(self, message: str, *, ordinal: int, bytes_written: int = 0) -> None:
        """Initialize stream failure metadata for segment diagnostics."""

        super().__init__(message)
        self.ordinal = ordinal
        self.bytes_written = bytes_written
