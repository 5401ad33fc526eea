"""Segment filtering for extracted recipe text.

Responsibilities:
- Keep only line-classified extraction blocks with meaningful text.
- Drop boilerplate lines containing configured keywords.
- Assign dense zero-based ordinals after filtering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.datatypes import LINE_BLOCK_TYPE, ExtractionBlock, TextSegment


class SegmentFilter:
    """Prune raw extraction blocks down to translatable text segments."""

    def __init__(
        self,
        keywords: Sequence[str] = (),
        min_length: int = 2,
        line_block_type: str = LINE_BLOCK_TYPE,
    ) -> None:
        """Initialize filter rules.

        Args:
            keywords: Case-sensitive substrings; a line containing any of them is dropped.
            min_length: Lines whose stripped length is at most this value are dropped.
            line_block_type: Block classification kept by the filter.
        """

        if min_length < 0:
            raise ValueError("`min_length` must be a non-negative integer.")
        self.keywords = tuple(keyword for keyword in keywords if keyword)
        self.min_length = min_length
        self.line_block_type = line_block_type

    def filter(self, blocks: Iterable[ExtractionBlock]) -> list[TextSegment]:
        """Return kept segments in extraction order with dense ordinals."""

        segments: list[TextSegment] = []
        for block in blocks:
            text = self._accepted_text(block)
            if text is None:
                continue
            segments.append(
                TextSegment(ordinal=len(segments), source_text=text, block_type=block.block_type)
            )
        return segments

    def matched_keyword(self, text: str) -> str | None:
        """Return the first configured keyword contained in `text`, if any."""

        for keyword in self.keywords:
            if keyword in text:
                return keyword
        return None

    def _accepted_text(self, block: ExtractionBlock) -> str | None:
        """Return the normalized block text when the block passes every rule."""

        if block.block_type != self.line_block_type:
            return None
        if block.text is None:
            return None
        text = block.text.strip()
        if len(text) <= self.min_length:
            return None
        if self.matched_keyword(text) is not None:
            return None
        return text
