"""Text processing stages.

This package contains the segment filter that turns raw extraction blocks
into ordered, translatable lines.
"""

from .segment_filter import SegmentFilter

__all__ = ["SegmentFilter"]
