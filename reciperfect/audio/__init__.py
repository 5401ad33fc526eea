"""Audio assembly components.

This package contains the ordered assembler that serializes per-segment audio
into one output file.
"""

from .assembler import OrderedAudioAssembler

__all__ = ["OrderedAudioAssembler"]
