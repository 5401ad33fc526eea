"""Telemetry and observability helpers.

This package emits structured run events for the watcher, queue, and file
processor.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
