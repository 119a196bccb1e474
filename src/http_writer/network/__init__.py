"""
Sink components for http_writer.

This module provides the destinations requests are written to.
"""

from .stream import Sink, SocketSink, as_sink
from .mock import MemorySink, MockBodySource

__all__ = [
    "Sink",
    "SocketSink",
    "as_sink",
    "MemorySink",
    "MockBodySource",
]
