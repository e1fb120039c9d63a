"""
Piped stream module.

Provides a bounded, blocking byte pipe between a producer thread and
a consumer thread.
"""

from threadkit.stream.base import Closable, InputStream, OutputStream, resolve_range
from threadkit.stream.buffer import BoundedBuffer, PipeConfig
from threadkit.stream.piped import PipedInputStream, PipedOutputStream, create_pipe

__all__ = [
    "BoundedBuffer",
    "Closable",
    "InputStream",
    "OutputStream",
    "PipeConfig",
    "PipedInputStream",
    "PipedOutputStream",
    "create_pipe",
    "resolve_range",
]
