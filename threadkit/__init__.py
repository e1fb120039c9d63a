"""
threadkit: thread-safe coordination primitives.

This package contains:
- Events (priority-ordered listener registry and dispatch)
- Stream (bounded, blocking producer/consumer byte pipe)
"""

from threadkit.errors import (
    AlreadyClosed,
    AlreadyConnected,
    ArgumentNotFound,
    InvalidRange,
    NotConnected,
    StreamClosed,
    StreamError,
    ThreadkitError,
    Unsupported,
)
from threadkit.events import Event, EventDispatcher, EventDispatcherContainer, EventPriority
from threadkit.stream import PipeConfig, PipedInputStream, PipedOutputStream, create_pipe

__version__ = "0.1.0"

__all__ = [
    "AlreadyClosed",
    "AlreadyConnected",
    "ArgumentNotFound",
    "Event",
    "EventDispatcher",
    "EventDispatcherContainer",
    "EventPriority",
    "InvalidRange",
    "NotConnected",
    "PipeConfig",
    "PipedInputStream",
    "PipedOutputStream",
    "StreamClosed",
    "StreamError",
    "ThreadkitError",
    "Unsupported",
    "create_pipe",
]
