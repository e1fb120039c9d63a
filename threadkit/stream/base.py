"""
Stream capabilities shared by the piped streams.

Defines the closable and input/output stream abstractions, plus the
offset/length resolution used by the substring operations:

- a negative offset counts back from the end of the sequence
- a negative length stops that many units before the end
- a selection that starts out of range or spans no units is invalid
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any

from threadkit.errors import AlreadyClosed, InvalidRange, Unsupported
from threadkit.events import EventDispatcher, EventDispatcherContainer


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_range(size: int, offset: int, length: int, *, into: bool = False) -> tuple[int, int]:
    """
    Resolve an offset/length pair against a sequence of ``size`` units.

    Args:
        size: Length of the sequence being sliced (or written into)
        offset: Start position; negative values count from the end
        length: Number of units; negative values stop ``|length|``
            units before the end
        into: Resolve against a target buffer instead of a source. The
            offset may then equal ``size`` and a positive length is not
            clamped, since the target grows as needed.

    Returns:
        ``(start, span)`` with ``span >= 1``

    Raises:
        InvalidRange: If the start is out of range or the span is empty
    """
    if not _is_int(offset) or not _is_int(length):
        raise InvalidRange(offset, length, size)

    start = offset if offset >= 0 else max(0, size + offset)
    if start > size or (not into and start >= size):
        raise InvalidRange(offset, length, size)

    span = length if length >= 0 else size - start + length
    if not into:
        span = min(span, size - start)
    if span <= 0:
        raise InvalidRange(offset, length, size)

    return start, span


class Closable(ABC):
    """Something that can be closed exactly once."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether the object is closed."""

    @abstractmethod
    def close(self) -> Any:
        """Close the object."""


class _Stream(EventDispatcherContainer, Closable):
    """Common state of both stream directions."""

    # Name of the event dispatched before a connection is made.
    EVENT_CONNECT_BEFORE = "connect.before"

    def __init__(self, dispatcher: EventDispatcher | None = None) -> None:
        super().__init__(dispatcher)
        self._closed = False
        self._state_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def close(self) -> Any:
        """
        Mark the stream closed.

        Subclasses override this, call it first, then release whatever
        waits on them.

        Raises:
            AlreadyClosed: If the stream is already closed
        """
        with self._state_lock:
            if self._closed:
                raise AlreadyClosed()
            self._closed = True
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._closed:
            self.close()
        return False


class InputStream(_Stream):
    """Readable stream of bytes."""

    @abstractmethod
    def read(self, length: int = 1) -> bytes:
        """
        Read up to ``length`` bytes.

        Returns:
            The bytes read; ``b""`` for a request of at least one byte
            means end of stream.
        """

    def read_substring(self, target: bytearray, offset: int, length: int) -> int:
        """
        Read bytes into ``target`` starting at ``offset``.

        ``offset`` and ``length`` are resolved against ``len(target)``;
        the target grows when the bytes read run past its end.

        Returns:
            Number of bytes stored, or -1 at end of stream

        Raises:
            InvalidRange: If offset/length select no bytes
        """
        if not isinstance(target, bytearray):
            raise TypeError(f"target must be a bytearray, got {type(target).__name__}")

        start, span = resolve_range(len(target), offset, length, into=True)
        data = self.read(span)
        if not data:
            return -1
        target[start:start + len(data)] = data
        return len(data)

    def available(self) -> int:
        """Estimated number of bytes readable without blocking."""
        return 0

    def skip(self, count: int) -> int:
        """Skip up to ``count`` bytes and return how many were skipped."""
        return len(self.read(count))

    def mark(self, read_limit: int) -> None:
        # Not supported.
        pass

    def mark_supported(self) -> bool:
        return False

    def reset(self) -> None:
        raise Unsupported("mark/reset")


class OutputStream(_Stream):
    """Writable stream of bytes."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes written."""

    def write_substring(self, data: bytes, offset: int, length: int) -> int:
        """
        Write part of ``data``.

        Examples:
            write_substring(b"hello", -3, 3)   # writes b"llo"
            write_substring(b"hello", 0, -1)   # writes b"hell"

        Raises:
            InvalidRange: If offset/length select no bytes
        """
        start, span = resolve_range(len(data), offset, length)
        return self.write(data[start:start + span])

    def flush(self) -> Any:
        return self
