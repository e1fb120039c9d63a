"""
Error taxonomy for threadkit.

Every error is raised synchronously to the caller and is recoverable;
nothing in the package retries or swallows them.

Example:
    from threadkit.errors import AlreadyClosed

    try:
        stream.close()
    except AlreadyClosed:
        pass  # closed by the other thread first
"""

from __future__ import annotations

from typing import Any


class ThreadkitError(Exception):
    """Root of every error raised by threadkit."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class StreamError(ThreadkitError, OSError):
    """Raised when a piped stream is used in an invalid state."""


class AlreadyConnected(StreamError):
    """Raised when connecting an end that is already connected and open."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Already connected.")


class AlreadyClosed(StreamError):
    """Raised when closing an end twice."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Already closed.")


class NotConnected(StreamError):
    """Raised when writing to an output end with no downstream."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or "Current stream is not connected to any downstream."
        )


class StreamClosed(StreamError):
    """Raised when writing to a closed output end."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Can't write to a closed stream.")


class Unsupported(StreamError):
    """Raised by operations a stream does not implement (mark/reset)."""

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        super().__init__(message or f"{operation} not supported.")


class InvalidRange(ThreadkitError, ValueError):
    """Raised when an offset/length pair does not select a non-empty span."""

    def __init__(
        self,
        offset: Any,
        length: Any,
        size: int,
        message: str | None = None,
    ):
        self.offset = offset
        self.length = length
        self.size = size
        super().__init__(
            message
            or f"Invalid offset or length: offset={offset!r}, length={length!r}, size={size}"
        )


class ArgumentNotFound(ThreadkitError, KeyError):
    """Raised by ``Event.get_argument()`` for an absent key."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f'Argument "{key}" not found.')

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message
