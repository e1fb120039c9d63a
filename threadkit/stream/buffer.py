"""
Bounded FIFO buffer shared by the two ends of a pipe.

The buffer owns one ``threading.Condition``. Every enqueue, dequeue
and size query must happen while holding it; the pipe ends enter the
buffer as a context manager and use ``wait()`` / ``notify_all()`` for
the producer/consumer handoff.

Example:
    buffer = BoundedBuffer(capacity=4)

    with buffer:
        while buffer.full:
            buffer.wait()
        buffer.append(0x2A)
        buffer.notify_all()
"""

from __future__ import annotations

import os
import threading
from collections import deque
from dataclasses import dataclass

BUFFER_SIZE_ENV = "THREADKIT_PIPE_BUFFER_SIZE"

DEFAULT_BUFFER_SIZE = 1024


@dataclass
class PipeConfig:
    """
    Configuration for a pipe.

    Args:
        buffer_size: Maximum number of bytes the pipe buffer holds
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self):
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> PipeConfig:
        """Build a config from ``THREADKIT_PIPE_BUFFER_SIZE``."""
        env = os.environ if environ is None else environ
        raw = env.get(BUFFER_SIZE_ENV)
        if not raw:
            return cls()
        try:
            buffer_size = int(raw)
        except ValueError as err:
            raise ValueError(f"{BUFFER_SIZE_ENV} must be an integer, got {raw!r}") from err
        return cls(buffer_size=buffer_size)


class BoundedBuffer:
    """
    Fixed-capacity FIFO of byte values guarded by one condition.

    The data methods do not lock on their own; callers hold the
    condition (``with buffer:``) around them.
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._items: deque[int] = deque()
        self._cond = threading.Condition()

    # Monitor

    def __enter__(self) -> BoundedBuffer:
        self._cond.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._cond.release()
        return False

    def wait(self) -> None:
        """Release the lock until notified, then reacquire it."""
        self._cond.wait()

    def notify_all(self) -> None:
        self._cond.notify_all()

    # Data (lock held)

    @property
    def full(self) -> bool:
        return len(self._items) >= self.capacity

    @property
    def empty(self) -> bool:
        return not self._items

    def append(self, unit: int) -> None:
        self._items.append(unit)

    def popleft(self) -> int:
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)
