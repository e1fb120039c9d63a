"""
Piped streams for passing bytes between threads.

A ``PipedOutputStream`` (the sending end) is connected to a
``PipedInputStream`` (the receiving end). Data written by one thread
is buffered in a bounded FIFO owned by the input end and read by
another thread:

- a writer blocks while the buffer is full and the reader is open
- a reader blocks while the buffer is empty and the writer is open
- closing either end wakes every thread blocked on the buffer

Using both ends from a single thread may deadlock that thread once the
buffer fills up.

Example:
    from threadkit.stream import create_pipe

    reader, writer = create_pipe()

    def produce():
        with writer:
            writer.write(b"hello")

    threading.Thread(target=produce).start()
    reader.read(5)  # b"hello"
"""

from __future__ import annotations

from threadkit.errors import AlreadyConnected, NotConnected, StreamClosed
from threadkit.events import EventDispatcher
from threadkit.logging_config import get_logger
from threadkit.stream.base import InputStream, OutputStream
from threadkit.stream.buffer import BoundedBuffer, PipeConfig

logger = get_logger(__name__)


class PipedInputStream(InputStream):
    """
    Receiving end of a pipe.

    Owns the pipe buffer. ``receive()`` is called by the connected
    output stream on the writer's thread; ``read()`` is called on the
    reader's thread.
    """

    # Name of the event dispatched before close() wakes blocked writers.
    EVENT_CLOSE_NOTIFY_BEFORE = "close.notify.before"

    def __init__(
        self,
        upstream: PipedOutputStream | None = None,
        *,
        config: PipeConfig | None = None,
        dispatcher: EventDispatcher | None = None,
    ):
        """
        Initialize the input stream.

        Args:
            upstream: Output stream to connect to (forcibly)
            config: Pipe configuration (buffer size)
            dispatcher: Event dispatcher for lifecycle events
        """
        super().__init__(dispatcher)
        self.config = config or PipeConfig()
        self._buffer = BoundedBuffer(self.config.buffer_size)
        self._upstream: PipedOutputStream | None = None

        if upstream is not None:
            self.connect(upstream, force=True)

    @property
    def upstream(self) -> PipedOutputStream | None:
        return self._upstream

    @property
    def buffer_size(self) -> int:
        return self._buffer.capacity

    def connect(
        self,
        upstream: PipedOutputStream,
        force: bool = False,
        reverse: bool = True,
    ) -> PipedInputStream:
        """
        Connect to an output stream.

        Args:
            upstream: Output stream to connect to
            force: Replace an existing, open connection
            reverse: Also connect ``upstream`` back to this stream

        Raises:
            AlreadyConnected: If connected and open, and ``force`` is False
        """
        if not isinstance(upstream, PipedOutputStream):
            raise TypeError(
                f"upstream must be a PipedOutputStream, got {type(upstream).__name__}"
            )

        self.dispatch(self.EVENT_CONNECT_BEFORE)

        with self._state_lock:
            if not force and self._upstream is not None and not self._closed:
                raise AlreadyConnected()
            self._upstream = upstream
            self._closed = False

        logger.debug("stream_connected", end="input", force=force, reverse=reverse)

        if reverse:
            upstream.connect(self, force=True, reverse=False)

        return self

    def _upstream_closed(self) -> bool:
        upstream = self._upstream
        return upstream is not None and upstream.closed

    def read(self, length: int = 1) -> bytes:
        """
        Read up to ``length`` bytes, blocking while the buffer is empty.

        Returns early with fewer bytes once the buffer is drained and
        the upstream is closed.

        Returns:
            The bytes read; ``b""`` means end of stream
        """
        if length <= 0:
            return b""

        data = bytearray()
        with self._buffer as buffer:
            for _ in range(length):
                while buffer.empty and not self._upstream_closed():
                    buffer.wait()

                if buffer.empty:
                    break

                data.append(buffer.popleft())
                buffer.notify_all()

        return bytes(data)

    def receive(self, data: bytes) -> PipedInputStream:
        """
        Buffer bytes from the upstream, blocking while the buffer is full.

        If this stream is closed while the buffer is full, the bytes
        not yet buffered are dropped: nobody is left to read them.
        """
        dropped = 0
        with self._buffer as buffer:
            for index, unit in enumerate(data):
                while buffer.full and not self._closed:
                    buffer.wait()

                if buffer.full:
                    dropped = len(data) - index
                    break

                buffer.append(unit)
                buffer.notify_all()

        if dropped:
            logger.debug("receive_dropped", count=dropped)
        return self

    def notify_waiters(self) -> None:
        """Wake every thread blocked on the buffer."""
        with self._buffer as buffer:
            buffer.notify_all()

    def close(self) -> PipedInputStream:
        """
        Close the stream and wake blocked writers.

        Writers are woken even when a close listener raises; the
        listener's error still reaches the caller.

        Raises:
            AlreadyClosed: If the stream is already closed
        """
        super().close()

        try:
            self.dispatch(self.EVENT_CLOSE_NOTIFY_BEFORE)
        finally:
            self.notify_waiters()

        logger.debug("stream_closed", end="input")
        return self

    def available(self) -> int:
        with self._buffer as buffer:
            return len(buffer)


class PipedOutputStream(OutputStream):
    """
    Sending end of a pipe.

    Writes are handed to the connected input stream one byte at a
    time; the writing thread blocks while the pipe buffer is full.
    """

    # Name of the event dispatched before each byte is handed downstream.
    EVENT_WRITE_RECEIVE_BEFORE = "write.receive.before"

    # Name of the event dispatched before close() wakes blocked readers.
    EVENT_CLOSE_NOTIFY_BEFORE = "close.notify.before"

    def __init__(
        self,
        downstream: PipedInputStream | None = None,
        *,
        dispatcher: EventDispatcher | None = None,
    ):
        """
        Initialize the output stream.

        Args:
            downstream: Input stream to connect to (forcibly)
            dispatcher: Event dispatcher for lifecycle events
        """
        super().__init__(dispatcher)
        self._downstream: PipedInputStream | None = None

        if downstream is not None:
            # The downstream connects back to this stream in reverse.
            downstream.connect(self, force=True)

    @property
    def downstream(self) -> PipedInputStream | None:
        return self._downstream

    def connect(
        self,
        downstream: PipedInputStream,
        force: bool = False,
        reverse: bool = True,
    ) -> PipedOutputStream:
        """
        Connect to an input stream.

        Args:
            downstream: Input stream to connect to
            force: Replace an existing, open connection
            reverse: Also connect ``downstream`` back to this stream

        Raises:
            AlreadyConnected: If connected and open, and ``force`` is False
        """
        if not isinstance(downstream, PipedInputStream):
            raise TypeError(
                f"downstream must be a PipedInputStream, got {type(downstream).__name__}"
            )

        self.dispatch(self.EVENT_CONNECT_BEFORE)

        with self._state_lock:
            if not force and self._downstream is not None and not self._closed:
                raise AlreadyConnected()
            self._downstream = downstream
            self._closed = False

        logger.debug("stream_connected", end="output", force=force, reverse=reverse)

        if reverse:
            downstream.connect(self, force=True, reverse=False)

        return self

    def write(self, data: bytes) -> int:
        """
        Write bytes to the downstream.

        Returns:
            Number of bytes handed to the downstream

        Raises:
            StreamClosed: If this stream is closed
            NotConnected: If no downstream is connected
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"data must be bytes-like, got {type(data).__name__}")

        if self._closed:
            raise StreamClosed()

        downstream = self._downstream
        if downstream is None:
            raise NotConnected()

        data = bytes(data)
        for index in range(len(data)):
            self.dispatch(self.EVENT_WRITE_RECEIVE_BEFORE)
            downstream.receive(data[index:index + 1])

        return len(data)

    def close(self) -> PipedOutputStream:
        """
        Close the stream and wake readers blocked on the downstream.

        Readers are woken even when a close listener raises.

        Raises:
            AlreadyClosed: If the stream is already closed
        """
        super().close()
        downstream = self._downstream

        try:
            self.dispatch(self.EVENT_CLOSE_NOTIFY_BEFORE)
        finally:
            if downstream is not None:
                downstream.notify_waiters()

        logger.debug("stream_closed", end="output")
        return self


def create_pipe(
    config: PipeConfig | None = None,
    dispatcher: EventDispatcher | None = None,
) -> tuple[PipedInputStream, PipedOutputStream]:
    """
    Create a connected pipe.

    Args:
        config: Pipe configuration
        dispatcher: Event dispatcher shared by both ends

    Returns:
        ``(input_stream, output_stream)``
    """
    reader = PipedInputStream(config=config, dispatcher=dispatcher)
    writer = PipedOutputStream(reader, dispatcher=dispatcher)
    return reader, writer
