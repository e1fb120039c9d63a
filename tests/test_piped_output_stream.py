import pytest

from threadkit.errors import (
    AlreadyClosed,
    AlreadyConnected,
    InvalidRange,
    NotConnected,
    StreamClosed,
    StreamError,
)
from threadkit.events import EventDispatcher
from threadkit.stream import PipedInputStream, PipedOutputStream, create_pipe


def test_constructor_connects_downstream():
    downstream = PipedInputStream()
    stream = PipedOutputStream(downstream)

    assert stream.downstream is downstream
    assert downstream.upstream is stream
    assert not stream.closed


def test_constructor_without_downstream():
    stream = PipedOutputStream()
    assert stream.downstream is None
    assert not stream.closed


def test_connect_and_reconnect():
    downstream = PipedInputStream()
    stream = PipedOutputStream()
    assert stream.connect(downstream) is stream
    assert downstream.upstream is stream

    with pytest.raises(AlreadyConnected):
        stream.connect(PipedInputStream())

    other = PipedInputStream()
    stream.connect(other, force=True)
    assert stream.downstream is other
    assert other.upstream is stream


def test_connect_rejects_wrong_end():
    with pytest.raises(TypeError):
        PipedOutputStream().connect(PipedOutputStream())


def test_reverse_connect_calls_downstream_connect(marker_listener):
    downstream = PipedInputStream()
    listener = marker_listener()
    downstream.set_event_dispatcher(EventDispatcher()).add_listener(
        downstream.EVENT_CONNECT_BEFORE, listener.mark
    )

    PipedOutputStream().connect(downstream)
    assert listener.markers == [listener]


def test_closed_stream_may_be_reconnected_without_force():
    downstream = PipedInputStream()
    stream = PipedOutputStream(downstream)
    stream.close()

    stream.connect(downstream)
    assert not stream.closed


def test_write_hands_bytes_downstream():
    reader, writer = create_pipe()

    assert writer.write(b"hello") == 5
    assert writer.write(bytearray(b" ")) == 1
    assert writer.write(memoryview(b"pipe")) == 4

    assert reader.available() == 10
    assert reader.read(10) == b"hello pipe"


def test_write_dispatches_event_per_byte(marker_listener):
    reader, writer = create_pipe()
    listener = marker_listener()
    writer.set_event_dispatcher(EventDispatcher()).add_listener(
        writer.EVENT_WRITE_RECEIVE_BEFORE, listener.mark
    )

    writer.write(b"abc")
    assert len(listener.markers) == 3

    writer.write(b"")
    assert len(listener.markers) == 3


def test_write_to_closed_stream_fails():
    reader, writer = create_pipe()
    writer.close()

    with pytest.raises(StreamClosed, match="Can't write to a closed stream."):
        writer.write(b"x")


def test_write_without_downstream_fails():
    with pytest.raises(NotConnected):
        PipedOutputStream().write(b"x")


def test_write_rejects_text():
    reader, writer = create_pipe()
    with pytest.raises(TypeError):
        writer.write("text")


def test_stream_errors_are_os_errors():
    with pytest.raises(OSError):
        PipedOutputStream().write(b"x")
    assert issubclass(AlreadyClosed, StreamError)


@pytest.mark.parametrize(
    "offset, length, expected",
    [
        (-3, 3, b"llo"),
        (0, -1, b"hell"),
        (0, 5, b"hello"),
        (1, 2, b"el"),
        (3, 100, b"lo"),
    ],
)
def test_write_substring(offset, length, expected):
    reader, writer = create_pipe()

    assert writer.write_substring(b"hello", offset, length) == len(expected)
    assert reader.read(len(expected)) == expected
    assert reader.available() == 0


@pytest.mark.parametrize("offset, length", [(5, 1), (0, 0), (0, -5), (9, 1), (0, None)])
def test_write_substring_rejects_invalid_range(offset, length):
    reader, writer = create_pipe()

    with pytest.raises(InvalidRange):
        writer.write_substring(b"hello", offset, length)
    assert reader.available() == 0


def test_flush_is_noop():
    reader, writer = create_pipe()
    assert writer.flush() is writer
    assert reader.available() == 0


def test_close_dispatches_notify_event(marker_listener):
    reader, writer = create_pipe()
    listener = marker_listener()
    writer.set_event_dispatcher(EventDispatcher()).add_listener(
        writer.EVENT_CLOSE_NOTIFY_BEFORE, listener.mark
    )

    assert writer.close() is writer
    assert writer.closed
    assert listener.markers == [listener]

    with pytest.raises(AlreadyClosed):
        writer.close()
    assert writer.closed
    assert listener.markers == [listener]


def test_close_unconnected_stream():
    stream = PipedOutputStream()
    stream.close()
    assert stream.closed


def test_context_manager_closes_writer():
    reader, writer = create_pipe()
    with writer:
        writer.write(b"ok")
    assert writer.closed
    assert reader.read(5) == b"ok"


def test_shared_dispatcher_sees_both_ends():
    dispatcher = EventDispatcher()
    seen = []
    dispatcher.add_listener(
        PipedOutputStream.EVENT_CONNECT_BEFORE,
        lambda event, name, d: seen.append(type(event.get_subject()).__name__),
    )

    create_pipe(dispatcher=dispatcher)

    # output constructor -> input.connect -> reverse output.connect
    assert seen == ["PipedInputStream", "PipedOutputStream"]
