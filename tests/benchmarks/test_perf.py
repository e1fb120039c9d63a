"""Performance benchmarks using pytest-benchmark.

Run benchmarks:
    pytest tests/benchmarks/ --benchmark-only -v
"""
import threading

import pytest

from threadkit.stream import PipeConfig, create_pipe


@pytest.mark.benchmark(group="events")
def test_dispatch_hundred_listeners(benchmark, busy_dispatcher):
    """Benchmark: dispatch to 100 prioritized listeners."""
    event = benchmark(busy_dispatcher.dispatch, "bench")

    assert not event.is_propagation_stopped()


@pytest.mark.benchmark(group="events")
def test_add_listener_invalidates_order(benchmark, busy_dispatcher):
    """Benchmark: register then rebuild the dispatch order."""

    def listener(event, name, d):
        return None

    def register_and_sort():
        busy_dispatcher.add_listener("bench", listener, 5)
        return busy_dispatcher.get_listeners("bench")

    result = benchmark(register_and_sort)

    assert listener in result


@pytest.mark.benchmark(group="pipe")
def test_pipe_transfer_4k(benchmark):
    """Benchmark: move 4 KiB through a 256-byte pipe between two threads."""
    payload = b"x" * 4096

    def transfer():
        reader, writer = create_pipe(PipeConfig(buffer_size=256))
        producer = threading.Thread(target=writer.write, args=(payload,))
        producer.start()
        data = reader.read(len(payload))
        producer.join()
        return data

    result = benchmark(transfer)

    assert result == payload
