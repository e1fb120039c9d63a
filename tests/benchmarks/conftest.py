"""Benchmark fixtures and configuration."""
import pytest

from threadkit.events import EventDispatcher


@pytest.fixture
def busy_dispatcher():
    """Dispatcher with 100 listeners spread over 10 priorities."""
    dispatcher = EventDispatcher()
    for i in range(100):
        dispatcher.add_listener("bench", lambda event, name, d: None, i % 10)
    return dispatcher
