"""Pytest configuration and shared fixtures."""
import time

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "benchmark: mark test as benchmark")


class MarkerListener:
    """Listener that records itself in a shared list each time it is called."""

    def __init__(self, markers=None):
        self.markers = markers if markers is not None else []

    def mark(self, event, event_name, dispatcher):
        self.markers.append(self)


@pytest.fixture
def marker_listener():
    """Factory for marker listeners; pass a list to share markers."""
    return MarkerListener


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    def _wait_until(predicate, timeout=2.0):
        deadline = time.time() + timeout
        while time.time() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait_until
