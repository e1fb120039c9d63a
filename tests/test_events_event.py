import threading

import pytest

from threadkit.errors import ArgumentNotFound
from threadkit.events import Event


def test_propagation_latch_is_one_way():
    event = Event()
    assert not event.is_propagation_stopped()

    assert event.stop_propagation() is event
    assert event.is_propagation_stopped()

    event.stop_propagation()
    assert event.is_propagation_stopped()


def test_stop_propagation_waits_for_event_lock():
    event = Event()
    stopper = threading.Thread(target=event.stop_propagation)

    with event._lock:
        stopper.start()
        stopper.join(timeout=0.1)
        assert stopper.is_alive()
        assert not event._propagation_stopped

    stopper.join(timeout=2)
    assert not stopper.is_alive()
    assert event.is_propagation_stopped()


def test_stop_propagation_from_many_threads():
    event = Event()
    threads = [threading.Thread(target=event.stop_propagation) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=2)

    assert event.is_propagation_stopped()


def test_subject_is_optional():
    subject = object()
    assert Event(subject).get_subject() is subject
    assert Event().get_subject() is None


def test_arguments():
    event = Event(arguments={"a": 1})
    assert event.has_argument("a")
    assert event.get_argument("a") == 1

    assert event.set_argument("b", None) is event
    assert event.has_argument("b")
    assert event.get_argument("b") is None
    assert event.get_arguments() == {"a": 1, "b": None}


def test_get_missing_argument_raises():
    event = Event()
    with pytest.raises(ArgumentNotFound) as excinfo:
        event.get_argument("missing")
    assert excinfo.value.key == "missing"
    assert str(excinfo.value) == 'Argument "missing" not found.'
    # Also catchable as a plain KeyError
    with pytest.raises(KeyError):
        event.get_argument("missing")


def test_set_arguments_replaces_mapping_and_returns_copies():
    source = {"x": 1}
    event = Event(arguments=source)
    source["y"] = 2
    assert not event.has_argument("y")

    event.set_arguments({"z": 3})
    assert not event.has_argument("x")
    copy = event.get_arguments()
    copy["w"] = 4
    assert event.get_arguments() == {"z": 3}
