import logging

import pytest

from delegates.core.delegate import DelegateType
from delegates.core.event import Event
from delegates.core.generics import Action, EventArgs, EventHandler
from delegates.errors.errors import DelegateSignatureError, EventAccessError

Notify = DelegateType("Notify", (str,), None)


class Publisher:
    changed = Event(Notify)
    standard = Event(EventHandler[EventArgs])

    def publish(self, message: str):
        return Publisher.changed._emit(self, message)

    def publish_isolated(self, message: str):
        return Publisher.changed._emit_isolated(self, message)

    def publish_standard(self):
        Publisher.standard._emit(self, self, EventArgs.EMPTY)


@pytest.fixture
def publisher() -> Publisher:
    return Publisher()


@pytest.fixture
def received() -> list:
    return []


def test_no_subscribers_is_a_no_op(publisher, caplog):
    with caplog.at_level(logging.DEBUG, logger="delegates.core.event"):
        assert publisher.publish("nobody home") is None
    assert len(publisher.changed) == 0
    assert "raised with no subscribers" in caplog.text


def test_no_subscribers_isolated_returns_empty(publisher):
    assert publisher.publish_isolated("nobody home") == []


@pytest.mark.parametrize("count", [0, 1, 2, 5])
def test_each_subscriber_invoked_once_in_order(publisher, count):
    calls: list[int] = []
    for i in range(count):
        publisher.changed += lambda msg, i=i: calls.append(i)
    publisher.publish("hello")
    assert calls == list(range(count))


def test_subscribe_and_unsubscribe_methods(publisher, received):
    def handler(message: str) -> None:
        received.append(message)

    publisher.changed.subscribe(handler)
    publisher.publish("one")
    publisher.changed.unsubscribe(handler)
    publisher.publish("two")
    assert received == ["one"]


def test_minus_equals_removes_named_handler(publisher, received):
    def named(message: str) -> None:
        received.append(f"named:{message}")

    publisher.changed += named
    publisher.changed += lambda message: received.append(f"lambda:{message}")
    publisher.changed -= named
    publisher.publish("hi")
    assert received == ["lambda:hi"]


def test_unsubscribing_unknown_handler_is_ignored(publisher):
    publisher.changed -= print
    assert len(publisher.changed) == 0


def test_slots_are_per_instance(received):
    first, second = Publisher(), Publisher()
    first.changed += received.append
    second.publish("ignored")
    first.publish("seen")
    assert received == ["seen"]


def test_assignment_from_outside_is_rejected(publisher):
    with pytest.raises(EventAccessError) as excinfo:
        publisher.changed = print
    assert excinfo.value.event == "Publisher.changed"


def test_assigning_another_instances_slot_is_rejected(publisher):
    other = Publisher()
    with pytest.raises(EventAccessError):
        publisher.changed = other.changed


def test_deleting_the_slot_is_rejected(publisher):
    with pytest.raises(EventAccessError):
        del publisher.changed


def test_raising_from_outside_is_rejected(publisher, received):
    publisher.changed += received.append
    with pytest.raises(EventAccessError):
        publisher.changed("not allowed")
    assert received == []


def test_handler_with_wrong_signature_is_rejected(publisher):
    with pytest.raises(DelegateSignatureError):
        publisher.changed += lambda: None


def test_failing_subscriber_aborts_combined_raise(publisher, received):
    def boom(message: str) -> None:
        raise ValueError("subscriber failed")

    publisher.changed += received.append
    publisher.changed += boom
    publisher.changed += received.append
    with pytest.raises(ValueError):
        publisher.publish("x")
    assert received == ["x"]


def test_failing_subscriber_isolated(publisher, received):
    def boom(message: str) -> None:
        raise ValueError("subscriber failed")

    publisher.changed += received.append
    publisher.changed += boom
    publisher.changed += received.append
    results = publisher.publish_isolated("x")
    assert received == ["x", "x"]
    assert [r.ok for r in results] == [True, False, True]


def test_unsubscribe_during_raise_uses_snapshot(publisher, received):
    def first(message: str) -> None:
        received.append("first")
        publisher.changed -= second

    def second(message: str) -> None:
        received.append("second")

    publisher.changed += first
    publisher.changed += second
    publisher.publish("x")
    assert received == ["first", "second"]
    received.clear()
    publisher.publish("x")
    assert received == ["first"]


def test_standard_event_passes_sender_and_args(publisher):
    seen = []
    publisher.standard += lambda sender, args: seen.append((sender, args))
    publisher.publish_standard()
    assert seen == [(publisher, EventArgs.EMPTY)]


def test_class_access_returns_descriptor():
    assert isinstance(Publisher.changed, Event)
    assert Publisher.changed.qualname == "Publisher.changed"
    assert Publisher.changed.handler_type is Notify


def test_event_with_generic_action():
    class Counter:
        ticked = Event(Action[int])

        def tick(self, n: int) -> None:
            Counter.ticked._emit(self, n)

    counter = Counter()
    totals = []
    counter.ticked += totals.append
    counter.tick(3)
    assert totals == [3]


def test_event_has_no_public_raise_method(publisher, received):
    publisher.changed += received.append
    public = [name for name in dir(Publisher.changed) if not name.startswith("_")]
    assert public == [
        "handler_type",
        "handlers",
        "name",
        "owner_name",
        "qualname",
        "subscribe",
        "unsubscribe",
    ]
    with pytest.raises(AttributeError):
        Publisher.changed.emit(publisher, "spoofed from outside")
    with pytest.raises(AttributeError):
        publisher.changed.emit("spoofed from outside")
    assert received == []
