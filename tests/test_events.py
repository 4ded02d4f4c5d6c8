from luahint.core.documents import TriggerEvent, scratch_document
from luahint.core.events import EventBus


def test_event_bus_invokes_subscribers():
    bus = EventBus()
    received = []
    bus.subscribe("topic", lambda payload: received.append(payload))
    bus.emit("topic", 42)
    assert received == [42]


def test_registration_covers_every_topic_and_cancels():
    bus = EventBus()
    received = []
    registration = bus.register(["CursorHold", "TextChanged", "CursorHold"], received.append)
    assert registration.topics == ("CursorHold", "TextChanged")

    bus.emit("CursorHold", 1)
    bus.emit("TextChanged", 2)
    registration.cancel()
    registration.cancel()
    bus.emit("CursorHold", 3)

    assert received == [1, 2]
    assert not registration.active
    assert bus.subscriber_count("CursorHold") == 0


def test_registration_scoped_to_document():
    bus = EventBus()
    first = scratch_document()
    second = scratch_document()
    received = []
    bus.register("TextChanged", lambda event: received.append(event.document), document_id=first.id)

    bus.emit("TextChanged", TriggerEvent("TextChanged", second))
    bus.emit("TextChanged", TriggerEvent("TextChanged", first))

    assert received == [first]


def test_same_handler_registered_twice_keeps_both_handles():
    bus = EventBus()
    received = []
    one = bus.register("topic", received.append)
    bus.register("topic", received.append)
    one.cancel()
    bus.emit("topic", "x")
    assert received == ["x"]


def test_cancel_during_emit_silences_handler():
    bus = EventBus()
    received = []
    later = None

    def first(payload):
        later.cancel()

    bus.register("topic", first)
    later = bus.register("topic", received.append)
    bus.emit("topic", "x")
    assert received == []
