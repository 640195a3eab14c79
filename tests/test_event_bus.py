from match3.events.bus import EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)
        received["sender"] = sender

    bus.subscribe("test", handler)
    bus.emit("test", value=42, msg="hello")

    assert received["value"] == 42
    assert received["msg"] == "hello"
    assert received["sender"] is bus


def test_event_bus_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    bus.subscribe("test", handler)
    bus.emit("test", n=1)
    bus.unsubscribe("test", handler)
    bus.emit("test", n=2)

    assert calls == [{"n": 1}]


def test_emit_without_subscribers_is_a_no_op():
    bus = EventBus()
    bus.emit("nobody_listens", value=1)
    bus.unsubscribe("nobody_listens", lambda sender, **kwargs: None)


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe("test", lambda sender, **kwargs: order.append("first"))
    bus.subscribe("test", lambda sender, **kwargs: order.append("second"))
    bus.emit("test")
    assert order == ["first", "second"]
