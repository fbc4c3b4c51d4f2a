from logitrack.sync.events import OrderChange, OrderEvents


def test_publish_reaches_every_listener():
    events = OrderEvents()
    first, second = [], []
    events.subscribe(first.append)
    events.subscribe(second.append)

    change = OrderChange("upsert", "srv-1", "LY-001")
    events.publish(change)

    assert first == [change]
    assert second == [change]


def test_unsubscribe_stops_delivery():
    events = OrderEvents()
    received = []
    unsubscribe = events.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    events.publish(OrderChange("delete", "srv-1"))

    assert received == []


def test_failing_listener_does_not_block_others(caplog):
    events = OrderEvents()
    received = []

    def broken(change):
        raise RuntimeError("listener down")

    events.subscribe(broken)
    events.subscribe(received.append)
    events.publish(OrderChange("upsert", "srv-2", "LY-002"))

    assert len(received) == 1
    assert "listener down" in caplog.text
