from src.pickup_system.pickup_system.notifications.hub import NotificationHub


def test_publish_reaches_every_subscriber():
    hub = NotificationHub()
    a = hub.subscribe()
    b = hub.subscribe()

    assert hub.publish({"n": 1}) == 2
    assert a.get(timeout=1) == {"n": 1}
    assert b.get(timeout=1) == {"n": 1}


def test_closed_subscriber_gets_nothing():
    hub = NotificationHub()
    with hub.subscribe():
        assert hub.subscriber_count == 1

    assert hub.subscriber_count == 0
    assert hub.publish({"n": 1}) == 0


def test_slow_subscriber_keeps_newest_payloads():
    hub = NotificationHub(queue_size=2)
    sub = hub.subscribe()

    for n in range(5):
        hub.publish(n)

    assert sub.get(timeout=1) == 3
    assert sub.get(timeout=1) == 4
    assert sub.get(timeout=0.01) is None


def test_listen_yields_heartbeat_when_idle():
    hub = NotificationHub()
    sub = hub.subscribe()
    stream = hub.listen(sub, heartbeat_seconds=0.01)

    assert next(stream) is None
    hub.publish("update")
    assert next(stream) == "update"

    sub.close()
    assert list(stream) == []
