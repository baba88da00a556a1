import threading
import time

from src.pickup_system.pickup_system.common.locks import KeyedLock


def test_same_key_is_serialized():
    locks = KeyedLock()
    active = []
    overlaps = []

    def work():
        with locks.hold(10):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []


def test_different_keys_do_not_block_each_other():
    locks = KeyedLock()
    entered = threading.Event()

    with locks.hold(10):
        def other():
            with locks.hold(11):
                entered.set()

        t = threading.Thread(target=other)
        t.start()
        assert entered.wait(1)
        t.join()


def test_unused_locks_are_dropped():
    locks = KeyedLock()
    with locks.hold(10):
        assert len(locks) == 1

    assert len(locks) == 0
