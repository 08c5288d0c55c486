import queue
import threading
import time

from fzterm.sync import AtomicBool, EventBox

READ_NEW, READ_FIN, SEARCH_NEW, SEARCH_PROGRESS, SEARCH_FIN = range(5)


def test_atomic_bool():
    assert AtomicBool(True).get() is True
    assert AtomicBool(False).get() is False

    ab = AtomicBool(True)
    assert ab.set(False) is False
    assert ab.get() is False


def test_event_box():
    eb = EventBox()
    to_main: queue.Queue = queue.Queue()
    to_worker: queue.Queue = queue.Queue()

    def worker():
        eb.set(READ_NEW, 10)
        to_main.put(True)
        to_worker.get()
        eb.set(SEARCH_NEW, 10)
        eb.set(SEARCH_NEW, 15)
        eb.set(SEARCH_NEW, 20)
        eb.set(SEARCH_PROGRESS, 30)
        to_main.put(True)
        to_worker.get()
        eb.set(SEARCH_FIN, 40)
        to_main.put(True)
        to_worker.get()

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()

    count = 0
    total = 0
    looping = True
    seen = []

    def callback(events):
        nonlocal total, looping
        seen.append(sorted(events))
        for value in events.values():
            if isinstance(value, int):
                total += value
                looping = total < 100
        events.clear()

    while looping:
        to_main.get(timeout=5)
        eb.wait(callback)
        to_worker.put(True)
        count += 1

    thread.join(timeout=5)
    assert count == 3
    assert total == 100
    assert seen == [[READ_NEW], [SEARCH_NEW, SEARCH_PROGRESS], [SEARCH_FIN]]
    assert eb.peek(SEARCH_FIN) is False
    assert eb.peek(READ_NEW) is False


def test_peek():
    eb = EventBox()
    assert eb.peek(READ_FIN) is False
    eb.set(READ_FIN, None)
    assert eb.peek(READ_FIN) is True


def test_wait_for():
    eb = EventBox()

    def setter():
        time.sleep(0.05)
        eb.set(SEARCH_FIN, 1)

    thread = threading.Thread(target=setter, daemon=True)
    thread.start()
    eb.wait_for(SEARCH_FIN)
    thread.join(timeout=5)
    assert eb.peek(SEARCH_FIN) is True