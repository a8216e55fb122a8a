from __future__ import annotations

import threading
import time

from homeschool_attendance.attendance.locks import KeyedLocks


def test_same_key_is_serialized():
    locks = KeyedLocks()
    order = []

    def worker(name: str):
        with locks.hold([("s1", "2025-2026")]):
            order.append(f"{name}-start")
            time.sleep(0.02)
            order.append(f"{name}-end")

    threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # No interleaving: each start is directly followed by its own end.
    assert order[0].split("-")[0] == order[1].split("-")[0]
    assert order[2].split("-")[0] == order[3].split("-")[0]


def test_overlapping_batches_do_not_deadlock():
    locks = KeyedLocks()
    a, b = ("s1", "2025-2026"), ("s2", "2025-2026")
    done = []

    def worker(keys):
        for _ in range(50):
            with locks.hold(keys):
                pass
        done.append(True)

    threads = [threading.Thread(target=worker, args=(k,)) for k in ([a, b], [b, a])]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert done == [True, True]


def test_duplicate_keys_are_held_once():
    locks = KeyedLocks()
    key = ("s1", "2025-2026")
    with locks.hold([key, key]):
        pass
    assert len(locks) == 1
