"""
Tests for the reservation scheduler on its own, with a fake clock and with
the real worker thread.
"""

import threading

from billetter.services.reservation_scheduler import COMPACT_MIN_DEAD, ReservationScheduler


def test_tasks_fire_in_deadline_order(scheduler, clock):
    fired = []
    scheduler.schedule("b", 20, lambda: fired.append("b"))
    scheduler.schedule("a", 10, lambda: fired.append("a"))
    scheduler.schedule("c", 30, lambda: fired.append("c"))

    clock.advance(25)
    assert scheduler.run_due() == 2
    assert fired == ["a", "b"]
    assert scheduler.pending_count() == 1
    assert scheduler.is_pending("c")


def test_cancel_prevents_firing(scheduler, clock):
    fired = []
    scheduler.schedule(1, 5, lambda: fired.append(1))

    assert scheduler.cancel(1) is True
    assert scheduler.cancel(1) is False

    clock.advance(10)
    assert scheduler.run_due() == 0
    assert fired == []


def test_rescheduling_a_key_replaces_the_old_task(scheduler, clock):
    fired = []
    scheduler.schedule(1, 5, lambda: fired.append("old"))
    scheduler.schedule(1, 50, lambda: fired.append("new"))

    clock.advance(10)
    assert scheduler.run_due() == 0
    clock.advance(50)
    assert scheduler.run_due() == 1
    assert fired == ["new"]


def test_failing_callback_does_not_stop_the_others(scheduler, clock):
    fired = []

    def boom():
        raise RuntimeError("boom")

    scheduler.schedule(1, 1, boom)
    scheduler.schedule(2, 2, lambda: fired.append(2))

    clock.advance(5)
    assert scheduler.run_due() == 2
    assert fired == [2]


def test_worker_thread_fires_due_tasks():
    scheduler = ReservationScheduler()
    done = threading.Event()
    scheduler.start()
    try:
        scheduler.schedule("seat", 0.05, done.set)
        assert done.wait(timeout=5)
        assert scheduler.pending_count() == 0
    finally:
        scheduler.stop()


def test_worker_wakes_for_an_earlier_deadline():
    scheduler = ReservationScheduler()
    early = threading.Event()
    scheduler.start()
    try:
        scheduler.schedule("late", 60, lambda: None)
        scheduler.schedule("early", 0.05, early.set)
        assert early.wait(timeout=5)
        assert scheduler.is_pending("late")
    finally:
        scheduler.stop()


def test_stop_is_idempotent():
    scheduler = ReservationScheduler()
    scheduler.stop()
    scheduler.start()
    scheduler.stop()
    scheduler.stop()


def test_cancelled_tasks_do_not_pile_up(scheduler, clock):
    fired = []
    scheduler.schedule("keep", 100, lambda: fired.append("keep"))
    for key in range(500):
        scheduler.schedule(key, 50, lambda: fired.append("dead"))
        scheduler.cancel(key)

    assert len(scheduler._heap) <= COMPACT_MIN_DEAD + 1
    assert scheduler.pending_count() == 1

    clock.advance(101)
    assert scheduler.run_due() == 1
    assert fired == ["keep"]


def test_rescheduling_one_key_keeps_heap_bounded(scheduler, clock):
    fired = []
    for i in range(1000):
        scheduler.schedule("seat", 10, lambda i=i: fired.append(i))

    assert len(scheduler._heap) <= COMPACT_MIN_DEAD + 1

    clock.advance(11)
    assert scheduler.run_due() == 1
    assert fired == [999]
    assert scheduler._heap == []
