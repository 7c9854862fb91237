"""
Cancellable one-shot tasks keyed by seat id.

A single daemon worker sleeps on a condition variable until the earliest
deadline, instead of one timer thread per reserved seat (a stadium event
can hold tens of thousands of reservations at once).

Cancelled entries stay in the heap and are skipped when popped; the
`_pending` map is the authority on which task is live for a key. Once dead
entries outnumber live ones (and COMPACT_MIN_DEAD), the heap is rebuilt
without them.

Callbacks run on the worker thread, outside the scheduler lock, so they are
free to take store locks and to call back into schedule()/cancel().
Callers that need deterministic firing (tests) inject a clock and call
run_due() themselves without starting the worker.
"""

import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional

from billetter.core.logging import get_logger
from billetter.core.metrics import active_reservations

logger = get_logger(__name__)

COMPACT_MIN_DEAD = 64


@dataclass(order=True)
class _Task:
    deadline: float
    seq: int
    key: Hashable = field(compare=False)
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ReservationScheduler:

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._cond = threading.Condition()
        self._heap: List[_Task] = []
        self._pending: Dict[Hashable, _Task] = {}
        self._dead = 0
        self._seq = itertools.count()
        self._worker: Optional[threading.Thread] = None
        self._stopping = False

    def schedule(self, key: Hashable, delay: float, callback: Callable[[], None]) -> None:
        """Run `callback` after `delay` seconds, replacing any pending task for `key`."""
        with self._cond:
            previous = self._pending.pop(key, None)
            if previous is not None:
                self._discard(previous)
            task = _Task(self._clock() + delay, next(self._seq), key, callback)
            self._pending[key] = task
            heapq.heappush(self._heap, task)
            active_reservations.set(len(self._pending))
            # Wake the worker if this is now the earliest deadline
            if self._heap[0] is task:
                self._cond.notify()

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending task for `key`. Returns False if nothing was pending."""
        with self._cond:
            task = self._pending.pop(key, None)
            if task is None:
                return False
            self._discard(task)
            active_reservations.set(len(self._pending))
            return True

    def is_pending(self, key: Hashable) -> bool:
        with self._cond:
            return key in self._pending

    def pending_count(self) -> int:
        with self._cond:
            return len(self._pending)

    def run_due(self) -> int:
        """Fire every task whose deadline has passed. Returns how many fired."""
        with self._cond:
            due = self._pop_due()
        for task in due:
            try:
                task.callback()
            except Exception:
                logger.exception("reservation_callback_failed", key=task.key)
        return len(due)

    def _pop_due(self) -> List[_Task]:
        # Caller holds self._cond
        now = self._clock()
        due = []
        while self._heap and (self._heap[0].cancelled or self._heap[0].deadline <= now):
            task = heapq.heappop(self._heap)
            if task.cancelled:
                self._dead -= 1
                continue
            del self._pending[task.key]
            due.append(task)
        if due:
            active_reservations.set(len(self._pending))
        return due

    def _discard(self, task: _Task) -> None:
        # Caller holds self._cond
        task.cancelled = True
        self._dead += 1
        if self._dead > max(COMPACT_MIN_DEAD, len(self._pending)):
            self._heap = [t for t in self._heap if not t.cancelled]
            heapq.heapify(self._heap)
            self._dead = 0

    def _next_wait(self) -> Optional[float]:
        # Caller holds self._cond
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
            self._dead -= 1
        if not self._heap:
            return None
        return max(self._heap[0].deadline - self._clock(), 0.0)

    def start(self) -> None:
        with self._cond:
            if self._worker is not None:
                return
            self._stopping = False
            self._worker = threading.Thread(
                target=self._run, name="reservation-scheduler", daemon=True
            )
            self._worker.start()
        logger.info("reservation_scheduler_started")

    def stop(self, timeout: float = 5.0) -> None:
        with self._cond:
            worker = self._worker
            if worker is None:
                return
            self._stopping = True
            self._cond.notify()
        worker.join(timeout)
        with self._cond:
            self._worker = None
        logger.info("reservation_scheduler_stopped", pending=self.pending_count())

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._stopping:
                    wait = self._next_wait()
                    if wait == 0.0:
                        break
                    self._cond.wait(wait)
                if self._stopping:
                    return
            self.run_due()
