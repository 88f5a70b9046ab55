"""
=============================================================================
READER-WRITER LOCK
=============================================================================

Python's threading module ships Lock, RLock, Condition, Semaphore and Event,
but no reader-writer lock. This module builds one on top of a Condition.

=============================================================================
WHY NOT A PLAIN LOCK?
=============================================================================

Most requests only READ (viewing the feed, viewing a post). Reads don't
conflict with each other, only with writes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHO MAY RUN TOGETHER?                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                    │  reader holding  │  writer holding             │
    │   ─────────────────┼──────────────────┼─────────────────            │
    │   reader arrives   │  YES (shared)    │  NO, waits                  │
    │   writer arrives   │  NO, waits       │  NO, waits                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A plain Lock would serialize reads too. With the GIL this isn't about CPU
parallelism; it stops one slow client render from blocking every other
page view.

=============================================================================
WRITER PREFERENCE
=============================================================================

A naive RW lock lets new readers in whenever any reader holds the lock.
Under a steady stream of feed views the reader count never drops to zero
and a writer waits forever (writer starvation).

This lock counts waiting writers. While any writer waits, new readers
queue up behind it:

    time ──────────────────────────────────────────────────────────────►

    R1  ████████████
    R2      ██████████████
    W1         ·······waits·······████████
    R3            ·········waits··········█████   (arrived after W1)

The flip side is that a thread already holding a read lock must never ask
for it again: if a writer is waiting in between, it deadlocks. Nothing in
this codebase nests lock acquisitions.

=============================================================================
INTERVIEW QUESTIONS ABOUT RW LOCKS
=============================================================================

Q: "Reader preference or writer preference?"
A: "Writer preference when writes must not starve. Reader preference
   maximizes read throughput but can block writers indefinitely."

Q: "Why notify_all() instead of notify()?"
A: "Waiters are of two kinds. notify() might wake a reader when only a
   writer can proceed, and the wakeup is lost. notify_all() lets every
   waiter recheck its own condition."

=============================================================================
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Writer-preferring reader-writer lock.

    Usage:
        lock = ReadWriteLock()

        with lock.read_locked():
            ...  # any number of threads at once

        with lock.write_locked():
            ...  # exactly one thread, no readers

    Not reentrant, in either mode.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0            # threads currently holding a read lock
        self._writer = False         # a thread currently holds the write lock
        self._writers_waiting = 0    # threads blocked in acquire_write()

    # ─────────────────────────────────────────────────────────────────────
    # SHARED (READ) SIDE
    # ─────────────────────────────────────────────────────────────────────

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() without matching acquire_read()")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    # ─────────────────────────────────────────────────────────────────────
    # EXCLUSIVE (WRITE) SIDE
    # ─────────────────────────────────────────────────────────────────────

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() without matching acquire_write()")
            self._writer = False
            self._cond.notify_all()

    # ─────────────────────────────────────────────────────────────────────
    # CONTEXT MANAGERS
    # ─────────────────────────────────────────────────────────────────────

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    # ─────────────────────────────────────────────────────────────────────
    # INTROSPECTION (monitoring and tests)
    # ─────────────────────────────────────────────────────────────────────

    @property
    def readers(self) -> int:
        with self._cond:
            return self._readers

    @property
    def write_locked_now(self) -> bool:
        with self._cond:
            return self._writer

    @property
    def writers_waiting(self) -> int:
        with self._cond:
            return self._writers_waiting
