"""
=============================================================================
WORKER THREAD POOL
=============================================================================

Connections are served by a fixed set of long-lived threads fed from a
bounded queue, instead of one new thread per connection.

    accept loop ──► submit(conn) ──► ┌──────────────────────┐
                                     │ queue (max_queue_size)│
                                     └──────────┬───────────┘
                        ┌───────────────────────┼────────────────────┐
                        ▼                       ▼                    ▼
                    Worker-0                Worker-1     ...     Worker-N
                  (min_workers at start, grows to max_workers under load)

    queue full    → submit(block=False) returns False → caller answers 503
    shutdown()    → one None ("poison pill") per worker; each exits on it

=============================================================================
HANDLERS AND THE GIL
=============================================================================

Handlers mostly wait on sockets, which releases the GIL, so threads give
real concurrency for this workload. Two requests touching the store at
the same moment are serialized by the store's ReadWriteLock, not by the
pool.

=============================================================================
COMMON INTERVIEW QUESTIONS
=============================================================================

Q: Why bound the queue?
A: An unbounded queue turns overload into unbounded memory and ever-growing
   latency. A bounded one turns it into fast 503s the client can retry.

Q: What if a task raises?
A: The worker logs it and takes the next task; one bad request must not
   shrink the pool.

Q: Why poison pills rather than a shared "stop" flag?
A: A worker blocked in queue.get() never looks at a flag. A None in the
   queue wakes exactly one worker and tells it to leave.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred call: func(*args, **kwargs).

    timeout, if set, is how long the task may sit in the queue; a task
    picked up later than that is dropped instead of run, and on_drop (if
    given) is called in its place so the owner can release resources.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    timeout: Optional[float] = None
    on_drop: Optional[Callable[[], Any]] = None
    submitted_at: float = field(default_factory=time.time)

    @property
    def is_stale(self) -> bool:
        return self.timeout is not None and time.time() - self.submitted_at > self.timeout


class Worker(threading.Thread):
    """
    Loop: get() a task, None means exit, otherwise run it and task_done().

    Exceptions from tasks are logged and counted; the worker carries on.
    """

    def __init__(
        self,
        task_queue: queue.Queue,
        worker_id: int,
        idle_timeout: float = 60.0
    ):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task) -> None:
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            if task.is_stale:
                logger.warning(
                    f"Task dropped after waiting {start_time - task.submitted_at:.2f}s "
                    f"(timeout {task.timeout}s)"
                )
                self.tasks_failed += 1
                if task.on_drop is not None:
                    task.on_drop()
                return

            task.func(*task.args, **task.kwargs)

            logger.debug(f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s")
            self.tasks_completed += 1

        except Exception as e:
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE

    def shutdown(self) -> None:
        self._shutdown.set()


class ThreadPool:
    """
    Bounded pool of Worker threads.

        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=100)
        pool.start()
        if not pool.submit(handle, args=(conn,), block=False):
            reject(conn)                   # queue full
        pool.shutdown(wait=True)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 60.0
    ):
        """
        Args:
            min_workers: Threads started by start() and kept for the pool's life.
            max_workers: Upper bound reached by scaling up under load.
            queue_size: Capacity of the pending-task queue.
            idle_timeout: How often an idle worker re-checks for shutdown.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # guards _workers and _next_worker_id
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    def start(self) -> None:
        """Start min_workers threads. Calling it twice is a no-op."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker_locked()

        self._started = True

    def _add_worker_locked(self) -> Worker:
        """Start one more worker. Caller holds self._lock."""
        if len(self._workers) >= self.max_workers:
            raise RuntimeError("Maximum workers reached")

        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
        block: bool = True,
        on_drop: Optional[Callable[[], Any]] = None,
    ) -> bool:
        """
        Queue func(*args, **kwargs).

        Args:
            timeout: Drop the task if it waits in the queue longer than this.
            block: Wait for room when the queue is full.
            on_drop: Called instead of func when the task is dropped as stale.

        Returns:
            True if queued, False if the queue stayed full.

        Raises:
            RuntimeError: The pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(
            func=func,
            args=args,
            kwargs=kwargs or {},
            timeout=timeout,
            on_drop=on_drop,
        )

        try:
            self._task_queue.put(task, block=block)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self) -> None:
        """One more worker when every worker is busy and tasks are waiting."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return

            busy = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._add_worker_locked()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish first. With wait=False they are
                  abandoned.
            timeout: Upper bound on that wait.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout else None
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for _ in workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                break  # the shutdown flag stops the rest

        for worker in workers:
            worker.shutdown()
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    # ─────────────────────────────────────────────────────────────────────
    # MONITORING
    # ─────────────────────────────────────────────────────────────────────

    @property
    def active_workers(self) -> int:
        return sum(1 for w in self._workers if w.state != WorkerState.STOPPED)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queue_size(self) -> int:
        """Tasks currently waiting (not the capacity; see max_queue_size)."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counters, as reported by /health."""
        return {
            "workers": {
                "total": len(self._workers),
                "active": self.active_workers,
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
