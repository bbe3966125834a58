"""
=============================================================================
WORKER THREAD POOL
=============================================================================

The accept loop must never block on a slow client, so each accepted
connection is queued and picked up by a worker thread:

    accept loop ──put──► [ queue ] ──get──► Worker-0 ─► process(conn)
                                    ──get──► Worker-1 ─► process(conn)
                                    ──get──► Worker-N ─► process(conn)

Connections are independent of each other; within one connection the
worker runs read → parse → handle → write → close strictly in sequence.

=============================================================================
BACKPRESSURE
=============================================================================

The queue is bounded. When every worker is busy and the queue is full,
submit() returns False immediately and the server answers 503 instead of
letting memory grow without limit.

=============================================================================
SHUTDOWN
=============================================================================

shutdown() waits (bounded) for queued tasks, then puts one None "poison
pill" per worker on the queue. A worker that takes a pill exits.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Pulls tasks off the shared queue until it receives None."""

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self) -> None:
        logger.debug(f"Worker {self.worker_id} started")
        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute(task)
            finally:
                self.task_queue.task_done()
        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute(self, task: Task) -> None:
        self.state = WorkerState.BUSY
        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
        except Exception:
            # A failing task must not take the worker down with it
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id}: task failed")
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size pool of worker threads fed by a bounded queue.

    Usage:
        pool = ThreadPool(workers=4)
        pool.start()
        pool.submit(process_connection, args=(conn,))
        ...
        pool.shutdown()
    """

    def __init__(self, workers: int = 8, queue_size: int = 100):
        self.num_workers = workers
        self.max_queue_size = queue_size
        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutting_down = False

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting thread pool with {self.num_workers} workers")
            for worker_id in range(self.num_workers):
                worker = Worker(self._task_queue, worker_id)
                worker.start()
                self._workers.append(worker)
            self._started = True
            self._shutting_down = False

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None) -> bool:
        """
        Queue func(*args, **kwargs) without blocking.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started or self._shutting_down:
            raise RuntimeError("Thread pool is not running")
        try:
            self._task_queue.put_nowait(Task(func=func, args=args, kwargs=kwargs or {}))
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """
        Stop all workers.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound on that wait, in seconds.
        """
        with self._lock:
            if not self._started:
                return
            self._shutting_down = True

        logger.info("Shutting down thread pool...")

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Thread pool shutdown timed out, stopping workers")
                    break
                time.sleep(0.05)

        for _ in self._workers:
            try:
                self._task_queue.put(None, timeout=1.0)
            except queue.Full:
                logger.warning("Queue full, a worker may not receive its stop signal")
                break
        for worker in self._workers:
            worker.join(timeout=2.0)

        with self._lock:
            self._workers.clear()
            self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def queued(self) -> int:
        return self._task_queue.qsize()

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def stats(self) -> dict:
        return {
            "workers": len(self._workers),
            "busy": self.busy_workers,
            "queued": self.queued,
            "completed": sum(w.tasks_completed for w in self._workers),
            "failed": sum(w.tasks_failed for w in self._workers),
        }
