"""
=============================================================================
THREAD POOL IMPLEMENTATION
=============================================================================

A fixed set of long-lived worker threads pulling tasks from one shared
queue. The accept loop submits one task per connection; the pool size is
the upper bound on connections being handled at the same time.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(task) ──►  ┌───────────────────────────────┐                │
    │                     │  queue.Queue()  (no maxsize)  │                │
    │                     └──────┬──────────┬─────────┬───┘                │
    │                            │          │         │                    │
    │                            ▼          ▼         ▼                    │
    │                       Worker-0   Worker-1 ... Worker-(N-1)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUEUEING, NOT REJECTION
=============================================================================

The queue has no size limit. When all N workers are busy, new tasks wait
in the queue until a worker frees up; submit() never blocks and never
refuses work. There is no admission control.

=============================================================================
TASK ISOLATION
=============================================================================

A task that raises is logged and counted; the worker that ran it goes back
to the queue. One failing connection cannot stop a sibling worker or the
accept loop.

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
    """
    Worker thread states.

    Used for monitoring and debugging the thread pool.
    """
    IDLE = "idle"      # Waiting for task
    BUSY = "busy"      # Executing task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred function call: "call this function with these arguments later".

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        submitted_at: Time the task was queued (for wait-time logging).
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

    Loop:
        1. Block on queue.get()
        2. None is the poison pill → exit
        3. Run the task, catching anything it raises
        4. task_done(), back to 1
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int):
        """
        Args:
            task_queue: Queue to pull tasks from.
            worker_id: Identifier used in the thread name and logs.
        """
        # daemon=True: process exit does not wait for in-flight tasks
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id

        self.state = WorkerState.IDLE

        # Metrics
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """Run one task with state tracking and exception isolation."""
        self.state = WorkerState.BUSY
        start_time = time.time()

        waited = start_time - task.submitted_at
        if waited > 1.0:
            logger.debug(f"Worker {self.worker_id} picked up task after {waited:.2f}s in queue")

        try:
            task.func(*task.args, **task.kwargs)

            elapsed = time.time() - start_time
            logger.debug(f"Worker {self.worker_id} completed task in {elapsed:.3f}s")
            self.tasks_completed += 1

        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool with an unbounded task queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ThreadPool Usage                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   pool = ThreadPool(num_workers=20)                                  │
    │   pool.start()                                                       │
    │                                                                      │
    │   pool.submit(handle_connection, args=(conn,))                       │
    │                                                                      │
    │   print(pool.stats)  # {"workers": {"busy": 3, ...}, ...}            │
    │                                                                      │
    │   pool.shutdown()                                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, num_workers: int = 20):
        """
        Args:
            num_workers: Number of worker threads, created once in start().
        """
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")

        self.num_workers = num_workers

        # queue.Queue is thread-safe; maxsize=0 means unbounded
        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue()

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects start/shutdown transitions
        self._started = False
        self._shutdown = False

    def start(self):
        """Create and start all worker threads."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.num_workers} workers")

            for worker_id in range(self.num_workers):
                worker = Worker(task_queue=self._task_queue, worker_id=worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> None:
        """
        Queue a task for the next free worker.

        Args:
            func: The function to execute.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}))

    def shutdown(self, wait: bool = False, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: If True, let queued tasks finish and join the workers.
                  If False, post poison pills and return immediately;
                  queued and in-flight tasks are abandoned to the daemon
                  threads.
            timeout: Per-worker join timeout when waiting.
        """
        with self._lock:
            if not self._started or self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        if not wait:
            # Drop what has not started yet
            while True:
                try:
                    self._task_queue.get_nowait()
                    self._task_queue.task_done()
                except queue.Empty:
                    break

        # ─────────────────────────────────────────────────────────────────
        # SEND POISON PILLS
        # ─────────────────────────────────────────────────────────────────
        # One None per worker; each worker exits when it takes one.
        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)

        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING: Check pool status
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        """Get count of busy workers."""
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        """Get count of idle workers."""
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def pending_tasks(self) -> int:
        """Get current task queue size."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counts, for logging and tests."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.pending_tasks,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
