"""
Unit tests for the worker pool.
"""

import threading
import time

import pytest

from homeserve.core.thread_pool import ThreadPool


def wait_for(predicate, timeout: float = 5.0) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def pool():
    pool = ThreadPool(num_workers=2)
    pool.start()
    yield pool
    pool.shutdown(wait=True, timeout=5.0)


class TestThreadPoolLifecycle:
    """Tests for creating, starting and stopping the pool."""

    @pytest.mark.parametrize("num_workers", [0, -3])
    def test_rejects_empty_pool(self, num_workers):
        with pytest.raises(ValueError):
            ThreadPool(num_workers=num_workers)

    def test_submit_before_start_raises(self):
        with pytest.raises(RuntimeError):
            ThreadPool(num_workers=1).submit(print)

    def test_submit_after_shutdown_raises(self):
        pool = ThreadPool(num_workers=1)
        pool.start()
        pool.shutdown(wait=True, timeout=5.0)

        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_creates_exactly_n_workers(self):
        """Test the worker count is fixed at start and does not grow."""
        pool = ThreadPool(num_workers=3)
        pool.start()
        pool.start()

        try:
            assert pool.stats["workers"]["total"] == 3
        finally:
            pool.shutdown(wait=True, timeout=5.0)

    def test_shutdown_with_wait_joins_workers(self):
        pool = ThreadPool(num_workers=2)
        pool.start()
        pool.shutdown(wait=True, timeout=5.0)

        assert all(not worker.is_alive() for worker in pool._workers)


class TestTaskExecution:
    """Tests for running submitted tasks."""

    def test_runs_task_with_arguments(self, pool):
        results = []
        done = threading.Event()

        def task(a, b, scale=1):
            results.append((a + b) * scale)
            done.set()

        pool.submit(task, args=(2, 3), kwargs={"scale": 10})

        assert done.wait(timeout=5.0)
        assert results == [50]

    def test_tasks_beyond_pool_size_are_queued(self, pool):
        """Test more tasks than workers wait in the queue and all complete."""
        release = threading.Event()
        finished = []
        lock = threading.Lock()

        def task(n):
            release.wait(timeout=5.0)
            with lock:
                finished.append(n)

        for n in range(6):
            pool.submit(task, args=(n,))

        assert wait_for(lambda: pool.busy_workers == 2)
        assert pool.pending_tasks == 4

        release.set()

        assert wait_for(lambda: len(finished) == 6)
        assert sorted(finished) == list(range(6))

    def test_concurrency_never_exceeds_pool_size(self, pool):
        """Test at most num_workers tasks run at the same time."""
        running = 0
        peak = 0
        lock = threading.Lock()
        done = []

        def task():
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.05)
            with lock:
                running -= 1
                done.append(True)

        for _ in range(8):
            pool.submit(task)

        assert wait_for(lambda: len(done) == 8)
        assert peak <= 2

    def test_failing_task_does_not_kill_worker(self, pool):
        """Test an exception is isolated and the pool keeps working."""
        done = threading.Event()

        def explode():
            raise RuntimeError("boom")

        pool.submit(explode)
        pool.submit(explode)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)
        assert wait_for(lambda: pool.stats["tasks"]["failed"] == 2)
        assert wait_for(lambda: pool.stats["tasks"]["completed"] == 1)
        assert all(worker.is_alive() for worker in pool._workers)
