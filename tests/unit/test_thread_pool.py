"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from tinyhttpd.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(workers=2, queue_size=4)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_runs_submitted_tasks(self, pool):
        done = threading.Event()
        results = []

        def task(value, scale=1):
            results.append(value * scale)
            done.set()

        assert pool.submit(task, args=(21,), kwargs={"scale": 2}) is True
        assert done.wait(timeout=5.0)
        assert results == [42]

    def test_failing_task_does_not_kill_worker(self, pool):
        done = threading.Event()

        def boom():
            raise RuntimeError("task failure")

        pool.submit(boom)
        pool.submit(boom)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)

    def test_queue_full_returns_false(self):
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5.0)

        try:
            assert pool.submit(blocker)
            assert started.wait(timeout=5.0)
            assert pool.submit(blocker)  # fills the queue
            assert pool.submit(blocker) is False
            assert pool.busy_workers == 1
            assert pool.queued == 1
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool(workers=1).submit(print)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(workers=1)
        pool.start()
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_shutdown_waits_for_queued_tasks(self):
        pool = ThreadPool(workers=1, queue_size=10)
        pool.start()
        results = []
        for i in range(5):
            pool.submit(results.append, args=(i,))

        pool.shutdown(wait=True, timeout=5.0)
        assert results == [0, 1, 2, 3, 4]

    def test_stats(self, pool):
        done = threading.Event()
        pool.submit(done.set)
        done.wait(timeout=5.0)

        stats = pool.stats
        assert stats["workers"] == 2
        assert set(stats) == {"workers", "busy", "queued", "completed", "failed"}

    def test_start_twice_is_harmless(self, pool):
        pool.start()
        assert pool.stats["workers"] == 2
