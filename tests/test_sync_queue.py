"""
Unit Tests for the Job Scheduler

Author: s3sync Project
License: MIT
"""

import threading
import time

import pytest

from s3sync.core.sync_queue import DEFAULT_PARALLEL, JobScheduler


class TestJobScheduler:
    """Test suite for the worker pool."""

    def test_default_parallelism(self):
        with JobScheduler() as scheduler:
            assert scheduler.n_jobs == DEFAULT_PARALLEL == 16

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            JobScheduler(0)

    def test_runs_all_jobs(self):
        """Test that wait() returns only after every job finished."""
        done = []
        lock = threading.Lock()

        def job(n):
            time.sleep(0.01)
            with lock:
                done.append(n)

        with JobScheduler(4) as scheduler:
            for n in range(20):
                scheduler.submit(lambda n=n: job(n))
            scheduler.wait()

            assert sorted(done) == list(range(20))
            stats = scheduler.get_statistics()
            assert stats["total_submitted"] == 20
            assert stats["total_processed"] == 20

    def test_concurrency_is_bounded(self):
        """Test that no more than n_jobs jobs run at once."""
        running = 0
        peak = 0
        lock = threading.Lock()

        def job():
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.02)
            with lock:
                running -= 1

        with JobScheduler(3) as scheduler:
            for _ in range(12):
                scheduler.submit(job)
            scheduler.wait()

        assert 1 <= peak <= 3

    def test_failing_job_does_not_kill_workers(self):
        results = []

        def bad():
            raise RuntimeError("boom")

        with JobScheduler(1) as scheduler:
            scheduler.submit(bad)
            scheduler.submit(lambda: results.append("ok"))
            scheduler.wait()

            assert results == ["ok"]
            assert scheduler.get_statistics()["total_failed"] == 1

    def test_submit_after_shutdown(self):
        scheduler = JobScheduler(1)
        scheduler.shutdown()

        with pytest.raises(RuntimeError):
            scheduler.submit(lambda: None)

    def test_shutdown_is_idempotent(self):
        scheduler = JobScheduler(2)
        scheduler.shutdown()
        scheduler.shutdown()

        assert scheduler.get_statistics()["running"] is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
