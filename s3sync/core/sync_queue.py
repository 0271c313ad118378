"""
Sync Queue

Fixed-size worker pool consuming a shared queue of sync jobs.

Author: s3sync Project
License: MIT
"""

import queue
import threading
from typing import Callable, List, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PARALLEL = 16

Job = Callable[[], None]


class JobScheduler:
    """
    Thread pool executing sync jobs from a single queue.

    Features:
    - Fixed number of worker threads
    - Counting wait for every submitted job (Queue.join)
    - Workers survive failing jobs
    - Statistics tracking
    """

    _STOP = object()

    def __init__(self, n_jobs: int = DEFAULT_PARALLEL, name: str = "s3sync-worker"):
        """
        Initialize the scheduler and start its workers.

        Args:
            n_jobs: Number of worker threads
            name: Prefix of the worker thread names
        """
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be positive: {n_jobs}")

        self.n_jobs = n_jobs
        self._queue: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._running = True

        # Statistics
        self._total_submitted = 0
        self._total_processed = 0
        self._total_failed = 0

        self._workers: List[threading.Thread] = []
        for i in range(n_jobs):
            worker = threading.Thread(
                target=self._worker_loop, name=f"{name}-{i}", daemon=True
            )
            worker.start()
            self._workers.append(worker)

        logger.debug(f"JobScheduler started with {n_jobs} worker(s)")

    def _worker_loop(self):
        """Take jobs off the queue until the stop marker arrives."""
        while True:
            job = self._queue.get()
            try:
                if job is self._STOP:
                    return
                try:
                    job()
                except Exception:
                    with self._lock:
                        self._total_failed += 1
                    logger.exception("Unhandled error in sync job")
                with self._lock:
                    self._total_processed += 1
            finally:
                self._queue.task_done()

    def submit(self, job: Job):
        """
        Queue a job for execution.

        Args:
            job: Callable without arguments

        Raises:
            RuntimeError: If the scheduler was shut down
        """
        if not self._running:
            raise RuntimeError("JobScheduler is shut down")
        with self._lock:
            self._total_submitted += 1
        self._queue.put(job)

    def wait(self):
        """Block until every submitted job has finished."""
        self._queue.join()

    def shutdown(self, timeout: Optional[float] = None):
        """
        Finish queued jobs and stop the workers.

        Args:
            timeout: Optional per-thread join timeout in seconds
        """
        if not self._running:
            return
        self._running = False
        for _ in self._workers:
            self._queue.put(self._STOP)
        for worker in self._workers:
            worker.join(timeout)
        logger.debug("JobScheduler stopped")

    def size(self) -> int:
        """Get number of jobs waiting in the queue."""
        return self._queue.qsize()

    def get_statistics(self) -> dict:
        """
        Get scheduler statistics.

        Returns:
            Dictionary with statistics
        """
        with self._lock:
            return {
                'workers': self.n_jobs,
                'pending': self.size(),
                'total_submitted': self._total_submitted,
                'total_processed': self._total_processed,
                'total_failed': self._total_failed,
                'running': self._running
            }

    def __enter__(self) -> "JobScheduler":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
