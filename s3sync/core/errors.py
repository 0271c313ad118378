"""
Sync Errors

Exception hierarchy for the sync engine and the thread-safe error
aggregator used by the worker pool.

Author: s3sync Project
License: MIT
"""

import threading
from typing import List, Optional


class S3SyncError(Exception):
    """Base class for all s3sync errors."""


class MissingBucketError(S3SyncError, ValueError):
    """S3 URL has no bucket name."""

    def __init__(self, message: str = "s3 url is missing bucket name"):
        super().__init__(message)


class UnsupportedDirectionError(S3SyncError):
    """Requested sync direction is not supported (S3 to S3, local to local)."""


class ListingError(S3SyncError):
    """Listing local files or S3 objects failed."""


class TransferError(S3SyncError):
    """Upload, download or delete call against S3 failed."""


class LocalIOError(S3SyncError, OSError):
    """Creating, opening, removing or touching a local file failed."""


class SyncCancelledError(S3SyncError):
    """Sync was cancelled before all operations were executed."""


class MultiError(S3SyncError):
    """
    Thread-safe collection of errors raised by sync jobs.

    Workers append concurrently; the driver raises the collection once all
    jobs have finished. The message is the newline-joined list of the
    individual messages in append order.
    """

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()
        self._errors: List[BaseException] = []

    def append(self, err: BaseException):
        """Record one error."""
        with self._lock:
            self._errors.append(err)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def has_errors(self) -> bool:
        """Check whether any error was recorded."""
        return len(self) > 0

    @property
    def errors(self) -> List[BaseException]:
        """Snapshot of the recorded errors."""
        with self._lock:
            return list(self._errors)

    def error_or_none(self) -> Optional["MultiError"]:
        """Return self if any error was recorded, otherwise None."""
        if self.has_errors():
            return self
        return None

    def __str__(self) -> str:
        return "\n".join(str(err) for err in self.errors)

    def __repr__(self) -> str:
        return f"MultiError({self.errors!r})"
