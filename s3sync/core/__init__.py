"""
s3sync Core Module

Listing, diffing, scheduling and transfer logic of the sync engine.

Author: s3sync Project
License: MIT
"""

from .errors import (
    S3SyncError,
    MissingBucketError,
    UnsupportedDirectionError,
    ListingError,
    TransferError,
    LocalIOError,
    SyncCancelledError,
    MultiError
)
from .file_info import FileInfo, Operation, SyncOperation
from .s3_path import S3Path, SyncDirection
from .sync_queue import JobScheduler, DEFAULT_PARALLEL
from .sync_engine import SyncManager, SyncStatistics, create_s3_client

__version__ = "0.1.0"
__all__ = [
    'SyncManager', 'SyncStatistics', 'create_s3_client',
    'JobScheduler', 'DEFAULT_PARALLEL',
    'FileInfo', 'Operation', 'SyncOperation', 'S3Path', 'SyncDirection',
    'S3SyncError', 'MissingBucketError', 'UnsupportedDirectionError',
    'ListingError', 'TransferError', 'LocalIOError', 'SyncCancelledError',
    'MultiError'
]
