"""
s3sync

Synchronizes a local directory or file with an S3 bucket prefix, in either
direction, with bounded parallelism, optional deletion and dry-run.

Author: s3sync Project
License: MIT
"""

from .config import Config, SyncConfig, load_config
from .core import (
    SyncManager,
    SyncStatistics,
    create_s3_client,
    S3SyncError,
    MissingBucketError,
    UnsupportedDirectionError,
    ListingError,
    TransferError,
    LocalIOError,
    SyncCancelledError,
    MultiError
)
from .utils.logger import setup_logging, get_logger

__version__ = "0.1.0"
__all__ = [
    'SyncManager', 'SyncStatistics', 'create_s3_client',
    'Config', 'SyncConfig', 'load_config',
    'setup_logging', 'get_logger',
    'S3SyncError', 'MissingBucketError', 'UnsupportedDirectionError',
    'ListingError', 'TransferError', 'LocalIOError', 'SyncCancelledError',
    'MultiError'
]
