"""
Sync Engine

Entry point of the library. Resolves the sync direction, runs both
listings, diffs them and executes the resulting operations on a worker
pool while collecting errors and statistics.

Author: s3sync Project
License: MIT
"""

import logging
import os
import posixpath
import threading
import time
from dataclasses import dataclass
from typing import Optional

import boto3
from boto3.s3.transfer import create_transfer_manager
from botocore.config import Config as BotoConfig

from .diff import filter_files_for_sync
from .errors import MultiError, SyncCancelledError
from .file_info import Operation, SyncOperation
from .listing import FileListing, list_local_files, list_s3_files
from .s3_path import S3Path, SyncDirection, resolve_direction
from .sync_queue import JobScheduler
from .transfer import TransferExecutor
from ..config.schema import Config, SyncConfig
from ..utils.file_ops import get_file_size_mb, is_exact_local_target, is_exact_remote_target
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncStatistics:
    """Snapshot of the counters of the last sync call."""
    bytes: int = 0
    files: int = 0
    deleted_files: int = 0
    elapsed: float = 0.0
    has_difference: bool = False


class StatisticsCollector:
    """Thread-safe accumulator behind SyncStatistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        """Zero all counters."""
        with self._lock:
            self._bytes = 0
            self._files = 0
            self._deleted_files = 0
            self._elapsed = 0.0
            self._has_difference = False

    def add_transfer(self, size: int):
        with self._lock:
            self._bytes += size
            self._files += 1

    def add_deleted(self):
        with self._lock:
            self._deleted_files += 1

    def mark_difference(self):
        with self._lock:
            self._has_difference = True

    def set_elapsed(self, seconds: float):
        with self._lock:
            self._elapsed = seconds

    def snapshot(self) -> SyncStatistics:
        with self._lock:
            return SyncStatistics(
                bytes=self._bytes,
                files=self._files,
                deleted_files=self._deleted_files,
                elapsed=self._elapsed,
                has_difference=self._has_difference
            )


def create_s3_client(aws_config=None, session: Optional[boto3.Session] = None):
    """
    Create a boto3 S3 client from an AwsConfig.

    Args:
        aws_config: s3sync.config.schema.AwsConfig (None uses SDK defaults)
        session: Optional pre-built boto3 session

    Returns:
        boto3 S3 client
    """
    if aws_config is None:
        return (session or boto3.Session()).client("s3")

    if session is None:
        session_args = {}
        if aws_config.profile_name:
            session_args["profile_name"] = aws_config.profile_name
        if aws_config.region:
            session_args["region_name"] = aws_config.region
        session = boto3.Session(**session_args)

    client_config = BotoConfig(
        retries={"max_attempts": aws_config.max_attempts, "mode": "standard"},
        s3={"addressing_style": "path" if aws_config.force_path_style else "auto"}
    )
    kwargs = {"config": client_config}
    if aws_config.endpoint_url:
        kwargs["endpoint_url"] = aws_config.endpoint_url

    return session.client("s3", **kwargs)


class SyncManager:
    """
    Synchronizes a local directory or file with an S3 prefix.

    One manager can run any number of sync calls; each call gets its own
    worker pool and listings. The configuration is read-only.
    """

    def __init__(
        self,
        client,
        config: Optional[SyncConfig] = None,
        transfer_manager=None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the sync manager.

        Args:
            client: boto3 S3 client used for listing and deleting
            config: Sync configuration (defaults to SyncConfig())
            transfer_manager: Upload/download collaborator returning futures.
                Defaults to an s3transfer TransferManager on ``client``.
            logger: Logger receiving the per-file action lines. Defaults to
                the package logger.
        """
        self.client = client
        self.config = config or SyncConfig()
        self.logger = logger or get_logger(__name__)

        self._owns_transfer_manager = transfer_manager is None
        if transfer_manager is None:
            transfer_manager = create_transfer_manager(
                client, self.config.transfer.to_transfer_config()
            )
        self.transfer_manager = transfer_manager

        self._statistics = StatisticsCollector()

        self.logger.debug(
            f"SyncManager initialized (parallel={self.config.parallel}, "
            f"delete={self.config.delete}, dry_run={self.config.dry_run})"
        )

    @classmethod
    def create(cls, client, logger: Optional[logging.Logger] = None, **options) -> "SyncManager":
        """
        Build a manager from keyword options.

        Args:
            client: boto3 S3 client
            logger: Optional logger
            **options: SyncConfig fields (parallel, delete, dry_run, acl, ...)

        Returns:
            SyncManager
        """
        return cls(client, config=SyncConfig(**options), logger=logger)

    @classmethod
    def from_config(cls, config: Config, logger: Optional[logging.Logger] = None) -> "SyncManager":
        """
        Build a manager and its S3 client from the application config.

        Args:
            config: Root configuration
            logger: Optional logger

        Returns:
            SyncManager
        """
        return cls(create_s3_client(config.aws), config=config.sync, logger=logger)

    def sync(self, source: str, dest: str, cancel_event: Optional[threading.Event] = None):
        """
        Sync the files between S3 and the local disk.

        Every call counts into its own statistics, which replace those of
        the previous call once it returns or raises. Concurrent calls on
        one manager therefore never mix their counters.

        Args:
            source: s3://bucket/prefix URL or local path
            dest: s3://bucket/prefix URL or local path
            cancel_event: Optional event; once set, pending operations are
                skipped and in-flight transfers are cancelled

        Raises:
            MissingBucketError: If an S3 URL has no bucket
            UnsupportedDirectionError: For S3 to S3 and local to local
            ListingError: If the destination cannot be listed
            SyncCancelledError: If cancelled without other failures
            MultiError: If any operation failed
        """
        direction, source_path, dest_path = resolve_direction(source, dest)

        statistics = StatisticsCollector()
        start = time.monotonic()
        self.logger.info(f"Starting sync from {source} to {dest}")

        try:
            if direction == SyncDirection.S3_TO_LOCAL:
                self._sync_s3_to_local(source_path, dest_path, statistics, cancel_event)
            else:
                self._sync_local_to_s3(source_path, dest_path, statistics, cancel_event)
        finally:
            statistics.set_elapsed(time.monotonic() - start)
            self._statistics = statistics

        stats = statistics.snapshot()
        self.logger.info(
            f"Sync completed: {stats.files} file(s) transferred "
            f"({get_file_size_mb(stats.bytes):.2f}MB), "
            f"{stats.deleted_files} deleted in {stats.elapsed:.2f}s"
        )

    def _sync_local_to_s3(self, source_path: str, dest_path: S3Path, statistics, cancel_event):
        source_files = list_local_files(source_path, cancel_event)
        dest_files = list_s3_files(self.client, dest_path, cancel_event)

        target_name = None
        if is_exact_remote_target(dest_path.prefix):
            target_name = posixpath.basename(dest_path.prefix)

        def handle(executor: TransferExecutor, operation: SyncOperation):
            if operation.op == Operation.UPDATE:
                executor.upload(operation.file, source_path, dest_path)
            else:
                executor.delete_remote(operation.file, dest_path)

        self._run(source_files, dest_files, target_name, handle, statistics, cancel_event)

    def _sync_s3_to_local(self, source_path: S3Path, dest_path: str, statistics, cancel_event):
        source_files = list_s3_files(self.client, source_path, cancel_event)
        dest_files = list_local_files(dest_path, cancel_event)

        target_name = None
        if is_exact_local_target(dest_path):
            target_name = os.path.basename(dest_path)

        def handle(executor: TransferExecutor, operation: SyncOperation):
            if operation.op == Operation.UPDATE:
                executor.download(operation.file, source_path, dest_path)
            else:
                executor.delete_local(operation.file, dest_path)

        self._run(source_files, dest_files, target_name, handle, statistics, cancel_event)

    def _run(
        self,
        source_files: FileListing,
        dest_files: FileListing,
        target_name: Optional[str],
        handle,
        statistics: StatisticsCollector,
        cancel_event: Optional[threading.Event]
    ):
        """Diff both listings and execute every operation on the worker pool."""
        errors = MultiError()
        executor = TransferExecutor(
            self.client,
            self.transfer_manager,
            self.config,
            self.logger,
            statistics=statistics,
            cancel_event=cancel_event
        )
        cancelled = threading.Event()

        def make_job(operation: SyncOperation):
            def job():
                if operation.error is not None:
                    errors.append(operation.error)
                    return
                if cancel_event is not None and cancel_event.is_set():
                    cancelled.set()
                    return
                try:
                    handle(executor, operation)
                except Exception as e:
                    errors.append(e)
            return job

        try:
            with JobScheduler(self.config.parallel) as scheduler:
                operations = filter_files_for_sync(
                    source_files, dest_files, self.config.delete, target_name
                )
                for operation in operations:
                    if cancel_event is not None and cancel_event.is_set():
                        cancelled.set()
                        break
                    if operation.error is None:
                        statistics.mark_difference()
                    scheduler.submit(make_job(operation))
                scheduler.wait()
            # Listings stop early once cancelled, so an empty diff proves nothing
            if cancel_event is not None and cancel_event.is_set():
                cancelled.set()
        finally:
            source_files.close()
            dest_files.close()

        if cancelled.is_set():
            errors.append(SyncCancelledError("sync was cancelled"))
            if len(errors) == 1:
                raise errors.errors[0]

        err = errors.error_or_none()
        if err is not None:
            raise err

    def get_statistics(self) -> SyncStatistics:
        """Get the statistics of the last sync call."""
        return self._statistics.snapshot()

    def has_difference(self) -> bool:
        """Check whether the last sync call found anything to change."""
        return self._statistics.snapshot().has_difference

    def close(self):
        """Shut down the transfer manager if this manager created it."""
        if self._owns_transfer_manager:
            self.transfer_manager.shutdown()

    def __enter__(self) -> "SyncManager":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
