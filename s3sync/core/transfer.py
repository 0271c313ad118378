"""
Transfer Executor

Carries out one sync operation: upload, download, local delete or remote
delete. Honours dry-run mode, content type and ACL settings, and records
statistics for completed operations.

Author: s3sync Project
License: MIT
"""

import logging
import os
import threading
from typing import Optional

from .errors import LocalIOError, TransferError
from .file_info import FileInfo
from .s3_path import S3Path
from ..config.schema import SyncConfig
from ..utils.file_ops import (
    content_type_from_name,
    ensure_directory,
    local_target_path,
    remote_key,
    set_modification_time
)

_CANCEL_POLL_INTERVAL = 0.1


class TransferExecutor:
    """
    Maps FileInfo + sync roots onto single transfer or delete calls.

    The transfer manager is anything with boto3/s3transfer-style
    ``upload(fileobj, bucket, key, extra_args)`` and
    ``download(bucket, key, fileobj, extra_args)`` methods returning futures.
    """

    def __init__(
        self,
        client,
        transfer_manager,
        config: SyncConfig,
        logger: logging.Logger,
        statistics=None,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Initialize the executor.

        Args:
            client: boto3 S3 client used for deletes
            transfer_manager: Upload/download collaborator returning futures
            config: Sync configuration (read-only)
            logger: Logger receiving one line per action
            statistics: Optional SyncStatistics accumulator
            cancel_event: Optional event cancelling in-flight transfers
        """
        self.client = client
        self.transfer_manager = transfer_manager
        self.config = config
        self.logger = logger
        self.statistics = statistics
        self.cancel_event = cancel_event

    def _wait(self, future, description: str):
        """Wait for a transfer future, cancelling it if the sync is cancelled."""
        if self.cancel_event is not None:
            while not future.done():
                if self.cancel_event.wait(_CANCEL_POLL_INTERVAL):
                    future.cancel()
                    break
        try:
            return future.result()
        except Exception as e:
            raise TransferError(f"{description} failed: {e}") from e

    def upload(self, file: FileInfo, source_path: str, dest_path: S3Path):
        """
        Upload a local file.

        Args:
            file: Source file
            source_path: Local sync root given by the caller
            dest_path: Destination bucket and prefix

        Raises:
            LocalIOError: If the local file cannot be read
            TransferError: If the upload fails
        """
        if file.single_file:
            source_filename = source_path
        else:
            source_filename = os.path.join(source_path, *file.name.split("/"))

        dest_file = dest_path.with_prefix(
            remote_key(dest_path.prefix, file.name, file.single_file)
        )

        self.logger.info(f"Uploading {file.name} to {dest_file}")
        if self.config.dry_run:
            return

        extra_args = {}
        if self.config.acl:
            extra_args["ACL"] = self.config.acl
        if self.config.content_type:
            extra_args["ContentType"] = self.config.content_type
        elif self.config.guess_mime:
            extra_args["ContentType"] = content_type_from_name(source_filename)

        try:
            reader = open(source_filename, "rb")
        except OSError as e:
            raise LocalIOError(f"failed to open {source_filename}: {e}") from e

        with reader:
            future = self.transfer_manager.upload(
                reader, dest_file.bucket, dest_file.prefix, extra_args=extra_args or None
            )
            self._wait(future, f"upload of {source_filename} to {dest_file}")

        if self.statistics is not None:
            self.statistics.add_transfer(file.size)

    def download(self, file: FileInfo, source_path: S3Path, dest_path: str):
        """
        Download an object and stamp it with the object's modification time.

        Args:
            file: Source object
            source_path: Source bucket and prefix
            dest_path: Local sync root given by the caller

        Raises:
            LocalIOError: If the local file cannot be written
            TransferError: If the download fails
        """
        target_filename = local_target_path(dest_path, file.name, file.single_file)
        target_dir = os.path.dirname(target_filename)

        self.logger.info(f"Downloading {file.name} to {target_filename}")
        if self.config.dry_run:
            return

        source_file = source_path.with_prefix(file.path)

        try:
            ensure_directory(target_dir)
            writer = open(target_filename, "wb")
        except OSError as e:
            raise LocalIOError(f"failed to create {target_filename}: {e}") from e

        with writer:
            future = self.transfer_manager.download(
                source_file.bucket, source_file.prefix, writer
            )
            self._wait(future, f"download of {source_file} to {target_filename}")

        try:
            set_modification_time(target_filename, file.last_modified)
        except OSError as e:
            raise LocalIOError(f"failed to set times of {target_filename}: {e}") from e

        if self.statistics is not None:
            self.statistics.add_transfer(file.size)

    def delete_local(self, file: FileInfo, dest_path: str):
        """
        Remove a local file that no longer exists in the source.

        Args:
            file: Destination file
            dest_path: Local sync root given by the caller

        Raises:
            LocalIOError: If the file cannot be removed
        """
        target_filename = local_target_path(dest_path, file.name, file.single_file)

        self.logger.info(f"Deleting {target_filename}")
        if self.config.dry_run:
            return

        try:
            os.remove(target_filename)
        except OSError as e:
            raise LocalIOError(f"failed to delete {target_filename}: {e}") from e

        if self.statistics is not None:
            self.statistics.add_deleted()

    def delete_remote(self, file: FileInfo, dest_path: S3Path):
        """
        Remove an object that no longer exists in the source.

        Args:
            file: Destination object
            dest_path: Destination bucket and prefix

        Raises:
            TransferError: If the delete call fails
        """
        dest_file = dest_path.with_prefix(
            remote_key(dest_path.prefix, file.name, file.single_file)
        )

        self.logger.info(f"Deleting {dest_file}")
        if self.config.dry_run:
            return

        try:
            self.client.delete_object(Bucket=dest_file.bucket, Key=dest_file.prefix)
        except Exception as e:
            raise TransferError(f"delete of {dest_file} failed: {e}") from e

        if self.statistics is not None:
            self.statistics.add_deleted()
