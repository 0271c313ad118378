"""
File Listing Producers

Lists local files and S3 objects in background threads. Each listing is
consumed as a lazy, single-pass iterator of FileInfo that may end with an
error-carrying item.

Author: s3sync Project
License: MIT
"""

import os
import queue
import threading
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from .errors import ListingError
from .file_info import FileInfo
from .s3_path import S3Path
from ..utils.file_ops import get_modification_time, is_below_root, relative_name, to_slash
from ..utils.logger import get_logger

logger = get_logger(__name__)

LOCAL_BUFFER_SIZE = 1000
# Object listings can be huge; keep paging while the diff engine catches up.
S3_BUFFER_SIZE = 50000

_PUT_TIMEOUT = 0.1


class ListingClosed(Exception):
    """Raised inside a producer when its consumer went away."""


class FileListing:
    """
    Iterator over FileInfo items produced by a background thread.

    The producer function receives an ``emit`` callback and returns when it
    is done; the end of the stream is signalled after it returns. Calling
    ``close()`` stops the producer and unblocks it if the buffer is full.
    """

    _END = object()

    def __init__(
        self,
        producer: Callable[[Callable[[FileInfo], None]], None],
        max_size: int,
        name: str,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Initialize and start the listing.

        Args:
            producer: Function emitting FileInfo items through its argument
            max_size: Buffer size of the underlying queue
            name: Thread name
            cancel_event: Optional event that stops the producer early
        """
        self._queue: "queue.Queue" = queue.Queue(maxsize=max_size)
        self._closed = threading.Event()
        self._cancel_event = cancel_event
        self._finished = False
        self._thread = threading.Thread(
            target=self._run, args=(producer,), name=name, daemon=True
        )
        self._thread.start()

    def _stopped(self) -> bool:
        if self._closed.is_set():
            return True
        return self._cancel_event is not None and self._cancel_event.is_set()

    def _put(self, item):
        while True:
            if self._closed.is_set():
                raise ListingClosed()
            try:
                self._queue.put(item, timeout=_PUT_TIMEOUT)
                return
            except queue.Full:
                continue

    def _emit(self, item: FileInfo):
        if self._stopped():
            raise ListingClosed()
        self._put(item)

    def _run(self, producer):
        try:
            producer(self._emit)
        except ListingClosed:
            pass
        except Exception as e:
            logger.exception(f"Listing thread {self._thread.name} failed")
            try:
                self._put(FileInfo.from_error(ListingError(str(e))))
            except ListingClosed:
                pass
        finally:
            try:
                self._put(self._END)
            except ListingClosed:
                pass

    def __iter__(self) -> Iterator[FileInfo]:
        return self

    def __next__(self) -> FileInfo:
        if self._finished:
            raise StopIteration
        item = self._queue.get()
        if item is self._END:
            self._finished = True
            raise StopIteration
        return item

    def close(self):
        """Stop the producer and discard anything still buffered."""
        self._closed.set()
        self._finished = True
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break

    def join(self, timeout: Optional[float] = None):
        """Wait for the producer thread to exit."""
        self._thread.join(timeout)


def list_local_files(
    base_path: str,
    cancel_event: Optional[threading.Event] = None
) -> FileListing:
    """
    List the files under a local path.

    A missing path yields nothing. A file path yields exactly one item
    marked as single-file root. A directory is walked recursively and yields
    one item per regular file. Filesystem errors end the listing with an
    error item.

    Args:
        base_path: Local file or directory
        cancel_event: Optional event that stops the listing early

    Returns:
        FileListing over the local files
    """
    def produce(emit):
        try:
            stat = os.stat(base_path)
        except FileNotFoundError:
            logger.debug(f"Local path does not exist: {base_path}")
            return
        except OSError as e:
            emit(FileInfo.from_error(ListingError(f"failed to stat {base_path}: {e}")))
            return

        if not os.path.isdir(base_path):
            emit(FileInfo(
                name=os.path.basename(base_path),
                path=base_path,
                size=stat.st_size,
                last_modified=get_modification_time(stat),
                single_file=True
            ))
            return

        root = to_slash(base_path)

        def raise_walk_error(error: OSError):
            raise error

        try:
            for dirpath, dirnames, filenames in os.walk(base_path, onerror=raise_walk_error):
                dirnames.sort()
                for filename in sorted(filenames):
                    file_path = os.path.join(dirpath, filename)
                    if not os.path.isfile(file_path):
                        continue
                    file_stat = os.stat(file_path)
                    emit(FileInfo(
                        name=relative_name(root, to_slash(file_path)),
                        path=file_path,
                        size=file_stat.st_size,
                        last_modified=get_modification_time(file_stat)
                    ))
        except OSError as e:
            emit(FileInfo.from_error(ListingError(f"failed to walk {base_path}: {e}")))

    return FileListing(produce, LOCAL_BUFFER_SIZE, f"list-local:{base_path}", cancel_event)


def _as_utc(value) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def list_s3_files(
    client,
    path: S3Path,
    cancel_event: Optional[threading.Event] = None
) -> FileListing:
    """
    List the objects under an S3 prefix.

    Pages through ListObjectsV2 with continuation tokens. Directory marker
    objects (keys ending with "/") are skipped, and so are keys that only share
    the prefix string without being below it ("foobar/x" when listing
    "foo"). If the prefix is exactly an object key, that object is yielded
    as a single-file root. A failing list call ends the listing with an
    error item.

    Args:
        client: boto3 S3 client (or anything with list_objects_v2)
        path: Bucket and prefix to list
        cancel_event: Optional event that stops paging early

    Returns:
        FileListing over the objects
    """
    def produce(emit):
        token = None
        page_count = 0
        while True:
            kwargs = {"Bucket": path.bucket, "Prefix": path.prefix}
            if token:
                kwargs["ContinuationToken"] = token

            try:
                page = client.list_objects_v2(**kwargs)
            except Exception as e:
                emit(FileInfo.from_error(ListingError(f"failed to list {path}: {e}")))
                return

            page_count += 1
            for obj in page.get("Contents", []):
                key = obj["Key"]
                if key.endswith("/"):
                    continue

                name = relative_name(path.prefix, key)
                if not is_below_root(name):
                    # "foo" also matches "foobar/..."
                    continue
                if name == ".":
                    emit(FileInfo(
                        name=key.rsplit("/", 1)[-1],
                        path=key,
                        size=obj["Size"],
                        last_modified=_as_utc(obj["LastModified"]),
                        single_file=True
                    ))
                else:
                    emit(FileInfo(
                        name=name,
                        path=key,
                        size=obj["Size"],
                        last_modified=_as_utc(obj["LastModified"])
                    ))

            token = page.get("NextContinuationToken")
            if not token:
                break

        logger.debug(f"Listed {path} in {page_count} page(s)")

    return FileListing(produce, S3_BUFFER_SIZE, f"list-s3:{path}", cancel_event)
