"""
Shared Test Fixtures

In-memory stand-ins for the S3 client and the transfer manager so the
sync engine can be exercised without network access.

Author: s3sync Project
License: MIT
"""

import os
import threading
from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest


def utc(seconds: float) -> datetime:
    """Build an aware UTC datetime from epoch seconds."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class FakeS3Client:
    """Minimal in-memory implementation of the S3 calls the engine uses."""

    def __init__(self, page_size: int = 1000):
        self.page_size = page_size
        self.buckets = {}
        self.list_calls = []
        self.deleted = []
        self.list_error = None
        self.delete_error_keys = set()
        self._lock = threading.Lock()

    def put(self, bucket, key, body=b"", last_modified=None, **extra):
        """Store an object directly."""
        if isinstance(body, str):
            body = body.encode()
        if last_modified is None:
            last_modified = datetime.now(timezone.utc)
        elif not isinstance(last_modified, datetime):
            last_modified = utc(last_modified)
        with self._lock:
            self.buckets.setdefault(bucket, {})[key] = {
                "Body": body,
                "LastModified": last_modified,
                **extra
            }

    def get(self, bucket, key):
        return self.buckets.get(bucket, {}).get(key)

    def keys(self, bucket):
        return sorted(self.buckets.get(bucket, {}))

    def list_objects_v2(self, Bucket, Prefix="", ContinuationToken=None, **kwargs):
        self.list_calls.append({"Bucket": Bucket, "Prefix": Prefix, "ContinuationToken": ContinuationToken})
        if self.list_error is not None:
            raise self.list_error

        with self._lock:
            keys = sorted(k for k in self.buckets.get(Bucket, {}) if k.startswith(Prefix))
            start = int(ContinuationToken) if ContinuationToken else 0
            page_keys = keys[start:start + self.page_size]
            contents = [
                {
                    "Key": key,
                    "Size": len(self.buckets[Bucket][key]["Body"]),
                    "LastModified": self.buckets[Bucket][key]["LastModified"]
                }
                for key in page_keys
            ]

        page = {"KeyCount": len(contents)}
        if contents:
            page["Contents"] = contents
        if start + self.page_size < len(keys):
            page["NextContinuationToken"] = str(start + self.page_size)
        return page

    def delete_object(self, Bucket, Key):
        if Key in self.delete_error_keys:
            raise RuntimeError(f"AccessDenied: {Key}")
        with self._lock:
            self.buckets.get(Bucket, {}).pop(Key, None)
            self.deleted.append(Key)
        return {}


class FakeTransferManager:
    """Transfer manager writing to and reading from a FakeS3Client."""

    def __init__(self, client: FakeS3Client):
        self.client = client
        self.uploads = []
        self.downloads = []
        self.fail_keys = set()
        self.shutdown_called = False

    def _done(self, result=None, error=None) -> Future:
        future = Future()
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)
        return future

    def upload(self, fileobj, bucket, key, extra_args=None, subscribers=None):
        self.uploads.append({"Bucket": bucket, "Key": key, "ExtraArgs": extra_args or {}})
        if key in self.fail_keys:
            return self._done(error=RuntimeError(f"upload failed: {key}"))
        # S3 reports whole seconds, never before the upload finished
        uploaded_at = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(seconds=1)
        self.client.put(bucket, key, fileobj.read(), uploaded_at, **(extra_args or {}))
        return self._done()

    def download(self, bucket, key, fileobj, extra_args=None, subscribers=None):
        self.downloads.append({"Bucket": bucket, "Key": key})
        obj = self.client.get(bucket, key)
        if key in self.fail_keys or obj is None:
            return self._done(error=RuntimeError(f"download failed: {key}"))
        fileobj.write(obj["Body"])
        return self._done()

    def shutdown(self):
        self.shutdown_called = True


def write_file(path, content=b"", mtime=None):
    """Create a file (and its parents) with an optional modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode()
    path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def s3_client():
    """Empty fake S3 client with small pages to exercise pagination."""
    return FakeS3Client(page_size=2)


@pytest.fixture
def transfer_manager(s3_client):
    """Fake transfer manager bound to the fake client."""
    return FakeTransferManager(s3_client)


@pytest.fixture
def mock_logger():
    """Logger double recording the action lines."""
    return Mock()

