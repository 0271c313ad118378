"""
Unit Tests for the Listing Producers

Author: s3sync Project
License: MIT
"""

import os
import threading

import pytest

from s3sync.core.errors import ListingError
from s3sync.core.listing import FileListing, list_local_files, list_s3_files
from s3sync.core.s3_path import S3Path

from conftest import utc, write_file


class TestLocalListing:
    """Test suite for local file listing."""

    def test_missing_path_is_empty(self, tmp_path):
        files = list(list_local_files(str(tmp_path / "missing")))

        assert files == []

    def test_single_file(self, tmp_path):
        """Test that a file root yields one single-file item."""
        path = write_file(tmp_path / "README.md", b"hello", mtime=100)

        files = list(list_local_files(str(path)))

        assert len(files) == 1
        assert files[0].name == "README.md"
        assert files[0].path == str(path)
        assert files[0].size == 5
        assert files[0].last_modified == utc(100)
        assert files[0].single_file is True

    def test_directory_walk(self, tmp_path):
        """Test recursive listing with relative names."""
        write_file(tmp_path / "README.md", b"a")
        write_file(tmp_path / "foo" / "README.md", b"bb")
        write_file(tmp_path / "bar" / "baz" / "README.md", b"ccc")
        (tmp_path / "empty").mkdir()

        files = {f.name: f for f in list_local_files(str(tmp_path))}

        assert sorted(files) == ["README.md", "bar/baz/README.md", "foo/README.md"]
        assert files["bar/baz/README.md"].size == 3
        assert files["bar/baz/README.md"].path == os.path.join(str(tmp_path), "bar", "baz", "README.md")
        assert not any(f.single_file for f in files.values())

    def test_trailing_separator(self, tmp_path):
        write_file(tmp_path / "a.txt", b"a")

        files = list(list_local_files(str(tmp_path) + os.sep))

        assert [f.name for f in files] == ["a.txt"]

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                        reason="root ignores directory permissions")
    def test_walk_error_ends_with_error_item(self, tmp_path):
        """Test that an unreadable directory produces a trailing error."""
        write_file(tmp_path / "a.txt", b"a")
        locked = tmp_path / "locked"
        write_file(locked / "b.txt", b"b")
        locked.chmod(0)
        try:
            files = list(list_local_files(str(tmp_path)))
        finally:
            locked.chmod(0o755)

        assert files[-1].error is not None
        assert isinstance(files[-1].error, ListingError)


class TestS3Listing:
    """Test suite for S3 object listing."""

    def test_paginated_listing(self, s3_client):
        """Test that every page is fetched using continuation tokens."""
        for key in ["data/a.txt", "data/b.txt", "data/sub/c.txt", "data/sub/d.txt", "data/e.txt"]:
            s3_client.put("bucket", key, b"xyz", last_modified=50)

        files = list(list_s3_files(s3_client, S3Path("bucket", "data/")))

        assert sorted(f.name for f in files) == [
            "a.txt", "b.txt", "e.txt", "sub/c.txt", "sub/d.txt"
        ]
        assert len(s3_client.list_calls) == 3
        assert s3_client.list_calls[0]["ContinuationToken"] is None
        assert s3_client.list_calls[1]["ContinuationToken"] == "2"
        assert all(f.last_modified == utc(50) for f in files)
        assert {f.path for f in files} >= {"data/sub/c.txt"}

    def test_prefix_without_slash(self, s3_client):
        s3_client.put("bucket", "data/a.txt", b"x")

        files = list(list_s3_files(s3_client, S3Path("bucket", "data")))

        assert [f.name for f in files] == ["a.txt"]

    def test_directory_markers_are_skipped(self, s3_client):
        s3_client.put("bucket", "dir/", b"")
        s3_client.put("bucket", "dir/file.txt", b"x")

        files = list(list_s3_files(s3_client, S3Path("bucket", "")))

        assert [f.name for f in files] == ["dir/file.txt"]

    def test_single_object(self, s3_client):
        """Test that a prefix equal to a key yields a single-file root."""
        s3_client.put("bucket", "docs/README.md", b"hello")

        files = list(list_s3_files(s3_client, S3Path("bucket", "docs/README.md")))

        assert len(files) == 1
        assert files[0].name == "README.md"
        assert files[0].path == "docs/README.md"
        assert files[0].single_file is True

    def test_keys_sharing_prefix_string_are_skipped(self, s3_client):
        """Test that "foobar/..." is not listed under the prefix "foo"."""
        s3_client.put("bucket", "foo/a.txt", b"x")
        s3_client.put("bucket", "foobar/keep.txt", b"x")
        s3_client.put("bucket", "foo.txt", b"x")

        files = list(list_s3_files(s3_client, S3Path("bucket", "foo")))

        assert [(f.name, f.path) for f in files] == [("a.txt", "foo/a.txt")]

    def test_keys_escaping_prefix_are_skipped(self, s3_client):
        s3_client.put("bucket", "foo/../../etc/passwd", b"x")
        s3_client.put("bucket", "foo/sub/../b.txt", b"x")

        files = list(list_s3_files(s3_client, S3Path("bucket", "foo/")))

        assert [f.name for f in files] == ["b.txt"]

    def test_listing_error(self, s3_client):
        s3_client.list_error = RuntimeError("NoSuchBucket")

        files = list(list_s3_files(s3_client, S3Path("bucket", "")))

        assert len(files) == 1
        assert isinstance(files[0].error, ListingError)
        assert "NoSuchBucket" in str(files[0].error)


class TestFileListing:
    """Test suite for the producer/consumer plumbing."""

    def test_close_unblocks_producer(self):
        """Test that closing an unconsumed listing stops its thread."""
        from s3sync.core.file_info import FileInfo

        def produce(emit):
            for i in range(100):
                emit(FileInfo(name=str(i)))

        listing = FileListing(produce, max_size=1, name="test")
        first = next(listing)
        listing.close()
        listing.join(timeout=5)

        assert first.name == "0"
        assert list(listing) == []

    def test_cancel_event_stops_listing(self):
        from s3sync.core.file_info import FileInfo

        cancel = threading.Event()
        cancel.set()

        def produce(emit):
            emit(FileInfo(name="never"))

        assert list(FileListing(produce, max_size=10, name="test", cancel_event=cancel)) == []

    def test_producer_exception_becomes_error_item(self):
        def produce(emit):
            raise ValueError("broken producer")

        files = list(FileListing(produce, max_size=10, name="test"))

        assert len(files) == 1
        assert isinstance(files[0].error, ListingError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
