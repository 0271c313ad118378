"""
File Operation Utilities

Path arithmetic shared by the listing producers and the transfer
executor, plus local file helpers for directories, modification times
and content types.

Author: s3sync Project
License: MIT
"""

import os
import mimetypes
import posixpath
from datetime import datetime, timezone
from typing import Optional

from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def to_slash(path: str) -> str:
    """Convert OS separators to "/"."""
    if os.sep != "/":
        path = path.replace(os.sep, "/")
    return path


def relative_name(base: str, target: str) -> str:
    """
    Compute the "/"-separated name of target relative to base.

    Works on S3 keys and slash-converted local paths alike without touching
    the filesystem or the current directory. Returns "." if both are equal.
    Targets outside base (a key "foobar/x" under the prefix "foo") get a
    name starting with "..".

    Args:
        base: Root path or key prefix
        target: Path or key below base

    Returns:
        Relative name
    """
    return posixpath.relpath("/" + target, "/" + base)


def is_below_root(name: str) -> bool:
    """Check that a relative name stays inside its sync root."""
    normalized = posixpath.normpath(name)
    if posixpath.isabs(normalized):
        return False
    return normalized != ".." and not normalized.startswith("../")


def _check_below_root(name: str, root: str):
    if not is_below_root(name):
        raise ValueError(f"{name} resolves outside of {root}")


def is_exact_local_target(dest_path: str) -> bool:
    """Check whether a local destination names a file rather than a directory."""
    return not dest_path.endswith(("/", os.sep))


def is_exact_remote_target(prefix: str) -> bool:
    """Check whether a key prefix names an object rather than a folder."""
    return prefix != "" and not prefix.endswith("/")


def local_target_path(dest_path: str, name: str, single_file: bool) -> str:
    """
    Compute the local file a downloaded or deleted file maps to.

    A single-file source synced to a path without a trailing separator
    targets that exact path; everything else lands below dest_path.

    Args:
        dest_path: Local destination root as given by the caller
        name: Relative name of the file
        single_file: Whether the source root is a single file

    Returns:
        Local file path

    Raises:
        ValueError: If name resolves outside of dest_path
    """
    if single_file and is_exact_local_target(dest_path):
        return dest_path
    _check_below_root(name, dest_path)
    return os.path.join(dest_path, *name.split("/"))


def remote_key(prefix: str, name: str, single_file: bool) -> str:
    """
    Compute the object key an uploaded file maps to.

    A single-file source synced to a prefix that does not end with "/" (and
    is not empty) uses the prefix itself as the key.

    Args:
        prefix: Destination key prefix
        name: Relative name of the file
        single_file: Whether the source root is a single file

    Returns:
        Object key

    Raises:
        ValueError: If name resolves outside of prefix
    """
    if single_file and is_exact_remote_target(prefix):
        return prefix
    _check_below_root(name, prefix)
    return posixpath.normpath(posixpath.join(prefix, name)).lstrip("/")


def get_modification_time(stat_result: os.stat_result) -> datetime:
    """Get the modification time of a stat result as an aware UTC datetime."""
    return datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)


def set_modification_time(file_path: str, modified: datetime):
    """
    Set access and modification time of a file.

    Args:
        file_path: Path to the file
        modified: New timestamp (naive values are treated as UTC)
    """
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    timestamp = modified.timestamp()
    os.utime(file_path, (timestamp, timestamp))


def content_type_from_name(file_path: str) -> str:
    """
    Guess the MIME type of a file from its name.

    Only the extension is looked at; the file is not opened.

    Args:
        file_path: Path or name of the file

    Returns:
        MIME type, application/octet-stream if unknown
    """
    content_type, encoding = mimetypes.guess_type(file_path)
    if content_type is None:
        return DEFAULT_CONTENT_TYPE
    return content_type


def ensure_directory(directory: str) -> bool:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: Directory path

    Returns:
        True if the directory exists or was created

    Raises:
        OSError: If the directory cannot be created
    """
    if not directory:
        return True
    os.makedirs(directory, exist_ok=True)
    return True


def get_file_size_mb(size_bytes: Optional[int]) -> float:
    """
    Convert a byte count to megabytes.

    Args:
        size_bytes: Size in bytes

    Returns:
        Size in MB
    """
    return (size_bytes or 0) / (1024 * 1024)
