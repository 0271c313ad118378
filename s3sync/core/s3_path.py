"""
S3 Path Resolution

Classifies sync endpoints as S3 URLs or local paths, splits S3 URLs into
bucket and key prefix, and decides the sync direction.

Author: s3sync Project
License: MIT
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple, Union
from urllib.parse import urlparse, ParseResult

from .errors import MissingBucketError, UnsupportedDirectionError

S3_SCHEME = "s3"


class SyncDirection(Enum):
    """Direction of a sync call."""
    S3_TO_LOCAL = "s3_to_local"
    LOCAL_TO_S3 = "local_to_s3"


@dataclass(frozen=True)
class S3Path:
    """Bucket and key prefix of an S3 endpoint."""
    bucket: str
    prefix: str = ""

    def with_prefix(self, prefix: str) -> "S3Path":
        """Return a copy pointing at another key."""
        return replace(self, prefix=prefix)

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.prefix}"


def is_s3_url(url: ParseResult) -> bool:
    """Check whether a parsed URL uses the s3 scheme."""
    return url.scheme == S3_SCHEME


def url_to_s3_path(url: ParseResult) -> S3Path:
    """
    Convert a parsed s3:// URL into an S3Path.

    Args:
        url: Result of urllib.parse.urlparse

    Returns:
        S3Path with the leading slash stripped from the prefix

    Raises:
        MissingBucketError: If the URL has no host part
    """
    if not url.netloc:
        raise MissingBucketError()

    return S3Path(
        bucket=url.netloc,
        prefix=url.path.replace("\\", "/").lstrip("/")
    )


def resolve_direction(
    source: str,
    dest: str
) -> Tuple[SyncDirection, Union[S3Path, str], Union[S3Path, str]]:
    """
    Work out which side is S3 and which side is local.

    Args:
        source: Source endpoint (s3:// URL or local path)
        dest: Destination endpoint (s3:// URL or local path)

    Returns:
        Tuple of (direction, resolved source, resolved destination). S3
        endpoints are returned as S3Path, local ones as the original string.

    Raises:
        MissingBucketError: If an S3 URL has no bucket
        UnsupportedDirectionError: For S3 to S3 and local to local syncs
    """
    source_url = urlparse(source)
    dest_url = urlparse(dest)

    if is_s3_url(source_url):
        source_path = url_to_s3_path(source_url)
        if is_s3_url(dest_url):
            url_to_s3_path(dest_url)
            raise UnsupportedDirectionError("S3 to S3 sync feature is not implemented")
        return SyncDirection.S3_TO_LOCAL, source_path, dest

    if is_s3_url(dest_url):
        return SyncDirection.LOCAL_TO_S3, source, url_to_s3_path(dest_url)

    raise UnsupportedDirectionError("local to local sync is not supported")
