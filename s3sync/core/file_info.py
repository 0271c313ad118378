"""
File Descriptors

Data carried from the listing producers through the diff engine to the
sync workers.

Author: s3sync Project
License: MIT
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class Operation(Enum):
    """Kind of change needed on the destination."""
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class FileInfo:
    """
    One file on either side of a sync.

    Attributes:
        name: Name relative to the sync root, always with "/" separators
        path: Absolute local path or full object key
        size: Size in bytes
        last_modified: Modification time (timezone aware, UTC)
        single_file: True when the sync root itself names this file
        error: Listing failure carried in place of a file
        exists_in_source: Set by the diff engine on destination entries
    """
    name: str = ""
    path: str = ""
    size: int = 0
    last_modified: datetime = EPOCH
    single_file: bool = False
    error: Optional[BaseException] = None
    exists_in_source: bool = field(default=False, compare=False)

    @classmethod
    def from_error(cls, error: BaseException) -> "FileInfo":
        """Create a descriptor that only carries a listing error."""
        return cls(error=error)

    def __repr__(self) -> str:
        if self.error is not None:
            return f"FileInfo(error={self.error!r})"
        return f"FileInfo(name={self.name}, size={self.size}, single_file={self.single_file})"


@dataclass(frozen=True)
class SyncOperation:
    """A file paired with the change to apply for it."""
    file: FileInfo
    op: Operation = Operation.UPDATE

    @property
    def error(self) -> Optional[BaseException]:
        return self.file.error
