"""
Diff Engine

Compares a source listing against a destination listing and yields the
operations needed to make the destination match the source.

Author: s3sync Project
License: MIT
"""

from dataclasses import replace
from typing import Dict, Iterable, Iterator, Optional

from .errors import ListingError
from .file_info import FileInfo, Operation, SyncOperation
from ..utils.logger import get_logger

logger = get_logger(__name__)


def file_infos_to_map(files: Iterable[FileInfo]) -> Dict[str, FileInfo]:
    """
    Collect a listing into a dict keyed by relative name.

    Args:
        files: Listing to drain

    Returns:
        Dictionary of name -> FileInfo

    Raises:
        ListingError: On the first error-carrying item
    """
    result: Dict[str, FileInfo] = {}
    for file in files:
        if file.error is not None:
            if isinstance(file.error, ListingError):
                raise file.error
            raise ListingError(str(file.error)) from file.error
        result[file.name] = file
    return result


def needs_update(source: FileInfo, dest: FileInfo) -> bool:
    """
    Decide whether a source file must be copied over its destination.

    A file is stale if the sizes differ or the source is strictly newer.
    Equal size with equal or older source time counts as in sync.
    """
    if source.size != dest.size:
        return True
    return source.last_modified > dest.last_modified


def filter_files_for_sync(
    source_files: Iterable[FileInfo],
    dest_files: Iterable[FileInfo],
    delete: bool,
    target_name: Optional[str] = None
) -> Iterator[SyncOperation]:
    """
    Yield the operations that converge the destination onto the source.

    The destination listing is drained completely on the first call to
    next(); the source listing is then streamed. Error items in the source
    listing are passed through as operations carrying the error.

    When the destination names one exact file, target_name is its base
    name. A single-file source is then compared under that name, and
    nothing is deleted since the target is the only file in scope.

    Args:
        source_files: Listing of the side driving the sync
        dest_files: Listing of the side being updated
        delete: Also yield deletes for destination-only files
        target_name: Base name of an exact destination file, if any

    Yields:
        SyncOperation items

    Raises:
        ListingError: If the destination listing contains an error
    """
    dest_map = file_infos_to_map(dest_files)
    logger.debug(f"Destination has {len(dest_map)} file(s)")

    exact_target = False
    for source in source_files:
        if source.error is not None:
            yield SyncOperation(source)
            continue

        if source.single_file and target_name is not None:
            source = replace(source, name=target_name)
            exact_target = True

        dest = dest_map.get(source.name)
        if dest is None or needs_update(source, dest):
            yield SyncOperation(source, Operation.UPDATE)
        if dest is not None:
            dest.exists_in_source = True

    if delete and not exact_target:
        for dest in dest_map.values():
            if not dest.exists_in_source:
                yield SyncOperation(dest, Operation.DELETE)
