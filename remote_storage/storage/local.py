"""
Local filesystem storage backend.

Copies files between two directories of the same filesystem; the remote
root is just another local directory (a mounted share, a second disk).
"""

import logging
import os
import shutil
import stat

from .base import Storage, PruneResult, PruneStatus, StorageFileNotFoundError, TransferError
from .retention import cutoff_timestamp, is_expired

logger = logging.getLogger(__name__)


class LocalStorage(Storage):
    """
    Handler for storing files in a local directory.

    Directories are not created: both roots must already exist.
    """

    @property
    def name(self) -> str:
        return 'local'

    def copy(self, file_name: str) -> None:
        """Copy file_name from the local root into the remote root."""
        source = self.backend.local_file(file_name)
        destination = os.path.join(self.backend.remote_path, file_name)
        _copy_file(source, destination)
        logger.info(f"Copied {source} to {destination}")

    def copy_from(self, file_name: str) -> None:
        """Copy file_name from the remote root into the local root."""
        source = os.path.join(self.backend.remote_path, file_name)
        destination = self.backend.local_file(file_name)
        _copy_file(source, destination)
        logger.info(f"Copied {source} to {destination}")

    def prune(self, retention_days: int) -> PruneResult:
        """
        Delete regular files under the remote root older than retention_days.

        Directories, symlinks and special files are never removed. The first
        error aborts the walk; files deleted before it stay deleted.
        """
        cutoff = cutoff_timestamp(retention_days)
        deleted = []

        def on_error(error: OSError):
            raise error

        try:
            for directory, _, file_names in os.walk(self.backend.remote_path, onerror=on_error):
                for file_name in file_names:
                    file_path = os.path.join(directory, file_name)
                    file_stat = os.lstat(file_path)

                    if not stat.S_ISREG(file_stat.st_mode):
                        continue

                    if is_expired(file_stat.st_mtime, cutoff):
                        os.remove(file_path)
                        deleted.append(file_path)
                        logger.info(f"Deleted expired file: {file_path}")

        except OSError as e:
            raise TransferError(f"Failed to prune {self.backend.remote_path}: {e}") from e

        logger.info(
            f"Prune of {self.backend.remote_path} complete "
            f"(retention: {retention_days} days, deleted: {len(deleted)})"
        )
        return PruneResult(PruneStatus.PRUNED, deleted)


def _copy_file(source: str, destination: str):
    """
    Stream source into destination, creating or truncating it.

    Raises:
        StorageFileNotFoundError: If source does not exist
        TransferError: If source and destination are the same file, or reading or writing fails
    """
    if not os.path.exists(source):
        raise StorageFileNotFoundError(f"Source file not found: {source}")
    if os.path.exists(destination) and os.path.samefile(source, destination):
        raise TransferError(f"Source and destination are the same file: {source}")

    try:
        with open(source, 'rb') as src, open(destination, 'wb') as dst:
            shutil.copyfileobj(src, dst)
    except PermissionError as e:
        raise TransferError(f"Permission denied copying {source} to {destination}: {e}") from e
    except OSError as e:
        raise TransferError(f"Failed to copy {source} to {destination}: {e}") from e
