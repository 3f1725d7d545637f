"""
Storage contract shared by every backend.

Provides:
- Backend: the local/remote root pair each storage resolves file names against
- Storage: abstract base class every backend implements
- PruneResult: outcome of a retention pass
- StorageError and its subclasses
"""

import os
import posixpath
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional


class StorageError(Exception):
    """Raised when a storage operation fails."""
    pass


class ConfigurationError(StorageError):
    """Raised when a backend is built with missing or invalid credentials."""
    pass


class StorageConnectionError(StorageError):
    """Raised when connecting or authenticating to a remote server fails."""
    pass


class TransferError(StorageError):
    """Raised when reading, writing or transferring a file fails."""
    pass


class StorageFileNotFoundError(StorageError, FileNotFoundError):
    """Raised when the source file of a copy does not exist."""
    pass


class Backend:
    """
    Local and remote root directories of a storage backend.

    Every file operation joins one of these roots with a relative file name,
    the same name on both sides.
    """

    __slots__ = ('_local_path', '_remote_path')

    def __init__(self, local_path: str, remote_path: str):
        if not local_path:
            raise ConfigurationError("local path is required")
        if not remote_path:
            raise ConfigurationError("remote path is required")
        self._local_path = str(local_path)
        self._remote_path = str(remote_path)

    @property
    def local_path(self) -> str:
        return self._local_path

    @property
    def remote_path(self) -> str:
        return self._remote_path

    def local_file(self, file_name: str) -> str:
        """Full local path of file_name."""
        return os.path.join(self._local_path, file_name)

    def remote_file(self, file_name: str) -> str:
        """Full remote path of file_name, using POSIX separators."""
        return posixpath.join(self._remote_path, file_name)

    def remote_key(self, file_name: str) -> str:
        """Object key of file_name for blob stores (no leading slash)."""
        return self.remote_file(file_name).lstrip('/')

    def __eq__(self, other):
        if not isinstance(other, Backend):
            return NotImplemented
        return (self._local_path, self._remote_path) == (other._local_path, other._remote_path)

    def __hash__(self):
        return hash((self._local_path, self._remote_path))

    def __repr__(self):
        return f"Backend(local_path={self._local_path!r}, remote_path={self._remote_path!r})"


class PruneStatus(Enum):
    PRUNED = 'pruned'
    UNSUPPORTED = 'unsupported'


class PruneResult:
    """
    Outcome of Storage.prune().

    An UNSUPPORTED result is not a failure: the backend cannot delete old
    files, so nothing was touched.
    """

    def __init__(self, status: PruneStatus, deleted: Optional[List[str]] = None):
        self.status = status
        self.deleted = list(deleted or [])

    @classmethod
    def unsupported(cls) -> 'PruneResult':
        return cls(PruneStatus.UNSUPPORTED)

    @property
    def supported(self) -> bool:
        return self.status is PruneStatus.PRUNED

    def __repr__(self):
        return f"PruneResult(status={self.status.value!r}, deleted={len(self.deleted)})"


class Storage(ABC):
    """Abstract base class for storage backends."""

    def __init__(self, local_path: str, remote_path: str):
        self.backend = Backend(local_path, remote_path)

    @property
    @abstractmethod
    def name(self) -> str:
        """Fixed label identifying the backend."""
        pass

    @abstractmethod
    def copy(self, file_name: str) -> None:
        """
        Transfer file_name from the local root to the remote root.

        Args:
            file_name: Name of the file relative to both roots

        Raises:
            StorageError: If any step of the transfer fails
        """
        pass

    @abstractmethod
    def copy_from(self, file_name: str) -> None:
        """
        Transfer file_name from the remote root to the local root.

        Args:
            file_name: Name of the file relative to both roots

        Raises:
            StorageError: If any step of the transfer fails
        """
        pass

    @abstractmethod
    def prune(self, retention_days: int) -> PruneResult:
        """
        Delete files under the remote root older than retention_days.

        Args:
            retention_days: Age threshold in days

        Returns:
            PruneResult listing the deleted files, or an UNSUPPORTED result

        Raises:
            StorageError: If listing or deleting fails
        """
        pass

    def __repr__(self):
        return f"<{type(self).__name__} {self.name} {self.backend!r}>"
