"""
FTP storage backend using ftplib.

Every copy runs in its own control session, which is closed before the call
returns. The session opened by the constructor checks that the server is
reachable and the credentials are valid, and serves the first operation.
"""

import ftplib
import logging
import shutil
from ftplib import FTP
from typing import Optional

from ..config import Config
from .base import (
    Storage,
    PruneResult,
    StorageConnectionError,
    StorageFileNotFoundError,
    TransferError,
)

logger = logging.getLogger(__name__)


class FTPStorage(Storage):
    """Handler for transferring files to and from an FTP server."""

    def __init__(
        self,
        host: str,
        user: str,
        password: str,
        local_path: str,
        remote_path: str,
        port: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize FTP storage handler and log in to the server.

        Args:
            host: FTP hostname or IP
            user: FTP username
            password: FTP password
            local_path: Local root directory
            remote_path: Remote root directory
            port: FTP port (default 21)
            timeout: Connection timeout in seconds (default 5)

        Raises:
            StorageConnectionError: If the server cannot be reached or login fails
        """
        super().__init__(local_path, remote_path)
        self.host = host
        self.port = int(port or Config.DEFAULT_FTP_PORT)
        self.user = user
        self._password = password
        self.timeout = timeout if timeout is not None else Config.FTP_TIMEOUT

        self._client = self._connect()

    @property
    def name(self) -> str:
        return 'ftp'

    def _connect(self) -> FTP:
        """
        Open and authenticate a control connection.

        Raises:
            StorageConnectionError: If connecting or logging in fails
        """
        client = FTP()
        try:
            client.connect(self.host, self.port, timeout=self.timeout)
        except (OSError, EOFError, ftplib.Error) as e:
            raise StorageConnectionError(
                f"Failed to connect to FTP {self.host}:{self.port}: {e}"
            ) from e

        # The timeout only bounds the dial; transfers may block as long as needed
        client.sock.settimeout(None)
        client.timeout = None

        try:
            client.login(self.user, self._password)
        except (OSError, EOFError, ftplib.Error) as e:
            _close(client)
            raise StorageConnectionError(f"Failed to log in to FTP as {self.user}: {e}") from e

        logger.debug(f"FTP session opened to {self.host}:{self.port}")
        return client

    def _session(self) -> FTP:
        """Hand out the pending session if the server still answers, or open a new one."""
        client, self._client = self._client, None
        if client is not None:
            try:
                client.voidcmd('NOOP')
                return client
            except (OSError, EOFError, ftplib.Error) as e:
                logger.debug(f"Pending FTP session is no longer usable ({e}), reconnecting")
                _close(client)
        return self._connect()

    def copy(self, file_name: str) -> None:
        """Upload file_name to the FTP server."""
        local_file = self.backend.local_file(file_name)
        remote_file = self.backend.remote_file(file_name)

        client = self._session()
        try:
            try:
                f = open(local_file, 'rb')
            except FileNotFoundError as e:
                raise StorageFileNotFoundError(f"Failed to open file {file_name}: {e}") from e
            except OSError as e:
                raise TransferError(f"Failed to open file {file_name}: {e}") from e

            with f:
                try:
                    client.storbinary(f'STOR {remote_file}', f)
                except (OSError, EOFError, ftplib.Error) as e:
                    raise TransferError(f"Failed to upload file {local_file}: {e}") from e

            logger.info(f"Uploaded {local_file} to ftp://{self.host}{remote_file}")
        finally:
            _quit(client)

    def copy_from(self, file_name: str) -> None:
        """Download file_name from the FTP server."""
        local_file = self.backend.local_file(file_name)
        remote_file = self.backend.remote_file(file_name)

        client = self._session()
        try:
            # The local file is only opened once the server has accepted RETR
            try:
                client.voidcmd('TYPE I')
                conn = client.transfercmd(f'RETR {remote_file}')
            except ftplib.error_perm as e:
                if str(e).startswith('550'):
                    raise StorageFileNotFoundError(
                        f"Failed to retrieve file {file_name}: {e}"
                    ) from e
                raise TransferError(f"Failed to retrieve file {file_name}: {e}") from e
            except (OSError, EOFError, ftplib.Error) as e:
                raise TransferError(f"Failed to retrieve file {file_name}: {e}") from e

            with conn:
                try:
                    out = open(local_file, 'wb')
                except OSError as e:
                    raise TransferError(f"Failed to create local file {file_name}: {e}") from e

                with out:
                    try:
                        with conn.makefile('rb') as stream:
                            shutil.copyfileobj(stream, out)
                    except OSError as e:
                        raise TransferError(f"Failed to retrieve file {file_name}: {e}") from e

            try:
                client.voidresp()
            except (OSError, EOFError, ftplib.Error) as e:
                raise TransferError(f"Failed to retrieve file {file_name}: {e}") from e

            logger.info(f"Downloaded ftp://{self.host}{remote_file} to {local_file}")
        finally:
            _quit(client)

    def prune(self, retention_days: int) -> PruneResult:
        """Deleting old files from an FTP server is not supported."""
        logger.info("Deleting old files from an FTP server is not supported, skipping prune")
        return PruneResult.unsupported()


def _quit(client: FTP):
    """Send QUIT, closing the socket if the server does not answer."""
    try:
        client.quit()
    except (OSError, EOFError, ftplib.Error) as e:
        logger.debug(f"FTP QUIT failed ({e}), closing connection")
        _close(client)
    else:
        logger.debug("FTP session closed")


def _close(client: FTP):
    try:
        client.close()
    except OSError as e:
        logger.debug(f"Failed to close FTP connection: {e}")
