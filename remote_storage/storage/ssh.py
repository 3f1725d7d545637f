"""
SSH storage backend using paramiko.

Files are transferred over an SFTP channel of a fresh SSH connection opened
for each copy and closed before the call returns.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import paramiko
from paramiko import SSHClient, AutoAddPolicy

from ..config import Config
from .base import (
    Storage,
    PruneResult,
    ConfigurationError,
    StorageConnectionError,
    StorageFileNotFoundError,
    TransferError,
)

logger = logging.getLogger(__name__)


class SSHStorage(Storage):
    """
    Handler for transferring files to and from a remote host via SSH.

    Authenticates with the private key in identify_file when that file
    exists, otherwise with the password. Host keys are not verified.
    """

    def __init__(
        self,
        host: str,
        user: str,
        local_path: str,
        remote_path: str,
        password: Optional[str] = None,
        identify_file: Optional[str] = None,
        port: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize SSH storage handler.

        Args:
            host: SSH hostname or IP
            user: SSH username
            local_path: Local root directory
            remote_path: Remote root directory
            password: SSH password (used when no private key file is found)
            identify_file: Path to private key file
            port: SSH port (default 22)
            timeout: Connection timeout in seconds (default 30)

        Raises:
            ConfigurationError: If neither a key file nor a password is usable
        """
        super().__init__(local_path, remote_path)
        self.host = host
        self.port = int(port or Config.DEFAULT_SSH_PORT)
        self.user = user
        self.timeout = timeout if timeout is not None else Config.SSH_TIMEOUT

        key_path = Path(identify_file).expanduser() if identify_file else None
        if key_path is not None and key_path.is_file():
            self.auth_method = 'key'
            self._auth_kwargs = {'key_filename': str(key_path), 'look_for_keys': False}
        elif password:
            self.auth_method = 'password'
            self._auth_kwargs = {'password': password, 'look_for_keys': False, 'allow_agent': False}
        else:
            raise ConfigurationError("SSH password required")

    @property
    def name(self) -> str:
        return 'ssh'

    def _connect(self) -> Tuple[SSHClient, paramiko.SFTPClient]:
        """
        Establish SSH connection and open an SFTP channel.

        Raises:
            StorageConnectionError: If connecting or authenticating fails
        """
        ssh_client = SSHClient()
        ssh_client.set_missing_host_key_policy(AutoAddPolicy())

        try:
            ssh_client.connect(
                hostname=self.host,
                port=self.port,
                username=self.user,
                timeout=self.timeout,
                **self._auth_kwargs
            )
            sftp_client = ssh_client.open_sftp()
        except paramiko.AuthenticationException as e:
            ssh_client.close()
            raise StorageConnectionError(f"SSH authentication failed for {self.user}@{self.host}: {e}") from e
        except (paramiko.SSHException, OSError) as e:
            ssh_client.close()
            raise StorageConnectionError(
                f"Couldn't establish a connection to {self.host}:{self.port}: {e}"
            ) from e

        logger.debug(f"SSH session opened to {self.host}:{self.port} ({self.auth_method} auth)")
        return ssh_client, sftp_client

    def copy(self, file_name: str) -> None:
        """Upload file_name to the remote host."""
        local_file = self.backend.local_file(file_name)
        remote_file = self.backend.remote_file(file_name)

        ssh_client, sftp_client = self._connect()
        try:
            try:
                f = open(local_file, 'rb')
            except FileNotFoundError as e:
                raise StorageFileNotFoundError(f"Failed to open file {local_file}: {e}") from e
            except OSError as e:
                raise TransferError(f"Failed to open file {local_file}: {e}") from e

            with f:
                try:
                    sftp_client.putfo(f, remote_file, confirm=False)
                    sftp_client.chmod(remote_file, Config.SSH_FILE_MODE)
                except (paramiko.SSHException, OSError) as e:
                    raise TransferError(f"Failed to copy file to remote server: {e}") from e

            logger.info(f"Uploaded {local_file} to ssh://{self.host}{remote_file}")
        finally:
            _close(ssh_client, sftp_client)

    def copy_from(self, file_name: str) -> None:
        """Download file_name from the remote host."""
        local_file = self.backend.local_file(file_name)
        remote_file = self.backend.remote_file(file_name)

        ssh_client, sftp_client = self._connect()
        try:
            try:
                out = open(local_file, 'wb')
            except OSError as e:
                raise TransferError(f"Couldn't open the output file {local_file}: {e}") from e

            with out:
                try:
                    sftp_client.getfo(remote_file, out)
                except FileNotFoundError as e:
                    raise StorageFileNotFoundError(f"Remote file not found: {remote_file}") from e
                except (paramiko.SSHException, OSError) as e:
                    raise TransferError(f"Failed to copy file from remote server: {e}") from e

            logger.info(f"Downloaded ssh://{self.host}{remote_file} to {local_file}")
        finally:
            _close(ssh_client, sftp_client)

    def prune(self, retention_days: int) -> PruneResult:
        """Deleting old files from an SSH host is not supported."""
        logger.info("Deleting old files from an SSH host is not supported, skipping prune")
        return PruneResult.unsupported()


def _close(ssh_client: SSHClient, sftp_client: paramiko.SFTPClient):
    """Close SFTP channel and SSH connection."""
    try:
        sftp_client.close()
    except (paramiko.SSHException, OSError) as e:
        logger.debug(f"Failed to close SFTP channel: {e}")
    ssh_client.close()
    logger.debug("SSH session closed")
