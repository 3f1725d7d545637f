"""
Shared pytest fixtures for remote-storage tests.

This module provides fixtures for:
- Local and remote root directories with sample files
- Mock fixtures for external services (FTP, SSH, Azure Blob, S3)

The FTP, SSH and Azure mocks keep uploaded files in a dict so that a
copy followed by copy_from can be checked end to end.
"""

import ftplib
import io
import logging
from unittest.mock import MagicMock, patch

import pytest
import boto3
from azure.core.exceptions import ResourceNotFoundError
from moto import mock_aws


@pytest.fixture
def local_root(tmp_path):
    """Local root directory."""
    path = tmp_path / 'local'
    path.mkdir()
    return path


@pytest.fixture
def remote_root(tmp_path):
    """Remote root directory for the local backend."""
    path = tmp_path / 'remote'
    path.mkdir()
    return path


@pytest.fixture
def sample_file(local_root):
    """
    Create report.csv in the local root.
    """
    path = local_root / 'report.csv'
    path.write_bytes(b'date,amount\n2024-01-15,100\n2024-01-16,250\n' * 50)
    return path


class FakeDataConnection:
    """Stand-in for the data socket returned by FTP.transfercmd."""

    def __init__(self, data):
        self.data = data
        self.closed = False

    def makefile(self, mode='rb'):
        return io.BytesIO(self.data)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def mock_ftp():
    """
    Mock ftplib.FTP as used by the FTP backend.

    Yields (FTP class mock, remote files dict keyed by remote path).
    """
    remote_files = {}

    def storbinary(cmd, fp, *args, **kwargs):
        remote_files[cmd[len('STOR '):]] = fp.read()
        return '226 Transfer complete.'

    def transfercmd(cmd, rest=None):
        path = cmd[len('RETR '):]
        if path not in remote_files:
            raise ftplib.error_perm('550 Failed to open file.')
        return FakeDataConnection(remote_files[path])

    with patch('remote_storage.storage.ftp.FTP') as mock_ftp_class:
        client = mock_ftp_class.return_value
        client.connect.return_value = '220 Welcome'
        client.login.return_value = '230 Login successful.'
        client.voidcmd.return_value = '200 Command okay.'
        client.storbinary.side_effect = storbinary
        client.transfercmd.side_effect = transfercmd
        client.voidresp.return_value = '226 Transfer complete.'
        client.quit.return_value = '221 Goodbye.'

        yield mock_ftp_class, remote_files


@pytest.fixture
def mock_ssh_client():
    """
    Mock paramiko SSHClient for SSH/SFTP testing.

    Yields (SSHClient class mock, SFTP client mock, remote files dict).
    """
    remote_files = {}

    def putfo(fl, remotepath, file_size=0, callback=None, confirm=True):
        remote_files[remotepath] = fl.read()

    def getfo(remotepath, fl, callback=None, prefetch=True, max_concurrent_prefetch_requests=None):
        if remotepath not in remote_files:
            raise FileNotFoundError(2, 'No such file')
        fl.write(remote_files[remotepath])
        return len(remote_files[remotepath])

    with patch('remote_storage.storage.ssh.SSHClient') as mock_ssh:
        mock_sftp = MagicMock()
        mock_sftp.putfo.side_effect = putfo
        mock_sftp.getfo.side_effect = getfo
        mock_ssh.return_value.open_sftp.return_value = mock_sftp

        # Mock connection success
        mock_ssh.return_value.connect.return_value = None

        yield mock_ssh, mock_sftp, remote_files


class FakeDownloader:
    """Stand-in for azure StorageStreamDownloader."""

    def __init__(self, data):
        self.data = data

    def readinto(self, stream):
        stream.write(self.data)
        return len(self.data)


class FakeBlobClient:
    """Stand-in for azure BlobClient backed by a dict."""

    def __init__(self, blobs, container, blob):
        self.blobs = blobs
        self.container_name = container
        self.blob_name = blob

    def upload_blob(self, data, overwrite=False, **kwargs):
        self.blobs[(self.container_name, self.blob_name)] = data.read()

    def download_blob(self, **kwargs):
        key = (self.container_name, self.blob_name)
        if key not in self.blobs:
            raise ResourceNotFoundError('The specified blob does not exist.')
        return FakeDownloader(self.blobs[key])


@pytest.fixture
def mock_blob_service():
    """
    Mock azure BlobServiceClient.

    Yields (BlobServiceClient class mock, blobs dict keyed by (container, blob)).
    """
    blobs = {}

    with patch('remote_storage.storage.azure.BlobServiceClient') as mock_service:
        mock_service.return_value.get_blob_client.side_effect = (
            lambda container, blob: FakeBlobClient(blobs, container, blob)
        )
        yield mock_service, blobs


@pytest.fixture
def mock_s3():
    """
    Mock AWS S3 service using moto.

    Creates a test bucket 'test-bucket' in us-east-1 region.
    """
    with mock_aws():
        s3 = boto3.resource('s3', region_name='us-east-1')
        s3.create_bucket(Bucket='test-bucket')

        yield s3


@pytest.fixture
def reset_logging():
    """Remove handlers added to the remote_storage logger by a test."""
    logger = logging.getLogger('remote_storage')
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
