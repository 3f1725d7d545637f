"""
Unit tests for the Azure Blob backend (remote_storage/storage/azure.py).

BlobServiceClient is mocked; blobs are kept in memory by the
mock_blob_service fixture.
"""

from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import HttpResponseError, ServiceRequestError

from remote_storage.storage.azure import AzureStorage
from remote_storage.storage.base import (
    PruneStatus,
    ConfigurationError,
    StorageFileNotFoundError,
    TransferError,
)


def _make_storage(local_root, **kwargs):
    options = {
        'account_name': 'backupaccount',
        'account_key': 'c2VjcmV0LWtleQ==',
        'container_name': 'backups',
        'local_path': str(local_root),
        'remote_path': '/nightly',
    }
    options.update(kwargs)
    return AzureStorage(**options)


class TestAzureStorageClient:
    """Test client construction."""

    def test_client_created_once(self, mock_blob_service, local_root, sample_file):
        """Test one long-lived client is shared by every operation."""
        mock_service, _ = mock_blob_service

        storage = _make_storage(local_root)
        storage.copy('report.csv')
        storage.copy_from('report.csv')

        mock_service.assert_called_once()
        call_kwargs = mock_service.call_args[1]
        assert call_kwargs['account_url'] == 'https://backupaccount.blob.core.windows.net/'
        assert call_kwargs['credential'] == {
            'account_name': 'backupaccount',
            'account_key': 'c2VjcmV0LWtleQ==',
        }
        assert storage.name == 'azure'

    def test_custom_account_url(self, mock_blob_service, local_root):
        mock_service, _ = mock_blob_service

        _make_storage(local_root, account_url='http://127.0.0.1:10000/devstoreaccount1')

        assert mock_service.call_args[1]['account_url'] == 'http://127.0.0.1:10000/devstoreaccount1'

    @pytest.mark.parametrize('missing', ['account_name', 'account_key', 'container_name'])
    def test_missing_credentials(self, mock_blob_service, local_root, missing):
        """Test that missing credentials raise instead of terminating."""
        with pytest.raises(ConfigurationError):
            _make_storage(local_root, **{missing: ''})

    def test_client_creation_failure(self, mock_blob_service, local_root):
        mock_service, _ = mock_blob_service
        mock_service.side_effect = ValueError('Invalid base64-encoded string')

        with pytest.raises(ConfigurationError, match='Failed to create Azure client'):
            _make_storage(local_root)


class TestAzureStorageTransfer:
    """Test copy and copy_from."""

    def test_copy_uploads_blob(self, mock_blob_service, local_root, sample_file):
        """Test that the blob name is the remote root joined with the file name."""
        _, blobs = mock_blob_service

        _make_storage(local_root).copy('report.csv')

        assert blobs[('backups', 'nightly/report.csv')] == sample_file.read_bytes()

    def test_round_trip(self, mock_blob_service, tmp_path, local_root, sample_file):
        """Test copy followed by copy_from into an empty local root."""
        _make_storage(local_root).copy('report.csv')

        restore_root = tmp_path / 'restore'
        restore_root.mkdir()
        _make_storage(restore_root).copy_from('report.csv')

        assert (restore_root / 'report.csv').read_bytes() == sample_file.read_bytes()

    def test_copy_twice_is_idempotent(self, mock_blob_service, local_root, sample_file):
        _, blobs = mock_blob_service
        storage = _make_storage(local_root)

        storage.copy('report.csv')
        storage.copy('report.csv')

        assert blobs[('backups', 'nightly/report.csv')] == sample_file.read_bytes()

    def test_copy_missing_local_file(self, mock_blob_service, local_root):
        _, blobs = mock_blob_service

        with pytest.raises(StorageFileNotFoundError):
            _make_storage(local_root).copy('missing.csv')

        assert blobs == {}

    def test_copy_upload_failure_raises(self, mock_blob_service, local_root, sample_file):
        """Test that an upload failure is returned as an error."""
        mock_service, _ = mock_blob_service
        blob_client = MagicMock()
        blob_client.upload_blob.side_effect = HttpResponseError(message='AuthenticationFailed')
        mock_service.return_value.get_blob_client.side_effect = None
        mock_service.return_value.get_blob_client.return_value = blob_client

        with pytest.raises(TransferError, match='Failed to upload file'):
            _make_storage(local_root).copy('report.csv')

    def test_copy_from_missing_blob(self, mock_blob_service, local_root):
        with pytest.raises(StorageFileNotFoundError, match='Blob not found'):
            _make_storage(local_root).copy_from('missing.csv')

        assert not (local_root / 'missing.csv').exists()

    def test_copy_from_download_failure(self, mock_blob_service, local_root):
        mock_service, _ = mock_blob_service
        blob_client = MagicMock()
        blob_client.download_blob.side_effect = ServiceRequestError('Connection aborted')
        mock_service.return_value.get_blob_client.side_effect = None
        mock_service.return_value.get_blob_client.return_value = blob_client

        with pytest.raises(TransferError):
            _make_storage(local_root).copy_from('report.csv')

    def test_copy_from_write_failure_raises(self, mock_blob_service, tmp_path):
        """Test that a local write failure is returned as an error."""
        _, blobs = mock_blob_service
        blobs[('backups', 'nightly/report.csv')] = b'data'

        with pytest.raises(TransferError, match='Failed to write blob to file'):
            _make_storage(tmp_path / 'no-such-dir').copy_from('report.csv')


class TestAzureStoragePrune:
    """Test that pruning is reported as unsupported."""

    def test_prune_is_unsupported(self, mock_blob_service, local_root):
        mock_service, blobs = mock_blob_service
        blobs[('backups', 'nightly/old.bak')] = b'old'

        result = _make_storage(local_root).prune(1)

        assert result.status is PruneStatus.UNSUPPORTED
        assert ('backups', 'nightly/old.bak') in blobs
        mock_service.return_value.get_blob_client.assert_not_called()
