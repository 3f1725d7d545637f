"""
Azure Blob Storage backend using azure-storage-blob.

One BlobServiceClient is built per handler and shared by every operation.
Blob names are the remote root joined with the file name.
"""

import logging
from typing import Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from ..config import Config
from .base import (
    Storage,
    PruneResult,
    ConfigurationError,
    StorageFileNotFoundError,
    TransferError,
)

logger = logging.getLogger(__name__)


class AzureStorage(Storage):
    """Handler for uploading files to and downloading from Azure Blob Storage."""

    def __init__(
        self,
        account_name: str,
        account_key: str,
        container_name: str,
        local_path: str,
        remote_path: str,
        account_url: Optional[str] = None
    ):
        """
        Initialize Azure storage handler.

        Args:
            account_name: Storage account name
            account_key: Storage account shared key
            container_name: Blob container name
            local_path: Local root directory
            remote_path: Blob name prefix used as remote root
            account_url: Blob service URL (default derived from account_name)

        Raises:
            ConfigurationError: If credentials are missing or the client cannot be created
        """
        super().__init__(local_path, remote_path)

        if not account_name or not account_key:
            raise ConfigurationError("Azure account name and account key are required")
        if not container_name:
            raise ConfigurationError("Azure container name is required")

        self.account_name = account_name
        self.container_name = container_name
        self.account_url = account_url or Config.AZURE_ACCOUNT_URL.format(account_name=account_name)

        try:
            self.client = BlobServiceClient(
                account_url=self.account_url,
                credential={'account_name': account_name, 'account_key': account_key}
            )
        except (ValueError, AzureError) as e:
            raise ConfigurationError(f"Failed to create Azure client: {e}") from e

    @property
    def name(self) -> str:
        return 'azure'

    def _blob_client(self, blob_name: str):
        return self.client.get_blob_client(
            container=self.container_name,
            blob=blob_name
        )

    def copy(self, file_name: str) -> None:
        """Upload file_name as a single blob, replacing any existing one."""
        local_file = self.backend.local_file(file_name)

        try:
            f = open(local_file, 'rb')
        except FileNotFoundError as e:
            raise StorageFileNotFoundError(f"Failed to open file {file_name}: {e}") from e
        except OSError as e:
            raise TransferError(f"Failed to open file {file_name}: {e}") from e

        blob_name = self.backend.remote_key(file_name)
        blob_client = self._blob_client(blob_name)
        with f:
            try:
                blob_client.upload_blob(f, overwrite=True)
            except AzureError as e:
                raise TransferError(f"Failed to upload file {file_name}: {e}") from e

        logger.info(f"Uploaded {local_file} to azure://{self.container_name}/{blob_name}")

    def copy_from(self, file_name: str) -> None:
        """Download the blob for file_name into the local root."""
        local_file = self.backend.local_file(file_name)
        blob_name = self.backend.remote_key(file_name)
        blob_client = self._blob_client(blob_name)

        try:
            downloader = blob_client.download_blob()
        except ResourceNotFoundError as e:
            raise StorageFileNotFoundError(
                f"Blob not found: {self.container_name}/{blob_name}"
            ) from e
        except AzureError as e:
            raise TransferError(f"Failed to download blob {blob_name}: {e}") from e

        try:
            with open(local_file, 'wb') as out:
                downloader.readinto(out)
        except AzureError as e:
            raise TransferError(f"Failed to download blob {blob_name}: {e}") from e
        except OSError as e:
            raise TransferError(f"Failed to write blob to file {local_file}: {e}") from e

        logger.info(f"Downloaded azure://{self.container_name}/{blob_name} to {local_file}")

    def prune(self, retention_days: int) -> PruneResult:
        """Deleting old blobs is not supported."""
        logger.info("Deleting old files from Azure Blob Storage is not supported, skipping prune")
        return PruneResult.unsupported()
