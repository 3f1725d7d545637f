"""
Storage backends for remote-storage.

This module provides one handler per transport, all implementing the
Storage contract:
- LocalStorage: another directory on the local filesystem
- FTPStorage: an FTP server
- SSHStorage: a remote host reached over SSH
- AzureStorage: an Azure Blob Storage container
- S3Storage: an S3-compatible bucket
"""

from typing import Dict, Any

from .base import (
    Backend,
    Storage,
    PruneResult,
    PruneStatus,
    StorageError,
    ConfigurationError,
    StorageConnectionError,
    TransferError,
    StorageFileNotFoundError,
)
from .local import LocalStorage
from .ftp import FTPStorage
from .ssh import SSHStorage
from .azure import AzureStorage
from .s3 import S3Storage


def create_storage(storage_type: str, config: Dict[str, Any]) -> Storage:
    """
    Factory function to create appropriate storage handler.

    Args:
        storage_type: 'local', 'ftp', 'ssh', 'azure' or 's3'
        config: Configuration dict for the storage. Every type needs
            'local_path' and 'remote_path'; other keys:
            - ftp: host, user, password, port, timeout
            - ssh: host, user, password, port, identify_file, timeout
            - azure: account_name, account_key, container_name, account_url
            - s3: access_key, secret_key, bucket_name, region, endpoint_url

    Returns:
        Storage instance

    Raises:
        ValueError: If storage_type is invalid
        StorageError: If the backend cannot be created
    """
    local_path = config.get('local_path')
    remote_path = config.get('remote_path')

    if storage_type == 'local':
        return LocalStorage(local_path, remote_path)
    elif storage_type == 'ftp':
        return FTPStorage(
            host=config.get('host'),
            user=config.get('user'),
            password=config.get('password'),
            port=config.get('port'),
            timeout=config.get('timeout'),
            local_path=local_path,
            remote_path=remote_path
        )
    elif storage_type == 'ssh':
        return SSHStorage(
            host=config.get('host'),
            user=config.get('user'),
            password=config.get('password'),
            identify_file=config.get('identify_file'),
            port=config.get('port'),
            timeout=config.get('timeout'),
            local_path=local_path,
            remote_path=remote_path
        )
    elif storage_type == 'azure':
        return AzureStorage(
            account_name=config.get('account_name'),
            account_key=config.get('account_key'),
            container_name=config.get('container_name'),
            account_url=config.get('account_url'),
            local_path=local_path,
            remote_path=remote_path
        )
    elif storage_type == 's3':
        return S3Storage(
            access_key=config.get('access_key'),
            secret_key=config.get('secret_key'),
            bucket_name=config.get('bucket_name'),
            region=config.get('region'),
            endpoint_url=config.get('endpoint_url'),
            local_path=local_path,
            remote_path=remote_path
        )
    else:
        raise ValueError(f"Invalid storage type: {storage_type}")


__all__ = [
    'Backend',
    'Storage',
    'PruneResult',
    'PruneStatus',
    'StorageError',
    'ConfigurationError',
    'StorageConnectionError',
    'TransferError',
    'StorageFileNotFoundError',
    'LocalStorage',
    'FTPStorage',
    'SSHStorage',
    'AzureStorage',
    'S3Storage',
    'create_storage',
]
