"""
S3-compatible storage backend using boto3.

Works with AWS S3 and S3-compatible services (MinIO, Backblaze B2, ...)
through endpoint_url. Object keys are the remote root joined with the
file name.
"""

import logging
import os
from typing import Optional, List, Dict, Any

import boto3
from botocore.exceptions import ClientError, BotoCoreError

from ..config import Config
from .base import (
    Storage,
    PruneResult,
    PruneStatus,
    ConfigurationError,
    StorageFileNotFoundError,
    TransferError,
)
from .retention import cutoff_datetime

logger = logging.getLogger(__name__)


class S3Storage(Storage):
    """
    Handler for uploading files to and downloading from an S3 bucket.

    Unlike the other remote backends it supports pruning, since object
    listings carry a LastModified timestamp.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        local_path: str,
        remote_path: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None
    ):
        """
        Initialize S3 storage handler.

        Args:
            access_key: AWS access key ID
            secret_key: AWS secret access key
            bucket_name: S3 bucket name
            local_path: Local root directory
            remote_path: Key prefix used as remote root
            region: AWS region (default: us-east-1)
            endpoint_url: Custom endpoint for S3-compatible services

        Raises:
            ConfigurationError: If the bucket is missing or the client cannot be created
        """
        super().__init__(local_path, remote_path)

        if not bucket_name:
            raise ConfigurationError("S3 bucket name is required")

        self.bucket_name = bucket_name
        self.region = region or Config.DEFAULT_S3_REGION
        self.endpoint_url = endpoint_url

        try:
            self.s3_client = boto3.client(
                's3',
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=self.region
            )
        except (BotoCoreError, ValueError) as e:
            raise ConfigurationError(f"Failed to initialize S3 client: {e}") from e

    @property
    def name(self) -> str:
        return 's3'

    def copy(self, file_name: str) -> None:
        """Upload file_name with a single put_object call."""
        local_file = self.backend.local_file(file_name)
        s3_key = self.backend.remote_key(file_name)

        if not os.path.exists(local_file):
            raise StorageFileNotFoundError(f"Local file not found: {local_file}")

        try:
            with open(local_file, 'rb') as f:
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=s3_key,
                    Body=f
                )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise TransferError(f"S3 upload failed ({error_code}): {e}") from e
        except BotoCoreError as e:
            raise TransferError(f"S3 upload failed: {e}") from e
        except OSError as e:
            raise TransferError(f"Failed to read {local_file}: {e}") from e

        logger.info(f"Uploaded {local_file} to s3://{self.bucket_name}/{s3_key}")

    def copy_from(self, file_name: str) -> None:
        """Download the object for file_name into the local root."""
        local_file = self.backend.local_file(file_name)
        s3_key = self.backend.remote_key(file_name)

        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=s3_key)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            if error_code in ('404', 'NoSuchKey'):
                raise StorageFileNotFoundError(
                    f"Object not found: s3://{self.bucket_name}/{s3_key}"
                ) from e
            raise TransferError(f"S3 download failed ({error_code}): {e}") from e
        except BotoCoreError as e:
            raise TransferError(f"S3 download failed: {e}") from e

        try:
            with open(local_file, 'wb') as out:
                self.s3_client.download_fileobj(self.bucket_name, s3_key, out)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise TransferError(f"S3 download failed ({error_code}): {e}") from e
        except BotoCoreError as e:
            raise TransferError(f"S3 download failed: {e}") from e
        except OSError as e:
            raise TransferError(f"Failed to write {local_file}: {e}") from e

        logger.info(f"Downloaded s3://{self.bucket_name}/{s3_key} to {local_file}")

    def list_objects(self, prefix: str) -> List[Dict[str, Any]]:
        """
        List objects in the bucket with given prefix.

        Args:
            prefix: S3 key prefix to filter by

        Returns:
            List of dicts with 'Key', 'LastModified', and 'Size' keys

        Raises:
            TransferError: If listing fails
        """
        try:
            objects = []
            paginator = self.s3_client.get_paginator('list_objects_v2')

            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for obj in page.get('Contents', []):
                    objects.append({
                        'Key': obj['Key'],
                        'LastModified': obj['LastModified'],
                        'Size': obj['Size']
                    })

            return objects

        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise TransferError(f"S3 list failed ({error_code}): {e}") from e
        except BotoCoreError as e:
            raise TransferError(f"S3 list failed: {e}") from e

    def delete(self, s3_key: str):
        """
        Delete an object from the bucket.

        Raises:
            TransferError: If deletion fails
        """
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise TransferError(f"S3 delete failed ({error_code}): {e}") from e
        except BotoCoreError as e:
            raise TransferError(f"S3 delete failed: {e}") from e

    def prune(self, retention_days: int) -> PruneResult:
        """
        Delete objects under the remote root last modified more than
        retention_days ago. The first failed deletion aborts the prune.
        """
        cutoff = cutoff_datetime(retention_days)
        prefix = self.backend.remote_key('')

        deleted = []
        for obj in self.list_objects(prefix):
            if obj['LastModified'] < cutoff:
                self.delete(obj['Key'])
                deleted.append(obj['Key'])
                logger.info(f"Deleted expired object: s3://{self.bucket_name}/{obj['Key']}")

        logger.info(
            f"Prune of s3://{self.bucket_name}/{prefix} complete "
            f"(retention: {retention_days} days, deleted: {len(deleted)})"
        )
        return PruneResult(PruneStatus.PRUNED, deleted)
