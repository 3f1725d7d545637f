import os


class Config:
    """Base configuration"""

    # FTP
    FTP_TIMEOUT = 5
    DEFAULT_FTP_PORT = 21

    # SSH
    SSH_TIMEOUT = 30
    DEFAULT_SSH_PORT = 22
    # Mode applied to files uploaded over SSH
    SSH_FILE_MODE = 0o655

    # Azure
    AZURE_ACCOUNT_URL = 'https://{account_name}.blob.core.windows.net/'

    # S3
    DEFAULT_S3_REGION = 'us-east-1'

    # Logging
    LOG_LEVEL = os.environ.get('REMOTE_STORAGE_LOG_LEVEL', 'INFO').upper()
    LOG_DIR = os.environ.get('REMOTE_STORAGE_LOG_DIR') or None
    LOG_MAX_BYTES = 10485760  # 10MB
    LOG_BACKUP_COUNT = 10
