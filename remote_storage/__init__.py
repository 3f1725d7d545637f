import os
import logging
from logging.handlers import RotatingFileHandler

from remote_storage.config import Config
from remote_storage.storage import (
    Backend,
    Storage,
    PruneResult,
    PruneStatus,
    StorageError,
    ConfigurationError,
    StorageConnectionError,
    TransferError,
    StorageFileNotFoundError,
    LocalStorage,
    FTPStorage,
    SSHStorage,
    AzureStorage,
    S3Storage,
    create_storage,
)

__version__ = '1.0.0'


def configure_logging(level=None, log_dir=None):
    """
    Configure logging for the remote_storage logger.

    Args:
        level: Log level name or number (default Config.LOG_LEVEL)
        log_dir: Directory for the rotating log file (default Config.LOG_DIR,
            console only when unset)

    Returns:
        The configured logger
    """
    if level is None:
        level = Config.LOG_LEVEL
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    if log_dir is None:
        log_dir = Config.LOG_DIR

    logger = logging.getLogger('remote_storage')
    logger.setLevel(level)

    # Drop handlers from a previous call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'remote_storage.log'),
            maxBytes=Config.LOG_MAX_BYTES,
            backupCount=Config.LOG_BACKUP_COUNT
        )
        file_handler.setLevel(level)
        file_formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging configured (level: {logging.getLevelName(level)})")
    return logger


__all__ = [
    'Config',
    'configure_logging',
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
