"""Backups of the world data, retention and restore."""

from .compression import compress_backup
from .engine import Backup, BackupEngine
from .exceptions import (
    BackupConfigsError,
    BackupDirectoryCreationError,
    BackupError,
    BackupsDisabledError,
    BackupWorldDataError,
    LatestBackupNotFoundError,
    RestoreWorldError,
    SymlinkCreateError,
    SymlinkDeleteError,
)
from .restore import RestoreWorkflow

__all__ = [
    "Backup",
    "BackupConfigsError",
    "BackupDirectoryCreationError",
    "BackupEngine",
    "BackupError",
    "BackupWorldDataError",
    "BackupsDisabledError",
    "LatestBackupNotFoundError",
    "RestoreWorkflow",
    "RestoreWorldError",
    "SymlinkCreateError",
    "SymlinkDeleteError",
    "compress_backup",
]
