"""Custom exceptions for the backup module."""

from mcwrapper.exceptions import ExitCode, McwrapperError


class BackupError(McwrapperError):
    """Base exception for all backup-related errors."""


class BackupDirectoryCreationError(BackupError):
    """Raised when the directory of a new backup cannot be created."""

    exit_code = ExitCode.CANNOT_CREATE_BACKUP_DIR


class BackupWorldDataError(BackupError):
    """Raised when copying the world data fails."""

    exit_code = ExitCode.CANNOT_BACKUP_WORLD_DATA


class BackupConfigsError(BackupError):
    """Raised when copying the support files fails."""

    exit_code = ExitCode.CANNOT_BACKUP_CONFIGS


class SymlinkDeleteError(BackupError):
    """Raised when the old latest pointer cannot be removed."""

    exit_code = ExitCode.FAILED_TO_DELETE_SYMLINK


class SymlinkCreateError(BackupError):
    """Raised when the latest pointer cannot be created."""

    exit_code = ExitCode.ERROR_CREATING_SYMLINK


class BackupsDisabledError(BackupError):
    """Raised when a backup is requested while retention is zero."""

    exit_code = ExitCode.BACKUPS_DISABLED


class LatestBackupNotFoundError(BackupError):
    """Raised when the latest pointer is missing."""

    exit_code = ExitCode.LATEST_BACKUP_NOT_FOUND


class RestoreWorldError(BackupError):
    """Raised when the world cannot be restored from a backup."""

    exit_code = ExitCode.CANNOT_RESTORE_WORLD
