"""Timestamped backups of the world data with retention and a latest pointer."""

import logging
import os
import re
import shutil
import tarfile
import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from mcwrapper.backup.compression import compress_backup
from mcwrapper.backup.exceptions import (
    BackupConfigsError,
    BackupDirectoryCreationError,
    BackupError,
    BackupsDisabledError,
    BackupWorldDataError,
    LatestBackupNotFoundError,
    SymlinkCreateError,
    SymlinkDeleteError,
)
from mcwrapper.config import CompressionMode, ServerProperties, WrapperConfig
from mcwrapper.server import ServerError, ServerSupervisor

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
BACKUP_NAME_PATTERN = re.compile(
    r"^(?P<stamp>\d{14})(?:-(?P<seq>\d{2}))?(?P<suffix>\.tgz|\.zip)?$",
)
SUPPORT_FILE_PATTERNS = ("*.txt", "*.properties")
MAX_SAME_SECOND_BACKUPS = 99

QUIESCE_COMMANDS = ("save-all", "save-off")
RESUME_COMMAND = "save-on"

UNLIMITED_RETENTION = -1


@dataclass(frozen=True)
class Backup:
    """One finished backup, either a directory or a single archive."""

    name: str
    path: Path
    created_at: datetime
    compression: CompressionMode

    @classmethod
    def from_path(cls, path: Path) -> "Backup | None":
        """Describe ``path`` if its name is a backup name, otherwise None."""
        match = BACKUP_NAME_PATTERN.match(path.name)
        if match is None:
            return None
        suffix = match.group("suffix") or ""
        compression = {
            "": CompressionMode.NONE,
            CompressionMode.TAR_GZIP.suffix: CompressionMode.TAR_GZIP,
            CompressionMode.ZIP.suffix: CompressionMode.ZIP,
        }[suffix]
        return cls(
            name=path.name.removesuffix(suffix),
            path=path,
            created_at=datetime.strptime(match.group("stamp"), TIMESTAMP_FORMAT),
            compression=compression,
        )


class BackupEngine:
    """Creates, lists and prunes backups under the configured backup root."""

    def __init__(
        self,
        config: WrapperConfig,
        supervisor: ServerSupervisor,
        logger: logging.Logger,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the backup engine.

        Args:
            config: Resolved mcwrapper configuration
            supervisor: Used to detect a running server and quiesce it
            logger: Logger instance for logging operations
            clock: Source of the backup timestamp, replaceable in tests

        """
        self.config = config
        self.supervisor = supervisor
        self.logger = logger
        self.clock = clock
        self.properties = ServerProperties(config.server_properties_path)

    @property
    def backup_root(self) -> Path:
        """Directory holding every backup and the latest pointer."""
        return self.config.backup_dir

    def world_dir(self) -> Path:
        """Current world-data directory, from ``level-name``."""
        return self.config.server_dir / self.properties.level_name

    def create_backup(
        self,
        retention: int | None = None,
        ignore_disabled: bool = False,
        server_running: bool | None = None,
    ) -> Backup:
        """Back up the world data and support files.

        Args:
            retention: Backups to keep; defaults to ``backups_to_keep``
            ignore_disabled: Back up even when retention is zero
            server_running: Liveness captured by the caller; probed when None

        Returns:
            The backup the latest pointer now refers to

        Raises:
            BackupsDisabledError: If retention is zero and not ignored
            BackupDirectoryCreationError: If the backup directory cannot be created
            BackupWorldDataError: If the world data cannot be copied
            BackupConfigsError: If the support files cannot be copied
            SymlinkDeleteError: If the old latest pointer cannot be removed
            SymlinkCreateError: If the latest pointer cannot be created

        """
        if retention is None:
            retention = self.config.backups_to_keep

        if retention == 0:
            if not ignore_disabled:
                error_msg = "Backups are disabled. Not backing anything up."
                raise BackupsDisabledError(error_msg)
            self.logger.warning("Backups are disabled; taking this backup anyway")
            retention = UNLIMITED_RETENTION

        world_dir = self.world_dir()
        backup_path = self._create_backup_directory()
        self.logger.info(f"Backing up {world_dir} to {backup_path}")

        if server_running is None:
            server_running = self.supervisor.is_running()

        if server_running:
            self._stop_writing_world()
            try:
                self._copy_data(world_dir, backup_path)
            finally:
                self._start_writing_world()
        else:
            self._copy_data(world_dir, backup_path)

        final_path = self._compress(backup_path)
        self._update_latest_pointer(final_path)

        if retention >= 0:
            self.prune(retention)

        backup = Backup.from_path(final_path)
        if backup is None:
            error_msg = f"Unexpected backup name: {final_path.name}"
            raise BackupError(error_msg)
        self.logger.info(f"Backup {backup.name} complete")
        return backup

    def _next_backup_name(self) -> str:
        stamp = self.clock().strftime(TIMESTAMP_FORMAT)
        taken = {path.name for path in self.backup_root.iterdir()}
        suffixes = [mode.suffix for mode in CompressionMode]

        for sequence in range(MAX_SAME_SECOND_BACKUPS + 1):
            name = stamp if sequence == 0 else f"{stamp}-{sequence:02d}"
            if not any(f"{name}{suffix}" in taken for suffix in suffixes):
                return name

        error_msg = f"Too many backups created at {stamp}"
        raise BackupDirectoryCreationError(error_msg)

    def _create_backup_directory(self) -> Path:
        try:
            self.backup_root.mkdir(parents=True, exist_ok=True)
            backup_path = self.backup_root / self._next_backup_name()
            backup_path.mkdir()
        except OSError as e:
            error_msg = f"An error occurred when creating the backup directory: {e}"
            raise BackupDirectoryCreationError(error_msg, original_error=e) from e
        return backup_path

    def _stop_writing_world(self) -> None:
        """Flush pending writes and pause saving while the copy runs."""
        for command in QUIESCE_COMMANDS:
            self.supervisor.send_command(command)

    def _start_writing_world(self) -> None:
        try:
            self.supervisor.send_command(RESUME_COMMAND)
        except ServerError as e:
            self.logger.warning(f"Could not resume world saving: {e}")

    def _copy_data(self, world_dir: Path, backup_path: Path) -> None:
        """Copy the world directory and the support files into ``backup_path``."""
        if not world_dir.is_dir():
            error_msg = f"World data directory not found: {world_dir}"
            raise BackupWorldDataError(error_msg)

        try:
            shutil.copytree(world_dir, backup_path / world_dir.name, symlinks=True)
        except (OSError, shutil.Error) as e:
            error_msg = f"An error occurred when copying the world data: {e}"
            raise BackupWorldDataError(error_msg, original_error=e) from e

        support_files = sorted(
            path
            for pattern in SUPPORT_FILE_PATTERNS
            for path in self.config.server_dir.glob(pattern)
            if path.is_file()
        )
        if not support_files:
            if self.config.require_support_files:
                error_msg = f"No support files (*.txt, *.properties) in {self.config.server_dir}"
                raise BackupConfigsError(error_msg)
            self.logger.debug("No support files to back up")
            return

        try:
            for path in support_files:
                shutil.copy2(path, backup_path / path.name)
        except OSError as e:
            error_msg = f"An error occurred when copying the configuration information: {e}"
            raise BackupConfigsError(error_msg, original_error=e) from e

    def _compress(self, backup_path: Path) -> Path:
        try:
            return compress_backup(backup_path, self.config.compression, self.logger)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            error_msg = f"An error occurred when compressing {backup_path.name}: {e}"
            raise BackupError(error_msg, original_error=e) from e

    def _update_latest_pointer(self, target: Path) -> None:
        """Point ``latest`` at ``target`` using a path relative to the backup root."""
        pointer = self.config.latest_backup_path
        if pointer.is_symlink():
            try:
                pointer.unlink()
            except OSError as e:
                error_msg = f"An error occurred when deleting the old symlink: {e}"
                raise SymlinkDeleteError(error_msg, original_error=e) from e

        try:
            os.symlink(target.name, pointer)
        except OSError as e:
            error_msg = f"An error occurred when creating the symlink: {e}"
            raise SymlinkCreateError(error_msg, original_error=e) from e

    def list_backups(self) -> list[Backup]:
        """Return all backups, newest first."""
        if not self.backup_root.is_dir():
            return []
        backups = [
            backup
            for backup in map(Backup.from_path, self.backup_root.iterdir())
            if backup is not None
        ]
        return sorted(backups, key=lambda backup: backup.name, reverse=True)

    def prune(self, keep: int) -> list[Path]:
        """Delete every backup beyond the ``keep`` most recent.

        Deletion failures are logged and skipped.

        Returns:
            Paths that were removed

        """
        if keep < 0:
            return []

        self.logger.info("Cleaning up old backups...")
        try:
            protected = self.latest_backup_path()
        except LatestBackupNotFoundError:
            protected = None

        removed = []
        for backup in self.list_backups()[keep:]:
            if protected is not None and backup.path == protected:
                continue
            self.logger.info(f"Removing {backup.path.name}")
            try:
                if backup.path.is_dir() and not backup.path.is_symlink():
                    shutil.rmtree(backup.path)
                else:
                    backup.path.unlink()
            except OSError as e:
                self.logger.warning(
                    f"An error occurred when deleting a previous backup: {backup.path.name} ({e})",
                )
                continue
            removed.append(backup.path)
        return removed

    def latest_backup_path(self) -> Path:
        """Resolve the latest pointer one hop.

        Raises:
            LatestBackupNotFoundError: If the pointer is missing or not a symlink

        """
        pointer = self.config.latest_backup_path
        if not pointer.is_symlink():
            error_msg = (
                "Latest backup not found. Either never created or not a link. "
                f"({pointer})"
            )
            raise LatestBackupNotFoundError(error_msg)

        target = Path(os.readlink(pointer))
        return target if target.is_absolute() else self.backup_root / target
