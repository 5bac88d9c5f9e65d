"""The mcwrapper application: every user-facing action in one place.

``McWrapper`` wires the supervisor, backup engine and restore workflow to a
single configuration and runs the mutating actions under the action lock.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from mcwrapper.alerts import AlertMailer
from mcwrapper.backup import (
    Backup,
    BackupEngine,
    BackupError,
    BackupsDisabledError,
    RestoreWorkflow,
)
from mcwrapper.config import (
    ServerProperties,
    ServerPropertiesNotFoundError,
    UnknownConfigSettingError,
    WrapperConfig,
)
from mcwrapper.exceptions import McwrapperError
from mcwrapper.locking import LockManager
from mcwrapper.server import ServerNotRunningError, ServerStatus, ServerSupervisor
from mcwrapper.utils import format_command


class McWrapper:
    """Facade over supervision, backups and restore for one configuration."""

    CONFIG_SETTINGS = (
        "serverpath",
        "serverdir",
        "pidfile",
        "pid",
        "pipe",
        "configfile",
        "command",
        "backupdir",
        "latestbackup",
        "backup-retention",
    )

    def __init__(
        self,
        config: WrapperConfig,
        logger: logging.Logger,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the application.

        Args:
            config: Resolved mcwrapper configuration
            logger: Logger instance for logging operations
            clock: Source of backup timestamps, replaceable in tests

        """
        self.config = config
        self.logger = logger
        self.alerts = AlertMailer(logger, config.alerts)
        self.supervisor = ServerSupervisor(config, logger)
        self.backups = BackupEngine(config, self.supervisor, logger, clock=clock)
        self.restorer = RestoreWorkflow(self.backups, self.supervisor, logger)
        self.properties = ServerProperties(config.server_properties_path)

    def _lock(self, action: str) -> LockManager:
        return LockManager(
            self.config.lock_file,
            self.logger,
            alerts=self.alerts,
            script_name=f"mcwrapper {action}",
        )

    def check(self) -> None:
        """Run the installation sanity checks."""
        self.supervisor.check()

    def status(self) -> ServerStatus:
        """Report whether the server is running."""
        return self.supervisor.status()

    def start(self) -> int:
        """Start the server under the action lock and return its pid."""
        with self._lock("start"):
            return self.supervisor.start()

    def stop(self) -> None:
        """Stop the server, backing up first when ``backup_on_stop`` is set."""
        with self._lock("stop"):
            self._stop()

    def restart(self) -> int:
        """Stop then start the server under one lock; returns the new pid."""
        with self._lock("restart"):
            self._stop()
            return self.supervisor.start()

    def _stop(self) -> None:
        if not self.supervisor.is_running():
            error_msg = "Server is NOT running."
            raise ServerNotRunningError(error_msg)

        if self.config.backup_on_stop:
            self.logger.info("Backing up world data before exiting...")
            try:
                self.backups.create_backup(server_running=True)
            except BackupsDisabledError:
                self.logger.warning("Backups are disabled; stopping without a backup")
            except (BackupError, ServerPropertiesNotFoundError) as e:
                self.logger.warning(f"Backup before stop failed, stopping anyway: {e}")
                self.alerts.send_alert("Backup before stop failed", str(e))

        self.supervisor.stop()

    def backup(self) -> Backup:
        """Take a backup under the action lock.

        Raises:
            BackupsDisabledError: If retention is zero
            BackupError: If any backup step fails; an alert is sent

        """
        with self._lock("backup"):
            try:
                return self.backups.create_backup()
            except BackupsDisabledError:
                raise
            except McwrapperError as e:
                self.alerts.send_alert("Backup failed", e.message)
                raise

    def restore(self, source: str | Path) -> Path:
        """Restore the world from a backup directory or ``latest``.

        Raises:
            RestoreWorldError: If the source is invalid or the copy fails

        """
        with self._lock("restore"):
            try:
                return self.restorer.restore(source)
            except McwrapperError as e:
                self.alerts.send_alert("Restore failed", e.message)
                raise

    def send_command(self, command: str) -> None:
        """Send one console command to the running server."""
        self.supervisor.send_command(command)

    def config_value(self, setting: str) -> str:
        """Return one configuration value as printed by the ``config`` action.

        Raises:
            UnknownConfigSettingError: If ``setting`` is not a known name
            ServerNotRunningError: For ``pid`` while the server is down
            LatestBackupNotFoundError: For ``latestbackup`` without backups

        """
        config = self.config
        if setting == "serverpath":
            return str(config.server_path)
        if setting == "serverdir":
            return str(config.server_dir)
        if setting == "pidfile":
            return str(config.pid_file)
        if setting == "pid":
            pid = self.supervisor.pid
            if pid is None:
                error_msg = "Server is NOT running."
                raise ServerNotRunningError(error_msg)
            return str(pid)
        if setting == "pipe":
            return str(config.command_pipe)
        if setting == "configfile":
            return str(config.config_path or "")
        if setting == "command":
            return format_command(config.launch_command)
        if setting == "backupdir":
            return str(config.backup_dir)
        if setting == "latestbackup":
            return str(self.backups.latest_backup_path())
        if setting == "backup-retention":
            return str(config.backups_to_keep)

        error_msg = (
            f"Unknown config setting: {setting}. "
            f"Valid settings: {', '.join(self.CONFIG_SETTINGS)}"
        )
        raise UnknownConfigSettingError(error_msg)

    def server_property(self, name: str | None = None) -> list[str]:
        """Return one property value, or every property key when ``name`` is None.

        Raises:
            ServerPropertiesNotFoundError: If ``server.properties`` is missing

        """
        if name is None:
            return self.properties.keys()
        return [self.properties.get(name, "") or ""]

    def server_log_path(self) -> Path:
        """Path of the log followed by the ``log`` action."""
        return self.supervisor.server_log_path()
