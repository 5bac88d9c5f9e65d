"""Replace the current world with the contents of a backup."""

import logging
import shutil
from pathlib import Path

from mcwrapper.backup.engine import UNLIMITED_RETENTION, Backup, BackupEngine
from mcwrapper.backup.exceptions import RestoreWorldError
from mcwrapper.config import CompressionMode
from mcwrapper.server import ServerSupervisor

LATEST_KEYWORD = "latest"
RESTORED_FROM_MARKER = "RESTORED_FROM"


class RestoreWorkflow:
    """Safety backup, stop, swap the world directory, start again."""

    def __init__(
        self,
        engine: BackupEngine,
        supervisor: ServerSupervisor,
        logger: logging.Logger,
    ) -> None:
        """Initialize the restore workflow.

        Args:
            engine: Backup engine used for the safety backup and ``latest``
            supervisor: Stops and restarts the server around the swap
            logger: Logger instance for logging operations

        """
        self.engine = engine
        self.supervisor = supervisor
        self.logger = logger

    def resolve_source(self, source: str | Path) -> Path:
        """Turn ``latest`` or a path into the backup directory to restore.

        Raises:
            RestoreWorldError: If the source is compressed or has no world data
            LatestBackupNotFoundError: If ``latest`` is requested but missing

        """
        if str(source) == LATEST_KEYWORD:
            path = self.engine.latest_backup_path()
        else:
            path = Path(source).expanduser().absolute()

        backup = Backup.from_path(path)
        if backup is not None and backup.compression is not CompressionMode.NONE:
            error_msg = f"Cannot restore from a compressed backup ({path}). Unpack it first."
            raise RestoreWorldError(error_msg)

        world_name = self.engine.world_dir().name
        if not (path / world_name).is_dir():
            error_msg = (
                f"Path does not appear to be a Minecraft world backup or does not exist "
                f"({path}, expected a '{world_name}' directory)."
            )
            raise RestoreWorldError(error_msg)
        return path

    def restore(self, source: str | Path) -> Path:
        """Restore the world from ``source``.

        The current world is backed up first with unlimited retention. A
        server that was running when the restore began is stopped for the
        swap and started again afterwards.

        Args:
            source: Backup directory, or ``latest``

        Returns:
            The world directory that now holds the restored data

        Raises:
            RestoreWorldError: If the source is invalid or the copy fails

        """
        source_dir = self.resolve_source(source)
        world_dir = self.engine.world_dir()
        was_running = self.supervisor.is_running()

        if world_dir.is_dir():
            safety = self.engine.create_backup(
                retention=UNLIMITED_RETENTION,
                ignore_disabled=True,
                server_running=was_running,
            )
            self.logger.info(f"Current world saved as backup {safety.name}")
        else:
            self.logger.info(f"No current world at {world_dir}; skipping safety backup")

        if was_running:
            self.supervisor.stop()

        self._replace_world(source_dir / world_dir.name, world_dir)
        self.logger.info(f"Restored {world_dir} from {source_dir}")

        if was_running:
            self.supervisor.start()

        return world_dir

    @staticmethod
    def _replace_world(source: Path, world_dir: Path) -> None:
        try:
            if world_dir.exists():
                shutil.rmtree(world_dir)
            shutil.copytree(source, world_dir, symlinks=True)
            (world_dir / RESTORED_FROM_MARKER).write_text(f"{source.parent}\n", encoding="utf-8")
        except (OSError, shutil.Error) as e:
            error_msg = f"An error occurred when restoring the world from {source.parent}: {e}"
            raise RestoreWorldError(error_msg, original_error=e) from e
