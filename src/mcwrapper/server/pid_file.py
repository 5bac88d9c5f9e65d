"""Single-record store for the identifier of the supervised process."""

import logging
from pathlib import Path


class PidFile:
    """Reads and writes the pid of the supervised server.

    The file holds one line with the numeric process id. It is only a
    recovery record: a pid that is no longer alive simply means the server
    is not running, and the next start overwrites it.
    """

    def __init__(self, path: Path, logger: logging.Logger) -> None:
        """Initialize with the pid file location."""
        self.path = path
        self.logger = logger

    def read(self) -> int | None:
        """Return the recorded pid, or None when missing or unreadable."""
        try:
            content = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.warning(f"Cannot read pid file {self.path}: {e}")
            return None

        try:
            return int(content)
        except ValueError:
            self.logger.warning(f"Ignoring malformed pid file {self.path}: {content!r}")
            return None

    def write(self, pid: int) -> None:
        """Record ``pid``, replacing any previous record."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"{pid}\n", encoding="utf-8")
        self.logger.debug(f"Recorded pid {pid} in {self.path}")

    def remove(self) -> None:
        """Delete the record; a missing file is not an error."""
        self.path.unlink(missing_ok=True)
