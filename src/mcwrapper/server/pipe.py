"""The named pipe that carries console commands to the relay reader."""

import logging
import os
from pathlib import Path

from mcwrapper.server.exceptions import PipeCreationError, SendCommandFailedError


class CommandPipe:
    """Creates, removes and writes to the command FIFO."""

    def __init__(self, path: Path, logger: logging.Logger) -> None:
        """Initialize with the pipe location."""
        self.path = path
        self.logger = logger

    def exists(self) -> bool:
        """Whether a FIFO is present at the configured path."""
        return self.path.is_fifo()

    def ensure(self) -> None:
        """Create the FIFO unless it already exists.

        Raises:
            PipeCreationError: If a non-pipe file occupies the path or mkfifo fails

        """
        if self.exists():
            return

        if self.path.exists() or self.path.is_symlink():
            error_msg = (
                f"Cannot create the pipe ({self.path}). A file or directory already exists."
            )
            raise PipeCreationError(error_msg)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            os.mkfifo(self.path, 0o600)
        except OSError as e:
            error_msg = f"Error creating the pipe: {self.path} ({e})"
            raise PipeCreationError(error_msg, original_error=e) from e
        self.logger.debug(f"Created command pipe {self.path}")

    def remove(self) -> None:
        """Remove the FIFO; failures are logged, not raised."""
        if not self.exists():
            return
        try:
            self.path.unlink()
        except OSError as e:
            self.logger.warning(f"Could not remove command pipe {self.path}: {e}")
        else:
            self.logger.debug(f"Removed command pipe {self.path}")

    def has_reader(self) -> bool:
        """Whether some process holds the FIFO open for reading."""
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError:
            return False
        os.close(fd)
        return True

    def write_line(self, command: str) -> None:
        """Append ``command`` as one line to the pipe.

        The pipe is opened non-blocking so that a pipe without a reader fails
        immediately instead of hanging the caller.

        Raises:
            SendCommandFailedError: If the command cannot be written

        """
        command = command.strip()
        if not command or "\n" in command or "\r" in command:
            error_msg = f"Refusing to send command {command!r}: must be a single non-empty line"
            raise SendCommandFailedError(error_msg)

        data = f"{command}\n".encode()
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError as e:
            error_msg = f"Error sending command: '{command}' ({e})"
            raise SendCommandFailedError(error_msg, original_error=e) from e

        try:
            os.set_blocking(fd, True)
            os.write(fd, data)
        except OSError as e:
            error_msg = f"Error sending command: '{command}' ({e})"
            raise SendCommandFailedError(error_msg, original_error=e) from e
        finally:
            os.close(fd)
        self.logger.debug(f"Sent command '{command}' through {self.path}")
