"""Advisory file lock around a whole mcwrapper action."""

import fcntl
import logging
import os
import types
from pathlib import Path

from mcwrapper.alerts import AlertMailer
from mcwrapper.exceptions import LockAlreadyTakenError


class LockManager:
    """Holds a non-blocking ``flock`` on a lock file.

    The kernel drops the lock when the holding process dies, so a crashed
    invocation never leaves a stale lock behind.
    """

    def __init__(
        self,
        lock_file: Path,
        logger: logging.Logger,
        alerts: AlertMailer | None = None,
        script_name: str | None = None,
    ) -> None:
        """Initialize the LockManager.

        Args:
            lock_file: Path to the lock file
            logger: Logger instance for logging operations
            alerts: Optional alert mailer notified when the lock is taken
            script_name: Optional name of the action for notifications

        """
        self.lock_file = lock_file
        self.logger = logger
        self.alerts = alerts
        self.script_name = script_name
        self._fd: int | None = None

    def __enter__(self) -> "LockManager":
        """Context manager entry point."""
        self.create_lock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Context manager exit point."""
        self.release_lock()

    @property
    def locked(self) -> bool:
        """Whether this manager currently holds the lock."""
        return self._fd is not None

    def create_lock(self) -> None:
        """Acquire the lock without blocking.

        Raises:
            LockAlreadyTakenError: If another process holds the lock

        """
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.lock_file, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            self.logger.error("Lock is held by another mcwrapper invocation.")

            if self.alerts and self.script_name:
                self.alerts.send_alert(
                    subject=f"Lock already taken for {self.script_name}",
                    message=f"The lock {self.lock_file} is held by another process. "
                    f"Action {self.script_name} was not run.",
                )

            error_message = f"Lock file {self.lock_file} is held by another process."
            raise LockAlreadyTakenError(error_message) from None

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd
        self.logger.debug(f"Lock file {self.lock_file} acquired.")

    def release_lock(self) -> None:
        """Release the lock. The lock file itself stays in place."""
        if self._fd is None:
            self.logger.warning("Lock is not held when attempting to release.")
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
        self.logger.debug("Lock file released.")
