"""Exit codes and the common exception base used across mcwrapper."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per failure category."""

    SUCCESS = 0
    GENERIC_FAILURE = 1
    BAD_PARAMS = 2
    UNKNOWN_CONFIG_SETTING = 3
    INVALID_ACTION = 4

    SERVER_NOT_RUNNING = 5
    SERVER_ALREADY_RUNNING = 6
    SERVER_DISAPPEARED = 7
    SERVER_CANNOT_START = 8
    SERVER_STOP_TIMEOUT = 9

    SERVER_BINARY_NOT_FOUND = 10
    NO_SERVER_PROPERTIES = 11
    SERVER_LOG_NOT_FOUND = 12
    INVALID_CONFIGURATION = 13
    ACTION_LOCKED = 14

    MAKE_FIFO_FAILED = 20
    SEND_COMMAND_FAILED = 21

    NO_JAVA = 30

    CANNOT_CREATE_BACKUP_DIR = 50
    CANNOT_BACKUP_WORLD_DATA = 51
    CANNOT_BACKUP_CONFIGS = 52
    FAILED_TO_DELETE_SYMLINK = 53
    ERROR_CREATING_SYMLINK = 54
    BACKUPS_DISABLED = 55
    LATEST_BACKUP_NOT_FOUND = 56
    CANNOT_RESTORE_WORLD = 57

    BAD_COMPRESSION_TYPE = 60

    RUNNING_AS_ROOT = 99


class McwrapperError(Exception):
    """Base exception for all mcwrapper failures.

    Every subclass names the exit code the command-line interface terminates
    with when the error reaches it.
    """

    exit_code: ExitCode = ExitCode.GENERIC_FAILURE

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """Initialize the exception with message and optional original error."""
        super().__init__(message)
        self.original_error = original_error
        self.message = message


class InvalidActionError(McwrapperError):
    """Raised when the requested action does not exist."""

    exit_code = ExitCode.INVALID_ACTION


class RunningAsRootError(McwrapperError):
    """Raised when mcwrapper is started by the superuser."""

    exit_code = ExitCode.RUNNING_AS_ROOT


class LockAlreadyTakenError(McwrapperError):
    """Raised when another invocation holds the action lock."""

    exit_code = ExitCode.ACTION_LOCKED
