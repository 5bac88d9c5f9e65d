"""Exceptions raised while supervising the server process."""

from mcwrapper.exceptions import ExitCode, McwrapperError


class ServerError(McwrapperError):
    """Base exception for server supervision errors."""


class ServerNotRunningError(ServerError):
    """Raised when an action needs a live server and none is running."""

    exit_code = ExitCode.SERVER_NOT_RUNNING


class ServerAlreadyRunningError(ServerError):
    """Raised when start is requested while the server is alive."""

    exit_code = ExitCode.SERVER_ALREADY_RUNNING


class ServerDisappearedError(ServerError):
    """Raised by the relay when the server died without a stop command."""

    exit_code = ExitCode.SERVER_DISAPPEARED


class ServerCannotStartError(ServerError):
    """Raised when the launched server is not alive after settling."""

    exit_code = ExitCode.SERVER_CANNOT_START


class ServerStopTimeoutError(ServerError):
    """Raised when the server is still alive when the stop wait ends."""

    exit_code = ExitCode.SERVER_STOP_TIMEOUT


class PipeCreationError(ServerError):
    """Raised when the command pipe cannot be created."""

    exit_code = ExitCode.MAKE_FIFO_FAILED


class SendCommandFailedError(ServerError):
    """Raised when writing a command into the pipe fails."""

    exit_code = ExitCode.SEND_COMMAND_FAILED


class ServerBinaryNotFoundError(ServerError):
    """Raised when the configured server binary does not exist."""

    exit_code = ExitCode.SERVER_BINARY_NOT_FOUND


class JavaNotFoundError(ServerError):
    """Raised when the Java executable is not on PATH."""

    exit_code = ExitCode.NO_JAVA


class ServerLogNotFoundError(ServerError):
    """Raised when no server log file exists yet."""

    exit_code = ExitCode.SERVER_LOG_NOT_FOUND
