"""Server process supervision and the command relay."""

from .exceptions import (
    JavaNotFoundError,
    PipeCreationError,
    SendCommandFailedError,
    ServerAlreadyRunningError,
    ServerBinaryNotFoundError,
    ServerCannotStartError,
    ServerDisappearedError,
    ServerError,
    ServerLogNotFoundError,
    ServerNotRunningError,
    ServerStopTimeoutError,
)
from .liveness import is_process_alive
from .pid_file import PidFile
from .pipe import CommandPipe
from .relay import CommandRelay
from .supervisor import ServerState, ServerStatus, ServerSupervisor

__all__ = [
    "CommandPipe",
    "CommandRelay",
    "JavaNotFoundError",
    "PidFile",
    "PipeCreationError",
    "SendCommandFailedError",
    "ServerAlreadyRunningError",
    "ServerBinaryNotFoundError",
    "ServerCannotStartError",
    "ServerDisappearedError",
    "ServerError",
    "ServerLogNotFoundError",
    "ServerNotRunningError",
    "ServerState",
    "ServerStatus",
    "ServerStopTimeoutError",
    "ServerSupervisor",
    "is_process_alive",
]
