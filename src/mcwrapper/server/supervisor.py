"""Start, stop and restart the server process."""

import logging
import shutil
import subprocess
import threading
import time
from enum import Enum
from pathlib import Path

from mcwrapper.config import WrapperConfig
from mcwrapper.server.exceptions import (
    JavaNotFoundError,
    ServerAlreadyRunningError,
    ServerBinaryNotFoundError,
    ServerCannotStartError,
    ServerLogNotFoundError,
    ServerNotRunningError,
    ServerStopTimeoutError,
)
from mcwrapper.server.liveness import is_process_alive
from mcwrapper.server.pid_file import PidFile
from mcwrapper.server.pipe import CommandPipe
from mcwrapper.server.relay import STOP_COMMAND, build_relay_command


class ServerState(Enum):
    """Lifecycle of the supervised server."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ServerStatus(Enum):
    """Answer of the ``status`` action."""

    RUNNING = "RUNNING"
    NOT_RUNNING = "NOT_RUNNING"


class ServerSupervisor:
    """Supervises one server process through its pid file and command pipe.

    A server launched by this instance is tracked through its ``Popen``
    handle; the pid file is how later invocations find it again.
    """

    RELAY_EXIT_GRACE_SECONDS = 5.0
    RELAY_READY_TIMEOUT_SECONDS = 10.0
    RELAY_READY_POLL_SECONDS = 0.05

    def __init__(self, config: WrapperConfig, logger: logging.Logger) -> None:
        """Initialize the supervisor.

        Args:
            config: Resolved mcwrapper configuration
            logger: Logger instance for logging operations

        """
        self.config = config
        self.logger = logger
        self.pid_file = PidFile(config.pid_file, logger)
        self.pipe = CommandPipe(config.command_pipe, logger)
        self._process: subprocess.Popen[bytes] | None = None
        self._relay: subprocess.Popen[bytes] | None = None
        self.state = ServerState.RUNNING if self.is_running() else ServerState.STOPPED

    @property
    def pid(self) -> int | None:
        """Pid of the running server, or None."""
        pid = self.pid_file.read()
        return pid if self._is_alive(pid) else None

    def _is_alive(self, pid: int | None) -> bool:
        if pid is not None and self._process is not None and self._process.pid == pid:
            # poll() also reaps our own exited child, which kill(pid, 0) would
            # still report as alive while it is a zombie.
            return self._process.poll() is None
        return is_process_alive(pid)

    def is_running(self) -> bool:
        """Whether the recorded server process is alive."""
        return self._is_alive(self.pid_file.read())

    def status(self) -> ServerStatus:
        """Report RUNNING or NOT_RUNNING without changing anything."""
        return ServerStatus.RUNNING if self.is_running() else ServerStatus.NOT_RUNNING

    def check(self) -> None:
        """Sanity check the installation before touching the server.

        Raises:
            JavaNotFoundError: If the Java binary is not on PATH
            ServerBinaryNotFoundError: If the server binary does not exist

        """
        if self.config.server_command is None and shutil.which(self.config.java_bin) is None:
            error_msg = (
                f"The java binary ({self.config.java_bin}) is not found. Install it or "
                "set java_bin in the configuration."
            )
            raise JavaNotFoundError(error_msg)

        if not self.config.server_path.exists():
            error_msg = f"Minecraft server not found! (server_path={self.config.server_path})"
            raise ServerBinaryNotFoundError(error_msg)

    def start(self) -> int:
        """Launch the server with the relay attached to its stdin.

        Returns:
            Pid of the started server

        Raises:
            ServerAlreadyRunningError: If the recorded server is alive
            PipeCreationError: If the command pipe cannot be created
            ServerCannotStartError: If the server is not alive after settling

        """
        if self.is_running():
            error_msg = f"Server is already running (pid {self.pid_file.read()})."
            raise ServerAlreadyRunningError(error_msg)

        self.state = ServerState.STARTING
        self.pipe.ensure()
        pid = self._launch()
        try:
            self.pid_file.write(pid)
        except OSError as e:
            self._abort_launch()
            error_msg = f"Could not record the server pid in {self.config.pid_file}: {e}"
            raise ServerCannotStartError(error_msg, original_error=e) from e
        self._wait_for_relay()

        time.sleep(self.config.start_settle_seconds)

        if not self._is_alive(pid):
            self.state = ServerState.STOPPED
            command = " ".join(self.config.launch_command)
            error_msg = f"Could not start Minecraft Server ({command})."
            raise ServerCannotStartError(error_msg)

        self.state = ServerState.RUNNING
        self.logger.info(f"Server started with pid {pid}")
        return pid

    def _launch(self) -> int:
        """Spawn the server and its relay reader, both in new sessions."""
        command = self.config.launch_command
        self.logger.debug(f"Launching {' '.join(command)} in {self.config.server_dir}")
        try:
            server = subprocess.Popen(  # noqa: S603
                command,
                cwd=self.config.server_dir,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            self.state = ServerState.STOPPED
            error_msg = f"Could not start Minecraft Server: {e}"
            raise ServerCannotStartError(error_msg, original_error=e) from e

        relay_command = build_relay_command(
            pid=server.pid,
            pipe_path=self.config.command_pipe,
            pid_file=self.config.pid_file,
            read_timeout=self.config.relay_read_timeout,
            config_path=self.config.config_path,
        )
        try:
            self._relay = subprocess.Popen(  # noqa: S603
                relay_command,
                stdin=subprocess.DEVNULL,
                stdout=server.stdin,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            server.kill()
            server.wait()
            self.state = ServerState.STOPPED
            error_msg = f"Could not start the command relay: {e}"
            raise ServerCannotStartError(error_msg, original_error=e) from e
        finally:
            if server.stdin is not None:
                server.stdin.close()

        self._process = server
        return server.pid

    def _wait_for_relay(self) -> None:
        """Block until the relay has the pipe open, so commands can be sent."""
        deadline = time.monotonic() + self.RELAY_READY_TIMEOUT_SECONDS
        while time.monotonic() < deadline:
            if self._relay is None or self._relay.poll() is not None:
                break
            if self.pipe.has_reader():
                return
            time.sleep(self.RELAY_READY_POLL_SECONDS)

        self._abort_launch()
        error_msg = f"The command relay did not open {self.config.command_pipe}."
        raise ServerCannotStartError(error_msg)

    def _abort_launch(self) -> None:
        """Kill a half-started server and relay and forget them."""
        for process in (self._relay, self._process):
            if process is not None and process.poll() is None:
                process.kill()
                process.wait()
        self._relay = None
        self.pid_file.remove()
        self.state = ServerState.STOPPED

    def send_command(self, command: str) -> None:
        """Send one console command to the running server.

        Raises:
            ServerNotRunningError: If the server is not alive; nothing is written
            SendCommandFailedError: If the pipe write fails

        """
        if not self.is_running():
            error_msg = "Server is NOT running. Not sending command"
            raise ServerNotRunningError(error_msg)
        self.pipe.write_line(command)
        self.logger.info(f"Sent command: {command}")

    def stop(
        self,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        """Send ``stop`` and wait for the server to exit.

        Args:
            timeout: Seconds to wait; defaults to ``stop_timeout_seconds``
            cancel: Optional event that aborts the wait when set

        Raises:
            ServerNotRunningError: If no live server is tracked
            ServerStopTimeoutError: If the server outlives the wait

        """
        if not self.is_running():
            error_msg = "Server is NOT running."
            raise ServerNotRunningError(error_msg)

        # The relay removes the pid file as soon as it forwards stop, so the pid
        # has to be captured before sending.
        pid = self.pid_file.read()
        self.state = ServerState.STOPPING
        self.send_command(STOP_COMMAND)
        try:
            self.wait_until_stopped(timeout=timeout, cancel=cancel, pid=pid)
        except ServerStopTimeoutError:
            self.state = ServerState.RUNNING
            # The relay drops the pid file once it forwards stop.
            self._reap_relay()
            if pid is not None and self._is_alive(pid):
                self.pid_file.write(pid)
            raise

        self._reap_relay()
        # The relay normally cleaned up already; these are no-ops then.
        self.pid_file.remove()
        self.pipe.remove()
        self.state = ServerState.STOPPED
        self.logger.info("Server stopped")

    def restart(self) -> int:
        """Stop, wait for the exit, then start again.

        Returns:
            Pid of the new server process

        """
        self.stop()
        return self.start()

    def wait_until_stopped(
        self,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
        pid: int | None = None,
    ) -> None:
        """Poll liveness until the server has exited.

        Args:
            timeout: Seconds to wait; defaults to ``stop_timeout_seconds``,
                which may be None to wait without limit
            cancel: Optional event that aborts the wait when set
            pid: Process to wait for; defaults to the recorded pid

        Raises:
            ServerStopTimeoutError: If the timeout expires or the wait is cancelled

        """
        if timeout is None:
            timeout = self.config.stop_timeout_seconds
        deadline = None if timeout is None else time.monotonic() + timeout
        poll = self.config.stop_poll_seconds
        if pid is None:
            pid = self.pid_file.read()

        while self._is_alive(pid):
            if cancel is not None and cancel.is_set():
                error_msg = "Waiting for the server to stop was cancelled."
                raise ServerStopTimeoutError(error_msg)

            delay = poll
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    error_msg = f"Server still running after {timeout} seconds."
                    raise ServerStopTimeoutError(error_msg)
                delay = min(poll, remaining)

            self.logger.debug("Waiting for the server to stop...")
            if cancel is not None:
                cancel.wait(delay)
            else:
                time.sleep(delay)

    def _reap_relay(self) -> None:
        if self._relay is None:
            return
        try:
            self._relay.wait(timeout=self.RELAY_EXIT_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Relay process {self._relay.pid} did not exit after stop")
        self._relay = None

    def server_log_path(self) -> Path:
        """Return the server's current log file.

        Raises:
            ServerLogNotFoundError: If the server has not written a log yet

        """
        candidates = [
            self.config.server_dir / "logs" / "latest.log",
            self.config.server_dir / "server.log",
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        error_msg = f"Server log not found! ({candidates[0]})"
        raise ServerLogNotFoundError(error_msg)
