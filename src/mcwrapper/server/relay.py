"""Relay reader that feeds the command pipe into the server's stdin.

The relay runs as its own process for the whole lifetime of the server. The
server was started with its stdin connected to the relay's stdout, so every
line that later invocations append to the pipe reaches the server console.
"""

import argparse
import logging
import os
import select
import sys
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from mcwrapper.alerts import AlertMailer
from mcwrapper.config import ConfigManager
from mcwrapper.exceptions import ExitCode
from mcwrapper.logging import LoggingConfig, configure_logging
from mcwrapper.server.exceptions import ServerDisappearedError
from mcwrapper.server.liveness import is_process_alive
from mcwrapper.server.pid_file import PidFile
from mcwrapper.server.pipe import CommandPipe

STOP_COMMAND = "stop"
READ_CHUNK_SIZE = 4096


class CommandRelay:
    """Forwards pipe lines to the server until ``stop`` or the server dies."""

    def __init__(  # noqa: PLR0913
        self,
        pid: int,
        pipe: CommandPipe,
        pid_file: PidFile,
        output: BinaryIO,
        logger: logging.Logger,
        read_timeout: float = 2.0,
        alerts: AlertMailer | None = None,
        liveness: Callable[[int], bool] = is_process_alive,
    ) -> None:
        """Initialize the relay.

        Args:
            pid: Process id of the server fed by ``output``
            pipe: The command pipe to read from
            pid_file: Identity record removed during cleanup
            output: Stream connected to the server's stdin
            logger: Logger instance for logging operations
            read_timeout: Seconds to wait for a line before re-checking liveness
            alerts: Optional alert mailer notified when the server disappears
            liveness: Liveness probe, replaceable in tests

        """
        self.pid = pid
        self.pipe = pipe
        self.pid_file = pid_file
        self.output = output
        self.logger = logger
        self.read_timeout = read_timeout
        self.alerts = alerts
        self.liveness = liveness
        self._buffer = b""

    def run(self) -> None:
        """Relay commands until the server stops.

        Returns after forwarding ``stop`` and cleaning up.

        Raises:
            ServerDisappearedError: If the server died without a stop command

        """
        # O_RDWR keeps a writer open on our side, so the FIFO never reports EOF
        # between two short-lived senders.
        fd = os.open(self.pipe.path, os.O_RDWR | os.O_NONBLOCK)
        self.logger.info(f"Relaying {self.pipe.path} to server pid {self.pid}")
        try:
            while True:
                line = self._next_line(fd)
                if not line:
                    if not self.liveness(self.pid):
                        self._handle_disappearance()
                    continue

                if not self._forward(line):
                    self._handle_disappearance()

                if line == STOP_COMMAND:
                    self.logger.info("Stop command relayed, cleaning up")
                    self.cleanup()
                    return
        finally:
            os.close(fd)

    def _next_line(self, fd: int) -> str | None:
        """Return the next complete line, or None after ``read_timeout``."""
        if b"\n" not in self._buffer:
            ready, _, _ = select.select([fd], [], [], self.read_timeout)
            if ready:
                try:
                    self._buffer += os.read(fd, READ_CHUNK_SIZE)
                except BlockingIOError:
                    return None

        if b"\n" not in self._buffer:
            return None
        raw, _, self._buffer = self._buffer.partition(b"\n")
        return raw.decode("utf-8", errors="replace").rstrip("\r")

    def _forward(self, line: str) -> bool:
        """Write ``line`` to the server console; False if its stdin is gone."""
        try:
            self.output.write(f"{line}\n".encode())
            self.output.flush()
        except (BrokenPipeError, ValueError):
            return False
        self.logger.debug(f"Relayed '{line}'")
        return True

    def _handle_disappearance(self) -> None:
        message = f"Server process {self.pid} disappeared without a stop command."
        self.logger.error(message)
        self.cleanup()
        if self.alerts:
            self.alerts.send_alert("Server disappeared", message)
        raise ServerDisappearedError(message)

    def cleanup(self) -> None:
        """Remove the pid file and the pipe if they still belong to our server.

        A pid file naming another process means a newer start owns both files.
        """
        recorded = self.pid_file.read()
        if recorded not in (None, self.pid):
            self.logger.info(
                f"Pid file now names {recorded}; leaving pipe and pid file in place",
            )
            return
        self.pid_file.remove()
        self.pipe.remove()


def build_relay_command(  # noqa: PLR0913
    pid: int,
    pipe_path: Path,
    pid_file: Path,
    read_timeout: float,
    config_path: Path | None = None,
    python: str = sys.executable,
) -> list[str]:
    """Command line that runs the relay in a separate interpreter."""
    command = [
        python,
        "-m",
        "mcwrapper.server",
        "--pid",
        str(pid),
        "--pipe",
        str(pipe_path),
        "--pid-file",
        str(pid_file),
        "--read-timeout",
        str(read_timeout),
    ]
    if config_path is not None:
        command += ["--config", str(config_path)]
    return command


def main(argv: list[str] | None = None) -> None:
    """Run the relay loop; used by ``start``, not meant to be run by hand."""
    parser = argparse.ArgumentParser(
        description="Relay commands from the mcwrapper pipe into the server console.",
    )
    parser.add_argument("--pid", type=int, required=True, help="Server process id")
    parser.add_argument("--pipe", type=Path, required=True, help="Command pipe path")
    parser.add_argument("--pid-file", type=Path, required=True, help="Pid file path")
    parser.add_argument("--read-timeout", type=float, default=2.0)
    parser.add_argument("--config", type=Path, help="mcwrapper configuration file")
    args = parser.parse_args(argv)

    config = ConfigManager.load_config(args.config) if args.config else None
    logger = configure_logging(
        LoggingConfig(
            log_name="mcwrapper",
            log_filename="mcwrapper-relay.log",
            log_level=config.log_level if config else "INFO",
            log_dir=config.log_dir if config else None,
            enable_console=False,
        ),
    ).getChild("relay")

    relay = CommandRelay(
        pid=args.pid,
        pipe=CommandPipe(args.pipe, logger),
        pid_file=PidFile(args.pid_file, logger),
        output=sys.stdout.buffer,
        logger=logger,
        read_timeout=args.read_timeout,
        alerts=AlertMailer(logger, config.alerts if config else None),
    )
    try:
        relay.run()
    except ServerDisappearedError:
        sys.exit(ExitCode.SERVER_DISAPPEARED)
    except OSError:
        logger.exception("Relay failed")
        sys.exit(ExitCode.GENERIC_FAILURE)
    sys.exit(ExitCode.SUCCESS)
