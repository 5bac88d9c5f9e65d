"""Command-line interface for mcwrapper."""

import argparse
import os
import sys
from collections.abc import Callable
from pathlib import Path

from mcwrapper import __version__
from mcwrapper.app import McWrapper
from mcwrapper.config import ConfigManager
from mcwrapper.exceptions import (
    ExitCode,
    InvalidActionError,
    McwrapperError,
    RunningAsRootError,
)
from mcwrapper.logging import LoggerConfigError, LoggingConfig, configure_logging
from mcwrapper.server import ServerStatus
from mcwrapper.utils import follow_file, get_system_info

ALLOW_ROOT_ENV = "MCWRAPPER_ALLOW_ROOT"
PROJECT_URL = "https://github.com/spikegrobstein/mcwrapper"

USAGE_EPILOG = """\
actions:
  help       this usage screen
  version    output mcwrapper's version number
  about      output information about mcwrapper
  start      start the server if it's not already running
  stop       stop a running server
  restart    restart a running server (stop, wait for it to stop, start)
  status     whether the server is running or not
  check      run basic sanity checks
  log        follow the server log as it's written to
  backup     safe backup of your Minecraft world data
  restore    restore a backup: restore <path|latest>
             the server is stopped and started again; the current world is
             backed up first
  config     read mcwrapper configuration: config <setting>
             settings: serverpath, serverdir, pidfile, pid, pipe, configfile,
             command, backupdir, latestbackup, backup-retention
  prop       read server.properties: prop [name]
             without a name, print every property key
  command    send a console command to the server (alias: cmd)
"""

HELP_ACTION = "help"
VERSION_ACTION = "version"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mcwrapper",
        usage="%(prog)s [--config PATH] [--log-level LEVEL] <action> [<action_options>]",
        description="Start, stop, monitor and back up a Minecraft server.",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"mcwrapper {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to the configuration file (default: discovered)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from the configuration, else INFO)",
    )
    parser.add_argument("action", nargs="?", help="Action to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Action options")
    return parser


def _print(*lines: str) -> None:
    for line in lines:
        print(line)  # noqa: T201


def _about() -> None:
    _print(f"mcwrapper {__version__}", PROJECT_URL)
    _print("Finally, simplified management of your Minecraft server.")
    _print("Start, stop, monitor, backup.")
    _print("Run with no arguments to see usage.", "")
    for key, value in get_system_info().items():
        _print(f"  {key}: {value}")


def _refuse_root() -> None:
    if os.geteuid() == 0 and os.environ.get(ALLOW_ROOT_ENV) != "1":
        error_msg = (
            "Refusing to run as root. Run mcwrapper as the user that owns the server "
            f"or set {ALLOW_ROOT_ENV}=1."
        )
        raise RunningAsRootError(error_msg)


def _status(app: McWrapper, _args: list[str]) -> int:
    status = app.status()
    _print(status.value)
    return ExitCode.SUCCESS if status is ServerStatus.RUNNING else ExitCode.SERVER_NOT_RUNNING


def _check(app: McWrapper, _args: list[str]) -> int:
    app.check()
    _print("Everything looks OK!")
    return ExitCode.SUCCESS


def _start(app: McWrapper, _args: list[str]) -> int:
    app.check()
    pid = app.start()
    app.logger.info(f"Minecraft server started (pid {pid})")
    return ExitCode.SUCCESS


def _stop(app: McWrapper, _args: list[str]) -> int:
    app.check()
    app.stop()
    return ExitCode.SUCCESS


def _restart(app: McWrapper, _args: list[str]) -> int:
    app.check()
    pid = app.restart()
    app.logger.info(f"Minecraft server restarted (pid {pid})")
    return ExitCode.SUCCESS


def _backup(app: McWrapper, _args: list[str]) -> int:
    app.check()
    backup = app.backup()
    _print(str(backup.path))
    return ExitCode.SUCCESS


def _restore(app: McWrapper, args: list[str]) -> int:
    if len(args) != 1:
        error_msg = "USAGE: mcwrapper restore <backup_path|latest>"
        raise InvalidActionError(error_msg)
    app.check()
    app.restore(args[0])
    return ExitCode.SUCCESS


def _command(app: McWrapper, args: list[str]) -> int:
    if not args:
        error_msg = "USAGE: mcwrapper command <server command>"
        raise InvalidActionError(error_msg)
    app.check()
    app.send_command(" ".join(args))
    return ExitCode.SUCCESS


def _config(app: McWrapper, args: list[str]) -> int:
    _print(app.config_value(args[0] if args else ""))
    return ExitCode.SUCCESS


def _prop(app: McWrapper, args: list[str]) -> int:
    app.check()
    _print(*app.server_property(args[0] if args else None))
    return ExitCode.SUCCESS


def _log(app: McWrapper, _args: list[str]) -> int:
    app.check()
    log_path = app.server_log_path()
    app.logger.info(f"Tailing from: {log_path}. Press ^C to cancel.")
    return follow_file(log_path)


ACTIONS: dict[str, Callable[[McWrapper, list[str]], int]] = {
    "start": _start,
    "stop": _stop,
    "restart": _restart,
    "status": _status,
    "check": _check,
    "backup": _backup,
    "restore": _restore,
    "command": _command,
    "cmd": _command,
    "config": _config,
    "prop": _prop,
    "log": _log,
}


def run(args: argparse.Namespace) -> int:
    """Load the configuration and dispatch one action.

    Returns:
        Exit code of the action

    Raises:
        McwrapperError: Any failure, carrying its exit code

    """
    _refuse_root()

    handler = ACTIONS.get(args.action)
    if handler is None:
        error_msg = f"Invalid action: {args.action}"
        raise InvalidActionError(error_msg)

    config = ConfigManager.load_config(args.config)
    logger = configure_logging(
        LoggingConfig(
            log_name="mcwrapper",
            log_level=args.log_level or config.log_level,
            log_dir=config.log_dir,
        ),
    )
    logger.debug(f"Running '{args.action}' with configuration {config.config_path}")
    return handler(McWrapper(config, logger), args.args)


def main(argv: list[str] | None = None) -> None:
    """Execute the main entry point for mcwrapper."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action is None or args.action == HELP_ACTION:
        parser.print_help()
        sys.exit(ExitCode.SUCCESS)
    if args.action == VERSION_ACTION:
        _print(f"mcwrapper {__version__}")
        sys.exit(ExitCode.SUCCESS)
    if args.action == "about":
        _about()
        sys.exit(ExitCode.SUCCESS)

    # Console only until the configuration names the log directory.
    logger = configure_logging(
        LoggingConfig(log_name="mcwrapper", log_level=args.log_level or "INFO", enable_file=False),
    )

    try:
        exit_code = run(args)
    except InvalidActionError as e:
        logger.error(e.message)
        parser.print_usage(sys.stderr)
        sys.exit(e.exit_code)
    except McwrapperError as e:
        logger.error(e.message)
        sys.exit(e.exit_code)
    except LoggerConfigError as e:
        logger.error(f"Logging configuration error: {e}")
        sys.exit(ExitCode.INVALID_CONFIGURATION)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        sys.exit(ExitCode.GENERIC_FAILURE)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(ExitCode.GENERIC_FAILURE)

    sys.exit(exit_code)
