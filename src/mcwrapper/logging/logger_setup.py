"""Logging configuration and setup utilities for mcwrapper.

Diagnostics always go to stderr so that values printed on stdout (status,
configuration values, server properties) stay machine readable.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d [pid %(process)d]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LoggerConfigError(Exception):
    """Custom exception for logger configuration errors."""


@dataclass
class LoggingConfig:
    """Configuration for logging setup."""

    log_name: str = "mcwrapper"
    log_filename: str | None = None
    log_level: str = "INFO"
    log_dir: Path | None = None
    max_bytes: int = 2 * 1024 * 1024  # 2 MB
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = True


def validate_log_level(log_level: str) -> int:
    """Validate and return the numeric log level."""
    numeric_level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(numeric_level, int):
        error_msg = f"Invalid log level: {log_level}"
        raise LoggerConfigError(error_msg)
    return numeric_level


def get_default_log_dir() -> Path:
    """Get the default log directory.

    ``/var/log/mcwrapper`` when it is writable (service installs), otherwise
    the XDG state directory of the invoking user.
    """
    system_dir = Path("/var/log/mcwrapper")
    if system_dir.is_dir() and os.access(system_dir, os.W_OK):
        return system_dir
    state_home = os.environ.get("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    return base / "mcwrapper"


def create_logging_config(config: LoggingConfig) -> dict[str, Any]:
    """Build the ``dictConfig`` dictionary for ``config``."""
    numeric_level = validate_log_level(config.log_level)

    handlers: dict[str, dict[str, Any]] = {}

    if config.enable_file:
        log_dir = get_default_log_dir() if config.log_dir is None else config.log_dir
        log_filename = config.log_filename or f"{config.log_name}.log"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create log directory {log_dir}: {e}"
            raise LoggerConfigError(error_msg) from e

        handlers["file_handler"] = {
            "level": numeric_level,
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_dir / log_filename),
            "maxBytes": config.max_bytes,
            "backupCount": config.backup_count,
            "formatter": "detailed",
            "encoding": "utf8",
        }

    if config.enable_console:
        handlers["console_handler"] = {
            "level": numeric_level,
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": CONSOLE_FORMAT, "datefmt": DATE_FORMAT},
            "detailed": {"format": FILE_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            config.log_name: {
                "handlers": list(handlers),
                "level": numeric_level,
                "propagate": False,
            },
        },
    }


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Configure logging for one mcwrapper invocation.

    Args:
        config: Logging configuration object

    Returns:
        The configured logger named ``config.log_name``

    Raises:
        LoggerConfigError: If the log level is invalid

    """
    numeric_level = validate_log_level(config.log_level)
    try:
        logging.config.dictConfig(create_logging_config(config))
        logger = logging.getLogger(config.log_name)
        logger.debug(
            f"Logging configured for '{config.log_name}' at level {config.log_level}",
        )
    except (LoggerConfigError, ValueError, KeyError):
        # Unwritable log directory and the like: keep going with stderr only.
        logging.basicConfig(level=numeric_level, format=CONSOLE_FORMAT)
        logger = logging.getLogger(config.log_name)
        logger.setLevel(numeric_level)
        logger.exception("Failed to configure file logging. Using stderr only.")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``mcwrapper`` logger.

    Args:
        name: Short component name, e.g. ``"relay"``

    Returns:
        Logger instance

    """
    return logging.getLogger("mcwrapper").getChild(name)
