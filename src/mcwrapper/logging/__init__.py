"""mcwrapper logging module.

Centralized logging configuration: rotating log file plus a console handler
writing diagnostics to stderr.
"""

from .logger_setup import LoggerConfigError, LoggingConfig, configure_logging, get_logger

__all__ = ["LoggerConfigError", "LoggingConfig", "configure_logging", "get_logger"]
