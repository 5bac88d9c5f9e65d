"""Configuration related exceptions."""

from mcwrapper.exceptions import ExitCode, McwrapperError


class ConfigurationError(McwrapperError):
    """Raised when the configuration file cannot be read or is invalid."""

    exit_code = ExitCode.INVALID_CONFIGURATION


class UnsupportedCompressionTypeError(ConfigurationError):
    """Raised when the configured compression mode is not recognized."""

    exit_code = ExitCode.BAD_COMPRESSION_TYPE


class UnknownConfigSettingError(McwrapperError):
    """Raised when the ``config`` action is asked for an unknown setting."""

    exit_code = ExitCode.UNKNOWN_CONFIG_SETTING


class ServerPropertiesNotFoundError(McwrapperError):
    """Raised when ``server.properties`` does not exist."""

    exit_code = ExitCode.NO_SERVER_PROPERTIES
