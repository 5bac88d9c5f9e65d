"""Configuration loading for mcwrapper."""

from .config_manager import CompressionMode, ConfigManager, WrapperConfig
from .exceptions import (
    ConfigurationError,
    ServerPropertiesNotFoundError,
    UnknownConfigSettingError,
    UnsupportedCompressionTypeError,
)
from .properties import ServerProperties

__all__ = [
    "CompressionMode",
    "ConfigManager",
    "ConfigurationError",
    "ServerProperties",
    "ServerPropertiesNotFoundError",
    "UnknownConfigSettingError",
    "UnsupportedCompressionTypeError",
    "WrapperConfig",
]
