"""Configuration management for mcwrapper.

The configuration is read once per invocation into an immutable
``WrapperConfig`` which every component receives explicitly.
"""

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

from mcwrapper.alerts import AlertSettings
from mcwrapper.config.exceptions import (
    ConfigurationError,
    UnsupportedCompressionTypeError,
)


class CompressionMode(Enum):
    """How a finished backup directory is packed."""

    NONE = "none"
    TAR_GZIP = "tar-gzip"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: "str | CompressionMode | None") -> "CompressionMode":
        """Resolve a configured compression name.

        Raises:
            UnsupportedCompressionTypeError: If the name is not recognized

        """
        if isinstance(value, CompressionMode):
            return value
        if value is None or not str(value).strip():
            return cls.NONE
        name = str(value).strip().lower()
        aliases = {"tgz": cls.TAR_GZIP, "tar.gz": cls.TAR_GZIP, "gztar": cls.TAR_GZIP}
        if name in aliases:
            return aliases[name]
        try:
            return cls(name)
        except ValueError:
            error_msg = f"Unknown compression type: {value}"
            raise UnsupportedCompressionTypeError(error_msg) from None

    @property
    def suffix(self) -> str:
        """File suffix of the archive, empty for uncompressed backups."""
        return {
            CompressionMode.NONE: "",
            CompressionMode.TAR_GZIP: ".tgz",
            CompressionMode.ZIP: ".zip",
        }[self]


@dataclass(frozen=True)
class WrapperConfig:
    """Resolved configuration for one mcwrapper invocation.

    All paths are absolute.
    """

    base_dir: Path
    server_path: Path
    pid_file: Path
    command_pipe: Path
    lock_file: Path
    server_properties_path: Path
    backup_dir: Path
    config_path: Path | None = None
    java_bin: str = "java"
    mx_size: str = "1024M"
    ms_size: str = "1024M"
    server_command: tuple[str, ...] | None = None
    latest_backup_name: str = "latest"
    backups_to_keep: int = 5
    compression: CompressionMode = CompressionMode.NONE
    backup_on_stop: bool = False
    require_support_files: bool = False
    start_settle_seconds: float = 1.0
    stop_poll_seconds: float = 1.0
    stop_timeout_seconds: float | None = 300.0
    relay_read_timeout: float = 2.0
    log_level: str = "INFO"
    log_dir: Path | None = None
    alerts: AlertSettings | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.latest_backup_name or "/" in self.latest_backup_name:
            error_msg = (
                f"latest_backup_name must be a plain file name, got '{self.latest_backup_name}'"
            )
            raise ConfigurationError(error_msg)
        if self.server_command is not None and not self.server_command:
            error_msg = "server_command cannot be empty"
            raise ConfigurationError(error_msg)
        for field_name in ("start_settle_seconds", "stop_poll_seconds", "relay_read_timeout"):
            if getattr(self, field_name) <= 0:
                error_msg = f"{field_name} must be positive"
                raise ConfigurationError(error_msg)
        if self.stop_timeout_seconds is not None and self.stop_timeout_seconds <= 0:
            error_msg = "stop_timeout_seconds must be positive or null"
            raise ConfigurationError(error_msg)

    @property
    def server_dir(self) -> Path:
        """Working directory of the server process."""
        return self.server_path.parent

    @property
    def latest_backup_path(self) -> Path:
        """Location of the ``latest`` pointer."""
        return self.backup_dir / self.latest_backup_name

    @property
    def launch_command(self) -> list[str]:
        """Command line that starts the server."""
        if self.server_command is not None:
            return list(self.server_command)
        return [
            self.java_bin,
            f"-Xmx{self.mx_size}",
            f"-Xms{self.ms_size}",
            "-jar",
            str(self.server_path),
            "nogui",
        ]


class ConfigManager:
    """Finds, loads and validates the configuration file."""

    ENV_VAR = "MCWRAPPER_CONFIG_PATH"
    CONFIG_NAMES = ("mcwrapper.yaml", "mcwrapper.conf")

    # mcwrapper.conf key -> YAML key
    LEGACY_KEYS = {
        "MINECRAFT_SERVER_PATH": "server_path",
        "JAVA_BIN": "java_bin",
        "MX_SIZE": "mx_size",
        "MS_SIZE": "ms_size",
        "MINECRAFT_SERVER_CMD": "server_command",
        "PID_FILE": "pid_file",
        "COMMAND_PIPE": "command_pipe",
        "SERVER_PROPERTIES_PATH": "server_properties_path",
        "BACKUP_DIRECTORY_PATH": "backup_dir",
        "LATEST_BACKUP_NAME": "latest_backup_name",
        "BACKUPS_TO_KEEP": "backups_to_keep",
        "COMPRESS_BACKUP": "compression",
        "BACKUP_ON_EXIT": "backup_on_stop",
    }

    KNOWN_KEYS = frozenset(
        {
            "server_path",
            "java_bin",
            "mx_size",
            "ms_size",
            "server_command",
            "pid_file",
            "command_pipe",
            "lock_file",
            "server_properties_path",
            "backup_dir",
            "latest_backup_name",
            "backups_to_keep",
            "compression",
            "backup_on_stop",
            "require_support_files",
            "start_settle_seconds",
            "stop_poll_seconds",
            "stop_timeout_seconds",
            "relay_read_timeout",
            "log_level",
            "log_dir",
            "alerts",
        },
    )

    @classmethod
    def discover_config_path(
        cls,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> Path | None:
        """Locate the configuration file.

        Checks ``$MCWRAPPER_CONFIG_PATH``, then the current directory, the home
        directory (as a dot file) and ``/etc``.

        Returns:
            Path of the first existing candidate, or None

        """
        from_env = os.environ.get(cls.ENV_VAR)
        if from_env:
            return Path(from_env).expanduser()

        cwd = Path.cwd() if cwd is None else cwd
        home = Path.home() if home is None else home
        candidates = [cwd / name for name in cls.CONFIG_NAMES]
        candidates += [home / f".{name}" for name in cls.CONFIG_NAMES]
        candidates += [Path("/etc") / name for name in cls.CONFIG_NAMES]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def load_config(cls, config_path: Path | None = None) -> WrapperConfig:
        """Load and validate the configuration.

        Args:
            config_path: Explicit configuration file; discovered when omitted

        Returns:
            Validated WrapperConfig instance

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
            UnsupportedCompressionTypeError: If the compression mode is unknown

        """
        if config_path is None:
            config_path = cls.discover_config_path()

        if config_path is None:
            return cls.from_mapping({}, base_dir=Path.cwd())

        config_path = config_path.expanduser().absolute()
        if not config_path.is_file():
            error_msg = f"Configuration file not found: {config_path}"
            raise ConfigurationError(error_msg)

        if config_path.suffix in {".yaml", ".yml"}:
            data = cls._read_yaml(config_path)
        else:
            data = cls._read_legacy(config_path)
        return cls.from_mapping(data, base_dir=config_path.parent, config_path=config_path)

    @staticmethod
    def _read_yaml(config_path: Path) -> dict[str, Any]:
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"Invalid configuration file format: {e}"
            raise ConfigurationError(error_msg, original_error=e) from e
        except OSError as e:
            error_msg = f"Error loading configuration: {e}"
            raise ConfigurationError(error_msg, original_error=e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            error_msg = f"Configuration file {config_path} must contain a mapping"
            raise ConfigurationError(error_msg)
        return data

    @classmethod
    def _read_legacy(cls, config_path: Path) -> dict[str, Any]:
        """Read a shell-style ``KEY=VALUE`` configuration file."""
        try:
            raw = dotenv_values(config_path, interpolate=False)
        except OSError as e:
            error_msg = f"Error loading configuration: {e}"
            raise ConfigurationError(error_msg, original_error=e) from e

        data: dict[str, Any] = {}
        for legacy_key, key in cls.LEGACY_KEYS.items():
            value = raw.get(legacy_key)
            if value is None:
                continue
            if key == "backup_on_stop":
                # Any non-empty value enabled it in the shell version.
                data[key] = bool(value.strip())
            elif key == "server_command":
                data[key] = shlex.split(value)
            else:
                data[key] = value
        return data

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        base_dir: Path,
        config_path: Path | None = None,
    ) -> WrapperConfig:
        """Build a WrapperConfig from already parsed values.

        Relative paths are resolved against ``base_dir``.

        Raises:
            ConfigurationError: If a key is unknown or a value is malformed

        """
        unknown = sorted(set(data) - cls.KNOWN_KEYS)
        if unknown:
            error_msg = f"Unknown configuration keys: {', '.join(unknown)}"
            raise ConfigurationError(error_msg)

        base_dir = base_dir.absolute()

        def path_of(key: str, default: str | Path) -> Path:
            value = data.get(key)
            path = Path(default if value in (None, "") else str(value)).expanduser()
            return path if path.is_absolute() else base_dir / path

        server_path = path_of("server_path", "minecraft_server.jar")
        pid_file = path_of("pid_file", "mcwrapper.pid")

        log_dir = data.get("log_dir")
        alerts_data = data.get("alerts")

        try:
            alerts = AlertSettings.from_mapping(alerts_data) if alerts_data else None
            return WrapperConfig(
                base_dir=base_dir,
                config_path=config_path,
                server_path=server_path,
                pid_file=pid_file,
                command_pipe=path_of("command_pipe", "command_input"),
                lock_file=path_of("lock_file", pid_file.with_name(f"{pid_file.name}.lock")),
                server_properties_path=path_of(
                    "server_properties_path",
                    server_path.parent / "server.properties",
                ),
                backup_dir=path_of("backup_dir", "backups"),
                java_bin=str(data.get("java_bin", "java")),
                mx_size=str(data.get("mx_size", "1024M")),
                ms_size=str(data.get("ms_size", "1024M")),
                server_command=cls._parse_command(data.get("server_command")),
                latest_backup_name=str(data.get("latest_backup_name", "latest")),
                backups_to_keep=int(data.get("backups_to_keep", 5)),
                compression=CompressionMode.parse(data.get("compression")),
                backup_on_stop=cls._parse_bool(data.get("backup_on_stop", False), "backup_on_stop"),
                require_support_files=cls._parse_bool(
                    data.get("require_support_files", False),
                    "require_support_files",
                ),
                start_settle_seconds=float(data.get("start_settle_seconds", 1.0)),
                stop_poll_seconds=float(data.get("stop_poll_seconds", 1.0)),
                stop_timeout_seconds=cls._parse_optional_float(
                    data.get("stop_timeout_seconds", 300.0),
                ),
                relay_read_timeout=float(data.get("relay_read_timeout", 2.0)),
                log_level=str(data.get("log_level", "INFO")).upper(),
                log_dir=path_of("log_dir", "") if log_dir else None,
                alerts=alerts,
            )
        except ConfigurationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            error_msg = f"Configuration validation failed: {e}"
            raise ConfigurationError(error_msg, original_error=e) from e

    @staticmethod
    def _parse_command(value: Any) -> tuple[str, ...] | None:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return tuple(shlex.split(value))
        if isinstance(value, list):
            return tuple(str(part) for part in value)
        error_msg = f"server_command must be a string or a list, got {type(value).__name__}"
        raise ConfigurationError(error_msg)

    @staticmethod
    def _parse_bool(value: Any, name: str) -> bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off", ""}:
            return False
        error_msg = f"{name} must be a boolean, got '{value}'"
        raise ConfigurationError(error_msg)

    @staticmethod
    def _parse_optional_float(value: Any) -> float | None:
        if value is None or str(value).strip().lower() in {"", "none", "null"}:
            return None
        return float(value)

