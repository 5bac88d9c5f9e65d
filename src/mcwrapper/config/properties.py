"""Read-only access to the server's ``server.properties`` file."""

import re
from pathlib import Path

from mcwrapper.config.exceptions import ServerPropertiesNotFoundError

DEFAULT_LEVEL_NAME = "world"
COMMENT_PREFIXES = ("#", "!")
SEPARATOR = re.compile(r"\s*[=:]\s*")


class ServerProperties:
    """Java-style ``key=value`` properties written by the server itself.

    Only lines starting with ``#`` or ``!`` are comments, and quotes carry no
    meaning, so values such as ``Survival #2`` are kept whole.
    """

    def __init__(self, path: Path) -> None:
        """Initialize with the path of ``server.properties``."""
        self.path = path

    def load(self) -> dict[str, str]:
        """Return all properties.

        Raises:
            ServerPropertiesNotFoundError: If the file does not exist

        """
        if not self.path.is_file():
            error_msg = f"Cannot locate server.properties ({self.path})"
            raise ServerPropertiesNotFoundError(error_msg)

        values: dict[str, str] = {}
        for raw_line in self.path.read_text(encoding="utf-8").splitlines():
            line = raw_line.lstrip()
            if not line or line.startswith(COMMENT_PREFIXES):
                continue
            parts = SEPARATOR.split(line, maxsplit=1)
            key = parts[0].strip()
            values[key] = parts[1] if len(parts) > 1 else ""
        return values

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return one property, or ``default`` when it is not set."""
        return self.load().get(name, default)

    def keys(self) -> list[str]:
        """Return the property names in file order."""
        return list(self.load())

    @property
    def level_name(self) -> str:
        """Name of the world-data directory (``level-name``)."""
        return self.get("level-name") or DEFAULT_LEVEL_NAME
