"""Common helpers shared by the command-line actions."""

import platform
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Any

from mcwrapper import __version__


def get_system_info(java_bin: str = "java") -> dict[str, Any]:
    """Collect host details printed by the ``about`` action.

    Args:
        java_bin: Java executable whose location is reported

    Returns:
        Dictionary containing system information

    """
    return {
        "mcwrapper_version": __version__,
        "platform": platform.system(),
        "platform_version": platform.release(),
        "architecture": platform.machine(),
        "python_version": platform.python_version(),
        "java": shutil.which(java_bin) or "not found",
    }


def format_command(command: list[str]) -> str:
    """Render a command line so it can be pasted into a shell."""
    return shlex.join(command)


def follow_file(path: Path) -> int:
    """Follow ``path`` with ``tail -F`` until interrupted.

    Returns:
        Exit status of ``tail``; 0 when stopped with Ctrl-C

    """
    try:
        return subprocess.run(["tail", "-F", str(path)], check=False).returncode  # noqa: S603, S607
    except KeyboardInterrupt:
        return 0
