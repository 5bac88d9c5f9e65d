"""Shared fixtures: a throwaway server directory and its configuration."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from mcwrapper.config import ConfigManager, WrapperConfig


def build_server_tree(root: Path, level_name: str = "world") -> Path:
    """Create a minimal server directory under ``root`` and return it."""
    server_dir = root / "server"
    world = server_dir / level_name
    (world / "region").mkdir(parents=True)
    (world / "level.dat").write_bytes(b"level-data")
    (world / "region" / "r.0.0.mca").write_bytes(b"\x00\x01region")
    (server_dir / "minecraft_server.jar").write_bytes(b"")
    (server_dir / "server.properties").write_text(
        f"#Minecraft server properties\nlevel-name={level_name}\nmotd=A Minecraft Server\n",
        encoding="utf-8",
    )
    (server_dir / "ops.txt").write_text("steve\n", encoding="utf-8")
    return server_dir


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., WrapperConfig]:
    """Return a factory for configurations rooted in ``tmp_path``."""
    server_dir = build_server_tree(tmp_path)

    def factory(**overrides: Any) -> WrapperConfig:
        data: dict[str, Any] = {
            "server_path": str(server_dir / "minecraft_server.jar"),
            "server_command": ["sleep", "30"],
            "pid_file": "run/mcwrapper.pid",
            "command_pipe": "run/command_input",
            "backup_dir": "backups",
            "start_settle_seconds": 0.2,
            "stop_poll_seconds": 0.05,
            "stop_timeout_seconds": 5,
            "relay_read_timeout": 0.1,
            "log_dir": str(tmp_path / "logs"),
        }
        data.update(overrides)
        return ConfigManager.from_mapping(data, base_dir=tmp_path)

    return factory
