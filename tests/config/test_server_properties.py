"""Tests for server.properties access."""

from pathlib import Path

import pytest

from mcwrapper.config import ServerProperties, ServerPropertiesNotFoundError
from mcwrapper.exceptions import ExitCode


class TestServerProperties:
    """Test cases for ServerProperties."""

    def test_get_and_keys(self, tmp_path: Path) -> None:
        """Test reading values and keys in file order."""
        path = tmp_path / "server.properties"
        path.write_text(
            "#Minecraft server properties\n"
            "#Sun Nov 18 23:55:00 EST 2012\n"
            "level-name=survival\n"
            "motd=Hello = World\n"
            "white-list=false\n",
            encoding="utf-8",
        )
        properties = ServerProperties(path)

        assert properties.keys() == ["level-name", "motd", "white-list"]
        assert properties.get("motd") == "Hello = World"
        assert properties.get("missing", "fallback") == "fallback"
        assert properties.level_name == "survival"

    def test_level_name_default(self, tmp_path: Path) -> None:
        """Test that an absent or empty level-name means 'world'."""
        path = tmp_path / "server.properties"
        path.write_text("level-name=\n", encoding="utf-8")

        assert ServerProperties(path).level_name == "world"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file has its own exit code."""
        properties = ServerProperties(tmp_path / "server.properties")

        with pytest.raises(ServerPropertiesNotFoundError) as exc_info:
            properties.keys()

        assert exc_info.value.exit_code == ExitCode.NO_SERVER_PROPERTIES
        assert "Cannot locate server.properties" in exc_info.value.message

    def test_java_properties_rules(self, tmp_path: Path) -> None:
        """Test that hashes inside values and stray quotes are kept verbatim."""
        path = tmp_path / "server.properties"
        path.write_text(
            "! generated by the server\n"
            "level-name=Survival #2\n"
            'motd="Welcome\n'
            "\n"
            "server-ip:\n"
            "spawn-protection = 16\n",
            encoding="utf-8",
        )
        properties = ServerProperties(path)

        assert properties.keys() == ["level-name", "motd", "server-ip", "spawn-protection"]
        assert properties.level_name == "Survival #2"
        assert properties.get("motd") == '"Welcome'
        assert properties.get("server-ip") == ""
        assert properties.get("spawn-protection") == "16"
