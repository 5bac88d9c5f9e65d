"""Tests for common utility functions."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

from mcwrapper import __version__
from mcwrapper.utils.common import follow_file, format_command, get_system_info


class TestCommonUtils:
    """Test cases for common utility functions."""

    def test_get_system_info(self) -> None:
        """Test that get_system_info returns expected keys."""
        info = get_system_info()
        expected_keys = {
            "mcwrapper_version",
            "platform",
            "platform_version",
            "architecture",
            "python_version",
            "java",
        }
        assert expected_keys <= set(info)  # nosec B101
        assert info["mcwrapper_version"] == __version__  # nosec B101
        assert isinstance(info["python_version"], str)  # nosec B101

    def test_get_system_info_without_java(self) -> None:
        """Test that a missing Java binary is reported, not raised."""
        info = get_system_info(java_bin="no-such-java-binary")
        assert info["java"] == "not found"  # nosec B101

    def test_format_command_quotes_arguments(self) -> None:
        """Test that arguments with spaces survive a copy into a shell."""
        command = ["java", "-jar", "/srv/my server/minecraft_server.jar", "nogui"]
        assert (  # nosec B101
            format_command(command) == "java -jar '/srv/my server/minecraft_server.jar' nogui"
        )

    def test_follow_file_returns_tail_status(self, tmp_path: Path) -> None:
        """Test that the exit status of tail is passed through."""
        log = tmp_path / "latest.log"
        completed = subprocess.CompletedProcess(args=[], returncode=0)
        with patch("mcwrapper.utils.common.subprocess.run", return_value=completed) as run:
            assert follow_file(log) == 0  # nosec B101
        run.assert_called_once_with(["tail", "-F", str(log)], check=False)

    def test_follow_file_interrupted(self, tmp_path: Path) -> None:
        """Test that Ctrl-C ends following cleanly."""
        run = Mock(side_effect=KeyboardInterrupt)
        with patch("mcwrapper.utils.common.subprocess.run", run):
            assert follow_file(tmp_path / "latest.log") == 0  # nosec B101
