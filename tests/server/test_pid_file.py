"""Tests for the pid file."""

import logging
from pathlib import Path
from unittest.mock import Mock

from mcwrapper.server.pid_file import PidFile


class TestPidFile:
    """Test cases for PidFile."""

    def test_write_and_read(self, tmp_path: Path) -> None:
        """Test that a written pid is read back, creating the directory."""
        pid_file = PidFile(tmp_path / "run" / "mcwrapper.pid", Mock(spec=logging.Logger))
        expected_pid = 4242

        pid_file.write(expected_pid)

        assert pid_file.read() == expected_pid
        assert pid_file.path.read_text(encoding="utf-8") == "4242\n"

    def test_read_missing(self, tmp_path: Path) -> None:
        """Test that a missing file means no pid."""
        pid_file = PidFile(tmp_path / "mcwrapper.pid", Mock(spec=logging.Logger))

        assert pid_file.read() is None

    def test_read_malformed(self, tmp_path: Path) -> None:
        """Test that garbage in the file is ignored with a warning."""
        path = tmp_path / "mcwrapper.pid"
        path.write_text("not-a-pid\n", encoding="utf-8")
        logger = Mock(spec=logging.Logger)

        assert PidFile(path, logger).read() is None
        logger.warning.assert_called_once()

    def test_write_overwrites_stale_record(self, tmp_path: Path) -> None:
        """Test that a new start replaces an old pid."""
        pid_file = PidFile(tmp_path / "mcwrapper.pid", Mock(spec=logging.Logger))
        pid_file.write(1)
        pid_file.write(2)

        expected_pid = 2
        assert pid_file.read() == expected_pid

    def test_remove_is_idempotent(self, tmp_path: Path) -> None:
        """Test removing twice is not an error."""
        pid_file = PidFile(tmp_path / "mcwrapper.pid", Mock(spec=logging.Logger))
        pid_file.write(1)

        pid_file.remove()
        pid_file.remove()

        assert not pid_file.path.exists()
