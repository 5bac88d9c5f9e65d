"""Tests for the liveness probe."""

import os
import subprocess
from unittest.mock import patch

from mcwrapper.server.liveness import is_process_alive


class TestIsProcessAlive:
    """Test cases for is_process_alive."""

    def test_own_process_is_alive(self) -> None:
        """Test that the test process itself is alive."""
        assert is_process_alive(os.getpid()) is True

    def test_none_and_non_positive(self) -> None:
        """Test that None, 0 and negative ids are never alive."""
        assert is_process_alive(None) is False
        assert is_process_alive(0) is False
        assert is_process_alive(-1) is False

    def test_exited_process(self) -> None:
        """Test that a reaped child is reported dead."""
        process = subprocess.Popen(["true"])  # noqa: S607
        process.wait()

        assert is_process_alive(process.pid) is False

    def test_permission_error_counts_as_dead(self) -> None:
        """Test that a process we may not signal is treated as not alive."""
        with patch("os.kill", side_effect=PermissionError("not yours")):
            assert is_process_alive(1) is False
