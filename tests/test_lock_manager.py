"""Tests for the lock manager module."""

import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from mcwrapper.alerts import AlertMailer
from mcwrapper.exceptions import ExitCode, LockAlreadyTakenError
from mcwrapper.locking.lock_manager import LockManager


class TestLockManager:
    """Test cases for LockManager functionality."""

    def test_init_with_all_parameters(self) -> None:
        """Test LockManager initialization with all parameters."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)
            alerts = Mock(spec=AlertMailer)

            lock_manager = LockManager(
                lock_file=lock_file,
                logger=logger,
                alerts=alerts,
                script_name="mcwrapper start",
            )

            assert lock_manager.lock_file == lock_file
            assert lock_manager.logger == logger
            assert lock_manager.alerts == alerts
            assert lock_manager.script_name == "mcwrapper start"
            assert lock_manager.locked is False

    def test_context_manager_success(self) -> None:
        """Test the context manager holds the lock and releases it on exit."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "run" / "test.lock"
            logger = Mock(spec=logging.Logger)

            with LockManager(lock_file=lock_file, logger=logger) as lock_manager:
                assert lock_manager.locked
                assert lock_file.exists()

            assert lock_manager.locked is False
            # The file stays; only the flock is dropped.
            assert lock_file.exists()
            logger.debug.assert_any_call(f"Lock file {lock_file} acquired.")
            logger.debug.assert_any_call("Lock file released.")

    def test_context_manager_with_exception(self) -> None:
        """Test the context manager releases the lock when the action raises."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)
            test_exception_message = "Test exception"

            with pytest.raises(ValueError, match=test_exception_message):
                with LockManager(lock_file=lock_file, logger=logger) as lock_manager:
                    raise ValueError(test_exception_message)

            assert lock_manager.locked is False
            with LockManager(lock_file=lock_file, logger=logger) as second:
                assert second.locked

    def test_create_lock_writes_pid(self) -> None:
        """Test that the holder's pid is recorded in the lock file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)

            with LockManager(lock_file=lock_file, logger=logger):
                content = lock_file.read_text(encoding="utf-8").strip()

            assert content.isdigit()

    def test_create_lock_already_taken(self) -> None:
        """Test a second holder is refused with the action-locked exit code."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)

            with LockManager(lock_file=lock_file, logger=logger):
                contender = LockManager(lock_file=lock_file, logger=logger)
                with pytest.raises(LockAlreadyTakenError) as exc_info:
                    contender.create_lock()

            assert exc_info.value.exit_code == ExitCode.ACTION_LOCKED
            assert contender.locked is False
            logger.error.assert_called_once_with(
                "Lock is held by another mcwrapper invocation.",
            )

    def test_create_lock_already_taken_sends_alert(self) -> None:
        """Test that a taken lock triggers an alert naming the action."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)
            alerts = Mock(spec=AlertMailer)

            with LockManager(lock_file=lock_file, logger=logger):
                contender = LockManager(
                    lock_file=lock_file,
                    logger=logger,
                    alerts=alerts,
                    script_name="mcwrapper backup",
                )
                with pytest.raises(LockAlreadyTakenError):
                    contender.create_lock()

            alerts.send_alert.assert_called_once()
            kwargs = alerts.send_alert.call_args.kwargs
            assert kwargs["subject"] == "Lock already taken for mcwrapper backup"
            assert str(lock_file) in kwargs["message"]

    def test_release_lock_not_held(self) -> None:
        """Test releasing a lock that is not held only warns."""
        with tempfile.TemporaryDirectory() as temp_dir:
            lock_file = Path(temp_dir) / "test.lock"
            logger = Mock(spec=logging.Logger)

            LockManager(lock_file=lock_file, logger=logger).release_lock()

            logger.warning.assert_called_once_with(
                "Lock is not held when attempting to release.",
            )
