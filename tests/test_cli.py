"""Tests for the command-line interface."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from mcwrapper import __version__
from mcwrapper.cli import ALLOW_ROOT_ENV, PROJECT_URL, main
from mcwrapper.config import WrapperConfig
from mcwrapper.exceptions import ExitCode


@pytest.fixture(autouse=True)
def regular_user(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test as an unprivileged user unless it says otherwise."""
    monkeypatch.setattr("mcwrapper.cli.os.geteuid", lambda: 1000)
    monkeypatch.delenv(ALLOW_ROOT_ENV, raising=False)


@pytest.fixture
def config_file(tmp_path: Path, make_config: Callable[..., WrapperConfig]) -> Path:
    """Write a YAML configuration for the server tree under ``tmp_path``."""
    config = make_config()
    path = tmp_path / "mcwrapper.yaml"
    path.write_text(
        f"server_path: {config.server_path}\n"
        "server_command: [sleep, '30']\n"
        "backup_dir: backups\n"
        f"log_dir: {tmp_path / 'logs'}\n",
        encoding="utf-8",
    )
    return path


def run_main(*argv: str) -> int:
    """Run the CLI and return the code it exits with."""
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


class TestInformationalActions:
    """Test cases for actions that need no configuration."""

    def test_no_action_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that running without an action shows usage and succeeds."""
        assert run_main() == ExitCode.SUCCESS
        assert "actions:" in capsys.readouterr().out

    def test_help_action(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the explicit help action."""
        assert run_main("help") == ExitCode.SUCCESS
        assert "restore" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that version prints only the version line."""
        assert run_main("version") == ExitCode.SUCCESS
        assert capsys.readouterr().out == f"mcwrapper {__version__}\n"

    def test_about(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that about names the project and the host."""
        assert run_main("about") == ExitCode.SUCCESS
        out = capsys.readouterr().out
        assert PROJECT_URL in out
        assert "python_version" in out


class TestDispatch:
    """Test cases for action dispatch and exit codes."""

    def test_unknown_action(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that an unknown action exits 4 with usage on stderr."""
        assert run_main("explode") == ExitCode.INVALID_ACTION
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "usage:" in captured.err

    def test_root_is_refused(self, monkeypatch: pytest.MonkeyPatch, config_file: Path) -> None:
        """Test that the superuser is turned away before anything happens."""
        monkeypatch.setattr("mcwrapper.cli.os.geteuid", lambda: 0)

        assert run_main("--config", str(config_file), "status") == ExitCode.RUNNING_AS_ROOT

    def test_root_allowed_by_environment(
        self,
        monkeypatch: pytest.MonkeyPatch,
        config_file: Path,
    ) -> None:
        """Test the explicit opt-in for running as root."""
        monkeypatch.setattr("mcwrapper.cli.os.geteuid", lambda: 0)
        monkeypatch.setenv(ALLOW_ROOT_ENV, "1")

        assert run_main("--config", str(config_file), "status") == ExitCode.SERVER_NOT_RUNNING

    def test_missing_config_file(self, tmp_path: Path) -> None:
        """Test that an explicit but missing configuration is exit code 13."""
        code = run_main("--config", str(tmp_path / "missing.yaml"), "status")
        assert code == ExitCode.INVALID_CONFIGURATION

    def test_status_not_running(
        self,
        config_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that status prints on stdout and exits 5 while stopped."""
        assert run_main("--config", str(config_file), "status") == ExitCode.SERVER_NOT_RUNNING
        assert capsys.readouterr().out == "NOT_RUNNING\n"

    def test_config_value(
        self,
        config_file: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that config prints just the value on stdout."""
        assert run_main("--config", str(config_file), "config", "backupdir") == ExitCode.SUCCESS
        assert capsys.readouterr().out == f"{tmp_path.absolute() / 'backups'}\n"

    def test_config_unknown_setting(self, config_file: Path) -> None:
        """Test the exit code for an unknown setting."""
        code = run_main("--config", str(config_file), "config", "nonsense")
        assert code == ExitCode.UNKNOWN_CONFIG_SETTING

    def test_prop(self, config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test reading one server property."""
        assert run_main("--config", str(config_file), "prop", "level-name") == ExitCode.SUCCESS
        assert capsys.readouterr().out == "world\n"

    def test_restore_needs_one_argument(self, config_file: Path) -> None:
        """Test that restore without a source is an invalid invocation."""
        assert run_main("--config", str(config_file), "restore") == ExitCode.INVALID_ACTION

    def test_command_not_running(self, config_file: Path) -> None:
        """Test that cmd against a stopped server exits 5."""
        code = run_main("--config", str(config_file), "cmd", "say", "hi")
        assert code == ExitCode.SERVER_NOT_RUNNING

    def test_backup_and_latest(
        self,
        config_file: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that backup prints the new backup and latest points at it."""
        assert run_main("--config", str(config_file), "backup") == ExitCode.SUCCESS
        backup_path = capsys.readouterr().out.strip()
        assert Path(backup_path).parent == tmp_path.absolute() / "backups"

        assert run_main("--config", str(config_file), "config", "latestbackup") == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == backup_path

    def test_unexpected_error(self, config_file: Path) -> None:
        """Test that an unexpected exception exits 1."""
        with patch("mcwrapper.cli.McWrapper", side_effect=RuntimeError("boom")):
            assert run_main("--config", str(config_file), "status") == ExitCode.GENERIC_FAILURE
