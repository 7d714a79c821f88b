"""Tests for the envsetup CLI.

Covers:
- Exit code constants and logging setup
- Project path validation
- setup: non-interactive runs, interactive runs with mocked prompts,
  failures and their exit codes
- diff: read-only preview
"""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from envsetup import __version__
from envsetup.cli import app
from envsetup.cli_utils import (
    CI_ENV_VARS,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SUCCESS,
    _is_interactive,
    _setup_logging,
    _validate_project_path,
)

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project directory with a two-key template."""
    (tmp_path / ".env.example").write_text("# App\nA=1\nB=2 # desc\n")
    return tmp_path


def _prompts(*values) -> MagicMock:
    """Mock for questionary.text/confirm returning values in order from .ask()."""
    return MagicMock(side_effect=[MagicMock(**{"ask.return_value": v}) for v in values])


# =============================================================================
# Test: Helpers
# =============================================================================


class TestExitCodes:
    """Tests for exit code constants."""

    def test_values(self) -> None:
        assert (EXIT_SUCCESS, EXIT_ERROR, EXIT_CONFIG_ERROR, EXIT_SIGINT) == (0, 1, 2, 130)


class TestSetupLogging:
    """Tests for _setup_logging()."""

    def test_default_is_info(self) -> None:
        _setup_logging(verbose=False, quiet=False)
        assert logging.getLogger().level == logging.INFO

    def test_verbose_is_debug(self) -> None:
        _setup_logging(verbose=True, quiet=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_is_warning(self) -> None:
        _setup_logging(verbose=False, quiet=True)
        assert logging.getLogger().level == logging.WARNING

    def test_verbose_wins_over_quiet(self) -> None:
        _setup_logging(verbose=True, quiet=True)
        assert logging.getLogger().level == logging.DEBUG


class TestIsInteractive:
    """Tests for _is_interactive()."""

    def test_ci_variable_means_non_interactive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CI", "true")
        with patch("envsetup.cli_utils.sys.stdin") as stdin:
            stdin.isatty.return_value = True
            assert _is_interactive() is False

    def test_tty_without_ci(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in CI_ENV_VARS:
            monkeypatch.delenv(var, raising=False)
        with patch("envsetup.cli_utils.sys.stdin") as stdin:
            stdin.isatty.return_value = True
            assert _is_interactive() is True

    def test_piped_stdin(self) -> None:
        with patch("envsetup.cli_utils.sys.stdin") as stdin:
            stdin.isatty.return_value = False
            assert _is_interactive() is False


class TestValidateProjectPath:
    """Tests for _validate_project_path()."""

    def test_relative_path_is_resolved(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "service").mkdir()
        assert _validate_project_path("service") == (tmp_path / "service").resolve()

    def test_missing_directory_exits(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["setup", "-p", str(tmp_path / "missing"), "-d", "-y"])
        assert result.exit_code == EXIT_ERROR
        assert "does not exist" in result.output

    def test_file_is_not_a_project(self, tmp_path: Path) -> None:
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        result = runner.invoke(app, ["setup", "-p", str(file_path), "-d", "-y"])
        assert result.exit_code == EXIT_ERROR
        assert "not a directory" in result.output


# =============================================================================
# Test: setup (non-interactive)
# =============================================================================


class TestSetupNonInteractive:
    """setup --defaults --yes."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_SUCCESS
        assert __version__ in result.output

    def test_creates_env_from_defaults(self, project: Path) -> None:
        result = runner.invoke(app, ["setup", "-p", str(project), "--defaults", "--yes"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert (project / ".env").read_text() == "A=1\nB=2\n"
        assert not (project / ".env.old").exists()
        assert "Successfully updated the .env file!" in result.output

    def test_existing_file_is_backed_up(self, project: Path) -> None:
        (project / ".env").write_text("A=old\n")

        result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert (project / ".env").read_text() == "A=old\nB=2\n"
        assert (project / ".env.old").read_text() == "A=old\n"
        assert "Backed up existing .env to .env.old" in result.output

    def test_no_changes(self, project: Path) -> None:
        (project / ".env").write_text("A=1\nB=2\n")

        result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_SUCCESS
        assert "No changes to apply to .env file." in result.output
        assert not (project / ".env.old").exists()

    def test_target_override(self, project: Path) -> None:
        result = runner.invoke(
            app, ["setup", "-p", str(project), "--target", ".env.local", "-d", "-y", "-q"]
        )

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert (project / ".env.local").read_text() == "A=1\nB=2\n"
        assert not (project / ".env").exists()

    def test_settings_file_is_used(self, project: Path) -> None:
        (project / "env.tpl").write_text("ONLY=x\n")
        (project / "envsetup.yaml").write_text("template: env.tpl\n")
        (project / ".env").write_text("ONLY=y\n")

        result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert (project / ".env").read_text() == "ONLY=y\n"

    def test_missing_template_exits_with_error(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["setup", "-p", str(tmp_path), "-d", "-y"])

        assert result.exit_code == EXIT_ERROR
        assert "Error reading .env.example" in result.output
        assert not (tmp_path / ".env").exists()

    def test_empty_template_exits_with_error(self, tmp_path: Path) -> None:
        (tmp_path / ".env.example").write_text("# nothing\n")

        result = runner.invoke(app, ["setup", "-p", str(tmp_path), "-d", "-y"])

        assert result.exit_code == EXIT_ERROR
        assert "No environment variables found in .env.example." in result.output

    def test_invalid_settings_file_is_config_error(self, project: Path) -> None:
        (project / "envsetup.yaml").write_text("target: [broken\n")

        result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_write_error_is_reported_with_exit_zero(self, project: Path) -> None:
        (project / ".env").mkdir()

        result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_SUCCESS
        assert "Error writing .env file" in result.output

    def test_refuses_prompts_without_terminal(self, project: Path) -> None:
        with patch("envsetup.cli._is_interactive", return_value=False):
            result = runner.invoke(app, ["setup", "-p", str(project)])

        assert result.exit_code == EXIT_ERROR
        assert "Non-interactive environment detected." in result.output
        assert not (project / ".env").exists()

    def test_interrupt_outside_prompts_exits_130(self, project: Path) -> None:
        with patch("envsetup.cli.Workflow.run", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["setup", "-p", str(project), "-d", "-y"])

        assert result.exit_code == EXIT_SIGINT
        assert "Interrupted." in result.output

    def test_defaults_alone_still_needs_terminal(self, project: Path) -> None:
        with patch("envsetup.cli._is_interactive", return_value=False):
            result = runner.invoke(app, ["setup", "-p", str(project), "--defaults"])

        assert result.exit_code == EXIT_ERROR


# =============================================================================
# Test: setup (interactive, mocked prompts)
# =============================================================================


class TestSetupInteractive:
    """setup with questionary prompts mocked."""

    def test_answers_are_saved_after_confirmation(self, project: Path) -> None:
        with (
            patch("envsetup.cli._is_interactive", return_value=True),
            patch("envsetup.ui.form.questionary.text", _prompts("1", "two words")),
            patch("envsetup.ui.dialog.questionary.confirm", _prompts(True)),
        ):
            result = runner.invoke(app, ["setup", "-p", str(project)])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert (project / ".env").read_text() == 'A=1\nB="two words"\n'

    def test_declined_changes_are_discarded(self, project: Path) -> None:
        with (
            patch("envsetup.cli._is_interactive", return_value=True),
            patch("envsetup.ui.form.questionary.text", _prompts("1", "2")),
            patch("envsetup.ui.dialog.questionary.confirm", _prompts(False)),
        ):
            result = runner.invoke(app, ["setup", "-p", str(project)])

        assert result.exit_code == EXIT_SUCCESS
        assert "Changes discarded by user." in result.output
        assert not (project / ".env").exists()

    def test_ctrl_c_in_form_cancels(self, project: Path) -> None:
        with (
            patch("envsetup.cli._is_interactive", return_value=True),
            patch("envsetup.ui.form.questionary.text", _prompts(None)),
            patch("envsetup.ui.dialog.questionary.confirm") as confirm,
        ):
            result = runner.invoke(app, ["setup", "-p", str(project)])

        assert result.exit_code == EXIT_SUCCESS
        assert "Operation cancelled by user." in result.output
        confirm.assert_not_called()
        assert not (project / ".env").exists()

    def test_yes_skips_confirmation(self, project: Path) -> None:
        with (
            patch("envsetup.cli._is_interactive", return_value=True),
            patch("envsetup.ui.form.questionary.text", _prompts("9", "2")),
            patch("envsetup.ui.dialog.questionary.confirm") as confirm,
        ):
            result = runner.invoke(app, ["setup", "-p", str(project), "--yes"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        confirm.assert_not_called()
        assert (project / ".env").read_text() == "A=9\nB=2\n"


# =============================================================================
# Test: diff
# =============================================================================


class TestDiffCommand:
    """diff never writes."""

    def test_shows_pending_changes(self, project: Path) -> None:
        (project / ".env").write_text("A=old\n")

        result = runner.invoke(app, ["diff", "-p", str(project)])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Changes to .env" in result.output
        assert "Added" in result.output
        assert (project / ".env").read_text() == "A=old\n"
        assert not (project / ".env.old").exists()

    def test_no_changes(self, project: Path) -> None:
        (project / ".env").write_text("A=1\nB=2\n")

        result = runner.invoke(app, ["diff", "-p", str(project)])

        assert result.exit_code == EXIT_SUCCESS
        assert "No changes to apply to .env file." in result.output

    def test_missing_template(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["diff", "-p", str(tmp_path)])
        assert result.exit_code == EXIT_ERROR
