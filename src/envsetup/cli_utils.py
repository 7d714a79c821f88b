"""Shared console output, logging setup and exit codes for the CLI."""

import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

# Exit codes
EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_CONFIG_ERROR: int = 2
EXIT_SIGINT: int = 130

# CI environment variables that imply no human at the keyboard
CI_ENV_VARS: tuple[str, ...] = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "JENKINS_URL",
    "TRAVIS",
    "CIRCLECI",
    "BUILDKITE",
    "TF_BUILD",
    "CODEBUILD_BUILD_ID",
)

console = Console()


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure root logging through a Rich handler.

    --verbose selects DEBUG, --quiet selects WARNING, default is INFO.
    Verbose takes precedence when both are given.

    Args:
        verbose: Enable debug output.
        quiet: Only show warnings and errors.

    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    logging.getLogger().setLevel(level)


def _is_interactive() -> bool:
    """Check if running in an interactive terminal.

    Returns False for non-TTY stdin (piped input) and for CI environments.

    """
    if not sys.stdin.isatty():
        return False
    return not any(os.environ.get(v) for v in CI_ENV_VARS)


def _validate_project_path(project: str) -> Path:
    """Resolve and check the project directory.

    Raises:
        typer.Exit: With EXIT_ERROR if the path is missing or not a directory.

    """
    project_path = Path(project).expanduser().resolve()
    if not project_path.exists():
        _error(f"Project directory does not exist: {project_path}")
        raise typer.Exit(code=EXIT_ERROR)
    if not project_path.is_dir():
        _error(f"Path is not a directory: {project_path}")
        raise typer.Exit(code=EXIT_ERROR)
    return project_path


def _error(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")


def _warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def _info(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")
