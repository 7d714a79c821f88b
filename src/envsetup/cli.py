"""Typer CLI entry point for envsetup.

This module only parses arguments, wires the collaborators and maps the
final workflow state to console output and an exit code. The setup logic
lives in envsetup.core.workflow.
"""

import logging
from pathlib import Path

import typer

from envsetup import __version__
from envsetup.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SUCCESS,
    _error,
    _info,
    _is_interactive,
    _setup_logging,
    _success,
    _validate_project_path,
    _warning,
    console,
)
from envsetup.core.config import EnvSetupConfig, load_config, merge_overrides
from envsetup.core.exceptions import ConfigError
from envsetup.core.persistence import EnvStore
from envsetup.core.workflow import FailureReason, Workflow, WorkflowState
from envsetup.ui import get_dialog, get_form, render_changes

# Module logger
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="envsetup",
    help="Fill in a .env file from its .env.example template, with review before saving",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"envsetup {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Fill in a .env file from its .env.example template, with review before saving."""


def _load_settings(
    project: str,
    template: str | None,
    target: str | None,
) -> tuple[Path, EnvSetupConfig]:
    """Resolve the project directory and load settings with CLI overrides.

    Raises:
        typer.Exit: EXIT_ERROR for a bad project path, EXIT_CONFIG_ERROR
            for an invalid envsetup.yaml or option value.

    """
    project_path = _validate_project_path(project)
    try:
        settings = merge_overrides(load_config(project_path), template=template, target=target)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None
    return project_path, settings


def _make_store(project_path: Path, settings: EnvSetupConfig) -> EnvStore:
    paths = settings.resolve_paths(project_path)
    logger.debug(
        "Template: %s, target: %s, backup: %s", paths.template, paths.target, paths.backup
    )
    return EnvStore(paths, check_permissions=settings.check_permissions)


def _report(workflow: Workflow) -> int:
    """Print the outcome of a finished workflow and pick the exit code.

    Only template failures exit non-zero; declining, cancelling and a
    failed write are reported but exit 0.

    """
    target_name = workflow.store.paths.target.name

    if workflow.state is WorkflowState.FAILED:
        assert workflow.failure is not None  # For type checker
        _error(workflow.failure.message)
        if workflow.failure.reason is FailureReason.WRITE_ERROR:
            if workflow.backup_path is not None:
                _info(f"Previous version kept in {workflow.backup_path.name}")
            return EXIT_SUCCESS
        return EXIT_ERROR

    if workflow.state is WorkflowState.ABORTED:
        if WorkflowState.REVIEWING in workflow.history:
            _warning("Changes discarded by user.")
        else:
            _warning("Operation cancelled by user.")
        return EXIT_SUCCESS

    if WorkflowState.COMMITTING in workflow.history:
        if workflow.backup_path is not None:
            _info(f"Backed up existing {target_name} to {workflow.backup_path.name}")
        _success(f"Successfully updated the {target_name} file!")
    else:
        _info(f"No changes to apply to {target_name} file.")
    return EXIT_SUCCESS


@app.command()
def setup(
    project: str = typer.Option(
        ".",
        "--project",
        "-p",
        help="Project directory holding the template and the .env file",
    ),
    template: str | None = typer.Option(
        None,
        "--template",
        "-t",
        help="Template path relative to the project (default: .env.example)",
    ),
    target: str | None = typer.Option(
        None,
        "--target",
        help="Target path relative to the project (default: .env)",
    ),
    defaults: bool = typer.Option(
        False,
        "--defaults",
        "-d",
        help="Accept the prefilled values without prompting",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Save changes without asking for confirmation",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only show warnings and errors",
    ),
) -> None:
    """Create or update the .env file, showing the changes before saving.

    Each key of the template is prompted for, prefilled with the current
    .env value, else the template default. Nothing is written until the
    changes are confirmed; the previous file is kept as .env.old.

    Examples:
        envsetup setup                     # Interactive setup in current directory
        envsetup setup -p ./service        # Setup for another project
        envsetup setup --defaults --yes    # Accept prefilled values (CI)

    """
    if verbose and quiet:
        _warning("Both --verbose and --quiet specified, --verbose takes precedence")
    _setup_logging(verbose, quiet)

    project_path, settings = _load_settings(project, template, target)

    if not (defaults and yes) and not _is_interactive():
        _error("Non-interactive environment detected.")
        _info("Run in a terminal, or pass --defaults --yes to accept the prefilled values.")
        raise typer.Exit(code=EXIT_ERROR)

    workflow = Workflow(_make_store(project_path, settings), title=settings.title)
    try:
        workflow.run(get_form(defaults, console), get_dialog(yes, console))
    except KeyboardInterrupt:
        # Prompts handle Ctrl+C themselves; this is an interrupt outside them
        _warning("Interrupted.")
        raise typer.Exit(code=EXIT_SIGINT) from None

    exit_code = _report(workflow)
    if exit_code != EXIT_SUCCESS:
        raise typer.Exit(code=exit_code)


@app.command()
def diff(
    project: str = typer.Option(
        ".",
        "--project",
        "-p",
        help="Project directory holding the template and the .env file",
    ),
    template: str | None = typer.Option(
        None,
        "--template",
        "-t",
        help="Template path relative to the project (default: .env.example)",
    ),
    target: str | None = typer.Option(
        None,
        "--target",
        help="Target path relative to the project (default: .env)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug output",
    ),
) -> None:
    """Show what accepting the prefilled values would change. Never writes."""
    _setup_logging(verbose, quiet=False)

    project_path, settings = _load_settings(project, template, target)
    store = _make_store(project_path, settings)

    workflow = Workflow(store, title=settings.title)
    workflow.start()
    if workflow.state is WorkflowState.FAILED:
        raise typer.Exit(code=_report(workflow))

    if workflow.submit({}) is WorkflowState.DONE:
        _info(f"No changes to apply to {store.paths.target.name} file.")
        return

    console.print(render_changes(workflow.changes, title=f"Changes to {store.paths.target.name}"))
