"""Confirmation dialogs shown before the .env file is overwritten.

Two dialog implementations:
- QuestionaryConfirm: renders the change table and asks "Save these changes?"
- AutoConfirm: approves without asking (--yes, tests)

Public API:
    - render_changes: Build the Rich table of change records
    - QuestionaryConfirm: Interactive confirmation
    - AutoConfirm: Always-approve stand-in
    - get_dialog: Factory function to get appropriate dialog
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envsetup.core.diff import Added, ChangeKind, ChangeRecord, Cleared

logger = logging.getLogger(__name__)

__all__ = ["render_changes", "QuestionaryConfirm", "AutoConfirm", "get_dialog"]

_KIND_STYLES: dict[ChangeKind, tuple[str, str]] = {
    ChangeKind.ADDED: ("+ Added", "green"),
    ChangeKind.CHANGED: ("~ Changed", "yellow"),
    ChangeKind.CLEARED: ("~ Cleared", "red"),
}


def render_changes(changes: Sequence[ChangeRecord], title: str = "Proposed changes") -> Table:
    """Build a Rich table with one row per change record.

    Args:
        changes: Change records in template order.
        title: Table title.

    Returns:
        Table with Change, Key, Old and New columns.

    """
    table = Table(title=title, show_header=True)
    table.add_column("Change")
    table.add_column("Key", style="cyan")
    table.add_column("Old")
    table.add_column("New")

    for change in changes:
        label, style = _KIND_STYLES[change.kind]
        old = "" if isinstance(change, Added) else f'"{change.old_value}"'
        new = "" if isinstance(change, Cleared) else f'"{change.new_value}"'
        # Keys and values are user text, not Rich markup
        table.add_row(
            f"[{style}]{label}[/{style}]",
            escape(change.key),
            escape(old),
            escape(new),
        )
    return table


class QuestionaryConfirm:
    """Interactive confirmation with a change table.

    Attributes:
        console: Rich console used to render the table.

    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def confirm(self, changes: Sequence[ChangeRecord]) -> bool | None:
        """Show the changes and ask whether to save them.

        Returns:
            True to save, False to discard, None on Ctrl+C.

        """
        self.console.print()
        self.console.print(render_changes(changes))
        self.console.print()

        result = questionary.confirm("Save these changes?", default=True).ask()
        logger.debug("Confirmation answer: %s", result)
        return result


class AutoConfirm:
    """Approves every change set without prompting."""

    def confirm(self, changes: Sequence[ChangeRecord]) -> bool:
        logger.debug("Auto-approving %d change(s)", len(changes))
        return True


def get_dialog(
    assume_yes: bool, console: Console | None = None
) -> QuestionaryConfirm | AutoConfirm:
    """Pick the confirmation collaborator for this run."""
    if assume_yes:
        return AutoConfirm()
    return QuestionaryConfirm(console)
