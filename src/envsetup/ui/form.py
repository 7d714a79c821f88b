"""Form collaborators that fill the prefilled .env fields.

Two implementations:
- QuestionaryForm: one questionary text prompt per field (interactive)
- PrefilledForm: accepts every prefilled value as-is (--defaults, tests)

Both return None when the user aborts, which the workflow treats as cancel.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import questionary
from rich.console import Console
from rich.markup import escape

from envsetup.core.fields import FormField, collect_values

logger = logging.getLogger(__name__)

__all__ = ["QuestionaryForm", "PrefilledForm", "get_form"]


class QuestionaryForm:
    """Interactive form using questionary text prompts.

    Each prompt is titled with the key and prefilled with the field's
    current value. Descriptions are printed above the prompt. Ctrl+C makes
    questionary return None, which aborts the whole form.

    Attributes:
        console: Rich console for headings and descriptions.

    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def collect(self, fields: Sequence[FormField], title: str) -> dict[str, str] | None:
        """Prompt for every field in order.

        Args:
            fields: Prefilled fields; updated in place with the answers.
            title: Heading shown above the first prompt.

        Returns:
            Key/value map of all fields, or None if the user aborted.

        """
        self._display_title(title, len(fields))

        for form_field in fields:
            if form_field.description:
                self.console.print(f"[dim]{escape(form_field.description)}[/dim]")
            answer = questionary.text(form_field.key, default=form_field.current_value()).ask()
            if answer is None:
                logger.debug("Form aborted at %s", form_field.key)
                return None
            form_field.set_value(answer)

        return collect_values(fields)

    def _display_title(self, title: str, count: int) -> None:
        self.console.print()
        if title:
            self.console.print(f"[bold blue]{escape(title)}[/bold blue]")
            self.console.print(f"[dim]{'─' * len(title)}[/dim]")
        self.console.print(
            f"[dim]{count} value(s). Enter accepts the shown value, Ctrl+C quits.[/dim]"
        )
        self.console.print()


class PrefilledForm:
    """Non-interactive form that keeps every prefilled value."""

    def collect(self, fields: Sequence[FormField], title: str) -> dict[str, str]:
        logger.debug("Accepting %d prefilled values", len(fields))
        return collect_values(fields)


def get_form(use_defaults: bool, console: Console | None = None) -> QuestionaryForm | PrefilledForm:
    """Pick the form collaborator for this run."""
    if use_defaults:
        return PrefilledForm()
    return QuestionaryForm(console)
