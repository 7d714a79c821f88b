"""Collect → review → commit state machine for .env setup.

The workflow moves only in response to discrete events:

    COLLECTING --submit--> REVIEWING --confirm(yes)--> COMMITTING --> DONE
        |                      |                           |
        |  (no changes) -> DONE  --confirm(no)/cancel--> ABORTED
        +--cancel--> ABORTED                              +--> FAILED(write)

Loading the template happens on start(); an unreadable or empty template
moves straight to FAILED. DONE, ABORTED and FAILED are terminal.

All file mutation is deferred to COMMITTING, so cancelling at either
suspension point (form or confirmation) leaves the disk untouched.

Collaborators:
    - FormCollaborator: fills the fields, returns a key/value map or None
    - ConfirmCollaborator: shows the changes, returns True/False or None
Both may be replaced by synchronous stubs in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from envsetup.core.codec import FieldSpec
from envsetup.core.diff import ChangeRecord, compute_changes, describe_change, has_changes
from envsetup.core.exceptions import (
    EnvWriteError,
    TemplateEmptyError,
    TemplateNotFoundError,
    WorkflowStateError,
)
from envsetup.core.fields import FormField, build_fields
from envsetup.core.persistence import EnvStore

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

__all__ = [
    "WorkflowState",
    "FailureReason",
    "Failure",
    "FormCollaborator",
    "ConfirmCollaborator",
    "Workflow",
]


class WorkflowState(str, Enum):
    """States of the setup workflow."""

    COLLECTING = "collecting"
    REVIEWING = "reviewing"
    COMMITTING = "committing"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({WorkflowState.DONE, WorkflowState.ABORTED, WorkflowState.FAILED})

_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.COLLECTING: frozenset(
        {
            WorkflowState.REVIEWING,
            WorkflowState.DONE,
            WorkflowState.ABORTED,
            WorkflowState.FAILED,
        }
    ),
    WorkflowState.REVIEWING: frozenset({WorkflowState.COMMITTING, WorkflowState.ABORTED}),
    WorkflowState.COMMITTING: frozenset({WorkflowState.DONE, WorkflowState.FAILED}),
    WorkflowState.DONE: frozenset(),
    WorkflowState.ABORTED: frozenset(),
    WorkflowState.FAILED: frozenset(),
}


class FailureReason(str, Enum):
    """Why the workflow ended in FAILED."""

    TEMPLATE_NOT_FOUND = "template_not_found"
    TEMPLATE_EMPTY = "template_empty"
    WRITE_ERROR = "write_error"


@dataclass(frozen=True)
class Failure:
    """Payload of the FAILED state.

    Attributes:
        reason: Failure category.
        message: Human-readable message, reported verbatim.

    """

    reason: FailureReason
    message: str


class FormCollaborator(Protocol):
    """Collects values for the prefilled fields."""

    def collect(self, fields: Sequence[FormField], title: str) -> Mapping[str, str] | None:
        """Return the finalized key/value map, or None if the user aborted."""
        ...


class ConfirmCollaborator(Protocol):
    """Asks the user to approve the proposed changes."""

    def confirm(self, changes: Sequence[ChangeRecord]) -> bool | None:
        """Return True to save, False to discard, None if the user aborted."""
        ...


class Workflow:
    """State machine coordinating collection, review and commit.

    Attributes:
        store: Persistence boundary for template, target and backup.
        title: Title shown above the form.
        state: Current state.
        failure: Failure payload once state is FAILED, else None.
        history: Every state entered, in order, starting with COLLECTING.
        fields: Prefilled form fields (after start()).
        existing: Values read from the target file (after start()).
        collected: Values submitted by the form (after submit()).
        changes: Change records (after submit()).
        backup_path: Backup written during commit, if any.

    Example:
        >>> from envsetup.ui import AutoConfirm, PrefilledForm
        >>> workflow = Workflow(EnvStore(EnvPaths.for_directory(Path.cwd())))
        >>> final = workflow.run(PrefilledForm(), AutoConfirm())
        >>> final is WorkflowState.DONE
        True

    """

    def __init__(self, store: EnvStore, *, title: str = "") -> None:
        self.store = store
        self.title = title
        self.state = WorkflowState.COLLECTING
        self.history: list[WorkflowState] = [WorkflowState.COLLECTING]
        self.failure: Failure | None = None
        self.specs: list[FieldSpec] = []
        self.fields: list[FormField] = []
        self.existing: dict[str, str] = {}
        self.collected: dict[str, str] = {}
        self.changes: list[ChangeRecord] = []
        self.backup_path: Path | None = None
        self._started = False

    # =========================================================================
    # State handling
    # =========================================================================

    @property
    def key_order(self) -> list[str]:
        """Template key order."""
        return [spec.key for spec in self.specs]

    @property
    def is_finished(self) -> bool:
        return self.state.is_terminal

    def _transition(self, target: WorkflowState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise WorkflowStateError(
                f"Invalid transition {self.state.value} -> {target.value}"
            )
        logger.debug("Workflow %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def _fail(self, reason: FailureReason, message: str) -> None:
        self._transition(WorkflowState.FAILED)
        self.failure = Failure(reason, message)
        logger.debug("Workflow failed (%s): %s", reason.value, message)

    def _require(self, state: WorkflowState, action: str) -> None:
        if self.state is not state:
            raise WorkflowStateError(f"Cannot {action} while {self.state.value}")

    # =========================================================================
    # Events
    # =========================================================================

    def start(self) -> None:
        """Load the template and existing values, and prefill the fields.

        On an unreadable or empty template the workflow moves to FAILED.

        Raises:
            WorkflowStateError: If called twice or outside COLLECTING.

        """
        self._require(WorkflowState.COLLECTING, "start")
        if self._started:
            raise WorkflowStateError("Workflow already started")
        self._started = True

        try:
            self.specs = self.store.read_template()
        except TemplateNotFoundError as e:
            self._fail(FailureReason.TEMPLATE_NOT_FOUND, str(e))
            return
        except TemplateEmptyError as e:
            self._fail(FailureReason.TEMPLATE_EMPTY, str(e))
            return

        declared = set(self.key_order)
        self.existing = {
            key: value for key, value in self.store.read_existing().items() if key in declared
        }
        self.fields = build_fields(self.specs, self.existing)
        logger.info(
            "Prefilled %d fields (%d existing values)", len(self.fields), len(self.existing)
        )

    def submit(self, values: Mapping[str, str]) -> WorkflowState:
        """Handle form completion.

        Keys not declared by the template are dropped; declared keys
        missing from values keep their prefilled value.

        Args:
            values: Key/value map produced by the form.

        Returns:
            New state: DONE if nothing changed, else REVIEWING.

        """
        self._require(WorkflowState.COLLECTING, "submit")
        if not self._started:
            raise WorkflowStateError("Workflow not started")

        for form_field in self.fields:
            if form_field.key in values:
                form_field.set_value(values[form_field.key])

        undeclared = sorted(set(values) - set(self.key_order))
        if undeclared:
            logger.warning("Ignoring keys not declared in template: %s", ", ".join(undeclared))

        self.collected = {f.key: f.current_value() for f in self.fields}
        self.changes = compute_changes(self.existing, self.collected, self.key_order)

        if not has_changes(self.changes):
            logger.info("No changes to apply to %s", self.store.paths.target.name)
            self._transition(WorkflowState.DONE)
        else:
            for change in self.changes:
                logger.debug("%s", describe_change(change))
            self._transition(WorkflowState.REVIEWING)
        return self.state

    def cancel(self) -> WorkflowState:
        """Handle a user cancel during collection or review."""
        if self.state not in (WorkflowState.COLLECTING, WorkflowState.REVIEWING):
            raise WorkflowStateError(f"Cannot cancel while {self.state.value}")
        logger.info("Operation cancelled by user")
        self._transition(WorkflowState.ABORTED)
        return self.state

    def confirm(self, approved: bool) -> WorkflowState:
        """Handle the confirmation answer.

        Args:
            approved: True to save the changes, False to discard them.

        Returns:
            DONE or FAILED when approved, ABORTED otherwise.

        """
        self._require(WorkflowState.REVIEWING, "confirm")
        if not approved:
            logger.info("Changes discarded by user")
            self._transition(WorkflowState.ABORTED)
            return self.state

        self._transition(WorkflowState.COMMITTING)
        self._commit()
        return self.state

    def _commit(self) -> None:
        self.backup_path = self.store.backup_existing()
        try:
            self.store.write(self.collected, self.key_order)
        except EnvWriteError as e:
            self._fail(FailureReason.WRITE_ERROR, str(e))
            return
        logger.info("Updated %s", self.store.paths.target)
        self._transition(WorkflowState.DONE)

    # =========================================================================
    # Driver
    # =========================================================================

    def run(self, form: FormCollaborator, dialog: ConfirmCollaborator) -> WorkflowState:
        """Drive the workflow to a terminal state.

        A collaborator returning None, or raising KeyboardInterrupt or
        EOFError, cancels the workflow.

        Args:
            form: Collects the field values.
            dialog: Confirms the proposed changes.

        Returns:
            Terminal state.

        """
        self.start()
        if self.is_finished:
            return self.state

        try:
            values = form.collect(self.fields, self.title)
        except (KeyboardInterrupt, EOFError):
            values = None
        if values is None:
            return self.cancel()

        if self.submit(values) is not WorkflowState.REVIEWING:
            return self.state

        try:
            decision = dialog.confirm(self.changes)
        except (KeyboardInterrupt, EOFError):
            decision = None
        if decision is None:
            return self.cancel()
        return self.confirm(decision)
