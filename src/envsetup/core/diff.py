"""Change detection between the persisted and the newly collected .env values.

Change records are emitted in template declaration order, never in mapping
iteration order, so the review screen and the logs are stable between runs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "ChangeKind",
    "Added",
    "Changed",
    "Cleared",
    "ChangeRecord",
    "compute_changes",
    "has_changes",
    "describe_change",
]


class ChangeKind(str, Enum):
    """Tag identifying the variant of a change record."""

    ADDED = "added"
    CHANGED = "changed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class Added:
    """Key not present before; new value may be empty."""

    key: str
    new_value: str
    kind: ChangeKind = field(default=ChangeKind.ADDED, init=False)


@dataclass(frozen=True)
class Changed:
    """Key present before with a different non-empty value now."""

    key: str
    old_value: str
    new_value: str
    kind: ChangeKind = field(default=ChangeKind.CHANGED, init=False)


@dataclass(frozen=True)
class Cleared:
    """Key present before, now set to the empty string."""

    key: str
    old_value: str
    kind: ChangeKind = field(default=ChangeKind.CLEARED, init=False)


ChangeRecord = Added | Changed | Cleared


def compute_changes(
    old: Mapping[str, str],
    new: Mapping[str, str],
    key_order: Sequence[str],
) -> list[ChangeRecord]:
    """Compute the ordered list of changes from old to new.

    Only keys in key_order are considered. A key missing from new is
    skipped; a key missing from old is always reported as Added, even
    when the new value is empty.

    Args:
        old: Previously persisted values (empty if there was no file).
        new: Newly collected values.
        key_order: Template key order; determines output order.

    Returns:
        List of change records. Empty when nothing changed.

    Example:
        >>> compute_changes({"A": "1"}, {"A": "2", "B": ""}, ["A", "B"])
        [Changed(key='A', old_value='1', new_value='2', kind=<ChangeKind.CHANGED: 'changed'>), \
Added(key='B', new_value='', kind=<ChangeKind.ADDED: 'added'>)]

    """
    changes: list[ChangeRecord] = []
    for key in key_order:
        if key not in new:
            continue
        new_value = new[key]
        if key not in old:
            changes.append(Added(key, new_value))
            continue
        old_value = old[key]
        if new_value == old_value:
            continue
        if new_value == "":
            changes.append(Cleared(key, old_value))
        else:
            changes.append(Changed(key, old_value, new_value))
    return changes


def has_changes(changes: Sequence[ChangeRecord]) -> bool:
    """Return True if the change list is non-empty."""
    return len(changes) > 0


def describe_change(change: ChangeRecord) -> str:
    """Format a change record as a one-line summary.

    Returns:
        ``+ Added: KEY="new"``, ``~ Changed: KEY: "old" -> "new"`` or
        ``~ Cleared: KEY (was "old")``.

    """
    if isinstance(change, Added):
        return f'+ Added: {change.key}="{change.new_value}"'
    if isinstance(change, Changed):
        return f'~ Changed: {change.key}: "{change.old_value}" -> "{change.new_value}"'
    return f'~ Cleared: {change.key} (was "{change.old_value}")'
