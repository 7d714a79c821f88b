"""Typed form fields handed to the form collaborator.

Each field exposes current_value() so collected values can be read back
without knowing the concrete widget. Field kinds form a tagged enum; only
free-text input is used today.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from envsetup.core.codec import FieldSpec


class FieldKind(str, Enum):
    """Kinds of form fields."""

    TEXT = "text"


@dataclass
class TextField:
    """Free-text input bound to one template key.

    Attributes:
        key: Template key; also the field title.
        description: Help text shown with the prompt, if any.
        value: Current value; starts at the prefilled initial value.

    """

    key: str
    description: str | None = None
    value: str = ""
    kind: FieldKind = field(default=FieldKind.TEXT, init=False)

    def current_value(self) -> str:
        """Return the value currently held by the field."""
        return self.value

    def set_value(self, value: str) -> None:
        self.value = value


FormField = TextField


def initial_value(spec: FieldSpec, existing: Mapping[str, str]) -> str:
    """Resolve the value a field starts with.

    Priority: non-empty persisted value, then template default, then "".

    """
    persisted = existing.get(spec.key, "")
    if persisted:
        return persisted
    if spec.default:
        return spec.default
    return ""


def build_fields(specs: Sequence[FieldSpec], existing: Mapping[str, str]) -> list[FormField]:
    """Create one prefilled text field per template declaration."""
    return [
        TextField(key=spec.key, description=spec.description, value=initial_value(spec, existing))
        for spec in specs
    ]


def collect_values(fields: Sequence[FormField]) -> dict[str, str]:
    """Read the current value of every field into a new mapping."""
    return {f.key: f.current_value() for f in fields}
