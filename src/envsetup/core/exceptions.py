"""Exception hierarchy for envsetup.

All exceptions raised by envsetup derive from EnvSetupError so callers can
catch the whole family with a single except clause.

Hierarchy:
    EnvSetupError
    ├── TemplateError
    │   ├── TemplateNotFoundError
    │   └── TemplateEmptyError
    ├── EnvWriteError
    ├── ConfigError
    │   └── ConfigValidationError
    └── WorkflowStateError
"""

from pathlib import Path
from typing import Any


class EnvSetupError(Exception):
    """Base exception for all envsetup errors."""


class TemplateError(EnvSetupError):
    """Template file could not be turned into a list of fields."""


class TemplateNotFoundError(TemplateError):
    """Template file is missing or unreadable.

    Attributes:
        path: Path of the template that could not be read.

    """

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        self.path = path
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Error reading {path.name}{detail}. Please create one to use as a template."
        )


class TemplateEmptyError(TemplateError):
    """Template file declares no keys."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No environment variables found in {path.name}.")


class EnvWriteError(EnvSetupError):
    """Target configuration file could not be written.

    Attributes:
        path: Path of the target file.

    """

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        super().__init__(f"Error writing {path.name} file: {cause}")


class ConfigError(EnvSetupError):
    """envsetup.yaml could not be loaded or parsed."""


class ConfigValidationError(ConfigError):
    """envsetup.yaml parsed but failed schema validation.

    Attributes:
        errors: Structured error details (loc, msg, type) from pydantic.

    """

    def __init__(self, message: str, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in errors
        )
        super().__init__(f"{message}: {details}" if details else message)


class WorkflowStateError(EnvSetupError):
    """An operation was requested that the current workflow state does not allow."""
