"""Core of envsetup: codec, change detection, persistence and workflow.

This module provides:
- The .env line codec (parse templates, parse and write .env files)
- Change records between persisted and collected values
- The persistence boundary (template, target, backup)
- The collect/review/commit workflow state machine
- Custom exception hierarchy with EnvSetupError as base
"""

from envsetup.core.codec import (
    FieldSpec,
    decode_config_line,
    decode_template_line,
    encode_entry,
    parse_config,
    parse_template,
)
from envsetup.core.config import EnvSetupConfig, load_config
from envsetup.core.diff import Added, ChangeKind, ChangeRecord, Changed, Cleared, compute_changes
from envsetup.core.exceptions import (
    ConfigError,
    EnvSetupError,
    EnvWriteError,
    TemplateEmptyError,
    TemplateError,
    TemplateNotFoundError,
    WorkflowStateError,
)
from envsetup.core.persistence import EnvPaths, EnvStore
from envsetup.core.workflow import Failure, FailureReason, Workflow, WorkflowState

__all__ = [
    # Codec
    "FieldSpec",
    "decode_config_line",
    "decode_template_line",
    "encode_entry",
    "parse_config",
    "parse_template",
    # Changes
    "Added",
    "ChangeKind",
    "ChangeRecord",
    "Changed",
    "Cleared",
    "compute_changes",
    # Settings
    "EnvSetupConfig",
    "load_config",
    # Persistence
    "EnvPaths",
    "EnvStore",
    # Workflow
    "Failure",
    "FailureReason",
    "Workflow",
    "WorkflowState",
    # Exceptions
    "ConfigError",
    "EnvSetupError",
    "EnvWriteError",
    "TemplateEmptyError",
    "TemplateError",
    "TemplateNotFoundError",
    "WorkflowStateError",
]
