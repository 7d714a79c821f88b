"""Tool settings loaded from an optional envsetup.yaml.

The file lives in the project directory next to the template. Every field
has a default, so a missing file is the same as an empty one. Command-line
options override file values via merge_overrides().

Example envsetup.yaml:

    template: config/.env.example
    target: .env.local
    backup_suffix: .bak
    title: Configure the local stack
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from envsetup.core.constants import (
    BACKUP_SUFFIX,
    DEFAULT_FORM_TITLE,
    ENV_FILE_NAME,
    MAX_CONFIG_SIZE,
    PROJECT_CONFIG_NAME,
    TEMPLATE_FILE_NAME,
)
from envsetup.core.exceptions import ConfigError, ConfigValidationError
from envsetup.core.persistence import EnvPaths

logger = logging.getLogger(__name__)


class EnvSetupConfig(BaseModel):
    """Settings for one envsetup run.

    Attributes:
        template: Template path, relative to the project directory.
        target: Target .env path, relative to the project directory.
        backup_suffix: Suffix appended to the target name for the backup.
        title: Title shown above the form.
        check_permissions: Warn when the target is group/world readable.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    template: str = Field(TEMPLATE_FILE_NAME, description="Template file (.env.example)")
    target: str = Field(ENV_FILE_NAME, description="Configuration file to write")
    backup_suffix: str = Field(BACKUP_SUFFIX, description="Backup file suffix")
    title: str = Field(DEFAULT_FORM_TITLE, description="Form title")
    check_permissions: bool = Field(True, description="Warn on insecure .env permissions")

    @field_validator("template", "target", "backup_suffix")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    def resolve_paths(self, project_path: Path) -> EnvPaths:
        """Build file locations for a project directory.

        Absolute template/target settings are used as-is.

        """
        target = project_path / self.target
        return EnvPaths(
            template=project_path / self.template,
            target=target,
            backup=target.with_name(target.name + self.backup_suffix),
        )


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load and parse a YAML settings file with safety checks.

    Raises:
        ConfigError: If the file cannot be read, is too large, is not a
            mapping, or the YAML is invalid.

    """
    try:
        # Read with size limit instead of stat-then-read
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)

        if len(content) > MAX_CONFIG_SIZE:
            raise ConfigError(f"Config file {path} exceeds 1MB limit.")

        parsed = yaml.safe_load(content)
        if parsed is None:
            return {}

        if not isinstance(parsed, dict):
            raise ConfigError(
                f"Config file {path} must contain a YAML mapping, got {type(parsed).__name__}."
            )

        return parsed
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except IsADirectoryError as e:
        raise ConfigError(f"{path} is a directory, not a config file.") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def load_config(project_path: Path) -> EnvSetupConfig:
    """Load envsetup.yaml from a project directory.

    Args:
        project_path: Project directory.

    Returns:
        Parsed settings, or defaults if the file does not exist.

    Raises:
        ConfigError: If the file exists but cannot be loaded.
        ConfigValidationError: If its content fails validation.

    """
    path = project_path / PROJECT_CONFIG_NAME
    if not path.exists():
        logger.debug("%s not found, using defaults", path)
        return EnvSetupConfig()

    data = _load_yaml_file(path)
    try:
        config = EnvSetupConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            {"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in e.errors()
        ]
        raise ConfigValidationError(f"Invalid configuration in {path}", errors) from e

    logger.debug("Loaded settings from %s", path)
    return config


def merge_overrides(config: EnvSetupConfig, **overrides: Any) -> EnvSetupConfig:
    """Apply command-line overrides; None values leave the setting alone.

    Example:
        >>> merge_overrides(EnvSetupConfig(), target=".env.test", template=None).target
        '.env.test'

    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    try:
        return EnvSetupConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as e:
        errors = [
            {"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in e.errors()
        ]
        raise ConfigValidationError("Invalid command-line options", errors) from e
