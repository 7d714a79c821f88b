"""Shared constants for envsetup modules.

Kept in a leaf module so codec, persistence and config can import them
without circular imports.
"""

from typing import Final

# File names resolved against the project directory
TEMPLATE_FILE_NAME: Final[str] = ".env.example"
ENV_FILE_NAME: Final[str] = ".env"
BACKUP_SUFFIX: Final[str] = ".old"
PROJECT_CONFIG_NAME: Final[str] = "envsetup.yaml"

MAX_CONFIG_SIZE: Final[int] = 1_048_576  # 1MB - protection against YAML bombs

# Characters that force a value to be written in double quotes
QUOTE_TRIGGER_CHARS: Final[frozenset[str]] = frozenset(' #="$\\`\n\r')

# Permission bits for a newly created target file
NEW_ENV_FILE_MODE: Final[int] = 0o600

DEFAULT_FORM_TITLE: Final[str] = "Setup your .env values"
