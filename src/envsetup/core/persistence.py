"""File I/O for templates, .env files and their backups.

All paths are passed in explicitly through EnvPaths; nothing here reads
module-level path state. Business rules are limited to:

- a missing or unreadable .env is an empty configuration (with a warning)
- the target is backed up before it is overwritten, when it is a regular file
- a backup problem is a warning and never blocks the write
- the target is replaced atomically, so no partial file is ever visible
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from envsetup.core.codec import FieldSpec, parse_config, parse_template, render_config
from envsetup.core.constants import (
    BACKUP_SUFFIX,
    ENV_FILE_NAME,
    NEW_ENV_FILE_MODE,
    TEMPLATE_FILE_NAME,
)
from envsetup.core.exceptions import EnvWriteError, TemplateEmptyError, TemplateNotFoundError

logger = logging.getLogger(__name__)

__all__ = [
    "EnvPaths",
    "EnvStore",
    "backup_file",
    "write_config",
]


@dataclass(frozen=True)
class EnvPaths:
    """Locations of the template, target and backup files.

    Attributes:
        template: Template file (.env.example).
        target: Configuration file being created or updated (.env).
        backup: Sidecar copy of the previous target (.env.old).

    """

    template: Path
    target: Path
    backup: Path

    @classmethod
    def for_directory(
        cls,
        directory: Path,
        *,
        template_name: str = TEMPLATE_FILE_NAME,
        target_name: str = ENV_FILE_NAME,
        backup_suffix: str = BACKUP_SUFFIX,
    ) -> EnvPaths:
        """Resolve the three paths against a project directory.

        The backup path is always derived from the target path.

        Example:
            >>> EnvPaths.for_directory(Path("/srv/app")).backup
            PosixPath('/srv/app/.env.old')

        """
        target = directory / target_name
        return cls(
            template=directory / template_name,
            target=target,
            backup=target.with_name(target.name + backup_suffix),
        )


def _check_env_file_permissions(path: Path) -> None:
    """Warn if a .env file is readable by group or others.

    Accepts 0600 (owner read-write) and 0400 (owner read-only). Skipped on
    Windows, which has a different permission model.

    """
    if sys.platform == "win32":
        return

    try:
        mode = path.stat().st_mode & 0o777
    except OSError:
        return  # File may have been deleted between read and stat
    if mode not in (0o600, 0o400):
        logger.warning(
            "%s has insecure permissions %03o, expected 600 or 400. Run: chmod 600 %s",
            path,
            mode,
            path,
        )


def backup_file(src: Path, dst: Path) -> None:
    """Copy src to dst byte for byte and flush it to disk.

    Permission bits of src are copied too; failing to copy them only logs
    a warning.

    Raises:
        OSError: If the copy or the flush fails.

    """
    with src.open("rb") as source, dst.open("wb") as destination:
        shutil.copyfileobj(source, destination)
        destination.flush()
        os.fsync(destination.fileno())

    try:
        shutil.copymode(src, dst)
    except OSError as e:
        logger.warning("Failed to preserve permissions on backup %s: %s", dst, e)


def write_config(
    path: Path,
    values: Mapping[str, str],
    key_order: Iterable[str] | None = None,
) -> None:
    """Write values to path, replacing any existing file.

    Content is written to a temp file in the same directory and renamed
    over the target, so readers see either the old file or the new one.
    Existing permission bits are kept; new files get 0600.

    Args:
        path: Target file.
        values: Key/value pairs to write, one encoded line each.
        key_order: Preferred line order (template order).

    Raises:
        OSError: If the file cannot be written.

    """
    content = render_config(values, key_order)
    temp_path = path.with_name(f"{path.name}.tmp.{os.getpid()}")
    try:
        orig_mode = path.stat().st_mode if path.is_file() else NEW_ENV_FILE_MODE

        with temp_path.open("w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, orig_mode & 0o777)
        os.replace(temp_path, path)
        logger.debug("Wrote %d entries to %s", len(values), path)

    except Exception:
        if temp_path.exists():
            with contextlib.suppress(OSError):
                temp_path.unlink()
        raise


class EnvStore:
    """Persistence boundary used by the workflow.

    Attributes:
        paths: File locations this store reads and writes.
        check_permissions: Warn about group/world readable .env files.

    Example:
        >>> store = EnvStore(EnvPaths.for_directory(Path.cwd()))
        >>> fields = store.read_template()

    """

    def __init__(self, paths: EnvPaths, *, check_permissions: bool = True) -> None:
        self.paths = paths
        self.check_permissions = check_permissions

    def read_template(self) -> list[FieldSpec]:
        """Read and parse the template.

        Returns:
            Non-empty list of field declarations.

        Raises:
            TemplateNotFoundError: If the template cannot be read.
            TemplateEmptyError: If it declares no keys.

        """
        try:
            text = self.paths.template.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateNotFoundError(self.paths.template, e) from e

        fields = parse_template(text)
        if not fields:
            raise TemplateEmptyError(self.paths.template)

        logger.debug("Loaded %d fields from %s", len(fields), self.paths.template)
        return fields

    def read_existing(self) -> dict[str, str]:
        """Read the current target file.

        Returns:
            Parsed values; empty if the file does not exist or cannot be
            read (the latter is logged as a warning).

        """
        target = self.paths.target
        try:
            text = target.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("%s not found, starting from empty configuration", target)
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read existing %s file to prefill: %s", target.name, e)
            return {}

        if self.check_permissions:
            _check_env_file_permissions(target)
        return parse_config(text)

    def backup_existing(self) -> Path | None:
        """Back up the target file if it exists and is a regular file.

        Returns:
            Backup path if a backup was written, None otherwise.

        """
        target = self.paths.target
        backup = self.paths.backup
        try:
            if not target.exists():
                return None
            if not target.is_file():
                logger.warning("%s exists but is not a regular file. Skipping backup.", target)
                return None
        except OSError as e:
            logger.warning("Error checking %s for backup: %s", target, e)
            return None

        logger.info("Backing up existing %s to %s", target.name, backup.name)
        try:
            backup_file(target, backup)
        except OSError as e:
            logger.warning("Failed to backup %s: %s", target, e)
            return None

        logger.info("Backed up %s to %s", target.name, backup.name)
        return backup

    def write(self, values: Mapping[str, str], key_order: Iterable[str] | None = None) -> None:
        """Write the collected values to the target file.

        Raises:
            EnvWriteError: If the file cannot be written.

        """
        try:
            write_config(self.paths.target, values, key_order)
        except OSError as e:
            raise EnvWriteError(self.paths.target, e) from e
