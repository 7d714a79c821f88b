"""Line codec for .env templates and .env files.

This module is the single parser/serializer for both file kinds:

- Template lines: ``KEY[=[VALUE]][ #DESCRIPTION]`` -> FieldSpec
- Config lines: ``KEY=VALUE`` -> (key, value)
- Entries: (key, value) -> ``KEY=VALUE\\n`` with quoting when needed

Quoted values use double quotes. Decoding replaces ``\\\\`` with ``\\``
first and ``\\"`` with ``"`` second; encoding escapes backslash, quote,
newline and carriage return in that order. The two directions are not exact
inverses: encoded ``\\n``/``\\r`` are not unescaped when read back, and a
hand-written ``\\\\"`` inside quotes collapses to ``"``. This asymmetry is
kept as-is until the intended semantics are settled.

Public API:
    - FieldSpec: One declared key from a template
    - decode_template_line: Parse one template line
    - decode_config_line: Parse one .env line
    - encode_entry: Serialize one key/value pair
    - needs_quoting: Whether a value must be quoted
    - parse_template: Parse a whole template text
    - parse_config: Parse a whole .env text
    - render_config: Serialize a mapping in a given key order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from envsetup.core.constants import QUOTE_TRIGGER_CHARS

logger = logging.getLogger(__name__)

__all__ = [
    "FieldSpec",
    "decode_template_line",
    "decode_config_line",
    "encode_entry",
    "needs_quoting",
    "parse_template",
    "parse_config",
    "render_config",
]


@dataclass(frozen=True)
class FieldSpec:
    """One configuration key declared by a template line.

    Attributes:
        key: Non-empty key name.
        description: Inline description after ``#``, or None.
        default: Default value, or None when the template gives none.
            An explicit quoted ``""`` yields an empty string, not None.

    Example:
        >>> decode_template_line('PORT=8080 # listen port')
        FieldSpec(key='PORT', description='listen port', default='8080')

    """

    key: str
    description: str | None = None
    default: str | None = None


def _is_skipped(stripped: str) -> bool:
    return not stripped or stripped.startswith("#")


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == '"' and value[-1] == '"'


def _unquote(value: str) -> str:
    inner = value[1:-1]
    inner = inner.replace("\\\\", "\\")
    return inner.replace('\\"', '"')


def decode_template_line(line: str) -> FieldSpec | None:
    """Parse a single template line.

    Args:
        line: Raw line, with or without its terminator.

    Returns:
        FieldSpec for a declaration, None for blank, comment or
        malformed (empty key) lines.

    """
    stripped = line.strip()
    if _is_skipped(stripped):
        return None

    description: str | None = None
    key_value = stripped
    comment_idx = stripped.find("#")
    if comment_idx != -1:
        description = stripped[comment_idx + 1 :].strip() or None
        key_value = stripped[:comment_idx].strip()

    raw_key, sep, raw_value = key_value.partition("=")
    key = raw_key.strip()
    if not key:
        return None

    default: str | None = None
    if sep:
        value = raw_value.strip()
        if _is_quoted(value):
            default = _unquote(value)
        elif value:
            default = value

    return FieldSpec(key=key, description=description, default=default)


def decode_config_line(line: str) -> tuple[str, str] | None:
    """Parse a single line of an existing .env file.

    Unlike template lines, no description is extracted and an omitted value
    is the empty string. Lines without ``=`` are not assignments and are
    skipped. The value is trimmed before unquoting, the same as a template
    default, so ``A= x`` reads as ``x`` and ``A= "x"`` as ``x``.

    Args:
        line: Raw line, with or without its terminator.

    Returns:
        (key, value) tuple, or None if the line carries no assignment.

    """
    stripped = line.strip()
    if _is_skipped(stripped):
        return None

    raw_key, sep, raw_value = stripped.partition("=")
    key = raw_key.strip()
    if not sep or not key:
        return None

    value = raw_value.strip()
    if _is_quoted(value):
        value = _unquote(value)
    return key, value


def needs_quoting(value: str) -> bool:
    """Check if a value must be written in double quotes.

    Empty values are always quoted so that ``KEY=""`` is explicit.

    """
    if value == "":
        return True
    return any(ch in QUOTE_TRIGGER_CHARS for ch in value)


def encode_entry(key: str, value: str) -> str:
    """Serialize a key/value pair as one .env line.

    Args:
        key: Configuration key.
        value: Value to write.

    Returns:
        ``key=value`` followed by a newline, with the value quoted and
        escaped when needs_quoting() says so.

    Example:
        >>> encode_entry("GREETING", "hello world")
        'GREETING="hello world"\\n'

    """
    if needs_quoting(value):
        # Backslash first, so later substitutions are not re-escaped
        escaped = value.replace("\\", "\\\\")
        escaped = escaped.replace('"', '\\"')
        escaped = escaped.replace("\n", "\\n")
        escaped = escaped.replace("\r", "\\r")
        return f'{key}="{escaped}"\n'
    return f"{key}={value}\n"


def parse_template(text: str) -> list[FieldSpec]:
    """Parse template text into field declarations in file order.

    Keys must be unique within a template. When a key is declared again,
    the first declaration wins and the duplicate is logged and ignored.

    Args:
        text: Full template content.

    Returns:
        List of FieldSpec (possibly empty).

    """
    fields: list[FieldSpec] = []
    seen: set[str] = set()
    for lineno, line in enumerate(text.splitlines(), start=1):
        spec = decode_template_line(line)
        if spec is None:
            continue
        if spec.key in seen:
            logger.warning(
                "Duplicate key %s in template (line %d), keeping first declaration",
                spec.key,
                lineno,
            )
            continue
        seen.add(spec.key)
        fields.append(spec)
    return fields


def parse_config(text: str) -> dict[str, str]:
    """Parse .env text into a key/value mapping (last assignment wins)."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        entry = decode_config_line(line)
        if entry is not None:
            key, value = entry
            values[key] = value
    return values


def render_config(values: Mapping[str, str], key_order: Iterable[str] | None = None) -> str:
    """Serialize a mapping into .env text.

    Keys listed in key_order come first, in that order; any remaining keys
    follow in mapping order.

    Args:
        values: Key/value mapping to serialize.
        key_order: Preferred key order, typically the template order.

    Returns:
        File content, one encoded entry per key.

    """
    ordered: list[str] = []
    if key_order is not None:
        ordered = [key for key in dict.fromkeys(key_order) if key in values]
    listed = set(ordered)
    ordered.extend(key for key in values if key not in listed)
    return "".join(encode_entry(key, values[key]) for key in ordered)
