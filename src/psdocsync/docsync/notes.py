"""NOTES field parsing, version bumping and rendering.

The NOTES section of a help block carries a small fixed-format header:

    AUTHOR  Jane Doe
    CREATED 2024-01-15
    MOD     2024-03-02
    VER     3

followed by any free-form lines. Version bump rules:

- New function: fill in author, created date and version 1 when unset
- Changed function with version update requested: stamp MOD with today
  when CREATED is not today, then increment VER when a MOD date exists
- Anything else: fill in defaults only

Bumping is intentionally not idempotent: every synthesis with version update
requested on a changed function increments VER again.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime

logger = logging.getLogger(__name__)

_NOTE_LINE = re.compile(
    r"^\s*(AUTHOR|CREATED|MOD(?:IFIED)?|VER(?:SION)?)\b[ \t]*:?[ \t]*(.*?)\s*$",
    re.IGNORECASE,
)


@dataclass
class NotesFields:
    """Structured content of a NOTES section."""

    author: str = ""
    created: date | None = None
    modified: date | None = None
    version: int | None = None
    other: list[str] = field(default_factory=list)


def _parse_date(value: str, date_format: str) -> date | None:
    try:
        return datetime.strptime(value, date_format).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring malformed date in notes: {value!r}")
        return None


def _parse_version(value: str) -> int | None:
    try:
        return int(value.strip().lstrip("vV"))
    except ValueError:
        logger.debug(f"Ignoring malformed version in notes: {value!r}")
        return None


def _parse(lines: Sequence[str], date_format: str) -> NotesFields:
    notes = NotesFields()
    for line in lines:
        match = _NOTE_LINE.match(line)
        if not match:
            if line.strip() or notes.other:
                notes.other.append(line.rstrip())
            continue

        tag, value = match.group(1).upper(), match.group(2)
        if tag == "AUTHOR":
            notes.author = value
            continue

        # Unparseable values stay as free-form text
        if tag == "CREATED":
            parsed = notes.created = _parse_date(value, date_format)
        elif tag.startswith("MOD"):
            parsed = notes.modified = _parse_date(value, date_format)
        else:
            parsed = notes.version = _parse_version(value)
        if parsed is None:
            notes.other.append(line.rstrip())

    while notes.other and not notes.other[-1].strip():
        notes.other.pop()
    return notes


def _has_author(lines: Sequence[str]) -> bool:
    return any(
        (m := _NOTE_LINE.match(line)) and m.group(1).upper() == "AUTHOR" for line in lines
    )


def parse_notes(
    lines: Sequence[str],
    fallback_lines: Sequence[str] = (),
    date_format: str = "%Y-%m-%d",
) -> NotesFields:
    """Parse a NOTES section.

    When the notes carry no AUTHOR tag, the structured tags are taken from
    ``fallback_lines`` (the synopsis) instead; free-form lines always come
    from the notes.

    Args:
        lines: NOTES section lines
        fallback_lines: Secondary source for the structured tags
        date_format: strftime format of CREATED/MOD dates

    Returns:
        NotesFields with unparseable values left as None
    """
    notes = _parse(lines, date_format)
    if notes.author or not _has_author(fallback_lines):
        return notes

    fallback = _parse(fallback_lines, date_format)
    return replace(
        notes,
        author=fallback.author,
        created=notes.created or fallback.created,
        modified=notes.modified or fallback.modified,
        version=notes.version if notes.version is not None else fallback.version,
    )


def apply_version_policy(
    notes: NotesFields,
    *,
    is_new: bool,
    is_changed: bool,
    update_version: bool,
    today: date,
    default_author: str,
) -> NotesFields:
    """Apply default fill-in and the version bump rules.

    Returns:
        New NotesFields; the input is not modified
    """
    author = notes.author or default_author
    created = notes.created or today
    modified = notes.modified
    version = notes.version if notes.version is not None else 1

    if is_changed and not is_new and update_version:
        if created != today:
            modified = today
        if modified is not None:
            version += 1

    return replace(notes, author=author, created=created, modified=modified, version=version)


def render_notes(notes: NotesFields, date_format: str = "%Y-%m-%d") -> list[str]:
    """Render NotesFields as fixed-format NOTES lines."""
    lines = [f"AUTHOR  {notes.author}"]
    if notes.created is not None:
        lines.append(f"CREATED {notes.created.strftime(date_format)}")
    if notes.modified is not None:
        lines.append(f"MOD     {notes.modified.strftime(date_format)}")
    if notes.version is not None:
        lines.append(f"VER     {notes.version}")
    if notes.other:
        lines.extend(notes.other)
    return lines


__all__ = ["NotesFields", "apply_version_policy", "parse_notes", "render_notes"]
