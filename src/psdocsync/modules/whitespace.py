"""Trailing whitespace stripping for source files."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def strip_trailing_whitespace(text: str) -> str:
    """Remove trailing spaces and tabs from every line.

    Line endings (including a final newline, or its absence) are kept.
    """
    return "".join(
        line.rstrip(" \t\r\n") + line[len(line.rstrip("\r\n")) :]
        for line in text.splitlines(keepends=True)
    )


def strip_file(path: Path) -> bool:
    """Strip trailing whitespace from a file in place.

    Returns:
        True if the file was rewritten
    """
    path = Path(path)
    original = path.read_bytes().decode("utf-8")
    stripped = strip_trailing_whitespace(original)
    if stripped == original:
        return False

    path.write_bytes(stripped.encode("utf-8"))
    logger.debug(f"Stripped trailing whitespace: {path}")
    return True


__all__ = ["strip_file", "strip_trailing_whitespace"]
