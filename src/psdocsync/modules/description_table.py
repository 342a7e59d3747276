"""Per-function description table.

A delimited text table of hand-authored descriptions keyed by function and
parent function:

    Function,Parent,Description
    Get-Widget,,"Returns widgets from the store."
    Resolve-Id,Get-Widget,Normalizes widget ids.

Descriptions may span several lines when quoted.
"""

import csv
import logging
from pathlib import Path

from ..errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Function", "Parent", "Description")


class DescriptionTable:
    """Read-only lookup of authored descriptions."""

    def __init__(self, entries: dict[tuple[str, str], str] | None = None):
        self._entries = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, function_name: str, parent_name: str = "") -> str | None:
        """Description for a function, or None when the table has none."""
        return self._entries.get((function_name.lower(), (parent_name or "").lower()))

    @classmethod
    def load(cls, path: Path | str | None, delimiter: str = ",") -> "DescriptionTable":
        """Load a table from a delimited text file.

        A missing path or file yields an empty table. Rows without a function
        name or description are skipped.

        Raises:
            ConfigError: If the file cannot be read or its header lacks a
                required column
        """
        if not path:
            return cls()
        path = Path(path)
        if not path.exists():
            logger.debug(f"No description table at {path}")
            return cls()

        try:
            with open(path, newline="", encoding="utf-8-sig") as f:
                reader = csv.DictReader(f, delimiter=delimiter)
                header = reader.fieldnames or []
                rows = list(reader)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise ConfigError(f"Failed to read description table {path}: {e}") from e

        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise ConfigError(
                f"Description table {path} is missing columns: {', '.join(missing)}"
            )

        entries: dict[tuple[str, str], str] = {}
        for row in rows:
            name = (row.get("Function") or "").strip()
            description = (row.get("Description") or "").strip()
            if not name or not description:
                continue
            parent = (row.get("Parent") or "").strip()
            entries[(name.lower(), parent.lower())] = description

        logger.debug(f"Loaded {len(entries)} descriptions from {path}")
        return cls(entries)


__all__ = ["DescriptionTable"]
