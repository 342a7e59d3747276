"""Project module discovery.

Collects the modules a project imports, used to fill the COMPONENT field
of help blocks that have none.
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

_IMPORT_PATTERNS = (
    re.compile(r"^\s*Import-Module\s+(?:-Name\s+)?['\"]?([\w.\-]+)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*using\s+module\s+['\"]?([\w.\-]+)", re.IGNORECASE | re.MULTILINE),
)
_REQUIRES = re.compile(r"^\s*#Requires\s+-Modules\s+(.+)$", re.IGNORECASE | re.MULTILINE)
_MODULE_NAME = re.compile(r"ModuleName\s*=\s*['\"]([^'\"]+)['\"]|['\"]?([\w.\-]+)['\"]?")


def modules_in_text(text: str) -> list[str]:
    """Module names imported by one source text, in order of appearance."""
    found: list[tuple[int, str]] = []
    for pattern in _IMPORT_PATTERNS:
        found.extend((m.start(), m.group(1)) for m in pattern.finditer(text))

    for match in _REQUIRES.finditer(text):
        # "#Requires -Modules A, @{ModuleName='B'; ModuleVersion='1.0'}"
        for item in re.split(r",(?![^{]*})", match.group(1)):
            name_match = _MODULE_NAME.search(item)
            if name_match:
                found.append((match.start(), name_match.group(1) or name_match.group(2)))

    found.sort(key=lambda pair: pair[0])
    return [name for _, name in found]


def discover_imported_modules(root: Path, globs: Iterable[str] = ("*.ps1", "*.psm1")) -> list[str]:
    """Distinct module names imported anywhere under a project root.

    Returns:
        Sorted, case-insensitively de-duplicated module names
    """
    root = Path(root)
    seen: dict[str, str] = {}
    for pattern in globs:
        for path in sorted(root.rglob(pattern)):
            try:
                text = path.read_text(encoding="utf-8-sig", errors="replace")
            except OSError as e:
                logger.warning(f"Skipping unreadable file {path}: {e}")
                continue
            for name in modules_in_text(text):
                seen.setdefault(name.lower(), name)

    return sorted(seen.values(), key=str.lower)


__all__ = ["discover_imported_modules", "modules_in_text"]
