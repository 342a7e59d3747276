"""Module manifest version bumping.

Rewrites the ``ModuleVersion = '1.2.3'`` entry of a PowerShell module
manifest (.psd1) in place, leaving every other byte of the file untouched.
"""

import logging
import re
from pathlib import Path

from ..errors import ManifestError

logger = logging.getLogger(__name__)

VERSION_PARTS = ("major", "minor", "build", "revision")

_MODULE_VERSION = re.compile(
    r"^(?P<prefix>[ \t]*ModuleVersion[ \t]*=[ \t]*)(?P<quote>['\"])(?P<version>[^'\"\r\n]*)(?P=quote)",
    re.IGNORECASE | re.MULTILINE,
)


def bump_version(version: str, part: str = "build") -> str:
    """Increment one component of a dotted version; lower components reset.

    Example:
        >>> bump_version("1.4.2", "minor")
        '1.5.0'

    Raises:
        ManifestError: If the version or part is invalid
    """
    if part not in VERSION_PARTS:
        expected = ", ".join(VERSION_PARTS)
        raise ManifestError(f"Unknown version part: {part} (expected one of {expected})")
    try:
        numbers = [int(n) for n in version.strip().split(".")]
    except ValueError as e:
        raise ManifestError(f"Invalid module version: {version!r}") from e
    if not 2 <= len(numbers) <= 4:
        raise ManifestError(f"Invalid module version: {version!r}")

    index = VERSION_PARTS.index(part)
    while len(numbers) <= index:
        numbers.append(0)
    numbers[index] += 1
    for lower in range(index + 1, len(numbers)):
        numbers[lower] = 0
    return ".".join(str(n) for n in numbers)


def bump_manifest_version(
    path: Path, part: str = "build", dry_run: bool = False
) -> tuple[str, str]:
    """Bump ModuleVersion in a manifest file.

    Args:
        path: Path to the .psd1 file
        part: Version component to increment
        dry_run: Compute the new version without writing

    Returns:
        (old_version, new_version)

    Raises:
        ManifestError: If the manifest is missing, unreadable or has no
            valid ModuleVersion
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    has_bom = raw.startswith(b"\xef\xbb\xbf")
    content = raw.decode("utf-8-sig")
    match = _MODULE_VERSION.search(content)
    if not match:
        raise ManifestError(f"No ModuleVersion entry in {path}")

    old_version = match.group("version")
    new_version = bump_version(old_version, part)
    if dry_run:
        return old_version, new_version

    quote = match.group("quote")
    updated = (
        content[: match.start()]
        + f"{match.group('prefix')}{quote}{new_version}{quote}"
        + content[match.end() :]
    )
    path.write_bytes((b"\xef\xbb\xbf" if has_bom else b"") + updated.encode("utf-8"))
    logger.info(f"{path.name}: ModuleVersion {old_version} -> {new_version}")
    return old_version, new_version


__all__ = ["VERSION_PARTS", "bump_manifest_version", "bump_version"]
