"""Git log collaborator.

Reads the last commit touching a file, the file's content at that commit,
and the repository's origin URL.

Security:
- Commands are built as argument lists (no shell)
- Paths are passed after "--" so they are never read as options
"""

import logging
import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

from ..errors import GitError
from ..models import CommitInfo
from .subprocess_helper import SubprocessResult, safe_run

logger = logging.getLogger(__name__)

# Unit separator between log fields
_SEP = "\x1f"
_LOG_FORMAT = _SEP.join(["%H", "%an", "%ad", "%s"])

_SCP_LIKE = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>(?!//).+)$")


def project_url(remote: str | None) -> str | None:
    """Turn a git remote URL into a browsable https URL.

    Example:
        >>> project_url("git@github.com:owner/repo.git")
        'https://github.com/owner/repo'
    """
    if not remote or not remote.strip():
        return None
    remote = remote.strip()

    parsed = urlparse(remote)
    if parsed.scheme in ("http", "https", "ssh", "git") and parsed.hostname:
        host, path = parsed.hostname, parsed.path
    else:
        match = _SCP_LIKE.match(remote)
        if not match:
            return None
        host, path = match.group("host"), match.group("path")

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    # Azure DevOps SSH remotes: ssh.dev.azure.com:v3/org/project/repo
    if host == "ssh.dev.azure.com" and path.startswith("v3/"):
        parts = path.split("/")
        if len(parts) == 4:
            return f"https://dev.azure.com/{parts[1]}/{parts[2]}/_git/{parts[3]}"

    return f"https://{host}/{path}" if path else f"https://{host}"


class GitLog:
    """Blocking git queries for one repository."""

    def __init__(
        self,
        repo_root: Path | None = None,
        runner: Callable[..., SubprocessResult] = safe_run,
    ):
        """Initialize git log reader.

        Args:
            repo_root: Directory git commands run in (default: cwd)
            runner: Command runner (injectable for tests)
        """
        self.repo_root = Path(repo_root) if repo_root else None
        self._run = runner

    def _git(self, args: list[str], cwd: Path | None = None) -> SubprocessResult:
        return self._run(["git", *args], cwd=cwd or self.repo_root)

    def get_last_commit(self, path: Path) -> CommitInfo | None:
        """Get the last commit that touched a file.

        Args:
            path: File path

        Returns:
            CommitInfo, or None when the file has never been committed

        Raises:
            GitError: If git fails (e.g. not a repository)
        """
        path = Path(path)
        result = self._git(
            [
                "log",
                "-1",
                f"--format={_LOG_FORMAT}",
                "--date=short",
                "--name-only",
                "--",
                path.name,
            ],
            cwd=path.parent,
        )
        if not result.ok:
            raise GitError(f"git log failed for {path}: {result.stderr.strip()}")

        lines = result.stdout.strip().splitlines()
        if not lines:
            logger.debug(f"No commits for {path}")
            return None

        fields = lines[0].split(_SEP)
        if len(fields) != 4:
            raise GitError(f"Unexpected git log output: {lines[0]!r}")

        commit_hash, author, commit_date, message = fields
        return CommitInfo(
            hash=commit_hash,
            author=author,
            date=commit_date,
            message=message,
            modified_files=tuple(line.strip() for line in lines[1:] if line.strip()),
        )

    def show(self, commit_hash: str, path: Path) -> str:
        """Get a file's content at a commit.

        Raises:
            GitError: If the file or commit does not exist
        """
        path = Path(path)
        result = self._git(["show", f"{commit_hash}:./{path.name}"], cwd=path.parent)
        if not result.ok:
            raise GitError(f"git show {commit_hash} failed for {path}: {result.stderr.strip()}")
        return result.stdout

    def remote_origin_url(self) -> str | None:
        """URL of the "origin" remote, or None when there is none."""
        result = self._git(["config", "--get", "remote.origin.url"])
        if not result.ok or not result.stdout.strip():
            return None
        return result.stdout.strip()

    def project_url(self) -> str | None:
        """Browsable URL of the origin remote."""
        return project_url(self.remote_origin_url())


__all__ = ["GitLog", "project_url"]
