"""Blocking subprocess execution for the git and pwsh collaborators.

Philosophy:
- Single responsibility: run one command, capture its text output
- Never raises for a failed or missing command; callers inspect the result
- No retries: callers needing resilience wrap it

Public API (the "studs"):
    SubprocessResult: Result dataclass
    safe_run: Main execution function
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def safe_run(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int | None = None,
    input_text: str | None = None,
) -> SubprocessResult:
    """
    Execute a command and capture decoded stdout/stderr.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds (None = wait forever)
        input_text: Text written to the command's stdin

    Returns:
        SubprocessResult with output and exit code (127 when the command
        does not exist)

    Example:
        >>> result = safe_run(["git", "--version"])
        >>> result.ok
        True
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        return SubprocessResult(
            returncode=127,
            stdout="",
            stderr=f"Command not found: {cmd[0] if cmd else 'unknown'}",
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        return SubprocessResult(returncode=-1, stdout=stdout, stderr="Timed out", timed_out=True)
    except OSError as e:
        return SubprocessResult(returncode=1, stdout="", stderr=f"Error executing command: {e!s}")

    return SubprocessResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


__all__ = ["SubprocessResult", "safe_run"]
