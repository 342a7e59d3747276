"""psdocsync modules - Self-contained bricks around external collaborators

Each module is a self-contained component with a clear contract:
- PowerShell Parser: Extract function nodes via pwsh
- Git Log: Last commit, file content at a commit, origin URL
- Description Table: Hand-authored function descriptions
- Change Log: Markdown and YAML change-set summaries
- Manifest: ModuleVersion bumping in .psd1 files
- Project Scan: Modules imported by the project
- Whitespace: Trailing whitespace stripping
- Subprocess Helper: Safe command execution
"""

from . import (
    changelog,
    description_table,
    git_log,
    manifest,
    project_scan,
    ps_parser,
    subprocess_helper,
    whitespace,
)

__all__ = [
    "changelog",
    "description_table",
    "git_log",
    "manifest",
    "project_scan",
    "ps_parser",
    "subprocess_helper",
    "whitespace",
]
