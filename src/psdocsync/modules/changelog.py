"""Change-log rendering.

Renders a file's ChangeSet as a markdown section (headed by the commit the
comparison was made against) and prepends it to the project's change-log
file. A YAML dump of the same data is available for machine consumption.

Philosophy:
- Simple string formatting (no templates)
- Newest section first
- Empty change-sets produce no section
"""

import logging
from datetime import date
from pathlib import Path

import yaml

from ..models import ChangeSet, CommitInfo, FunctionDelta

logger = logging.getLogger(__name__)

CHANGELOG_TITLE = "# Changelog"


def _qualified(name: str, parent: str) -> str:
    return f"{parent}/{name}" if parent else name


class ChangeLogWriter:
    """Writes change-set summaries to a markdown change-log."""

    def __init__(self, changelog_path: Path):
        self.changelog_path = Path(changelog_path)

    def render_section(
        self,
        path: Path,
        changeset: ChangeSet,
        commit: CommitInfo | None = None,
        today: date | None = None,
    ) -> str:
        """Render the markdown section for one file.

        Args:
            path: The file the change-set belongs to
            changeset: Result of the diff
            commit: Commit the working copy was compared against
            today: Section date (defaults to today)

        Returns:
            Markdown text, or "" when the change-set is empty
        """
        if not changeset.has_changes:
            return ""

        today = today or date.today()
        lines = [f"## {Path(path).name} ({today.isoformat()})", ""]
        if commit:
            lines.append(
                f"Compared against `{commit.hash[:8]}` by {commit.author}"
                f" on {commit.date}: {commit.message}"
            )
        else:
            lines.append("No previous commit; every function is new.")
        lines.append("")

        if changeset.added:
            lines.append("### Added")
            lines.extend(f"- `{_qualified(f.name, f.parent_name)}`" for f in changeset.added)
            lines.append("")

        if changeset.removed:
            lines.append("### Removed")
            lines.extend(f"- `{_qualified(f.name, f.parent_name)}`" for f in changeset.removed)
            lines.append("")

        if changeset.changed:
            lines.append("### Changed")
            for delta in changeset.changed:
                lines.extend(self._render_delta(delta))
            lines.append("")

        if changeset.reparented:
            lines.append("### Moved")
            for move in changeset.reparented:
                before = move.previous_parent or "(top level)"
                after = move.current_parent or "(top level)"
                lines.append(f"- `{move.name}`: {before} -> {after}")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _render_delta(delta: FunctionDelta) -> list[str]:
        lines = [f"- `{_qualified(delta.function_name, delta.parent_function_name)}`"]
        if delta.line_count_delta:
            lines.append(
                f"  - Lines: {delta.previous_line_count} -> {delta.current_line_count}"
                f" ({delta.line_count_delta:+d})"
            )
        for label, items in (
            ("Parameter added", delta.parameters_added),
            ("Parameter removed", delta.parameters_removed),
            ("Parameter changed", delta.parameters_changed),
            ("Attribute added", delta.attributes_added),
            ("Attribute removed", delta.attributes_removed),
            ("Attribute changed", delta.attributes_changed),
        ):
            lines.extend(f"  - {label}: `{item}`" for item in items)
        return lines

    def prepend(self, section: str) -> bool:
        """Insert a section at the top of the change-log, below its title.

        Returns:
            True if the file was written
        """
        if not section.strip():
            return False

        existing = ""
        if self.changelog_path.exists():
            existing = self.changelog_path.read_text(encoding="utf-8")

        body = existing
        if body.startswith(CHANGELOG_TITLE):
            body = body[len(CHANGELOG_TITLE) :].lstrip("\n")

        content = f"{CHANGELOG_TITLE}\n\n{section.rstrip()}\n"
        if body.strip():
            content += f"\n{body}"

        self.changelog_path.parent.mkdir(parents=True, exist_ok=True)
        self.changelog_path.write_text(content, encoding="utf-8")
        logger.debug(f"Updated change-log: {self.changelog_path}")
        return True

    def write(
        self,
        path: Path,
        changeset: ChangeSet,
        commit: CommitInfo | None = None,
        today: date | None = None,
    ) -> bool:
        """Render and prepend the section for one file."""
        return self.prepend(self.render_section(path, changeset, commit, today))


def to_yaml(changesets: dict[str, ChangeSet]) -> str:
    """Dump change-sets keyed by file path as YAML."""
    data = {path: changeset.to_dict() for path, changeset in changesets.items()}
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


__all__ = ["CHANGELOG_TITLE", "ChangeLogWriter", "to_yaml"]
