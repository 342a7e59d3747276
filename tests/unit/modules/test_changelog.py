"""Unit tests for change-log rendering."""

from datetime import date

import pytest
import yaml

from psdocsync.models import ChangeSet, CommitInfo, FunctionDelta, ParsedFunction, Reparenting
from psdocsync.modules.changelog import CHANGELOG_TITLE, ChangeLogWriter, to_yaml

TODAY = date(2024, 6, 1)
COMMIT = CommitInfo(hash="abc1234def5678", author="Jane Doe", date="2024-01-15", message="Initial")


@pytest.fixture
def changeset():
    return ChangeSet(
        added=[ParsedFunction(name="New-Widget", start_line=1, end_line=3)],
        removed=[
            ParsedFunction(name="Format-Row", start_line=5, end_line=9, parent_name="Get-Widget")
        ],
        changed=[
            FunctionDelta(
                function_name="Get-Widget",
                line_count_delta=2,
                current_line_count=12,
                previous_line_count=10,
                parameters_added=["[int] $B = 5"],
                attributes_changed=["OutputType [[string]->[int]]"],
            )
        ],
        reparented=[Reparenting("Helper", "Get-Widget", "")],
    )


@pytest.fixture
def writer(tmp_path):
    return ChangeLogWriter(tmp_path / "CHANGELOG.md")


class TestRenderSection:
    def test_full_section(self, writer, changeset):
        section = writer.render_section("src/Widgets.ps1", changeset, COMMIT, today=TODAY)

        assert section.splitlines() == [
            "## Widgets.ps1 (2024-06-01)",
            "",
            "Compared against `abc1234d` by Jane Doe on 2024-01-15: Initial",
            "",
            "### Added",
            "- `New-Widget`",
            "",
            "### Removed",
            "- `Get-Widget/Format-Row`",
            "",
            "### Changed",
            "- `Get-Widget`",
            "  - Lines: 10 -> 12 (+2)",
            "  - Parameter added: `[int] $B = 5`",
            "  - Attribute changed: `OutputType [[string]->[int]]`",
            "",
            "### Moved",
            "- `Helper`: Get-Widget -> (top level)",
        ]

    def test_without_commit(self, writer, changeset):
        section = writer.render_section("Widgets.ps1", changeset, today=TODAY)
        assert "No previous commit" in section

    def test_empty_changeset(self, writer):
        assert writer.render_section("Widgets.ps1", ChangeSet(), COMMIT) == ""


class TestPrepend:
    def test_creates_file_with_title(self, writer):
        assert writer.prepend("## First\n\n- one")

        assert writer.changelog_path.read_text() == f"{CHANGELOG_TITLE}\n\n## First\n\n- one\n"

    def test_newest_section_first(self, writer):
        writer.prepend("## First")
        writer.prepend("## Second")

        content = writer.changelog_path.read_text()
        assert content.startswith(CHANGELOG_TITLE)
        assert content.index("## Second") < content.index("## First")
        assert content.count(CHANGELOG_TITLE) == 1

    def test_existing_file_without_title(self, writer):
        writer.changelog_path.write_text("Old notes.\n")

        writer.prepend("## New")

        assert writer.changelog_path.read_text() == f"{CHANGELOG_TITLE}\n\n## New\n\nOld notes.\n"

    def test_empty_section_not_written(self, writer):
        assert not writer.prepend("  ")
        assert not writer.changelog_path.exists()

    def test_write_skips_empty_changeset(self, writer):
        assert not writer.write("Widgets.ps1", ChangeSet(), COMMIT)
        assert not writer.changelog_path.exists()


def test_to_yaml(changeset):
    data = yaml.safe_load(to_yaml({"Widgets.ps1": changeset}))

    entry = data["Widgets.ps1"]
    assert entry["added"] == ["New-Widget"]
    assert entry["removed"] == ["Format-Row"]
    assert entry["changed"][0]["function"] == "Get-Widget"
    assert entry["changed"][0]["parameters_added"] == ["[int] $B = 5"]
    assert entry["reparented"] == [{"function": "Helper", "from": "Get-Widget", "to": ""}]
