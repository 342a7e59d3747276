"""Unit tests for the git log collaborator."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from psdocsync.errors import GitError
from psdocsync.modules.git_log import GitLog, project_url
from psdocsync.modules.subprocess_helper import SubprocessResult


class TestProjectUrl:
    @pytest.mark.parametrize(
        "remote,expected",
        [
            ("git@github.com:owner/repo.git", "https://github.com/owner/repo"),
            ("https://github.com/owner/repo.git", "https://github.com/owner/repo"),
            ("https://github.com/owner/repo", "https://github.com/owner/repo"),
            ("ssh://git@gitlab.com/group/repo.git", "https://gitlab.com/group/repo"),
            (
                "git@ssh.dev.azure.com:v3/org/project/repo",
                "https://dev.azure.com/org/project/_git/repo",
            ),
        ],
    )
    def test_normalised(self, remote, expected):
        assert project_url(remote) == expected

    @pytest.mark.parametrize("remote", [None, "", "   ", "not a url"])
    def test_unusable(self, remote):
        assert project_url(remote) is None


class TestGitLog:
    """Tests for GitLog with a mocked runner."""

    def test_get_last_commit(self, tmp_path):
        output = "abc123\x1fJane Doe\x1f2024-01-15\x1fAdd widgets\n\nWidgets.ps1\nOther.ps1\n"
        runner = MagicMock(return_value=SubprocessResult(0, output, ""))
        path = tmp_path / "Widgets.ps1"

        commit = GitLog(runner=runner).get_last_commit(path)

        assert commit.hash == "abc123"
        assert commit.author == "Jane Doe"
        assert commit.date == "2024-01-15"
        assert commit.message == "Add widgets"
        assert commit.modified_files == ("Widgets.ps1", "Other.ps1")

        args, kwargs = runner.call_args
        assert args[0][:3] == ["git", "log", "-1"]
        assert args[0][-2:] == ["--", "Widgets.ps1"]
        assert kwargs["cwd"] == tmp_path

    def test_never_committed(self, tmp_path):
        runner = MagicMock(return_value=SubprocessResult(0, "", ""))
        assert GitLog(runner=runner).get_last_commit(tmp_path / "New.ps1") is None

    def test_git_failure(self, tmp_path):
        runner = MagicMock(return_value=SubprocessResult(128, "", "fatal: not a git repository"))

        with pytest.raises(GitError, match="not a git repository"):
            GitLog(runner=runner).get_last_commit(tmp_path / "Widgets.ps1")

    def test_unexpected_output(self, tmp_path):
        runner = MagicMock(return_value=SubprocessResult(0, "just-a-hash\n", ""))

        with pytest.raises(GitError, match="Unexpected"):
            GitLog(runner=runner).get_last_commit(tmp_path / "Widgets.ps1")

    def test_show(self, tmp_path):
        runner = MagicMock(return_value=SubprocessResult(0, "function Foo {}\n", ""))
        path = tmp_path / "Widgets.ps1"

        assert GitLog(runner=runner).show("abc123", path) == "function Foo {}\n"
        runner.assert_called_once_with(["git", "show", "abc123:./Widgets.ps1"], cwd=tmp_path)

    def test_show_failure(self, tmp_path):
        runner = MagicMock(return_value=SubprocessResult(128, "", "fatal: bad object"))

        with pytest.raises(GitError):
            GitLog(runner=runner).show("abc123", tmp_path / "Widgets.ps1")

    def test_project_url_from_origin(self):
        runner = MagicMock(return_value=SubprocessResult(0, "git@github.com:o/r.git\n", ""))
        git = GitLog(repo_root=Path("/repo"), runner=runner)

        assert git.project_url() == "https://github.com/o/r"
        runner.assert_called_once_with(
            ["git", "config", "--get", "remote.origin.url"], cwd=Path("/repo")
        )

    def test_no_origin(self):
        runner = MagicMock(return_value=SubprocessResult(1, "", ""))
        assert GitLog(runner=runner).remote_origin_url() is None
