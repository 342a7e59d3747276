"""Unit tests for the pwsh parser adapter."""

import json
from unittest.mock import MagicMock

import pytest

from psdocsync.errors import ParseFailure
from psdocsync.modules.ps_parser import DUMP_SCRIPT, PowerShellParser, nodes_from_json
from psdocsync.modules.subprocess_helper import SubprocessResult

NODE = {"name": "Get-Widget", "start_line": 1, "end_line": 3, "text": "function Get-Widget {}"}


class TestNodesFromJson:
    def test_list(self):
        assert nodes_from_json(json.dumps([NODE])) == [NODE]

    def test_single_object_wrapped(self):
        assert nodes_from_json(json.dumps(NODE)) == [NODE]

    def test_empty_output(self):
        assert nodes_from_json("  \n") == []

    def test_invalid_json(self):
        with pytest.raises(ParseFailure, match="not valid JSON"):
            nodes_from_json("{oops")

    def test_not_a_list_of_objects(self):
        with pytest.raises(ParseFailure):
            nodes_from_json("[1, 2]")

    def test_missing_keys(self):
        with pytest.raises(ParseFailure, match="start_line"):
            nodes_from_json(json.dumps([{"name": "X", "end_line": 2}]))


class TestPowerShellParser:
    """Tests for PowerShellParser with a mocked runner."""

    @pytest.fixture
    def source(self, tmp_path):
        path = tmp_path / "Widgets.ps1"
        path.write_text("function Get-Widget {}\n")
        return path

    def test_parse_file(self, source):
        runner = MagicMock(return_value=SubprocessResult(0, json.dumps([NODE]), ""))
        parser = PowerShellParser("pwsh", runner=runner)

        assert parser.parse_file(source) == [NODE]
        runner.assert_called_once_with(
            ["pwsh", "-NoProfile", "-NonInteractive", "-Command", DUMP_SCRIPT],
            input_text=str(source.resolve()),
        )

    def test_nonzero_exit_gives_no_functions(self, source, caplog):
        runner = MagicMock(return_value=SubprocessResult(1, "", "ParserError"))
        parser = PowerShellParser(runner=runner)

        assert parser.parse_file(source) == []
        assert "Parse failed" in caplog.text

    def test_missing_pwsh_gives_no_functions(self, source):
        runner = MagicMock(return_value=SubprocessResult(127, "", "Command not found: pwsh"))
        assert PowerShellParser(runner=runner).parse_file(source) == []

    def test_invalid_output_gives_no_functions(self, source):
        runner = MagicMock(return_value=SubprocessResult(0, "garbage", ""))
        assert PowerShellParser(runner=runner).parse_file(source) == []

    def test_missing_file_not_run(self, tmp_path):
        runner = MagicMock()

        assert PowerShellParser(runner=runner).parse_file(tmp_path / "missing.ps1") == []
        runner.assert_not_called()
