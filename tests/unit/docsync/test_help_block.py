"""Unit tests for comment-based help parsing."""

from psdocsync.docsync.help_block import dedent_lines, parse_help_block, strip_delimiters
from psdocsync.models import HelpField

FULL_BLOCK = """<#
.SYNOPSIS
    Gets a widget.
.DESCRIPTION
    Line one.
      Indented two.
.PARAMETER Id
    The widget id.
.EXAMPLE
    Get-Widget -Id 1
.EXAMPLE
    Get-Widget -Id 2
.LINK
    https://example.com/a
    https://example.com/b
.OUTPUTS
    System.String
.NOTES
    AUTHOR  Jane
#>"""


class TestDedentLines:
    def test_keeps_relative_indentation(self):
        assert dedent_lines(["    a", "      b", "    c"]) == ["a", "  b", "c"]

    def test_drops_outer_blank_lines(self):
        assert dedent_lines(["", "  a", "", "  b  ", "   "]) == ["a", "", "b"]

    def test_empty(self):
        assert dedent_lines([]) == []


class TestParseHelpBlock:
    """Tests for parse_help_block."""

    def test_empty_or_none(self):
        assert parse_help_block(None).is_empty
        assert parse_help_block("   ").is_empty

    def test_full_block(self):
        doc = parse_help_block(FULL_BLOCK)

        assert doc.get(HelpField.SYNOPSIS) == ["Gets a widget."]
        assert doc.get(HelpField.DESCRIPTION) == ["Line one.", "  Indented two."]
        assert doc.parameters == {"Id": ["The widget id."]}
        assert doc.examples == [["Get-Widget -Id 1"], ["Get-Widget -Id 2"]]
        assert doc.links == ["https://example.com/a", "https://example.com/b"]
        assert doc.get(HelpField.OUTPUTS) == ["System.String"]
        assert doc.get(HelpField.NOTES) == ["AUTHOR  Jane"]

    def test_keywords_case_insensitive(self):
        doc = parse_help_block("<#\n.synopsis\n    Lower case.\n#>")
        assert doc.get(HelpField.SYNOPSIS) == ["Lower case."]

    def test_inline_argument(self):
        doc = parse_help_block("<# .SYNOPSIS Gets foo. #>")
        assert doc.get(HelpField.SYNOPSIS) == ["Gets foo."]

    def test_unknown_keyword_is_content(self):
        doc = parse_help_block("<#\n.DESCRIPTION\n    Uses\n    .FOO settings\n#>")
        assert doc.get(HelpField.DESCRIPTION) == ["Uses", ".FOO settings"]

    def test_parameter_name_dollar_stripped(self):
        doc = parse_help_block("<#\n.PARAMETER $Name\n    Who.\n#>")
        assert doc.parameters == {"Name": ["Who."]}

    def test_external_help_keyword(self):
        doc = parse_help_block("<#\n.EXTERNALHELP Widgets-help.xml\n#>")
        assert doc.get(HelpField.MAML_HELP_FILE) == ["Widgets-help.xml"]

    def test_strip_delimiters(self):
        assert strip_delimiters("  <# x #>  ") == " x "
