"""Comment-based help block parsing.

Reads a ``<# ... #>`` help block into a DocumentationBlock. Used when the
parser node carries no serialized help content, and by tests that build
functions straight from PowerShell text.
"""

from __future__ import annotations

import re

from ..models import MULTI_ENTRY_FIELDS, DocumentationBlock, HelpField

OPEN_DELIMITER = "<#"
CLOSE_DELIMITER = "#>"

_KEYWORD_LINE = re.compile(r"^\s*(\.[A-Za-z]+)(?:[ \t]+(\S.*?))?\s*$")


def dedent_lines(lines: list[str]) -> list[str]:
    """Dedent lines, preserving relative indentation.

    Leading and trailing blank lines are dropped and trailing whitespace is
    stripped from every line.
    """
    lines = [line.rstrip() for line in lines]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    margin = min(indents) if indents else 0
    return [line[margin:] if line.strip() else "" for line in lines]


def strip_delimiters(block: str) -> str:
    """Return the text between the help block delimiters."""
    text = block.strip()
    if text.startswith(OPEN_DELIMITER):
        text = text[len(OPEN_DELIMITER) :]
    if text.endswith(CLOSE_DELIMITER):
        text = text[: -len(CLOSE_DELIMITER)]
    return text


def parse_help_block(block: str | None) -> DocumentationBlock:
    """Parse comment-based help text into a DocumentationBlock.

    Keywords are matched case-insensitively; lines that look like keywords
    but are not known help keywords are treated as content.

    Args:
        block: Help block text, with or without the <# #> delimiters

    Returns:
        DocumentationBlock (empty when block is empty or None)

    Example:
        >>> doc = parse_help_block("<#\\n.SYNOPSIS\\n    Gets foo.\\n#>")
        >>> doc.get(HelpField.SYNOPSIS)
        ['Gets foo.']
    """
    if not block or not block.strip():
        return DocumentationBlock()

    sections: dict[HelpField, list[str]] = {}
    examples: list[list[str]] = []
    links: list[str] = []
    parameters: dict[str, list[str]] = {}

    # (field, parameter name) of the entry currently being filled
    entries: list[tuple[HelpField, str, list[str]]] = []
    current: list[str] | None = None

    for line in strip_delimiters(block).splitlines():
        match = _KEYWORD_LINE.match(line)
        help_field = HelpField.from_keyword(match.group(1)) if match else None
        if help_field is None:
            if current is not None:
                current.append(line)
            continue

        current = []
        argument = (match.group(2) or "").strip()
        if help_field is HelpField.PARAMETERS:
            entries.append((help_field, argument.lstrip("$"), current))
        else:
            if argument:
                current.append(argument)
            entries.append((help_field, "", current))

    for help_field, parameter_name, raw_lines in entries:
        lines = dedent_lines(raw_lines)
        if help_field is HelpField.EXAMPLES:
            if lines:
                examples.append(lines)
        elif help_field is HelpField.LINKS:
            links.extend(line.strip() for line in lines if line.strip())
        elif help_field is HelpField.PARAMETERS:
            if parameter_name:
                parameters[parameter_name] = lines
        elif help_field not in MULTI_ENTRY_FIELDS:
            sections.setdefault(help_field, []).extend(lines)

    return DocumentationBlock(
        sections={k: v for k, v in sections.items() if v},
        examples=examples,
        links=links,
        parameters=parameters,
    )


__all__ = [
    "CLOSE_DELIMITER",
    "OPEN_DELIMITER",
    "dedent_lines",
    "parse_help_block",
    "strip_delimiters",
]
