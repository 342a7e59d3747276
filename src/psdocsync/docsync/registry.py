"""Function registry building.

Turns the flat list of function nodes returned by the parser into
ParsedFunction objects with their nesting resolved.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..models import DocumentationBlock, ParsedFunction, ParsedParameter, attribute_from_node
from .help_block import parse_help_block
from .patcher import locate


def function_from_node(node: Mapping[str, Any]) -> ParsedFunction:
    """Wrap one raw parser node into a ParsedFunction shell.

    Documentation comes from the node's serialized help content when the
    parser supplied it, otherwise from the help block found in the body.
    """
    raw_text = str(node.get("text") or "")
    help_content = node.get("help")
    if help_content:
        documentation = DocumentationBlock.from_help_content(help_content)
    else:
        documentation = parse_help_block(locate(raw_text).existing_block)

    return ParsedFunction(
        name=str(node["name"]),
        start_line=int(node["start_line"]),
        end_line=int(node["end_line"]),
        start_column=int(node.get("start_column") or 1),
        end_column=int(node.get("end_column") or 1),
        parameters=[ParsedParameter.from_node(p) for p in node.get("parameters") or ()],
        attributes=[attribute_from_node(a) for a in node.get("attributes") or ()],
        documentation=documentation,
        raw_text=raw_text,
    )


def build_registry(nodes: Iterable[Mapping[str, Any] | ParsedFunction]) -> list[ParsedFunction]:
    """Build the function registry of one file revision.

    Functions are sorted by start line. A function's parent is the innermost
    function whose extent strictly contains it on both bounds; candidates are
    scanned in increasing start-line order and later matches overwrite
    earlier ones.

    Args:
        nodes: Raw parser nodes or ParsedFunction shells

    Returns:
        Functions sorted by start line with parent_name populated
    """
    functions = [
        node if isinstance(node, ParsedFunction) else function_from_node(node) for node in nodes
    ]
    functions.sort(key=lambda f: f.start_line)

    for i, function in enumerate(functions):
        function.parent_name = ""
        for candidate in functions[:i]:
            if candidate.start_line < function.start_line and candidate.end_line > function.end_line:
                function.parent_name = candidate.name

    return functions


__all__ = ["build_registry", "function_from_node"]
