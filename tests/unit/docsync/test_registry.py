"""Unit tests for the function registry builder."""

import random

import pytest

from psdocsync.docsync.registry import build_registry, function_from_node
from psdocsync.models import (
    CmdletBindingAttribute,
    HelpField,
    ParameterAttribute,
    ParsedFunction,
)


def add_extents(rng, line, parent, depth, out):
    """Append a random function tree rooted at line; return the next free line."""
    name = f"F{line}"
    start = line
    line += 1
    if depth < 3:
        for _ in range(rng.randint(0, 3)):
            line = add_extents(rng, line, name, depth + 1, out)
    end = line + rng.randint(0, 2)
    out.append((name, start, end, parent))
    return end + 1 + rng.randint(0, 2)


class TestFunctionFromNode:
    """Tests for wrapping raw parser nodes."""

    def test_basic_fields(self, make_node):
        node = make_node("Get-Widget", start_line=3, end_line=9, start_column=5)
        function = function_from_node(node)

        assert function.name == "Get-Widget"
        assert function.start_line == 3
        assert function.end_line == 9
        assert function.start_column == 5
        assert function.line_count == 6
        assert function.parent_name == ""
        assert not function.is_new
        assert not function.is_changed

    def test_parameters_and_attributes(self, make_node, make_parameter):
        node = make_node(
            "Get-Widget",
            parameters=[
                make_parameter("$Id", "int", mandatory=None, help_message="'Widget id'"),
                make_parameter("Force", "switch"),
            ],
            attributes=[{"name": "CmdletBinding", "positional": [], "named": {}}],
        )
        function = function_from_node(node)

        assert [p.name for p in function.parameters] == ["Id", "Force"]
        assert function.parameters[0].static_type == "int"
        assert function.parameters[0].help_message == "Widget id"
        assert isinstance(function.parameters[0].attributes[0], ParameterAttribute)
        assert function.attributes == [CmdletBindingAttribute()]

    def test_bare_mandatory_means_true(self, make_node, make_parameter):
        node = make_node(
            "Get-Widget",
            parameters=[
                {
                    "name": "Id",
                    "attributes": [{"name": "Parameter", "named": {"Mandatory": None}}],
                }
            ],
        )
        parameter = function_from_node(node).parameters[0]

        assert parameter.arguments["Mandatory"] == "$true"
        assert parameter.is_mandatory

    def test_documentation_from_help_content(self, make_node):
        node = make_node(
            "Get-Widget",
            help_content={
                "Synopsis": "Gets a widget.",
                "Examples": ["Get-Widget -Id 1", "Get-Widget -Id 2"],
                "Parameters": {"Id": "The id."},
            },
        )
        doc = function_from_node(node).documentation

        assert doc.get(HelpField.SYNOPSIS) == ["Gets a widget."]
        assert doc.examples == [["Get-Widget -Id 1"], ["Get-Widget -Id 2"]]
        assert doc.parameters == {"Id": ["The id."]}

    def test_documentation_from_raw_text(self, make_node):
        text = (
            "function Get-Widget {\n"
            "    <#\n"
            "    .SYNOPSIS\n"
            "        Gets a widget.\n"
            "    #>\n"
            "    param()\n"
            "}"
        )
        doc = function_from_node(make_node("Get-Widget", text=text)).documentation

        assert doc.get(HelpField.SYNOPSIS) == ["Gets a widget."]


class TestBuildRegistry:
    """Tests for nesting resolution."""

    def test_empty_input(self):
        assert build_registry([]) == []

    def test_sorted_by_start_line(self, make_node):
        nodes = [
            make_node("Second", start_line=10, end_line=12),
            make_node("First", start_line=1, end_line=5),
        ]
        assert [f.name for f in build_registry(nodes)] == ["First", "Second"]

    def test_innermost_container_wins(self, make_node):
        nodes = [
            make_node("Outer", start_line=1, end_line=20),
            make_node("Inner", start_line=5, end_line=10),
            make_node("Deeper", start_line=6, end_line=8),
            make_node("Sibling", start_line=22, end_line=30),
        ]
        parents = {f.name: f.parent_name for f in build_registry(nodes)}

        assert parents == {
            "Outer": "",
            "Inner": "Outer",
            "Deeper": "Inner",
            "Sibling": "",
        }

    def test_containment_must_be_strict(self, make_node):
        nodes = [
            make_node("A", start_line=1, end_line=10),
            make_node("SameEnd", start_line=3, end_line=10),
            make_node("SameStart", start_line=1, end_line=4),
        ]
        parents = {f.name: f.parent_name for f in build_registry(nodes)}

        assert parents["SameEnd"] == ""
        assert parents["SameStart"] == ""

    def test_accepts_parsed_functions_and_resets_parent(self):
        stale = ParsedFunction(name="Child", start_line=3, end_line=4, parent_name="Gone")
        outer = ParsedFunction(name="Outer", start_line=1, end_line=10)

        registry = build_registry([stale, outer])

        assert registry[1].parent_name == "Outer"

    def test_one_function_per_node(self, make_node):
        nodes = [make_node(f"F{i}", start_line=i * 10, end_line=i * 10 + 5) for i in range(5)]
        assert len(build_registry(nodes)) == 5

    @pytest.mark.parametrize("seed", range(20))
    def test_no_function_is_its_own_ancestor(self, make_node, seed):
        rng = random.Random(seed)
        extents = []
        line = 1
        for _ in range(rng.randint(1, 4)):
            line = add_extents(rng, line, "", 0, extents)
        rng.shuffle(extents)

        registry = build_registry([make_node(n, start_line=s, end_line=e) for n, s, e, _ in extents])

        by_name = {f.name: f for f in registry}
        expected_parents = {name: parent for name, _, _, parent in extents}
        for function in registry:
            assert function.parent_name == expected_parents[function.name]
            seen = {function.name}
            ancestor = function.parent_name
            while ancestor:
                assert ancestor not in seen
                seen.add(ancestor)
                ancestor = by_name[ancestor].parent_name
