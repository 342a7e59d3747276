"""Data models for the function diff and help synchronization engine.

This module defines the structures that flow between the parser adapter,
the registry builder, the differ, the synthesizer and the patcher.

Philosophy:
- Ruthlessly simple dataclasses
- Closed attribute variants instead of open property bags
- Deltas hold formatted strings, never live references
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Union


class HelpField(Enum):
    """Comment-based help fields, in the order they are emitted.

    Each value is the property name PowerShell's CommentHelpInfo uses.
    """

    SYNOPSIS = "Synopsis"
    DESCRIPTION = "Description"
    EXAMPLES = "Examples"
    NOTES = "Notes"
    COMPONENT = "Component"
    LINKS = "Links"
    FORWARD_HELP_CATEGORY = "ForwardHelpCategory"
    FORWARD_HELP_TARGET_NAME = "ForwardHelpTargetName"
    FUNCTIONALITY = "Functionality"
    INPUTS = "Inputs"
    OUTPUTS = "Outputs"
    MAML_HELP_FILE = "MamlHelpFile"
    PARAMETERS = "Parameters"
    REMOTE_HELP_RUNSPACE = "RemoteHelpRunspace"
    ROLE = "Role"

    @property
    def keyword(self) -> str:
        """Comment-help keyword line for this field (e.g. ".SYNOPSIS")."""
        return _KEYWORDS[self]

    @classmethod
    def from_name(cls, name: str) -> HelpField:
        """Resolve a field from its name or keyword, case-insensitively.

        Raises:
            ValueError: If the name is not a known help field
        """
        wanted = name.strip().lstrip(".").lower()
        for help_field in cls:
            if wanted in (help_field.value.lower(), help_field.keyword.lstrip(".").lower()):
                return help_field
        raise ValueError(f"Unknown help field: {name}")

    @classmethod
    def from_keyword(cls, keyword: str) -> HelpField | None:
        """Resolve a field from a comment-help keyword such as ".LINK"."""
        wanted = keyword.strip().upper()
        for help_field, known in _KEYWORDS.items():
            if known == wanted:
                return help_field
        return None


_KEYWORDS = {
    HelpField.SYNOPSIS: ".SYNOPSIS",
    HelpField.DESCRIPTION: ".DESCRIPTION",
    HelpField.EXAMPLES: ".EXAMPLE",
    HelpField.NOTES: ".NOTES",
    HelpField.COMPONENT: ".COMPONENT",
    HelpField.LINKS: ".LINK",
    HelpField.FORWARD_HELP_CATEGORY: ".FORWARDHELPCATEGORY",
    HelpField.FORWARD_HELP_TARGET_NAME: ".FORWARDHELPTARGETNAME",
    HelpField.FUNCTIONALITY: ".FUNCTIONALITY",
    HelpField.INPUTS: ".INPUTS",
    HelpField.OUTPUTS: ".OUTPUTS",
    HelpField.MAML_HELP_FILE: ".EXTERNALHELP",
    HelpField.PARAMETERS: ".PARAMETER",
    HelpField.REMOTE_HELP_RUNSPACE: ".REMOTEHELPRUNSPACE",
    HelpField.ROLE: ".ROLE",
}

# Fields that hold several independent entries, each under its own keyword line
MULTI_ENTRY_FIELDS = frozenset({HelpField.EXAMPLES, HelpField.LINKS, HelpField.PARAMETERS})

# Fields a caller may ask to keep as an empty heading
PLACEHOLDER_FIELDS = frozenset(
    {HelpField.SYNOPSIS, HelpField.DESCRIPTION, HelpField.EXAMPLES, HelpField.LINKS}
)


# ============================================================================
# ATTRIBUTES
# ============================================================================


def _format_arguments(arguments: Mapping[str, str]) -> str:
    return ", ".join(f"{key}={value}" for key, value in arguments.items())


@dataclass(frozen=True)
class ParameterAttribute:
    """[Parameter(...)] on a parameter."""

    kind: ClassVar[str] = "Parameter"
    arguments: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.kind

    @property
    def value_text(self) -> str:
        return _format_arguments(self.arguments)

    def render(self) -> str:
        return f"{self.name}({self.value_text})"


@dataclass(frozen=True)
class ValidateSetAttribute:
    """[ValidateSet('a', 'b')] - allowed values as literal source text."""

    kind: ClassVar[str] = "ValidateSet"
    values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.kind

    @property
    def value_text(self) -> str:
        return ", ".join(self.values)

    def render(self) -> str:
        return f"{self.name}({self.value_text})"


@dataclass(frozen=True)
class ValidateNotNullOrEmptyAttribute:
    kind: ClassVar[str] = "ValidateNotNullOrEmpty"

    @property
    def name(self) -> str:
        return self.kind

    @property
    def value_text(self) -> str:
        return ""

    def render(self) -> str:
        return f"{self.name}()"


@dataclass(frozen=True)
class CmdletBindingAttribute:
    """[CmdletBinding(...)] on a function."""

    kind: ClassVar[str] = "CmdletBinding"
    arguments: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.kind

    @property
    def value_text(self) -> str:
        return _format_arguments(self.arguments)

    def render(self) -> str:
        return f"{self.name}({self.value_text})"


@dataclass(frozen=True)
class OutputTypeAttribute:
    """[OutputType([string])] on a function."""

    kind: ClassVar[str] = "OutputType"
    types: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.kind

    @property
    def value_text(self) -> str:
        return ", ".join(self.types)

    def render(self) -> str:
        return f"{self.name}({self.value_text})"


@dataclass(frozen=True)
class OtherAttribute:
    """Any attribute without a dedicated variant; arguments kept as text."""

    type_name: str
    arguments_text: str = ""

    @property
    def name(self) -> str:
        return self.type_name

    @property
    def value_text(self) -> str:
        return self.arguments_text

    def render(self) -> str:
        return f"{self.name}({self.value_text})"


ParsedAttribute = Union[
    ParameterAttribute,
    ValidateSetAttribute,
    ValidateNotNullOrEmptyAttribute,
    CmdletBindingAttribute,
    OutputTypeAttribute,
    OtherAttribute,
]


def _named_arguments(node: Mapping[str, Any]) -> dict[str, str]:
    # A bare switch-style argument ([Parameter(Mandatory)]) means $true
    named = node.get("named") or {}
    return {str(key): (str(value) if value not in (None, "") else "$true") for key, value in named.items()}


def attribute_from_node(node: Mapping[str, Any]) -> ParsedAttribute:
    """Map a raw parser attribute node onto its attribute variant.

    Args:
        node: Mapping with "name", optional "positional" (list of literal
            argument texts) and optional "named" (argument name -> text)

    Returns:
        The matching attribute variant
    """
    name = str(node.get("name", "")).strip()
    positional = tuple(str(value) for value in node.get("positional") or ())
    lowered = name.lower()

    if lowered == "parameter":
        return ParameterAttribute(arguments=_named_arguments(node))
    if lowered == "validateset":
        return ValidateSetAttribute(values=positional)
    if lowered == "validatenotnullorempty":
        return ValidateNotNullOrEmptyAttribute()
    if lowered == "cmdletbinding":
        return CmdletBindingAttribute(arguments=_named_arguments(node))
    if lowered == "outputtype":
        return OutputTypeAttribute(types=positional)

    parts = list(positional)
    parts.extend(f"{key}={value}" for key, value in _named_arguments(node).items())
    return OtherAttribute(type_name=name, arguments_text=", ".join(parts))


# ============================================================================
# PARAMETERS AND FUNCTIONS
# ============================================================================

# [Parameter()] arguments that take part in diffs and example generation
RECOGNIZED_ARGUMENTS = (
    "Mandatory",
    "Position",
    "HelpMessage",
    "ParameterSetName",
    "ValueFromPipeline",
)

ALL_PARAMETER_SETS = "__AllParameterSets"


@dataclass
class ParsedParameter:
    """One declared parameter of a function.

    Attributes:
        name: Parameter name without the leading "$"
        default_value: Default value source text ("" when none)
        static_type: Type constraint text (e.g. "string", "int[]")
        arguments: Recognized [Parameter()] argument name -> literal text
        attributes: Every attribute on the parameter, in source order
    """

    name: str
    default_value: str = ""
    static_type: str = ""
    arguments: dict[str, str] = field(default_factory=dict)
    attributes: list[ParsedAttribute] = field(default_factory=list)

    @property
    def is_mandatory(self) -> bool:
        text = self.arguments.get("Mandatory", "")
        return bool(text) and text.strip().lower() not in ("$false", "0")

    @property
    def parameter_set(self) -> str:
        return self.arguments.get("ParameterSetName", "").strip("'\"")

    @property
    def help_message(self) -> str:
        return self.arguments.get("HelpMessage", "").strip("'\"")

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> ParsedParameter:
        """Create from a raw parser parameter node."""
        attributes = [attribute_from_node(a) for a in node.get("attributes") or ()]
        arguments: dict[str, str] = {}
        for attribute in attributes:
            if isinstance(attribute, ParameterAttribute):
                for key, value in attribute.arguments.items():
                    for recognized in RECOGNIZED_ARGUMENTS:
                        if key.lower() == recognized.lower():
                            arguments[recognized] = value

        return cls(
            name=str(node.get("name", "")).lstrip("$"),
            default_value=str(node.get("default") or ""),
            static_type=str(node.get("type") or ""),
            arguments=arguments,
            attributes=attributes,
        )


@dataclass(frozen=True)
class DocumentationBlock:
    """Structured comment-based help fields.

    Single-valued fields live in ``sections``; examples, links and
    per-parameter help are kept as separate entries.
    """

    sections: dict[HelpField, list[str]] = field(default_factory=dict)
    examples: list[list[str]] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    parameters: dict[str, list[str]] = field(default_factory=dict)

    def get(self, help_field: HelpField) -> list[str]:
        """Lines of a single-valued field (empty list when absent)."""
        return list(self.sections.get(help_field, []))

    @property
    def is_empty(self) -> bool:
        return not (
            any(lines for lines in self.sections.values())
            or self.examples
            or self.links
            or self.parameters
        )

    @classmethod
    def from_help_content(cls, content: Mapping[str, Any]) -> DocumentationBlock:
        """Create from a serialized CommentHelpInfo mapping."""

        def as_lines(value: Any) -> list[str]:
            if value is None:
                return []
            if isinstance(value, str):
                return value.strip("\n").splitlines()
            lines: list[str] = []
            for item in value:
                lines.extend(as_lines(item))
            return lines

        sections: dict[HelpField, list[str]] = {}
        for help_field in HelpField:
            if help_field in MULTI_ENTRY_FIELDS:
                continue
            lines = as_lines(content.get(help_field.value))
            if lines:
                sections[help_field] = lines

        examples = [as_lines(e) for e in content.get("Examples") or () if as_lines(e)]
        links = [line.strip() for line in as_lines(content.get("Links")) if line.strip()]
        parameters = {
            str(name).lstrip("$"): as_lines(text)
            for name, text in (content.get("Parameters") or {}).items()
        }
        return cls(sections=sections, examples=examples, links=links, parameters=parameters)


@dataclass
class ParsedFunction:
    """One parsed function definition.

    Attributes:
        name: Function name (unique among siblings of a file)
        parent_name: Name of the innermost enclosing function ("" if top-level)
        start_line, end_line, start_column, end_column: 1-based extent
        parameters: Declared parameters in order
        attributes: Function attributes in order (CmdletBinding, OutputType, ...)
        documentation: Parsed comment-based help
        raw_text: Exact source span; diff key and patch anchor
        is_new, is_changed: Set by the differ
    """

    name: str
    start_line: int
    end_line: int
    start_column: int = 1
    end_column: int = 1
    parent_name: str = ""
    parameters: list[ParsedParameter] = field(default_factory=list)
    attributes: list[ParsedAttribute] = field(default_factory=list)
    documentation: DocumentationBlock = field(default_factory=DocumentationBlock)
    raw_text: str = ""
    is_new: bool = False
    is_changed: bool = False

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line

    def parameter_sets(self) -> list[str]:
        """Distinct parameter-set names in declaration order."""
        names: list[str] = []
        for parameter in self.parameters:
            if parameter.parameter_set and parameter.parameter_set not in names:
                names.append(parameter.parameter_set)
        return names or [ALL_PARAMETER_SETS]


# ============================================================================
# DIFF RESULTS
# ============================================================================


@dataclass
class FunctionDelta:
    """Structured description of how one function changed.

    Only formatted strings and integers are stored; both compared
    ParsedFunction instances may be discarded afterwards.
    """

    function_name: str
    parent_function_name: str = ""
    line_count_delta: int | None = None
    current_line_count: int | None = None
    previous_line_count: int | None = None
    parameters_added: list[str] = field(default_factory=list)
    parameters_removed: list[str] = field(default_factory=list)
    parameters_changed: list[str] = field(default_factory=list)
    attributes_added: list[str] = field(default_factory=list)
    attributes_removed: list[str] = field(default_factory=list)
    attributes_changed: list[str] = field(default_factory=list)

    @property
    def is_significant(self) -> bool:
        """Whether at least one concrete sub-field differs."""
        return bool(
            self.line_count_delta
            or self.parameters_added
            or self.parameters_removed
            or self.parameters_changed
            or self.attributes_added
            or self.attributes_removed
            or self.attributes_changed
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding empty values."""
        data = {
            "function": self.function_name,
            "parent": self.parent_function_name,
            "line_count_delta": self.line_count_delta,
            "current_line_count": self.current_line_count,
            "previous_line_count": self.previous_line_count,
            "parameters_added": self.parameters_added,
            "parameters_removed": self.parameters_removed,
            "parameters_changed": self.parameters_changed,
            "attributes_added": self.attributes_added,
            "attributes_removed": self.attributes_removed,
            "attributes_changed": self.attributes_changed,
        }
        return {k: v for k, v in data.items() if v not in (None, "", [])}


@dataclass(frozen=True)
class Reparenting:
    """A same-named function whose enclosing function changed."""

    name: str
    previous_parent: str
    current_parent: str


@dataclass
class ChangeSet:
    """Result of comparing two revisions of a file's functions.

    Attributes:
        added: Functions present now and absent before (by name)
        removed: Functions present before and absent now (by name)
        changed: Significant deltas, in current source order
        all_functions: The full current registry
        reparented: Same-named functions that moved to another parent
    """

    added: list[ParsedFunction] = field(default_factory=list)
    removed: list[ParsedFunction] = field(default_factory=list)
    changed: list[FunctionDelta] = field(default_factory=list)
    all_functions: list[ParsedFunction] = field(default_factory=list)
    reparented: list[Reparenting] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Whether any changes were detected."""
        return bool(self.added or self.removed or self.changed or self.reparented)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": [f.name for f in self.added],
            "removed": [f.name for f in self.removed],
            "changed": [delta.to_dict() for delta in self.changed],
            "reparented": [
                {"function": r.name, "from": r.previous_parent, "to": r.current_parent}
                for r in self.reparented
            ],
        }


# ============================================================================
# PATCHING
# ============================================================================


@dataclass(frozen=True)
class BlockLocation:
    """Signature text and existing help block of one function."""

    preceding_code: str
    existing_block: str | None = None


class PatchStatus(Enum):
    PATCHED = "patched"
    INSERTED = "inserted"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"

    @property
    def ok(self) -> bool:
        return self not in (PatchStatus.NOT_FOUND, PatchStatus.AMBIGUOUS)


@dataclass(frozen=True)
class PatchPlan:
    """What to replace (or insert) for one function."""

    function_name: str
    old_block: str | None
    new_block: str
    anchor: str = ""


@dataclass(frozen=True)
class PatchOutcome:
    function_name: str
    status: PatchStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status.ok


@dataclass
class PatchResult:
    """Patched file content plus one outcome per planned function."""

    content: str
    outcomes: list[PatchOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether every function was patched (or needed no patch)."""
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failures(self) -> list[PatchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


# ============================================================================
# COLLABORATOR RESULTS
# ============================================================================


@dataclass(frozen=True)
class CommitInfo:
    """Last commit that touched a file."""

    hash: str
    author: str
    date: str
    message: str
    modified_files: tuple[str, ...] = ()


@dataclass
class FileSyncResult:
    """Result of syncing the help blocks of one file.

    Attributes:
        path: File that was processed
        changeset: Detected function changes
        patch_result: Patch pass result (None when nothing was planned)
        written: Whether the file on disk was rewritten
        commit: Commit the file was compared against (None for new files)
        error: Why the file could not be processed at all
    """

    path: Path
    changeset: ChangeSet
    patch_result: PatchResult | None = None
    written: bool = False
    commit: CommitInfo | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        if self.error:
            return False
        return self.patch_result is None or self.patch_result.success


__all__ = [
    "ALL_PARAMETER_SETS",
    "BlockLocation",
    "ChangeSet",
    "CmdletBindingAttribute",
    "CommitInfo",
    "DocumentationBlock",
    "FileSyncResult",
    "FunctionDelta",
    "HelpField",
    "MULTI_ENTRY_FIELDS",
    "OtherAttribute",
    "OutputTypeAttribute",
    "PLACEHOLDER_FIELDS",
    "ParameterAttribute",
    "ParsedAttribute",
    "ParsedFunction",
    "ParsedParameter",
    "PatchOutcome",
    "PatchPlan",
    "PatchResult",
    "PatchStatus",
    "RECOGNIZED_ARGUMENTS",
    "Reparenting",
    "ValidateNotNullOrEmptyAttribute",
    "ValidateSetAttribute",
    "attribute_from_node",
]
