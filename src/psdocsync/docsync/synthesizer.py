"""Help block synthesis.

Builds a new comment-based help block for one function by merging content
generated from the function's current signature with the content already
written in its existing block.

Per-field policy:
- Field requested and its generator yields content: use generated content
- Otherwise: keep existing content, re-indented
- Otherwise: omit the field (or emit an empty heading when asked to)

Philosophy:
- Simple string formatting (no templates)
- Indentation anchored to the function's source column
- Same inputs always produce the same lines
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection
from dataclasses import dataclass
from datetime import date

from ..config_manager import DocSyncConfig
from ..models import (
    ALL_PARAMETER_SETS,
    MULTI_ENTRY_FIELDS,
    PLACEHOLDER_FIELDS,
    DocumentationBlock,
    HelpField,
    ParsedFunction,
    ParsedParameter,
)
from .help_block import CLOSE_DELIMITER, OPEN_DELIMITER, dedent_lines
from .notes import apply_version_policy, parse_notes, render_notes

# (keyword argument, content lines) for one keyword line of a field
Entry = tuple[str, list[str]]

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")

_SWITCH_TYPES = ("switch", "switchparameter", "system.management.automation.switchparameter")


@dataclass(frozen=True)
class SynthesisContext:
    """Everything besides the function itself that shapes its help block.

    Attributes:
        is_new: Function was added since the previous revision
        is_changed: Function received a significant delta
        prior_description: Hand-authored description from the description table
        project_modules: Modules the project imports (Component fallback)
        project_url: Browsable repository URL (Links fallback)
    """

    is_new: bool = False
    is_changed: bool = False
    prior_description: str | None = None
    project_modules: tuple[str, ...] = ()
    project_url: str | None = None

    @classmethod
    def for_function(cls, function: ParsedFunction, **kwargs) -> SynthesisContext:
        """Context carrying the differ's flags for a function."""
        return cls(is_new=function.is_new, is_changed=function.is_changed, **kwargs)


def title_from_name(name: str) -> str:
    """Split a function name into words at case boundaries.

    Example:
        >>> title_from_name("Get-ADUserReport")
        'Get AD User Report'
    """
    words = _WORD.findall(name)
    return " ".join(words) if words else name


def example_for_parameter_set(function: ParsedFunction, parameter_set: str) -> str:
    """One invocation line listing the parameters of a parameter set.

    Mandatory parameters come first as ``-Name $Name``; optional ones are
    bracketed, and a default value is appended as ``=default``.
    """
    members = [
        p
        for p in function.parameters
        if parameter_set == ALL_PARAMETER_SETS
        or not p.parameter_set
        or p.parameter_set == parameter_set
    ]
    ordered = [p for p in members if p.is_mandatory] + [p for p in members if not p.is_mandatory]

    parts = [function.name]
    for parameter in ordered:
        text = _parameter_usage(parameter)
        parts.append(text if parameter.is_mandatory else f"[{text}]")
    return " ".join(parts)


def _parameter_usage(parameter: ParsedParameter) -> str:
    if parameter.static_type.lower() in _SWITCH_TYPES:
        return f"-{parameter.name}"
    text = f"-{parameter.name} ${parameter.name}"
    if parameter.default_value:
        text += f"={parameter.default_value}"
    return text


def render_block(lines: list[str]) -> str:
    """Join synthesized lines into block text ready for patching."""
    return "\n".join(lines)


class DocSynthesizer:
    """Synthesizes comment-based help blocks for parsed functions."""

    def __init__(self, config: DocSyncConfig | None = None):
        """Initialize synthesizer.

        Args:
            config: Indentation, date format and default author settings
        """
        self.config = config or DocSyncConfig()

    def synthesize(
        self,
        function: ParsedFunction,
        context: SynthesisContext,
        requested_fields: Collection[HelpField],
        update_version: bool = False,
        placeholders: Collection[HelpField] = (),
        inside_body: bool = True,
        today: date | None = None,
    ) -> list[str]:
        """Build the help block lines for one function.

        Args:
            function: Current parsed state of the function
            context: Change flags and external content for the function
            requested_fields: Fields to regenerate
            update_version: Whether changed functions get a version bump
            placeholders: Fields (Synopsis/Description/Examples/Links only)
                to keep as empty headings when they have no content
            inside_body: Block sits inside the function body (one indent
                level deeper than the function) rather than above it
            today: Date used for notes (defaults to today)

        Returns:
            Block lines; the first line is the bare opening delimiter, every
            other line carries its full indentation

        Example:
            >>> lines = DocSynthesizer().synthesize(fn, SynthesisContext(), {HelpField.SYNOPSIS})
            >>> lines[0], lines[1].strip()
            ('<#', '.SYNOPSIS')
        """
        merged = self.merge_fields(
            function, context, requested_fields, update_version, today or date.today()
        )

        unit = self.config.indent
        base = " " * max(function.start_column - 1, 0) + (unit if inside_body else "")
        empty_headings = set(placeholders) & PLACEHOLDER_FIELDS

        lines = [OPEN_DELIMITER]
        for help_field in HelpField:
            entries = merged.get(help_field)
            if not entries:
                if help_field in empty_headings:
                    lines.append(base + help_field.keyword)
                continue
            for argument, content in entries:
                heading = f"{help_field.keyword} {argument}" if argument else help_field.keyword
                lines.append(base + heading)
                lines.extend(base + unit + line if line else "" for line in content)
        lines.append(base + CLOSE_DELIMITER)
        return lines

    def merge_fields(
        self,
        function: ParsedFunction,
        context: SynthesisContext,
        requested_fields: Collection[HelpField],
        update_version: bool,
        today: date,
    ) -> dict[HelpField, list[Entry]]:
        """Decide the content of every field, generated or preserved."""
        generators: dict[HelpField, Callable[[], list[Entry]]] = {
            HelpField.SYNOPSIS: lambda: self._synopsis(function),
            HelpField.DESCRIPTION: lambda: self._description(function, context),
            HelpField.EXAMPLES: lambda: self._examples(function),
            HelpField.NOTES: lambda: self._notes(function, context, update_version, today),
            HelpField.COMPONENT: lambda: self._component(function, context),
            HelpField.LINKS: lambda: self._links(function, context),
            HelpField.PARAMETERS: lambda: self._parameters(function),
        }

        merged: dict[HelpField, list[Entry]] = {}
        for help_field in HelpField:
            entries: list[Entry] = []
            generator = generators.get(help_field)
            if help_field in requested_fields and generator is not None:
                entries = [(arg, lines) for arg, lines in generator() if lines]
            if not entries:
                entries = self._existing(function.documentation, help_field)
            if entries:
                merged[help_field] = entries
        return merged

    # ------------------------------------------------------------------
    # Existing content
    # ------------------------------------------------------------------

    @staticmethod
    def _existing(doc: DocumentationBlock, help_field: HelpField) -> list[Entry]:
        if help_field is HelpField.EXAMPLES:
            return [("", dedent_lines(ex)) for ex in doc.examples if dedent_lines(ex)]
        if help_field is HelpField.LINKS:
            return [("", [link]) for link in doc.links]
        if help_field is HelpField.PARAMETERS:
            return [(name, dedent_lines(lines)) for name, lines in doc.parameters.items()]
        if help_field in MULTI_ENTRY_FIELDS:
            return []
        lines = dedent_lines(doc.get(help_field))
        return [("", lines)] if lines else []

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def _synopsis(self, function: ParsedFunction) -> list[Entry]:
        existing = dedent_lines(function.documentation.get(HelpField.SYNOPSIS))
        # More than two lines means the synopsis is really something else
        if not existing or len(existing) > 2:
            return [("", [title_from_name(function.name)])]
        return [("", [line.strip() for line in existing])]

    def _description(self, function: ParsedFunction, context: SynthesisContext) -> list[Entry]:
        if context.prior_description and context.prior_description.strip():
            return [("", dedent_lines(context.prior_description.splitlines()))]
        return self._existing(function.documentation, HelpField.DESCRIPTION)

    def _examples(self, function: ParsedFunction) -> list[Entry]:
        return [
            ("", [example_for_parameter_set(function, parameter_set)])
            for parameter_set in function.parameter_sets()
        ]

    def _notes(
        self,
        function: ParsedFunction,
        context: SynthesisContext,
        update_version: bool,
        today: date,
    ) -> list[Entry]:
        doc = function.documentation
        notes = parse_notes(
            doc.get(HelpField.NOTES),
            doc.get(HelpField.SYNOPSIS),
            date_format=self.config.date_format,
        )
        notes = apply_version_policy(
            notes,
            is_new=context.is_new,
            is_changed=context.is_changed,
            update_version=update_version,
            today=today,
            default_author=self.config.author,
        )
        return [("", render_notes(notes, self.config.date_format))]

    def _component(self, function: ParsedFunction, context: SynthesisContext) -> list[Entry]:
        existing = self._existing(function.documentation, HelpField.COMPONENT)
        if existing:
            return existing
        modules = list(dict.fromkeys(m for m in context.project_modules if m))
        return [("", [", ".join(modules)])] if modules else []

    def _links(self, function: ParsedFunction, context: SynthesisContext) -> list[Entry]:
        existing = self._existing(function.documentation, HelpField.LINKS)
        if existing:
            return existing
        return [("", [context.project_url])] if context.project_url else []

    def _parameters(self, function: ParsedFunction) -> list[Entry]:
        written = {name.lower(): lines for name, lines in function.documentation.parameters.items()}
        entries = []
        for parameter in function.parameters:
            lines = dedent_lines(written.get(parameter.name.lower(), []))
            if not lines and parameter.help_message:
                lines = [parameter.help_message]
            if lines:
                entries.append((parameter.name, lines))
        return entries


__all__ = [
    "DocSynthesizer",
    "SynthesisContext",
    "example_for_parameter_set",
    "render_block",
    "title_from_name",
]
