"""Function differencing between two revisions of a file.

Compares the current registry against the previous one and produces a
ChangeSet: added and removed functions (matched by name) and a structured
FunctionDelta for every function whose signature changed.

Philosophy:
- Diff rules are pure functions over sequences
- Comparisons are textual: literal source text, never evaluated values
- Deltas carry formatted strings only
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..models import (
    ChangeSet,
    FunctionDelta,
    ParsedAttribute,
    ParsedFunction,
    ParsedParameter,
    Reparenting,
)

logger = logging.getLogger(__name__)

# Sub-fields compared for parameters present in both revisions
PARAMETER_FIELDS: tuple[tuple[str, Callable[[ParsedParameter], str]], ...] = (
    ("Mandatory", lambda p: p.arguments.get("Mandatory", "")),
    ("Position", lambda p: p.arguments.get("Position", "")),
    ("HelpMessage", lambda p: p.arguments.get("HelpMessage", "")),
    ("ParameterSetName", lambda p: p.arguments.get("ParameterSetName", "")),
    ("ValueFromPipeline", lambda p: p.arguments.get("ValueFromPipeline", "")),
    ("DefaultValue", lambda p: p.default_value),
    ("Type", lambda p: p.static_type),
)


def format_parameter(parameter: ParsedParameter) -> str:
    """Descriptor for an added or removed parameter, e.g. "[int] $B = 5"."""
    type_part = f"[{parameter.static_type}] " if parameter.static_type else ""
    default_part = f" = {parameter.default_value}" if parameter.default_value else ""
    return f"{type_part}${parameter.name}{default_part}"


def parameter_field_changes(current: ParsedParameter, previous: ParsedParameter) -> list[str]:
    """One "<Field> [<old>-><new>]" entry per differing sub-field."""
    return [
        f"{label} [{read(previous)}->{read(current)}]"
        for label, read in PARAMETER_FIELDS
        if read(previous) != read(current)
    ]


def diff_parameters(
    current: Sequence[ParsedParameter], previous: Sequence[ParsedParameter]
) -> tuple[list[str], list[str], list[str]]:
    """Compare two parameter lists.

    Returns:
        (added, removed, changed) descriptor lists; added and changed follow
        the current order, removed follows the previous order
    """
    previous_by_name = {p.name: p for p in previous}
    current_names = {p.name for p in current}

    added = [format_parameter(p) for p in current if p.name not in previous_by_name]
    removed = [format_parameter(p) for p in previous if p.name not in current_names]

    changed = []
    for parameter in current:
        before = previous_by_name.get(parameter.name)
        if before is None:
            continue
        changes = parameter_field_changes(parameter, before)
        if changes:
            type_part = f"[{parameter.static_type}] " if parameter.static_type else ""
            changed.append(f"{type_part}${parameter.name} ( {', '.join(changes)} )")

    return added, removed, changed


def _group_attributes(attributes: Sequence[ParsedAttribute]) -> dict[str, list[ParsedAttribute]]:
    grouped: dict[str, list[ParsedAttribute]] = {}
    for attribute in attributes:
        grouped.setdefault(attribute.name, []).append(attribute)
    return grouped


def diff_attributes(
    current: Sequence[ParsedAttribute], previous: Sequence[ParsedAttribute]
) -> tuple[list[str], list[str], list[str]]:
    """Compare two attribute lists by attribute name.

    Going from no attributes to some (or back) is reported entirely as
    additions (or removals).

    Returns:
        (added, removed, changed) descriptor lists
    """
    current_groups = _group_attributes(current)
    previous_groups = _group_attributes(previous)

    added = [
        f"[{a.render()}]" for name, group in current_groups.items() if name not in previous_groups
        for a in group
    ]
    removed = [
        f"[{a.render()}]" for name, group in previous_groups.items() if name not in current_groups
        for a in group
    ]

    changed = []
    for name, group in current_groups.items():
        before = previous_groups.get(name)
        if before is None:
            continue
        old_text = "; ".join(a.value_text for a in before)
        new_text = "; ".join(a.value_text for a in group)
        if old_text != new_text:
            changed.append(f"{name} [{old_text}->{new_text}]")

    return added, removed, changed


def compare_functions(current: ParsedFunction, previous: ParsedFunction) -> FunctionDelta | None:
    """Build the delta of two revisions of the same function.

    Returns:
        FunctionDelta, or None when the raw text is identical (ignoring
        surrounding whitespace) or no concrete sub-field differs
    """
    if current.raw_text.strip() == previous.raw_text.strip():
        return None

    delta = FunctionDelta(
        function_name=current.name,
        parent_function_name=current.parent_name,
    )

    line_delta = current.line_count - previous.line_count
    if line_delta:
        delta.line_count_delta = line_delta
        delta.current_line_count = current.line_count
        delta.previous_line_count = previous.line_count

    (
        delta.parameters_added,
        delta.parameters_removed,
        delta.parameters_changed,
    ) = diff_parameters(current.parameters, previous.parameters)
    (
        delta.attributes_added,
        delta.attributes_removed,
        delta.attributes_changed,
    ) = diff_attributes(current.attributes, previous.attributes)

    if not delta.is_significant:
        logger.debug(f"Ignoring text-only change in {current.name}")
        return None
    return delta


class FunctionDiffer:
    """Compares two revisions of a file's function registry."""

    def diff(
        self, current: Sequence[ParsedFunction], previous: Sequence[ParsedFunction]
    ) -> ChangeSet:
        """Compute the change-set between two registries.

        Marks ``is_new`` on added functions and ``is_changed`` on every
        current function that received a delta.

        Args:
            current: Registry of the working copy
            previous: Registry of the previous revision

        Returns:
            ChangeSet (possibly empty)

        Example:
            >>> changeset = FunctionDiffer().diff(current, previous)
            >>> [f.name for f in changeset.added]
            ['Get-Widget']
        """
        previous_names = {p.name for p in previous}
        current_names = {f.name for f in current}

        added = [f for f in current if f.name not in previous_names]
        removed = [p for p in previous if p.name not in current_names]

        changed: list[FunctionDelta] = []
        reparented: list[Reparenting] = []
        compared: set[str] = set()

        for function in current:
            if function.name in compared or function.name not in previous_names:
                continue
            match = next(
                (
                    p
                    for p in previous
                    if p.name == function.name and p.parent_name == function.parent_name
                ),
                None,
            )
            if match is None:
                # Moved into or out of nesting: still compared in place
                match = next(p for p in previous if p.name == function.name)
                reparented.append(
                    Reparenting(function.name, match.parent_name, function.parent_name)
                )

            compared.add(function.name)
            delta = compare_functions(function, match)
            if delta is not None:
                function.is_changed = True
                changed.append(delta)

        for function in added:
            function.is_new = True

        logger.debug(
            f"Diff: {len(added)} added, {len(removed)} removed, {len(changed)} changed"
        )
        return ChangeSet(
            added=added,
            removed=removed,
            changed=changed,
            all_functions=list(current),
            reparented=reparented,
        )


__all__ = [
    "FunctionDiffer",
    "compare_functions",
    "diff_attributes",
    "diff_parameters",
    "format_parameter",
    "parameter_field_changes",
]
