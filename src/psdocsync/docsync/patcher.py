"""Help block location and patching.

Finds a function's current help block inside its raw text and swaps it for
a synthesized one in the file content. A block is only ever replaced when
its text occurs exactly once in the file; anything else is reported as a
per-function failure and the remaining functions are still processed.

Philosophy:
- Never replace anchor text that is not uniquely identifying
- Patches are local: bytes outside the matched span never change
- Partial success is reported, not raised
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from ..errors import AmbiguousMatchError, NotFoundError, PatchError
from ..models import BlockLocation, PatchOutcome, PatchPlan, PatchResult, PatchStatus
from .help_block import CLOSE_DELIMITER, OPEN_DELIMITER

logger = logging.getLogger(__name__)

# Help above a function may be followed by at most one blank line
MAX_HELP_GAP_NEWLINES = 2


def locate(function_raw_text: str) -> BlockLocation:
    """Split a function into its signature and its existing help block.

    The signature is everything before the first opening brace. The help
    block is recognized only when it is the first thing inside the body.

    Args:
        function_raw_text: Exact source text of the function

    Returns:
        BlockLocation with preceding code and the block text (delimiters
        included) or None when the function has no help block
    """
    brace = function_raw_text.find("{")
    if brace < 0:
        return BlockLocation(preceding_code=function_raw_text)

    preceding_code = function_raw_text[:brace]
    body = function_raw_text[brace + 1 :]
    stripped = body.lstrip()
    if not stripped.startswith(OPEN_DELIMITER):
        return BlockLocation(preceding_code=preceding_code)

    start = len(body) - len(stripped)
    end = body.find(CLOSE_DELIMITER, start + len(OPEN_DELIMITER))
    if end < 0:
        logger.debug(f"Unterminated help block after: {preceding_code.strip()}")
        return BlockLocation(preceding_code=preceding_code)

    return BlockLocation(
        preceding_code=preceding_code,
        existing_block=body[start : end + len(CLOSE_DELIMITER)],
    )


def locate_preceding(
    file_content: str, function_raw_text: str, claimed: Collection[str] = ()
) -> str | None:
    """Find a help block written directly above a function.

    The block belongs to the function only when:
    - at most one blank line separates it from the function keyword
    - it is not the first thing in an enclosing body (that block documents
      the enclosing function)
    - it is not in ``claimed`` (blocks already owned by other functions)

    Returns:
        The block text, or None when there is none or the function text is
        not unique in the file
    """
    if file_content.count(function_raw_text) != 1:
        return None

    function_start = file_content.index(function_raw_text)
    before = file_content[:function_start].rstrip()
    if not before.endswith(CLOSE_DELIMITER):
        return None
    if file_content.count("\n", len(before), function_start) > MAX_HELP_GAP_NEWLINES:
        return None

    start = before.rfind(OPEN_DELIMITER)
    if start < 0:
        return None
    if before[:start].rstrip().endswith("{"):
        return None

    block = before[start:]
    if block in claimed:
        return None
    return block


def _single_occurrence(content: str, anchor: str, function_name: str | None, what: str) -> int:
    count = content.count(anchor)
    if count == 0:
        raise NotFoundError(f"{what} not found in file", function_name)
    if count > 1:
        raise AmbiguousMatchError(
            f"{what} occurs {count} times in file", function_name, occurrences=count
        )
    return content.index(anchor)


def _line_indent(content: str, index: int) -> str:
    line_start = content.rfind("\n", 0, index) + 1
    prefix = content[line_start:index]
    return prefix if not prefix.strip() else ""


def patch(
    file_content: str,
    old_block: str | None,
    new_block: str,
    anchor: str | None = None,
    function_name: str | None = None,
    newline: str = "\n",
) -> str:
    """Replace one help block, or insert a fresh one before a function.

    Args:
        file_content: Current file text
        old_block: Existing block text; empty/None means "insert"
        new_block: Replacement block text
        anchor: Function raw text, required when inserting
        function_name: Used in error messages only
        newline: Line ending written after an inserted block

    Returns:
        New file content

    Raises:
        NotFoundError: Anchor (old block or function text) does not occur
        AmbiguousMatchError: Anchor occurs more than once
        ValueError: Inserting without an anchor

    Example:
        >>> patch("x <# a #> y", "<# a #>", "<# b #>")
        'x <# b #> y'
    """
    if old_block:
        index = _single_occurrence(file_content, old_block, function_name, "Help block")
        return file_content[:index] + new_block + file_content[index + len(old_block) :]

    if not anchor:
        raise ValueError("An anchor is required to insert a new help block")

    index = _single_occurrence(file_content, anchor, function_name, "Function text")
    indent = _line_indent(file_content, index)
    return file_content[:index] + new_block + newline + indent + file_content[index:]


def patch_functions(
    file_content: str, plans: Iterable[PatchPlan], newline: str = "\n"
) -> PatchResult:
    """Apply a patch plan per function, continuing past failures.

    Args:
        file_content: Current file text
        plans: One plan per function, in application order
        newline: Line ending written after inserted blocks

    Returns:
        PatchResult with the (partially) patched content and one outcome
        per plan
    """
    content = file_content
    outcomes: list[PatchOutcome] = []

    for plan in plans:
        if plan.old_block and plan.old_block == plan.new_block:
            outcomes.append(PatchOutcome(plan.function_name, PatchStatus.UNCHANGED))
            continue

        try:
            content = patch(
                content,
                plan.old_block,
                plan.new_block,
                anchor=plan.anchor,
                function_name=plan.function_name,
                newline=newline,
            )
        except AmbiguousMatchError as e:
            logger.warning(f"Skipped {plan.function_name}: {e}")
            outcomes.append(PatchOutcome(plan.function_name, PatchStatus.AMBIGUOUS, str(e)))
        except PatchError as e:
            logger.warning(f"Skipped {plan.function_name}: {e}")
            outcomes.append(PatchOutcome(plan.function_name, PatchStatus.NOT_FOUND, str(e)))
        else:
            status = PatchStatus.PATCHED if plan.old_block else PatchStatus.INSERTED
            logger.debug(f"{status.value}: {plan.function_name}")
            outcomes.append(PatchOutcome(plan.function_name, status))

    return PatchResult(content=content, outcomes=outcomes)


__all__ = ["locate", "locate_preceding", "patch", "patch_functions"]
