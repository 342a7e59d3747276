"""
Shared test fixtures and configuration for psdocsync tests.

This module provides common fixtures used across all test types:
- Factories for raw parser nodes (functions, parameters, attributes)
- ParsedFunction factory built through the registry
- A deterministic configuration and date
"""

from datetime import date
from typing import Any

import pytest

from psdocsync.config_manager import DocSyncConfig
from psdocsync.docsync.registry import function_from_node

# ============================================================================
# NODE FACTORIES
# ============================================================================


def parameter_node(
    name: str,
    type_name: str = "",
    default: str | None = None,
    mandatory: str | None = None,
    parameter_set: str | None = None,
    help_message: str | None = None,
    extra_attributes: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Raw parser node for one parameter."""
    named: dict[str, Any] = {}
    if mandatory is not None:
        named["Mandatory"] = mandatory
    if parameter_set is not None:
        named["ParameterSetName"] = parameter_set
    if help_message is not None:
        named["HelpMessage"] = help_message

    attributes = []
    if named:
        attributes.append({"name": "Parameter", "positional": [], "named": named})
    attributes.extend(extra_attributes or [])
    return {"name": name, "type": type_name, "default": default, "attributes": attributes}


def function_node(
    name: str,
    start_line: int = 1,
    end_line: int = 5,
    text: str | None = None,
    parameters: list[dict[str, Any]] | None = None,
    attributes: list[dict[str, Any]] | None = None,
    help_content: dict[str, Any] | None = None,
    start_column: int = 1,
) -> dict[str, Any]:
    """Raw parser node for one function definition."""
    return {
        "name": name,
        "start_line": start_line,
        "end_line": end_line,
        "start_column": start_column,
        "end_column": 2,
        "text": text if text is not None else f"function {name} {{ }}",
        "parameters": parameters or [],
        "attributes": attributes or [],
        "help": help_content,
    }


@pytest.fixture
def make_parameter():
    """Factory for raw parameter nodes."""
    return parameter_node


@pytest.fixture
def make_node():
    """Factory for raw function nodes."""
    return function_node


@pytest.fixture
def make_function():
    """Factory for ParsedFunction objects built from raw nodes."""

    def _make(name: str, **kwargs):
        return function_from_node(function_node(name, **kwargs))

    return _make


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture
def config():
    """Deterministic configuration (fixed author, default fields)."""
    return DocSyncConfig(author="Jane Doe")


@pytest.fixture
def today():
    """Fixed "today" for notes stamping."""
    return date(2024, 6, 1)
