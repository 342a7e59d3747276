"""PowerShell parser adapter.

Runs ``pwsh`` with a small dump script that uses the PowerShell language
parser to find every function definition in a file and print it as JSON.
The JSON node shape is the contract the registry builder consumes:

    {
      "name": "Get-Widget",
      "start_line": 3, "end_line": 20, "start_column": 1, "end_column": 2,
      "text": "function Get-Widget { ... }",
      "parameters": [
        {"name": "Id", "type": "int", "default": "5",
         "attributes": [{"name": "Parameter", "positional": [],
                         "named": {"Mandatory": "$true"}}]}
      ],
      "attributes": [{"name": "CmdletBinding", "positional": [], "named": {}}],
      "help": {"Synopsis": "...", "Examples": ["..."], "Parameters": {...}}
    }

Any failure of the parser is a parse failure: it is logged and the file is
treated as having no functions.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..errors import ParseFailure
from .subprocess_helper import SubprocessResult, safe_run

logger = logging.getLogger(__name__)

# Reads the target path from stdin so no path ever lands in the command line
DUMP_SCRIPT = r"""
$path = [Console]::In.ReadToEnd().Trim()
$tokens = $null; $errors = $null
$ast = [System.Management.Automation.Language.Parser]::ParseFile($path, [ref]$tokens, [ref]$errors)

function ConvertFrom-AttributeAst($attr) {
    $named = [ordered]@{}
    foreach ($arg in $attr.NamedArguments) {
        if ($arg.ExpressionOmitted) { $named[$arg.ArgumentName] = $null }
        else { $named[$arg.ArgumentName] = $arg.Argument.Extent.Text }
    }
    [ordered]@{
        name = $attr.TypeName.FullName
        positional = @($attr.PositionalArguments | ForEach-Object { $_.Extent.Text })
        named = $named
    }
}

function ConvertFrom-ParameterAst($p) {
    $type = ''
    $attributes = @()
    foreach ($a in $p.Attributes) {
        if ($a -is [System.Management.Automation.Language.TypeConstraintAst]) { $type = $a.TypeName.FullName }
        else { $attributes += ConvertFrom-AttributeAst $a }
    }
    [ordered]@{
        name = $p.Name.VariablePath.UserPath
        type = $type
        default = if ($p.DefaultValue) { $p.DefaultValue.Extent.Text } else { $null }
        attributes = $attributes
    }
}

$functions = $ast.FindAll({ $args[0] -is [System.Management.Automation.Language.FunctionDefinitionAst] }, $true)
$nodes = foreach ($f in $functions) {
    $params = if ($f.Body.ParamBlock) { $f.Body.ParamBlock.Parameters } else { $f.Parameters }
    $attrs = if ($f.Body.ParamBlock) { $f.Body.ParamBlock.Attributes } else { @() }
    $help = $f.GetHelpContent()
    [ordered]@{
        name = $f.Name
        start_line = $f.Extent.StartLineNumber
        end_line = $f.Extent.EndLineNumber
        start_column = $f.Extent.StartColumnNumber
        end_column = $f.Extent.EndColumnNumber
        text = $f.Extent.Text
        parameters = @($params | ForEach-Object { ConvertFrom-ParameterAst $_ })
        attributes = @($attrs | ForEach-Object { ConvertFrom-AttributeAst $_ })
        help = if ($help) {
            [ordered]@{
                Synopsis = $help.Synopsis; Description = $help.Description
                Examples = @($help.Examples); Notes = $help.Notes
                Component = $help.Component; Links = @($help.Links)
                ForwardHelpCategory = $help.ForwardHelpCategory
                ForwardHelpTargetName = $help.ForwardHelpTargetName
                Functionality = $help.Functionality
                Inputs = @($help.Inputs); Outputs = @($help.Outputs)
                MamlHelpFile = $help.MamlHelpFile; Parameters = $help.Parameters
                RemoteHelpRunspace = $help.RemoteHelpRunspace; Role = $help.Role
            }
        } else { $null }
    }
}
ConvertTo-Json -InputObject @($nodes) -Depth 8 -Compress
"""


def nodes_from_json(text: str) -> list[dict[str, Any]]:
    """Decode the dump script's JSON output into function nodes.

    Raises:
        ParseFailure: If the text is not a JSON list of node objects
    """
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Parser output is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(node, dict) for node in data):
        raise ParseFailure("Parser output is not a list of function nodes")

    for node in data:
        missing = [key for key in ("name", "start_line", "end_line") if key not in node]
        if missing:
            raise ParseFailure(f"Function node is missing {', '.join(missing)}")
    return data


class PowerShellParser:
    """Extracts function nodes from PowerShell files via pwsh."""

    def __init__(
        self,
        executable: str = "pwsh",
        runner: Callable[..., SubprocessResult] = safe_run,
    ):
        """Initialize parser adapter.

        Args:
            executable: pwsh (or powershell) executable name or path
            runner: Command runner (injectable for tests)
        """
        self.executable = executable
        self._run = runner

    def parse_file(self, path: Path) -> list[dict[str, Any]]:
        """Parse one file into function nodes.

        Args:
            path: PowerShell source file

        Returns:
            Function nodes; an empty list on any parse failure
        """
        try:
            return self._parse(Path(path))
        except ParseFailure as e:
            logger.warning(f"Parse failed for {path}, treating it as having no functions: {e}")
            return []

    def _parse(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            raise ParseFailure(f"File does not exist: {path}")

        result = self._run(
            [self.executable, "-NoProfile", "-NonInteractive", "-Command", DUMP_SCRIPT],
            input_text=str(path.resolve()),
        )
        if not result.ok:
            raise ParseFailure(
                f"{self.executable} exited with {result.returncode}: {result.stderr.strip()}"
            )
        return nodes_from_json(result.stdout)


__all__ = ["DUMP_SCRIPT", "PowerShellParser", "nodes_from_json"]
