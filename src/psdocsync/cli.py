"""psdocsync CLI.

Command-line entry point for keeping PowerShell comment-based help in sync
with function signatures.

Commands:
    diff              Show function changes since the last commit
    sync              Regenerate help blocks
    changelog         Write a change-log section for changed files
    bump-version      Bump ModuleVersion in a module manifest
    strip-whitespace  Remove trailing whitespace from source files
    init-config       Write a default psdocsync.toml
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config_manager import ConfigManager, DocSyncConfig
from .docsync.sync_manager import DocSyncManager
from .errors import ConfigError, DocSyncError
from .models import ChangeSet, HelpField
from .modules.changelog import ChangeLogWriter, to_yaml
from .modules.manifest import VERSION_PARTS, bump_manifest_version
from .modules.whitespace import strip_file

logger = logging.getLogger(__name__)

console = Console()

_FIELD_NAMES = [f.value for f in HelpField]


def _expand_paths(paths: tuple[str, ...], globs: list[str]) -> list[Path]:
    """Expand directories into the source files they contain."""
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for pattern in globs:
                files.extend(sorted(path.rglob(pattern)))
        else:
            files.append(path)
    return list(dict.fromkeys(files))


def _get_config(ctx: click.Context) -> DocSyncConfig:
    return ctx.obj["config"]


def _get_manager(ctx: click.Context) -> DocSyncManager:
    try:
        return DocSyncManager(_get_config(ctx))
    except DocSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _changeset_table(path: Path, changeset: ChangeSet) -> Table:
    table = Table(title=str(path), show_header=True, header_style="bold")
    table.add_column("Change", style="cyan")
    table.add_column("Function")
    table.add_column("Details")

    for function in changeset.added:
        table.add_row("[green]added[/green]", function.name, function.parent_name)
    for function in changeset.removed:
        table.add_row("[red]removed[/red]", function.name, function.parent_name)
    for delta in changeset.changed:
        details = []
        if delta.line_count_delta:
            details.append(f"lines {delta.line_count_delta:+d}")
        details.extend(f"+ {p}" for p in delta.parameters_added)
        details.extend(f"- {p}" for p in delta.parameters_removed)
        details.extend(f"~ {p}" for p in delta.parameters_changed)
        details.extend(f"+ {a}" for a in delta.attributes_added)
        details.extend(f"- {a}" for a in delta.attributes_removed)
        details.extend(f"~ {a}" for a in delta.attributes_changed)
        table.add_row("[yellow]changed[/yellow]", delta.function_name, escape("\n".join(details)))
    for move in changeset.reparented:
        table.add_row(
            "[magenta]moved[/magenta]",
            move.name,
            f"{move.previous_parent or '(top level)'} -> {move.current_parent or '(top level)'}",
        )
    return table


@click.group(context_settings={"help_option_names": ["--help", "-h"]})
@click.option("--config", "config_path", help="Config file path", type=click.Path())
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """psdocsync - keep PowerShell comment-based help in sync.

    Diffs every function against the last committed revision of its file
    and regenerates its help block, preserving hand-written content.

    \b
    CONFIGURATION:
        Config file: ./psdocsync.toml
        Create one with: psdocsync init-config
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand == "init-config":
        return

    try:
        ctx.obj["config"] = ConfigManager.load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command(name="diff")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yaml", "as_yaml", is_flag=True, help="Print the change-set as YAML")
@click.pass_context
def diff_command(ctx: click.Context, path: str, as_yaml: bool) -> None:
    """Show function changes since the last commit of PATH."""
    manager = _get_manager(ctx)
    try:
        changeset = manager.diff_file(Path(path))
    except DocSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_yaml:
        click.echo(to_yaml({path: changeset}), nl=False)
    elif not changeset.has_changes:
        console.print(f"[green]No function changes in {path}[/green]")
    else:
        console.print(_changeset_table(Path(path), changeset))


@main.command(name="sync")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--update-version/--no-update-version",
    default=None,
    help="Bump VER in the notes of changed functions (default: from config)",
)
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option(
    "--field",
    "fields",
    multiple=True,
    type=click.Choice(_FIELD_NAMES, case_sensitive=False),
    help="Help field to regenerate (repeatable; default: from config)",
)
@click.option("--changelog", is_flag=True, help="Also prepend change-log sections")
@click.pass_context
def sync_command(
    ctx: click.Context,
    paths: tuple[str, ...],
    update_version: bool | None,
    dry_run: bool,
    fields: tuple[str, ...],
    changelog: bool,
) -> None:
    """Regenerate the help blocks of PATHS (files or directories)."""
    config = _get_config(ctx)
    manager = _get_manager(ctx)
    requested = {HelpField.from_name(name) for name in fields} if fields else None

    files = _expand_paths(paths, config.source_globs)
    results = manager.sync_paths(
        files, update_version=update_version, dry_run=dry_run, fields=requested
    )

    writer = ChangeLogWriter(Path(config.changelog_path)) if changelog and not dry_run else None
    for result in results:
        if result.error:
            console.print(f"[red]✗ {result.path}: {result.error}[/red]")
            continue

        if result.written:
            console.print(f"[green]✓ Updated {result.path}[/green]")
        elif dry_run:
            console.print(f"[cyan]{result.path}: dry run, not written[/cyan]")
        else:
            console.print(f"[dim]{result.path}: up to date[/dim]")

        for failure in result.patch_result.failures if result.patch_result else []:
            console.print(f"[yellow]  ⚠ {failure.function_name}: {failure.message}[/yellow]")

        if writer:
            writer.write(result.path, result.changeset, result.commit)

    failed = [r for r in results if not r.success]
    if failed:
        console.print(f"[red]{len(failed)} of {len(results)} files had failures[/red]")
        sys.exit(1)


@main.command(name="changelog")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Change-log file (default: from config)")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["markdown", "yaml"]),
    default="markdown",
    show_default=True,
)
@click.pass_context
def changelog_command(
    ctx: click.Context, paths: tuple[str, ...], output: str | None, output_format: str
) -> None:
    """Record function changes of PATHS since their last commit."""
    config = _get_config(ctx)
    manager = _get_manager(ctx)

    try:
        results = [manager.compare(path) for path in _expand_paths(paths, config.source_globs)]
    except DocSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if output_format == "yaml":
        text = to_yaml({str(r.path): r.changeset for r in results})
        if output:
            Path(output).write_text(text, encoding="utf-8")
            console.print(f"[green]✓ Wrote {output}[/green]")
        else:
            click.echo(text, nl=False)
        return

    writer = ChangeLogWriter(Path(output or config.changelog_path))
    written = sum(writer.write(r.path, r.changeset, r.commit) for r in results)
    if written:
        console.print(f"[green]✓ Added {written} section(s) to {writer.changelog_path}[/green]")
    else:
        console.print("[green]No function changes to record[/green]")


@main.command(name="bump-version")
@click.argument("manifest", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--part",
    type=click.Choice(list(VERSION_PARTS)),
    default="build",
    show_default=True,
    help="Version component to increment",
)
@click.option("--dry-run", is_flag=True, help="Print the new version without writing")
@click.pass_context
def bump_version_command(
    ctx: click.Context, manifest: str | None, part: str, dry_run: bool
) -> None:
    """Bump ModuleVersion in a .psd1 MANIFEST (default: from config)."""
    manifest = manifest or _get_config(ctx).manifest_path
    if not manifest:
        console.print("[red]Error: No manifest given and manifest_path is not configured[/red]")
        sys.exit(1)

    try:
        old_version, new_version = bump_manifest_version(Path(manifest), part, dry_run=dry_run)
    except DocSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    suffix = " (dry run)" if dry_run else ""
    console.print(f"[green]{manifest}: {old_version} -> {new_version}{suffix}[/green]")


@main.command(name="strip-whitespace")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_context
def strip_whitespace_command(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Remove trailing whitespace from PATHS (files or directories)."""
    changed = 0
    for path in _expand_paths(paths, _get_config(ctx).source_globs):
        if strip_file(path):
            changed += 1
            console.print(f"[green]✓ {path}[/green]")
    console.print(f"{changed} file(s) changed")


@main.command(name="init-config")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """Write a psdocsync.toml with default settings."""
    custom_path = ctx.obj.get("config_path")
    target = Path(custom_path) if custom_path else Path.cwd() / "psdocsync.toml"
    if target.exists() and not force:
        console.print(f"[yellow]Config already exists: {target} (use --force)[/yellow]")
        sys.exit(1)

    try:
        saved = ConfigManager.save_config(DocSyncConfig(), custom_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Wrote {saved}[/green]")


if __name__ == "__main__":
    main()


__all__ = ["main"]
