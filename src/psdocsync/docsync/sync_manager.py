"""Documentation sync orchestration.

This module orchestrates the complete sync of one PowerShell file:
- Parse the working copy and the last committed revision
- Diff the two function registries
- Synthesize a help block per function
- Patch the blocks into the file and write it back

Philosophy:
- Orchestration, not implementation
- Delegates to specialized modules
- Files are processed independently; one failing file never stops the rest
"""

import logging
import os
import tempfile
from collections.abc import Collection, Iterable
from datetime import date
from pathlib import Path
from typing import NamedTuple

from ..config_manager import DocSyncConfig
from ..errors import DocSyncError, GitError
from ..models import (
    ChangeSet,
    CommitInfo,
    FileSyncResult,
    HelpField,
    ParsedFunction,
    PatchPlan,
)
from ..modules.description_table import DescriptionTable
from ..modules.git_log import GitLog
from ..modules.project_scan import discover_imported_modules
from ..modules.ps_parser import PowerShellParser
from ..modules.whitespace import strip_trailing_whitespace
from .differ import FunctionDiffer
from .patcher import locate, locate_preceding, patch_functions
from .registry import build_registry
from .synthesizer import DocSynthesizer, SynthesisContext, render_block

logger = logging.getLogger(__name__)

_BOM = b"\xef\xbb\xbf"


class Revisions(NamedTuple):
    """Function registries of the working copy and the last commit."""

    current: list[ParsedFunction]
    previous: list[ParsedFunction]
    commit: CommitInfo | None


def _read_source(path: Path) -> tuple[str, bool]:
    raw = path.read_bytes()
    has_bom = raw.startswith(_BOM)
    return raw.decode("utf-8-sig"), has_bom


def _newline_of(content: str) -> str:
    return "\r\n" if "\r\n" in content else "\n"


class DocSyncManager:
    """Orchestrates help block synchronization for PowerShell files."""

    def __init__(
        self,
        config: DocSyncConfig | None = None,
        parser: PowerShellParser | None = None,
        git: GitLog | None = None,
        descriptions: DescriptionTable | None = None,
        project_root: Path | None = None,
    ):
        """Initialize sync manager.

        Args:
            config: Project configuration
            parser: Function extractor (default: pwsh from config)
            git: Version control reader
            descriptions: Authored descriptions (default: loaded from the
                table named in config)
            project_root: Root scanned for imported modules (default: cwd)
        """
        self.config = config or DocSyncConfig()
        self.parser = parser or PowerShellParser(self.config.pwsh_executable)
        self.git = git or GitLog(project_root)
        if descriptions is None:
            descriptions = DescriptionTable.load(
                self.config.description_table, self.config.description_delimiter
            )
        self.descriptions = descriptions
        self.project_root = Path(project_root) if project_root else Path.cwd()

        self.differ = FunctionDiffer()
        self.synthesizer = DocSynthesizer(self.config)

        self._project_modules: tuple[str, ...] | None = None
        self._project_url: str | None = None
        self._project_url_loaded = False

    # ------------------------------------------------------------------
    # Project-wide context
    # ------------------------------------------------------------------

    @property
    def project_modules(self) -> tuple[str, ...]:
        if self._project_modules is None:
            self._project_modules = tuple(
                discover_imported_modules(self.project_root, self.config.source_globs)
            )
        return self._project_modules

    @property
    def project_url(self) -> str | None:
        if not self._project_url_loaded:
            self._project_url = self.git.project_url()
            self._project_url_loaded = True
        return self._project_url

    # ------------------------------------------------------------------
    # Diffing
    # ------------------------------------------------------------------

    def load_revisions(self, path: Path) -> Revisions:
        """Parse the working copy and the last committed revision of a file.

        A file without history (never committed, or outside a repository)
        has an empty previous registry, so every function counts as added.
        """
        path = Path(path)
        current = build_registry(self.parser.parse_file(path))

        try:
            commit = self.git.get_last_commit(path)
        except GitError as e:
            logger.warning(f"No history for {path.name}: {e}")
            commit = None

        if commit is None:
            return Revisions(current, [], None)

        previous_text = self.git.show(commit.hash, path)
        return Revisions(current, self._parse_text(previous_text, path.suffix), commit)

    def _parse_text(self, text: str, suffix: str) -> list[ParsedFunction]:
        fd, temp_name = tempfile.mkstemp(suffix=suffix or ".ps1", prefix="psdocsync-")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            return build_registry(self.parser.parse_file(temp_path))
        finally:
            temp_path.unlink(missing_ok=True)

    def compare(self, path: Path) -> FileSyncResult:
        """Diff a file against its last commit without touching it."""
        path = Path(path)
        current, previous, commit = self.load_revisions(path)
        changeset = self.differ.diff(current, previous)
        return FileSyncResult(path=path, changeset=changeset, commit=commit)

    def diff_file(self, path: Path) -> ChangeSet:
        """Change-set of a file's functions since the last commit.

        Example:
            >>> manager = DocSyncManager(config)
            >>> changeset = manager.diff_file(Path("Widgets.psm1"))
            >>> [f.name for f in changeset.added]
            ['Get-Widget']
        """
        return self.compare(path).changeset

    # ------------------------------------------------------------------
    # Syncing
    # ------------------------------------------------------------------

    def plan(
        self,
        content: str,
        functions: Iterable[ParsedFunction],
        requested_fields: Collection[HelpField],
        update_version: bool,
        today: date | None = None,
    ) -> list[PatchPlan]:
        """Build one patch plan per function, in ascending start line.

        Parents come before their nested children so that replacing a
        parent's block never disturbs the children's anchors.
        """
        newline = _newline_of(content)
        ordered = sorted(functions, key=lambda f: f.start_line)
        in_body = [locate(f.raw_text).existing_block for f in ordered]
        claimed = {block for block in in_body if block}

        plans = []
        for function, old_block in zip(ordered, in_body):
            inside_body = old_block is not None
            if old_block is None:
                old_block = locate_preceding(content, function.raw_text, claimed)

            context = SynthesisContext.for_function(
                function,
                prior_description=self.descriptions.lookup(function.name, function.parent_name),
                project_modules=self.project_modules,
                project_url=self.project_url,
            )
            lines = self.synthesizer.synthesize(
                function,
                context,
                requested_fields,
                update_version=update_version,
                placeholders=self.config.placeholders,
                inside_body=inside_body,
                today=today,
            )
            plans.append(
                PatchPlan(
                    function_name=function.name,
                    old_block=old_block,
                    new_block=render_block(lines).replace("\n", newline),
                    anchor=function.raw_text,
                )
            )
        return plans

    def sync_file(
        self,
        path: Path,
        update_version: bool | None = None,
        dry_run: bool = False,
        fields: Collection[HelpField] | None = None,
        today: date | None = None,
    ) -> FileSyncResult:
        """Regenerate the help blocks of one file.

        Args:
            path: PowerShell source file
            update_version: Bump VER of changed functions (default: config)
            dry_run: Compute everything but leave the file untouched
            fields: Fields to regenerate (default: config)
            today: Date stamped into notes (default: today)

        Returns:
            FileSyncResult; per-function patch failures are recorded in
            its patch result

        Raises:
            DocSyncError: If git fails reading the previous revision
            OSError: If the file cannot be read or written
        """
        path = Path(path)
        if update_version is None:
            update_version = self.config.update_version
        requested = set(fields) if fields is not None else self.config.requested_fields

        result = self.compare(path)
        content, has_bom = _read_source(path)

        plans = self.plan(
            content, result.changeset.all_functions, requested, update_version, today
        )
        result.patch_result = patch_functions(content, plans, newline=_newline_of(content))

        new_content = result.patch_result.content
        if self.config.strip_whitespace:
            new_content = strip_trailing_whitespace(new_content)

        if new_content == content:
            logger.debug(f"{path.name}: up to date")
        elif dry_run:
            logger.info(f"{path.name}: would update ({len(plans)} functions)")
        else:
            path.write_bytes((_BOM if has_bom else b"") + new_content.encode("utf-8"))
            result.written = True
            logger.info(f"{path.name}: updated")

        for failure in result.patch_result.failures:
            logger.warning(
                f"{path.name}: {failure.function_name} not patched ({failure.status.value})"
            )
        return result

    def sync_paths(
        self,
        paths: Iterable[Path],
        update_version: bool | None = None,
        dry_run: bool = False,
        fields: Collection[HelpField] | None = None,
    ) -> list[FileSyncResult]:
        """Sync several files independently.

        Returns:
            One FileSyncResult per path; a file that could not be processed
            at all carries an error message and an empty change-set
        """
        results = []
        for path in paths:
            path = Path(path)
            try:
                results.append(self.sync_file(path, update_version, dry_run, fields))
            except (DocSyncError, OSError) as e:
                logger.error(f"Failed to sync {path}: {e}")
                results.append(FileSyncResult(path=path, changeset=ChangeSet(), error=str(e)))
        return results


__all__ = ["DocSyncManager", "Revisions"]
