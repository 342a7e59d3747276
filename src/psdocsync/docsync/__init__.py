"""Help Block Sync System.

Function-level diffing and comment-based help regeneration for PowerShell
files. Two parses of the same file (working copy and last commit) are
compared, and each function's help block is rebuilt from its current
signature while hand-written content is preserved.

Public API ("studs" for external connections):
    - build_registry: Resolve function nesting from parser nodes
    - FunctionDiffer: Compare two registries into a ChangeSet
    - DocSynthesizer: Build a help block for one function
    - locate / patch / patch_functions: Find and replace help blocks
    - DocSyncManager: Orchestrate the full sync of a file

Philosophy:
- Bricks & Studs: Each component self-contained
- Pure core: only the sync manager touches files and subprocesses
- Patch only what is uniquely identified

Example Usage:
    >>> from psdocsync.docsync import DocSyncManager
    >>> manager = DocSyncManager()
    >>> result = manager.sync_file(Path("Widgets.psm1"))
    >>> print(result.written)
"""

from .differ import FunctionDiffer
from .help_block import parse_help_block
from .notes import NotesFields, apply_version_policy, parse_notes, render_notes
from .patcher import locate, locate_preceding, patch, patch_functions
from .registry import build_registry
from .sync_manager import DocSyncManager
from .synthesizer import DocSynthesizer, SynthesisContext, render_block

# Public API (the "studs")
__all__ = [
    "DocSyncManager",
    "DocSynthesizer",
    "FunctionDiffer",
    "NotesFields",
    "SynthesisContext",
    "apply_version_policy",
    "build_registry",
    "locate",
    "locate_preceding",
    "parse_help_block",
    "parse_notes",
    "patch",
    "patch_functions",
    "render_block",
    "render_notes",
]
