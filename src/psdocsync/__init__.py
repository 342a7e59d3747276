"""psdocsync - function diff and help synchronization for PowerShell projects

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Collaborators (pwsh, git) stay behind thin adapters
- Never patch text that is not uniquely identified

psdocsync compares the functions of a script or module file against the last
committed revision, reports what changed, and regenerates each function's
comment-based help block in place.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
