"""Custom exceptions for psdocsync."""


class DocSyncError(Exception):
    """Base exception for psdocsync errors."""

    pass


class PatchError(DocSyncError):
    """A help block could not be patched into the file."""

    def __init__(self, message: str, function_name: str | None = None):
        super().__init__(message)
        self.function_name = function_name


class NotFoundError(PatchError):
    """Anchor text does not occur in the file."""

    pass


class AmbiguousMatchError(PatchError):
    """Anchor text occurs more than once in the file."""

    def __init__(self, message: str, function_name: str | None = None, occurrences: int = 0):
        super().__init__(message, function_name)
        self.occurrences = occurrences


class ParseFailure(DocSyncError):
    """The external PowerShell parser failed or returned garbage."""

    pass


class GitError(DocSyncError):
    """A git command failed."""

    pass


class ConfigError(DocSyncError):
    """Raised when configuration operations fail."""

    pass


class ManifestError(DocSyncError):
    """Module manifest could not be read or updated."""

    pass
