class ChronoError(Exception):
    """Base class for git-chrono errors."""


class ConfigurationError(ChronoError, ValueError):
    """Unsupported time source or output mode."""


class RepositoryOpenError(ChronoError):
    """The given path is not a git repository."""

    def __init__(self, path, reason: str = "not a git repository"):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class CommitReadError(ChronoError):
    """A commit's metadata could not be retrieved."""

    def __init__(self, oid: str, reason: str):
        self.oid = oid
        self.reason = reason
        super().__init__(f"Cannot read commit {oid}: {reason}")


class GraphStateError(ChronoError, RuntimeError):
    """The commit graph cache was used in a way that breaks its invariants."""
