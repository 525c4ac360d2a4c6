"""Git module error types."""


class GitError(Exception):
    """Base error for git operations."""

    pass


class NotARepositoryError(GitError):
    """Path is not inside a git repository."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class NoRemoteError(GitError):
    """Repository has no usable remote."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No remote configured for repository: {path}")
        self.path = path
