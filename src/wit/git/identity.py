"""Product identity from repository metadata via pygit2.

The product name is the repository name of the remote the checkout tracks:
the last path segment of the remote URL with any ``.git`` suffix removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pygit2
import structlog

from wit.git.errors import GitError, NoRemoteError, NotARepositoryError

logger = structlog.get_logger()

PREFERRED_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class RemoteInfo:
    """Git remote information."""

    name: str
    url: str


def repository_name_from_url(url: str) -> str | None:
    """Extract ``name`` from ``https://host/owner/name.git``, ``git@host:owner/name``, or a path."""
    trimmed = url.strip().rstrip("/")
    if not trimmed:
        return None
    segment = trimmed.replace("\\", "/").rsplit("/", 1)[-1]
    # scp-like syntax without a slash: git@host:name.git
    segment = segment.rsplit(":", 1)[-1]
    if segment.endswith(".git"):
        segment = segment[: -len(".git")]
    return segment or None


class RepoIdentity:
    """Owns pygit2.Repository for identity lookups."""

    def __init__(self, repo_path: Path | str) -> None:
        self._path = Path(repo_path)
        discovered = pygit2.discover_repository(str(self._path))
        if discovered is None:
            raise NotARepositoryError(str(self._path))
        try:
            self._repo = pygit2.Repository(discovered)
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e

    @property
    def root(self) -> Path:
        """Working tree root (the metadata directory for bare repositories)."""
        return Path(self._repo.workdir or self._repo.path).resolve()

    def remotes(self) -> list[RemoteInfo]:
        return [RemoteInfo(r.name or "", r.url or "") for r in self._repo.remotes]

    def tracking_remote(self) -> RemoteInfo:
        """The preferred remote, else the first one configured.

        Raises:
            NoRemoteError: If no remote has a URL.
        """
        remotes = [r for r in self.remotes() if r.url]
        if not remotes:
            raise NoRemoteError(str(self.root))
        for remote in remotes:
            if remote.name == PREFERRED_REMOTE:
                return remote
        return remotes[0]

    def product_name(self) -> str | None:
        return repository_name_from_url(self.tracking_remote().url)


def discover_repo_root(path: Path | str) -> Path | None:
    """Nearest ancestor of ``path`` containing repository metadata."""
    try:
        return RepoIdentity(path).root
    except NotARepositoryError:
        return None


def resolve_product_name(repo_path: Path | str) -> str | None:
    """Product name for the repository containing ``repo_path``.

    Returns None when there is no repository, the metadata cannot be read,
    or no remote is configured.
    """
    try:
        name = RepoIdentity(repo_path).product_name()
    except (GitError, pygit2.GitError, OSError) as e:
        logger.warning("product_name_unresolved", path=str(repo_path), error=str(e))
        return None
    if name is None:
        logger.warning("product_name_unresolved", path=str(repo_path), error="empty remote url")
    return name
