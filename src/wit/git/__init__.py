"""Repository metadata: product identity and repository-root discovery."""

from wit.git.errors import GitError, NoRemoteError, NotARepositoryError
from wit.git.identity import (
    RemoteInfo,
    RepoIdentity,
    discover_repo_root,
    repository_name_from_url,
    resolve_product_name,
)

__all__ = [
    "RepoIdentity",
    "RemoteInfo",
    "discover_repo_root",
    "repository_name_from_url",
    "resolve_product_name",
    "GitError",
    "NotARepositoryError",
    "NoRemoteError",
]
