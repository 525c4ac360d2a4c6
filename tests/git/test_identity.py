"""Tests for git/identity.py module.

Covers:
- repository_name_from_url() for the common remote URL forms
- RepoIdentity remote selection
- discover_repo_root() / resolve_product_name() on real repositories
"""

from __future__ import annotations

from pathlib import Path

import pygit2
import pytest

from wit.git import (
    NoRemoteError,
    NotARepositoryError,
    RepoIdentity,
    discover_repo_root,
    repository_name_from_url,
    resolve_product_name,
)


class TestRepositoryNameFromUrl:
    """Tests for repository_name_from_url function."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/acme/widgets.git", "widgets"),
            ("https://github.com/acme/widgets", "widgets"),
            ("https://github.com/acme/widgets/", "widgets"),
            ("git@github.com:acme/widgets.git", "widgets"),
            ("git@example.com:widgets.git", "widgets"),
            ("ssh://git@example.com:2222/team/widgets.git", "widgets"),
            ("/srv/git/widgets.git", "widgets"),
            ("file:///srv/git/widgets", "widgets"),
        ],
    )
    def test_common_forms(self, url: str, expected: str) -> None:
        assert repository_name_from_url(url) == expected

    @pytest.mark.parametrize("url", ["", "   ", ".git"])
    def test_empty_names(self, url: str) -> None:
        assert repository_name_from_url(url) is None


class TestRepoIdentity:
    """Tests for RepoIdentity class."""

    def test_not_a_repository(self, tmp_path: Path) -> None:
        with pytest.raises(NotARepositoryError):
            RepoIdentity(tmp_path)

    def test_root_from_nested_directory(self, temp_repo: pygit2.Repository) -> None:
        # Given
        workdir = Path(temp_repo.workdir)
        nested = workdir / "src" / "pkg"
        nested.mkdir(parents=True)

        # When
        identity = RepoIdentity(nested)

        # Then
        assert identity.root == workdir.resolve()

    def test_no_remote_raises(self, temp_repo: pygit2.Repository) -> None:
        identity = RepoIdentity(temp_repo.workdir)
        with pytest.raises(NoRemoteError):
            identity.tracking_remote()

    def test_origin_is_preferred(self, temp_repo: pygit2.Repository) -> None:
        # Given
        temp_repo.remotes.create("upstream", "https://example.com/org/upstream-name.git")
        temp_repo.remotes.create("origin", "https://example.com/me/fork-name.git")

        # When
        identity = RepoIdentity(temp_repo.workdir)

        # Then
        assert identity.tracking_remote().name == "origin"
        assert identity.product_name() == "fork-name"

    def test_first_remote_used_without_origin(self, temp_repo: pygit2.Repository) -> None:
        temp_repo.remotes.create("upstream", "git@example.com:org/widgets.git")

        assert RepoIdentity(temp_repo.workdir).product_name() == "widgets"


class TestResolveProductName:
    """Tests for resolve_product_name and discover_repo_root."""

    def test_given_remote_then_repository_name(self, temp_repo: pygit2.Repository) -> None:
        temp_repo.remotes.create("origin", "https://github.com/acme/widgets.git")

        assert resolve_product_name(temp_repo.workdir) == "widgets"

    def test_without_remote_is_none(self, temp_repo: pygit2.Repository) -> None:
        assert resolve_product_name(temp_repo.workdir) is None

    def test_outside_repository_is_none(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        assert resolve_product_name(plain) is None

    def test_discover_repo_root(self, temp_repo: pygit2.Repository, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        assert discover_repo_root(Path(temp_repo.workdir)) == Path(temp_repo.workdir).resolve()
        assert discover_repo_root(plain) is None
