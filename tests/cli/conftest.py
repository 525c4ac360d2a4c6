"""Shared fixtures for CLI tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pygit2
import pytest


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with initial commit and an origin remote."""
    repo_path = (tmp_path / "repo").resolve()
    repo_path.mkdir()
    repo = pygit2.init_repository(str(repo_path), initial_head="main")

    repo.config["user.name"] = "Test"
    repo.config["user.email"] = "test@test.com"
    repo.remotes.create("origin", "git@github.com:acme/widgets.git")

    (repo_path / "README.md").write_text("# Test repo")
    repo.index.add("README.md")
    repo.index.write()
    tree = repo.index.write_tree()
    sig = pygit2.Signature("Test", "test@test.com")
    repo.create_commit("HEAD", sig, sig, "Initial commit", tree, [])

    yield repo_path


@pytest.fixture
def temp_non_git(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary non-git directory."""
    non_git = tmp_path / "not-a-repo"
    non_git.mkdir()
    yield non_git


@pytest.fixture
def initialized_repo(temp_git_repo: Path) -> Path:
    """Create an initialized but not running repo."""
    wit_dir = temp_git_repo / ".wit"
    wit_dir.mkdir()
    (wit_dir / "config.yaml").write_text("port: 7655\n")
    return temp_git_repo
