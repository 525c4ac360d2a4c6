"""CLI utilities."""

from pathlib import Path

import click

from wit.git.identity import discover_repo_root


def find_repo_root(start_path: Path | None = None) -> Path:
    """Find the git repository root from the given path.

    If start_path is None, uses the current working directory.

    Raises:
        click.ClickException: If not inside a git repository
    """
    if start_path is None:
        start_path = Path.cwd()

    root = discover_repo_root(start_path.resolve())
    if root is None:
        raise click.ClickException(
            f"Not inside a git repository: {start_path}\n"
            "wit commands must be run from within a git repository."
        )
    return root
