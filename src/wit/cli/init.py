"""wit init command - initialize a repository for wit."""

import shutil
import sys
from pathlib import Path

import click

from wit.config.constants import DEFAULT_DB_FILENAME, WIT_DIR
from wit.config.user_config import (
    RuntimeState,
    UserConfig,
    write_runtime_state,
    write_user_config,
)
from wit.core.progress import get_console, status
from wit.git.identity import resolve_product_name

GITIGNORE = (
    "# Ignore everything except user config files\n"
    "*\n"
    "!.gitignore\n"
    "!config.yaml\n"
    "# state.yaml is auto-generated, do not commit\n"
)


def initialize_repo(repo_root: Path, *, force: bool = False, show_up_hint: bool = True) -> bool:
    """Initialize a repository for wit, returning True on success.

    Args:
        repo_root: Path to the repository root
        force: Overwrite existing .wit directory
        show_up_hint: Show "Run 'wit up'" hint at end (False when auto-init from wit up)
    """
    wit_dir = repo_root / WIT_DIR
    console = get_console()

    if wit_dir.exists() and not force:
        status(f"Already initialized: {wit_dir}", style="info")
        status("Use --force to reinitialize", style="info")
        return False

    console.print()
    status(f"Initializing wit in {repo_root}", style="none")
    console.print()

    if force and wit_dir.exists():
        shutil.rmtree(wit_dir)

    wit_dir.mkdir(exist_ok=True)

    config_path = wit_dir / "config.yaml"
    write_user_config(config_path, UserConfig())

    db_path = wit_dir / DEFAULT_DB_FILENAME
    write_runtime_state(wit_dir / "state.yaml", RuntimeState(database_path=str(db_path)))

    gitignore_path = wit_dir / ".gitignore"
    if not gitignore_path.exists() or force:
        gitignore_path.write_text(GITIGNORE)

    product = resolve_product_name(repo_root)
    if product:
        status(f"Product: {product}", style="success")
    else:
        status("No git remote found; set product_name in .wit/config.yaml", style="warning")

    console.print()
    status(f"Config created at {config_path.relative_to(repo_root)}", style="success")

    if show_up_hint:
        console.print()
        status("Ready. Run 'wit up' to start the server.", style="none")

    return True


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--force", "-f", is_flag=True, help="Overwrite existing .wit directory")
def init_command(path: Path | None, force: bool) -> None:
    """Initialize a repository for wit.

    Creates .wit/ with a default configuration and a local SQLite
    database location.

    PATH is the repository root. If not specified, auto-detects by walking
    up from the current directory to find the git root.
    """
    from wit.cli.utils import find_repo_root

    repo_root = find_repo_root(path)

    if not initialize_repo(repo_root, force=force):
        if not force:
            return  # Already initialized, message printed
        sys.exit(1)
