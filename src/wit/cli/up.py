"""wit up command - start the server."""

import asyncio
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from uuid import uuid4

import click

from wit.cli.init import initialize_repo
from wit.cli.utils import find_repo_root
from wit.config.constants import WIT_DIR
from wit.config.loader import load_config
from wit.core.errors import ConfigError
from wit.core.progress import get_console, print_rule


def _version() -> str:
    try:
        return version("wit")
    except PackageNotFoundError:
        return "dev"


def _print_banner(host: str, port: int, repo_root: Path | None = None) -> None:
    """Print startup banner with endpoint info using Rich."""
    console = get_console()
    banner_width = 64
    base_url = f"http://{host}:{port}"

    console.print()
    print_rule(style="dim cyan", width=banner_width)
    title = f"wit v{_version()} · Ready".center(banner_width)
    console.print(title, style="bold cyan", highlight=False)
    print_rule(style="dim cyan", width=banner_width)
    console.print()

    console.print(f"  Surface:         ws://{host}:{port}/surface", style="green", highlight=False)
    console.print(f"  Health Check:    {base_url}/health", highlight=False)
    console.print(f"  Status:          {base_url}/status", highlight=False)

    if repo_root:
        console.print(f"  Repository:      {repo_root}", style="dim", highlight=False)

    console.print()


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--port", "-p", type=int, help="Override server port")
def up_command(path: Path | None, port: int | None) -> None:
    """Start the wit server for this repository.

    If already running, reports the existing instance. Runs in foreground.

    PATH is the repository root. If not specified, auto-detects by walking
    up from the current directory to find the git root.
    """
    from wit.config.models import LoggingConfig, LogOutputConfig
    from wit.core.logging import configure_logging
    from wit.daemon.lifecycle import is_server_running, read_server_info, run_server

    repo_root = find_repo_root(path)
    wit_dir = repo_root / WIT_DIR

    if is_server_running(wit_dir):
        info = read_server_info(wit_dir)
        if info:
            pid, server_port = info
            click.echo(f"Already running (PID {pid}, port {server_port})")
            return

    if not wit_dir.exists() and not initialize_repo(repo_root, show_up_hint=False):
        raise click.ClickException("Failed to initialize repository")

    try:
        config = load_config(repo_root)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    if port is not None:
        config.server.port = port

    # Format: .wit/logs/YYYY-MM-DD/HHMMSS-<6-digit-hash>.log
    now = datetime.now()
    log_dir = wit_dir / "logs" / now.strftime("%Y-%m-%d")
    log_file = log_dir / f"{now.strftime('%H%M%S')}-{uuid4().hex[:6]}.log"

    # Console at the configured level, file always DEBUG
    configure_logging(
        config=LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(destination="stderr", format="console", level=config.logging.level),
                LogOutputConfig(destination=str(log_file), format="json", level="DEBUG"),
            ],
        ),
    )

    _print_banner(config.server.host, config.server.port, repo_root)

    try:
        asyncio.run(run_server(repo_root, config))
    except KeyboardInterrupt:
        click.echo("\nStopped")
