"""wit status command - show daemon status."""

import json
from pathlib import Path

import click
import httpx

from wit.cli.utils import find_repo_root
from wit.config.constants import WIT_DIR, WORKSPACE_HEADER
from wit.daemon.lifecycle import is_server_running, read_server_info


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status_command(path: Path | None, as_json: bool) -> None:
    """Show wit daemon status.

    PATH is the repository root. If not specified, auto-detects by walking
    up from the current directory to find the git root.
    """
    repo_root = find_repo_root(path)

    wit_dir = repo_root / WIT_DIR
    if not wit_dir.exists():
        if as_json:
            click.echo(json.dumps({"initialized": False}))
        else:
            click.echo("Repository not initialized. Run 'wit init' first.")
        return

    info = read_server_info(wit_dir) if is_server_running(wit_dir) else None
    if info is None:
        if as_json:
            click.echo(json.dumps({"initialized": True, "running": False}))
        else:
            click.echo("Daemon: not running")
            click.echo(f"Repository: {repo_root}")
        return

    pid, port = info

    try:
        response = httpx.get(
            f"http://127.0.0.1:{port}/status",
            headers={WORKSPACE_HEADER: str(repo_root)},
            timeout=5.0,
        )
        status_data = response.json()
    except (httpx.RequestError, json.JSONDecodeError) as e:
        if as_json:
            click.echo(
                json.dumps(
                    {
                        "initialized": True,
                        "running": True,
                        "pid": pid,
                        "port": port,
                        "error": str(e),
                    }
                )
            )
        else:
            click.echo(f"Daemon: running (PID {pid}, port {port})")
            click.echo(f"Status: unavailable ({e})")
        return

    if as_json:
        payload = {"initialized": True, "running": True, "pid": pid, "port": port, **status_data}
        click.echo(json.dumps(payload))
        return

    click.echo(f"Daemon: running (PID {pid}, port {port})")
    click.echo(f"Repository: {repo_root}")

    sync = status_data.get("sync", {})
    click.echo(f"Sync: {sync.get('state', 'unknown')}")
    product = sync.get("product")
    if product:
        click.echo(f"  Product: {product['name']} (id {product['id']})")
    if sync.get("file"):
        click.echo(f"  File: {sync['file']}")
    reason = sync.get("disabled_reason")
    if reason:
        click.echo(f"  Disabled: {reason.get('message')}")

    database = status_data.get("database", {})
    if database.get("connected"):
        click.echo(f"Database: {database.get('backend', 'unknown')}")
    else:
        click.echo("Database: not connected")

    surface = status_data.get("surface", {})
    click.echo(f"Panels: {surface.get('connections', 0)} connected")
