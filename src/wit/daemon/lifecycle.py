"""Daemon lifecycle management."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from dataclasses import dataclass, field
from pathlib import Path

import structlog
import uvicorn

from wit.config.constants import WIT_DIR
from wit.config.models import ServerConfig, TimeoutsConfig, WitConfig
from wit.context.controller import SyncController
from wit.context.session import SessionContext, open_session
from wit.daemon.surface import EventHost, SurfaceHub
from wit.store.descriptions import DescriptionStore

logger = structlog.get_logger()

# PID file location relative to .wit/
PID_FILE = "daemon.pid"
PORT_FILE = "daemon.port"


@dataclass
class ServerController:
    """
    Orchestrates daemon components.

    Components:
    - SurfaceHub: WebSocket fan-out to the rendering panels
    - EventHost: editor services fed by HTTP events
    - SyncController: resolution cycles, cache and publishing
    """

    repo_root: Path
    sync: SyncController
    hub: SurfaceHub
    host: EventHost
    server_config: ServerConfig = field(default_factory=ServerConfig)
    timeouts_config: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    session: SessionContext | None = None
    store: DescriptionStore | None = None

    async def start(self) -> None:
        """Log endpoints; announce a disabled engine up front."""
        logger.info("server starting", repo_root=str(self.repo_root))
        if not self.sync.enabled:
            await self.sync.repaint()

        address = f"{self.server_config.host}:{self.server_config.port}"
        base_url = f"http://{address}"
        logger.info("server started")
        logger.info("endpoint", name="surface", url=f"ws://{address}/surface")
        logger.info("endpoint", name="health", url=f"{base_url}/health")
        logger.info("endpoint", name="status", url=f"{base_url}/status")

    async def stop(self) -> None:
        """Stop all daemon components gracefully."""
        logger.info("server stopping")

        try:
            async with asyncio.timeout(self.timeouts_config.server_stop_sec):
                await self.host.drain()
                if self.store is not None:
                    await asyncio.to_thread(self.store.close)
        except TimeoutError:
            logger.warning(
                "server_stop_timeout",
                message=f"Shutdown timed out after {self.timeouts_config.server_stop_sec}s",
            )

        logger.info("server stopped")


async def bootstrap(repo_root: Path, config: WitConfig) -> ServerController:
    """Open the session and wire the controller to the daemon adapters.

    A failed session still yields a working daemon whose controller is
    disabled and reports the reason.
    """
    result = await open_session(config, repo_root)
    hub = SurfaceHub()
    host = EventHost(hub)
    sync = SyncController(
        session=result.session,
        store=result.store,
        host=host,
        surface=hub,
        disabled_reason=result.error,
    )
    if result.error is not None:
        logger.warning(
            "sync_engine_disabled",
            code=result.error.error_name,
            reason=result.error.message,
        )
    return ServerController(
        repo_root=repo_root,
        sync=sync,
        hub=hub,
        host=host,
        server_config=config.server,
        timeouts_config=config.timeouts,
        session=result.session,
        store=result.store,
    )


def write_pid_file(wit_dir: Path, port: int) -> None:
    """Write PID and port files for daemon discovery."""
    pid_path = wit_dir / PID_FILE
    port_path = wit_dir / PORT_FILE

    pid_path.write_text(str(os.getpid()))
    port_path.write_text(str(port))

    logger.debug("pid_file_written", pid_path=str(pid_path), port=port)


def remove_pid_file(wit_dir: Path) -> None:
    """Remove PID and port files on shutdown."""
    for path in (wit_dir / PID_FILE, wit_dir / PORT_FILE):
        with contextlib.suppress(FileNotFoundError):
            path.unlink()


def read_server_info(wit_dir: Path) -> tuple[int, int] | None:
    """Read daemon PID and port from files. Returns (pid, port) or None."""
    try:
        pid = int((wit_dir / PID_FILE).read_text().strip())
        port = int((wit_dir / PORT_FILE).read_text().strip())
        return (pid, port)
    except (FileNotFoundError, ValueError):
        return None


def is_server_running(wit_dir: Path) -> bool:
    """Check if daemon is running by verifying PID file and process."""
    info = read_server_info(wit_dir)
    if info is None:
        return False

    pid, _ = info

    try:
        os.kill(pid, 0)
        return True
    except (OSError, ProcessLookupError):
        # Process doesn't exist - clean up stale files
        remove_pid_file(wit_dir)
        return False


async def run_server(repo_root: Path, config: WitConfig) -> None:
    """Run the daemon until shutdown signal."""
    from wit.daemon.app import create_app

    controller = await bootstrap(repo_root, config)
    app = create_app(controller)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",  # Use structlog instead
        ws="auto",
    )
    server = uvicorn.Server(uvicorn_config)

    wit_dir = repo_root / WIT_DIR
    write_pid_file(wit_dir, config.server.port)

    # Setup signal handlers with force exit on second signal
    loop = asyncio.get_running_loop()
    shutdown_count = 0
    force_exit_task: asyncio.Task[None] | None = None

    async def force_exit_after_timeout() -> None:
        """Force exit if graceful shutdown takes too long."""
        await asyncio.sleep(config.timeouts.force_exit_sec)
        logger.info("forcing_exit_after_timeout")
        server.force_exit = True

    def signal_handler() -> None:
        nonlocal shutdown_count, force_exit_task
        shutdown_count += 1
        logger.info("shutdown_signal_received", count=shutdown_count)
        server.should_exit = True
        if shutdown_count == 1:
            force_exit_task = loop.create_task(force_exit_after_timeout())
        else:
            # Second signal - force immediate exit
            server.force_exit = True
            if force_exit_task:
                force_exit_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await controller.start()
        await server.serve()
    finally:
        await controller.stop()
        remove_pid_file(wit_dir)


def stop_daemon(wit_dir: Path) -> bool:
    """Stop a running daemon by sending SIGTERM. Returns True if stopped."""
    info = read_server_info(wit_dir)
    if info is None:
        return False

    pid, _ = info

    try:
        os.kill(pid, signal.SIGTERM)
        logger.info("daemon_stop_signal_sent", pid=pid)
        return True
    except (OSError, ProcessLookupError):
        remove_pid_file(wit_dir)
        return False
