"""wit daemon - HTTP event intake and WebSocket surface for the sync controller."""

from wit.daemon.app import create_app
from wit.daemon.lifecycle import ServerController, bootstrap, run_server
from wit.daemon.surface import EventHost, SurfaceHub

__all__ = [
    "EventHost",
    "ServerController",
    "SurfaceHub",
    "bootstrap",
    "create_app",
    "run_server",
]
