"""Host and surface adapters for the daemon.

The editor extension reports events over HTTP and renders the panel from a
WebSocket. ``SurfaceHub`` fans outbound messages out to every connected
panel; ``EventHost`` answers the controller's host queries from the data
the extension sent along with its events.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog
from starlette.websockets import WebSocket, WebSocketState

from wit.context.messages import Notify, NotifyLevel, SetLoading, UpdateTree
from wit.context.symbols import DocumentSymbol, parse_symbol_forest

logger = structlog.get_logger()


class SurfaceHub:
    """Broadcasts outbound messages to connected panels."""

    def __init__(self) -> None:
        self._sockets: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def connections(self) -> int:
        return len(self._sockets)

    def add(self, websocket: WebSocket) -> None:
        self._sockets.add(websocket)
        logger.info("surface_connected", connections=len(self._sockets))

    def remove(self, websocket: WebSocket) -> None:
        self._sockets.discard(websocket)
        logger.info("surface_disconnected", connections=len(self._sockets))

    async def send(self, websocket: WebSocket, message: UpdateTree | SetLoading | Notify) -> None:
        """Send to one panel, e.g. the snapshot for a new connection."""
        await websocket.send_json(message.to_wire())

    async def post(self, message: UpdateTree | SetLoading | Notify) -> None:
        payload = message.to_wire()
        # Serialized so panels see messages in publish order
        async with self._lock:
            dead: list[WebSocket] = []
            for websocket in list(self._sockets):
                if websocket.application_state != WebSocketState.CONNECTED:
                    dead.append(websocket)
                    continue
                try:
                    await websocket.send_json(payload)
                except (RuntimeError, OSError) as e:
                    logger.debug("surface_send_failed", error=str(e))
                    dead.append(websocket)
            for websocket in dead:
                self._sockets.discard(websocket)
        logger.debug("surface_posted", command=payload["command"], connections=len(self._sockets))


class EventHost:
    """Host backed by the symbol forests delivered with selection events."""

    def __init__(self, hub: SurfaceHub) -> None:
        self._hub = hub
        self._symbols: dict[Path, list[DocumentSymbol] | None] = {}
        self._pending: set[asyncio.Task[None]] = set()

    def remember_symbols(self, path: Path, raw: Any) -> None:
        """Store the forest the extension sent for ``path``.

        Malformed forests are stored as None so the cursor resolves no
        deeper than the file.
        """
        self._symbols[path] = parse_symbol_forest(raw)

    def forget(self, path: Path) -> None:
        self._symbols.pop(path, None)

    async def document_symbols(self, path: Path) -> list[DocumentSymbol] | None:
        return self._symbols.get(path)

    def notify(self, level: NotifyLevel, message: str) -> None:
        """Forward a notification to the panels without blocking the caller."""
        log = logger.error if level == "error" else logger.info
        log("user_notified", level=level, message=message)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._hub.post(Notify(level=level, message=message)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for notifications still being sent."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
