"""HTTP and WebSocket routes for the wit daemon.

Editor events arrive as JSON posts; the panel talks over ``/surface``.
"""

from __future__ import annotations

import importlib.metadata
import json
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, Field, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import BaseRoute, Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from wit.context.messages import Notify, TreePayload, UpdateTree
from wit.context.symbols import Position
from wit.core.errors import MessageError, StoreError, WitError

if TYPE_CHECKING:
    from wit.daemon.lifecycle import ServerController

logger = structlog.get_logger()


class PositionBody(BaseModel):
    line: int = Field(ge=0)
    character: int = Field(default=0, ge=0)


class ActiveEditorEvent(BaseModel):
    path: str = Field(min_length=1)


class SelectionEvent(BaseModel):
    path: str = Field(min_length=1)
    position: PositionBody | None = None
    # Raw host forest; parsed leniently so bad symbols only cost depth
    symbols: list[Any] | None = None


def _get_version() -> str:
    """Get package version from installed metadata."""
    try:
        return importlib.metadata.version("wit")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _get_runtime_info() -> dict[str, Any]:
    """Get Python runtime information."""
    return {
        "python_version": sys.version.split()[0],
        "pid": os.getpid(),
    }


def _get_db_info(controller: ServerController) -> dict[str, Any]:
    store = controller.store
    if store is None:
        return {"connected": False}
    db = store.database
    info: dict[str, Any] = {"connected": True, "backend": db.backend}
    if db.backend == "sqlite" and db.engine.url.database:
        db_path = Path(db.engine.url.database)
        info["exists"] = db_path.exists()
        if db_path.exists():
            info["size_bytes"] = db_path.stat().st_size
    return info


def _error_response(error: WitError, status_code: int) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=status_code)


async def _read_event[M: BaseModel](request: Request, model: type[M]) -> M:
    """Parse a JSON body into ``model``.

    Raises:
        MessageError: If the body is not JSON or fails validation.
    """
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise MessageError.invalid(f"body is not JSON: {e.msg}") from e
    try:
        return model.model_validate(body)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"]) or "body"
        raise MessageError.invalid(f"{field}: {err['msg']}") from e


def create_routes(controller: ServerController) -> list[BaseRoute]:
    """Create HTTP and WebSocket routes bound to the daemon controller."""
    start_time = time.time()
    version = _get_version()
    sync = controller.sync

    def _absolute(path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = controller.repo_root / candidate
        return candidate

    async def health(request: Request) -> JSONResponse:
        """Health check endpoint.

        Returns a quick status suitable for liveness probes.
        For detailed diagnostics, use /status instead.
        """
        _ = request  # unused
        return JSONResponse(
            {
                "status": "healthy",
                "repo_root": str(controller.repo_root),
                "version": version,
                "uptime_seconds": round(time.time() - start_time, 1),
            }
        )

    async def status(request: Request) -> JSONResponse:
        """Detailed status endpoint with comprehensive diagnostics."""
        _ = request  # unused
        return JSONResponse(
            {
                "repo_root": str(controller.repo_root),
                "version": version,
                "uptime_seconds": round(time.time() - start_time, 1),
                "runtime": _get_runtime_info(),
                "sync": sync.status(),
                "surface": {"connections": controller.hub.connections},
                "database": _get_db_info(controller),
            }
        )

    async def tree(request: Request) -> JSONResponse:
        _ = request  # unused
        return JSONResponse(TreePayload.from_tree(sync.cache.snapshot()).model_dump(mode="json"))

    async def items(request: Request) -> JSONResponse:
        """Stored items directly below ?parent= (top level when omitted)."""
        if controller.session is None or controller.store is None:
            return _error_response(StoreError.not_configured(), 503)
        parent = request.query_params.get("parent") or None
        outcome = await controller.store.children_of(controller.session.product.id, parent)
        if outcome.error is not None:
            return _error_response(outcome.error, 503)
        return JSONResponse(
            {
                "parent": parent,
                "items": [
                    {
                        "path": item.item_path,
                        "name": item.item_name,
                        "type": item.item_type,
                        "description": item.description,
                    }
                    for item in outcome.value or []
                ],
            }
        )

    async def active_editor(request: Request) -> JSONResponse:
        try:
            event = await _read_event(request, ActiveEditorEvent)
        except MessageError as e:
            return _error_response(e, 400)
        path = _absolute(event.path)
        controller.host.forget(path)
        await sync.on_file_changed(path)
        return JSONResponse({"accepted": True, "state": sync.state.value})

    async def selection(request: Request) -> JSONResponse:
        try:
            event = await _read_event(request, SelectionEvent)
        except MessageError as e:
            return _error_response(e, 400)
        path = _absolute(event.path)
        if event.symbols is not None:
            controller.host.remember_symbols(path, event.symbols)
        position = (
            Position(line=event.position.line, character=event.position.character)
            if event.position is not None
            else None
        )
        await sync.on_cursor_changed(path, position)
        return JSONResponse({"accepted": True, "state": sync.state.value})

    async def surface(websocket: WebSocket) -> None:
        await websocket.accept()
        controller.hub.add(websocket)
        try:
            await controller.hub.send(websocket, UpdateTree.from_tree(sync.cache.snapshot()))
            reason = sync.disabled_reason
            if reason is not None:
                await controller.hub.send(websocket, Notify(level="error", message=reason.message))
            while True:
                text = await websocket.receive_text()
                try:
                    raw = json.loads(text)
                except json.JSONDecodeError as e:
                    logger.warning("surface_message_not_json", error=e.msg)
                    continue
                await sync.on_surface_message(raw)
        except WebSocketDisconnect:
            pass
        finally:
            controller.hub.remove(websocket)

    return [
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
        Route("/tree", tree, methods=["GET"]),
        Route("/items", items, methods=["GET"]),
        Route("/events/active-editor", active_editor, methods=["POST"]),
        Route("/events/selection", selection, methods=["POST"]),
        WebSocketRoute("/surface", surface),
    ]
