"""Starlette application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starlette.applications import Starlette

from wit.daemon.middleware import WorkspaceValidationMiddleware
from wit.daemon.routes import create_routes

if TYPE_CHECKING:
    from wit.daemon.lifecycle import ServerController


def create_app(controller: ServerController) -> Starlette:
    """Create the Starlette application bound to ``controller``."""

    @asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        yield
        # Controller stop is handled in run_server finally block
        # to ensure it runs even if lifespan exit times out

    app = Starlette(routes=create_routes(controller), lifespan=lifespan)
    app.add_middleware(WorkspaceValidationMiddleware, workspace_root=controller.repo_root)
    return app
