"""HTTP middleware for request validation."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from wit.config.constants import WORKSPACE_HEADER
from wit.core.logging import clear_request_id, set_request_id

# Type alias for the call_next function
CallNext = Callable[[Request], Awaitable[Response]]


class WorkspaceValidationMiddleware(BaseHTTPMiddleware):
    """Validate the X-Wit-Workspace header on all HTTP requests.

    The header keeps an editor attached to one workspace from driving a
    daemon started for another. WebSocket traffic bypasses HTTP middleware.
    """

    def __init__(self, app: Any, workspace_root: Path) -> None:
        super().__init__(app)
        self.workspace_root = workspace_root.resolve()

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        """Validate workspace header and dispatch request."""
        # Skip validation for health endpoint
        if request.url.path == "/health":
            return await call_next(request)

        header = request.headers.get(WORKSPACE_HEADER)

        if header is None:
            return JSONResponse(
                {
                    "code": 4101,
                    "error": "WORKSPACE_HEADER_MISSING",
                    "message": f"Missing required header: {WORKSPACE_HEADER}",
                },
                status_code=400,
            )

        received_path = Path(header).resolve()
        if received_path != self.workspace_root:
            return JSONResponse(
                {
                    "code": 4102,
                    "error": "WORKSPACE_MISMATCH",
                    "message": "Workspace path mismatch",
                    "expected": str(self.workspace_root),
                    "received": str(received_path),
                },
                status_code=400,
            )

        request_id = set_request_id(request.headers.get("X-Request-Id"))
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers["X-Request-Id"] = request_id
        return response
