"""Tests for daemon/middleware.py module.

Covers:
- WORKSPACE_HEADER constant
- WorkspaceValidationMiddleware class
"""

from __future__ import annotations

from pathlib import Path

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from wit.config.constants import WORKSPACE_HEADER
from wit.core.logging import get_request_id
from wit.daemon.middleware import WorkspaceValidationMiddleware


def test_header_name() -> None:
    assert WORKSPACE_HEADER == "X-Wit-Workspace"


class TestWorkspaceValidationMiddleware:
    """Tests for WorkspaceValidationMiddleware class."""

    @pytest.fixture
    def client(self, tmp_path: Path) -> TestClient:
        async def echo(request: Request) -> JSONResponse:
            _ = request
            return JSONResponse({"request_id": get_request_id()})

        app = Starlette(routes=[Route("/health", echo), Route("/status", echo)])
        app.add_middleware(WorkspaceValidationMiddleware, workspace_root=tmp_path)
        return TestClient(app)

    def test_init_resolves_path(self, tmp_path: Path) -> None:
        middleware = WorkspaceValidationMiddleware(Starlette(), tmp_path / "sub" / "..")

        assert middleware.workspace_root == tmp_path.resolve()

    def test_health_skips_validation(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200

    def test_missing_header_rejected(self, client: TestClient) -> None:
        # When
        response = client.get("/status")

        # Then
        assert response.status_code == 400
        data = response.json()
        assert data["code"] == 4101
        assert data["error"] == "WORKSPACE_HEADER_MISSING"

    def test_mismatched_header_rejected(self, client: TestClient, tmp_path: Path) -> None:
        # Given
        other = tmp_path / "other"

        # When
        response = client.get("/status", headers={WORKSPACE_HEADER: str(other)})

        # Then
        assert response.status_code == 400
        data = response.json()
        assert data["code"] == 4102
        assert data["error"] == "WORKSPACE_MISMATCH"
        assert data["expected"] == str(tmp_path.resolve())
        assert data["received"] == str(other.resolve())

    def test_matching_header_passes_with_request_id(
        self, client: TestClient, tmp_path: Path
    ) -> None:
        response = client.get("/status", headers={WORKSPACE_HEADER: str(tmp_path)})

        assert response.status_code == 200
        request_id = response.headers["X-Request-Id"]
        assert len(request_id) == 12
        assert response.json()["request_id"] == request_id

    def test_client_request_id_is_echoed(self, client: TestClient, tmp_path: Path) -> None:
        response = client.get(
            "/status",
            headers={WORKSPACE_HEADER: str(tmp_path), "X-Request-Id": "abc-123"},
        )

        assert response.headers["X-Request-Id"] == "abc-123"
        assert response.json()["request_id"] == "abc-123"
