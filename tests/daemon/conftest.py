"""Shared fixtures for daemon tests: a real app over a temp SQLite store."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from starlette.testclient import TestClient

from wit.config.constants import WORKSPACE_HEADER
from wit.config.models import DatabaseConfig, ProductConfig, WitConfig
from wit.daemon.app import create_app
from wit.daemon.lifecycle import ServerController, bootstrap

APP_SOURCE = """\
class Widget:
    def render(self):
        return "<widget>"


def helper():
    return 1
"""

# Host symbol forest for APP_SOURCE, in the editor's JSON shape
APP_SYMBOLS = [
    {
        "name": "Widget",
        "kind": "class",
        "range": {"start": {"line": 0, "character": 0}, "end": {"line": 2, "character": 25}},
        "children": [
            {
                "name": "render",
                "kind": "method",
                "range": {
                    "start": {"line": 1, "character": 4},
                    "end": {"line": 2, "character": 25},
                },
            }
        ],
    },
    {
        "name": "helper",
        "kind": "function",
        "range": {"start": {"line": 5, "character": 0}, "end": {"line": 6, "character": 12}},
    },
]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = (tmp_path / "repo").resolve()
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.py").write_text(APP_SOURCE)
    return root


@pytest.fixture
def make_controller(tmp_path: Path, workspace: Path) -> Iterator[Callable[..., ServerController]]:
    """Build a bootstrapped controller; ``configured=False`` leaves the store unset."""
    built: list[ServerController] = []

    def _make(*, configured: bool = True) -> ServerController:
        config = WitConfig(product=ProductConfig(name="widgets"))
        if configured:
            config = config.model_copy(
                update={"database": DatabaseConfig(path=str(tmp_path / "wit.db"))}
            )
        # Run on a worker thread so the factory also works inside a running loop
        with ThreadPoolExecutor(max_workers=1) as pool:
            controller = pool.submit(asyncio.run, bootstrap(workspace, config)).result()
        built.append(controller)
        return controller

    yield _make

    for controller in built:
        if controller.store is not None:
            controller.store.close()


@pytest.fixture
def controller(make_controller: Callable[..., ServerController]) -> ServerController:
    return make_controller()


@pytest.fixture
def client(controller: ServerController) -> Iterator[TestClient]:
    app = create_app(controller)
    with TestClient(app, headers={WORKSPACE_HEADER: str(controller.repo_root)}) as test_client:
        yield test_client


@pytest.fixture
def app_symbols() -> list[dict]:
    return APP_SYMBOLS
