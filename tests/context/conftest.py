"""Shared fixtures for context tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from wit.context.symbols import DocumentSymbol, Position, Range

SymbolFactory = Callable[..., DocumentSymbol]


@pytest.fixture
def sym() -> SymbolFactory:
    """Builder for symbols spanning whole lines ``start``..``end``."""

    def _build(
        name: str,
        start: int,
        end: int,
        *children: DocumentSymbol,
        kind: str | int | None = "function",
    ) -> DocumentSymbol:
        return DocumentSymbol(
            name=name,
            kind=kind,
            range=Range(Position(start, 0), Position(end, 200)),
            children=tuple(children),
        )

    return _build
