"""Boundary protocols for the editor host and the rendering surface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from wit.context.messages import Notify, NotifyLevel, SetLoading, UpdateTree
from wit.context.symbols import DocumentSymbol


class Host(Protocol):
    """Editor services the controller consumes."""

    async def document_symbols(self, path: Path) -> list[DocumentSymbol] | None:
        """Symbol forest of a document, or None when the provider has none."""
        ...

    def notify(self, level: NotifyLevel, message: str) -> None:
        """Show a user-visible notification."""
        ...


class Surface(Protocol):
    """Rendering surface fed by outbound messages."""

    async def post(self, message: UpdateTree | SetLoading | Notify) -> None: ...
