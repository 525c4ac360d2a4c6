"""Context tree data model.

A context tree is the breadcrumb from the product root to the user's
current location: ancestor folders, the active file, then the symbols
enclosing the cursor from outermost to innermost. Nodes are immutable;
description updates produce copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from wit.core.errors import WitError


class NodeType(StrEnum):
    """Closed set of node kinds shown in the context tree."""

    FOLDER = "folder"
    FILE = "file"
    CLASS = "class"
    STRUCT = "struct"
    FUNCTION = "function"
    VARIABLE = "variable"
    ENUM = "enum"
    ENUM_MEMBER = "enumMember"
    NAMESPACE = "namespace"
    FIELD = "field"
    UNKNOWN = "unknown"


class Node(BaseModel):
    """One breadcrumb entry, keyed by its path identity."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    type: NodeType
    description: str

    def with_description(self, description: str) -> Node:
        return self.model_copy(update={"description": description})


class ContextTree(BaseModel):
    """Root-to-leaf node sequence plus the focused (innermost symbol) node."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    focused: Node | None = None

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(node.path for node in self.nodes)

    def find(self, path: str) -> Node | None:
        for node in self.nodes:
            if node.path == path:
                return node
        if self.focused is not None and self.focused.path == path:
            return self.focused
        return None

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass(frozen=True, slots=True)
class Outcome[T]:
    """Success/failure result of a store or resolver operation.

    Public store operations return an Outcome instead of raising so the
    controller handles every failure explicitly.
    """

    value: T | None = None
    error: WitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: WitError) -> Outcome[T]:
        return cls(error=error)


def resolve_description(stored: str | None, default: str) -> str:
    """Apply the placeholder for never-annotated (or blanked) items."""
    return stored if stored else default
