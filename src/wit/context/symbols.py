"""Symbol hierarchy resolution for a cursor position.

The host's symbol provider returns a forest of range-annotated symbols.
``resolve_symbol_chain`` walks it from the top level down and returns every
symbol enclosing the cursor, outermost first.

Ranges at one level are expected not to overlap. When the host breaks that,
the first matching sibling in document order wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import structlog

from wit.config.constants import MAX_SYMBOL_DEPTH
from wit.context.models import NodeType

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based line/character position in a document."""

    line: int
    character: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Position:
        return cls(line=int(data["line"]), character=int(data.get("character", 0)))


@dataclass(frozen=True, slots=True)
class Range:
    """Document range; both ends are inclusive, as in the editor."""

    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Range:
        return cls(start=Position.from_dict(data["start"]), end=Position.from_dict(data["end"]))


@runtime_checkable
class Symbol(Protocol):
    """What the resolver needs from a host symbol."""

    @property
    def name(self) -> str: ...

    @property
    def children(self) -> Sequence[Symbol]: ...

    def contains(self, position: Position) -> bool: ...


# Editor SymbolKind numbering (0-based) for hosts that send integers.
_SYMBOL_KIND_NAMES = (
    "file",
    "module",
    "namespace",
    "package",
    "class",
    "method",
    "property",
    "field",
    "constructor",
    "enum",
    "interface",
    "function",
    "variable",
    "constant",
    "string",
    "number",
    "boolean",
    "array",
    "object",
    "key",
    "null",
    "enummember",
    "struct",
    "event",
    "operator",
    "typeparameter",
)

_KIND_TO_NODE_TYPE: dict[str, NodeType] = {
    "class": NodeType.CLASS,
    "interface": NodeType.CLASS,
    "struct": NodeType.STRUCT,
    "method": NodeType.FUNCTION,
    "function": NodeType.FUNCTION,
    "constructor": NodeType.FUNCTION,
    "operator": NodeType.FUNCTION,
    "variable": NodeType.VARIABLE,
    "constant": NodeType.VARIABLE,
    "field": NodeType.FIELD,
    "property": NodeType.FIELD,
    "enum": NodeType.ENUM,
    "enummember": NodeType.ENUM_MEMBER,
    "namespace": NodeType.NAMESPACE,
    "module": NodeType.NAMESPACE,
    "package": NodeType.NAMESPACE,
}


def node_type_for_kind(kind: str | int | None) -> NodeType:
    """Map a host symbol kind (name or editor number) onto NodeType."""
    if kind is None:
        return NodeType.UNKNOWN
    if isinstance(kind, int):
        if not 0 <= kind < len(_SYMBOL_KIND_NAMES):
            return NodeType.UNKNOWN
        key = _SYMBOL_KIND_NAMES[kind]
    else:
        key = kind.replace("_", "").replace("-", "").lower()
    return _KIND_TO_NODE_TYPE.get(key, NodeType.UNKNOWN)


@dataclass(frozen=True, slots=True)
class DocumentSymbol:
    """Host symbol with its full range and nested children."""

    name: str
    kind: str | int | None
    range: Range
    children: tuple[DocumentSymbol, ...] = field(default_factory=tuple)

    def contains(self, position: Position) -> bool:
        return self.range.contains(position)

    @property
    def node_type(self) -> NodeType:
        return node_type_for_kind(self.kind)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocumentSymbol:
        """Parse the host's JSON shape.

        Raises:
            KeyError, TypeError, ValueError: On malformed input.
        """
        return cls(
            name=str(data["name"]),
            kind=data.get("kind"),
            range=Range.from_dict(data["range"]),
            children=tuple(cls.from_dict(child) for child in data.get("children") or ()),
        )


def parse_symbol_forest(raw: Iterable[Mapping[str, Any]] | None) -> list[DocumentSymbol] | None:
    """Parse a host symbol forest, or None if it is absent or malformed."""
    if raw is None:
        return None
    try:
        return [DocumentSymbol.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("symbol_forest_malformed", error=str(e))
        return None


def resolve_symbol_chain[S: Symbol](forest: Sequence[S] | None, position: Position) -> list[S]:
    """Return the symbols enclosing ``position``, outermost first.

    Descends at most MAX_SYMBOL_DEPTH levels. An absent forest or a position
    outside every top-level symbol yields an empty chain.
    """
    chain: list[S] = []
    level: Sequence[S] = forest or ()
    while level and len(chain) < MAX_SYMBOL_DEPTH:
        match = next((symbol for symbol in level if symbol.contains(position)), None)
        if match is None:
            break
        chain.append(match)
        level = match.children  # type: ignore[assignment]
    if len(chain) == MAX_SYMBOL_DEPTH:
        logger.debug("symbol_depth_limit_reached", depth=MAX_SYMBOL_DEPTH)
    return chain


def deepest_symbol[S: Symbol](forest: Sequence[S] | None, position: Position) -> S | None:
    """Innermost symbol enclosing ``position``."""
    chain = resolve_symbol_chain(forest, position)
    return chain[-1] if chain else None
