"""Context tree resolution: paths, symbols, cache and surface messages.

The controller and session modules are imported directly
(``wit.context.controller``, ``wit.context.session``) since they depend on
the store.
"""

from wit.context.cache import ContextTreeCache
from wit.context.host import Host, Surface
from wit.context.messages import (
    Notify,
    Ready,
    SetLoading,
    UpdateDescription,
    UpdateTree,
    parse_inbound,
)
from wit.context.models import ContextTree, Node, NodeType, Outcome, resolve_description
from wit.context.paths import parent_of, resolve_path_chain
from wit.context.symbols import DocumentSymbol, Position, Range, resolve_symbol_chain

__all__ = [
    "ContextTree",
    "ContextTreeCache",
    "DocumentSymbol",
    "Host",
    "Node",
    "NodeType",
    "Notify",
    "Outcome",
    "Position",
    "Range",
    "Ready",
    "SetLoading",
    "Surface",
    "UpdateDescription",
    "UpdateTree",
    "parent_of",
    "parse_inbound",
    "resolve_description",
    "resolve_path_chain",
    "resolve_symbol_chain",
]
