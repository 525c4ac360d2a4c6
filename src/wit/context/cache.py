"""In-memory holder of the last resolved context tree."""

from __future__ import annotations

import structlog

from wit.context.models import ContextTree, Node

logger = structlog.get_logger()


class ContextTreeCache:
    """Last fully annotated tree; repaints come from here without a store trip.

    Only the sync controller mutates the cache. Paths are unique within the
    held tree.
    """

    def __init__(self) -> None:
        self._tree = ContextTree()

    def replace(self, tree: ContextTree) -> None:
        """Swap in a freshly resolved tree, dropping repeated paths."""
        seen: set[str] = set()
        unique: list[Node] = []
        for node in tree.nodes:
            if node.path in seen:
                logger.warning("duplicate_node_dropped", path=node.path)
                continue
            seen.add(node.path)
            unique.append(node)
        if len(unique) != len(tree.nodes):
            tree = tree.model_copy(update={"nodes": tuple(unique)})
        self._tree = tree

    def patch_description(self, path: str, description: str) -> int:
        """Update every node at ``path``; returns how many were changed."""
        patched = 0
        nodes: list[Node] = []
        for node in self._tree.nodes:
            if node.path == path:
                node = node.with_description(description)
                patched += 1
            nodes.append(node)

        focused = self._tree.focused
        if focused is not None and focused.path == path:
            focused = focused.with_description(description)
            patched += 1

        if patched:
            self._tree = ContextTree(nodes=tuple(nodes), focused=focused)
        return patched

    def snapshot(self) -> ContextTree:
        """Current tree. Nodes are immutable, so sharing is safe."""
        return self._tree

    def get(self, path: str) -> Node | None:
        return self._tree.find(path)

    def descriptions(self) -> dict[str, str]:
        """Description by path for every held node."""
        return {node.path: node.description for node in self._tree.nodes}

    def clear(self) -> None:
        self._tree = ContextTree()
