"""Sync controller: turns editor events into published context trees.

Every event starts a resolution cycle:

    idle -> resolving -> annotating -> published

Resolving (path chain, symbol chain) is synchronous. Annotating awaits the
store, so several cycles can be suspended at once. Each cycle takes a
sequence number when it starts; a cycle that completes after a newer one
has already published is discarded, so the surface always ends on the
result of the most recently started cycle.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from wit.config.constants import DEFAULT_DESCRIPTION
from wit.context.cache import ContextTreeCache
from wit.context.host import Host, Surface
from wit.context.messages import Ready, SetLoading, UpdateDescription, UpdateTree, parse_inbound
from wit.context.models import ContextTree, Node, NodeType, resolve_description
from wit.context.paths import name_of, resolve_path_chain, symbol_chain_paths, type_of
from wit.context.session import SessionContext
from wit.context.symbols import DocumentSymbol, Position, resolve_symbol_chain
from wit.core.errors import MessageError, WitError
from wit.store.descriptions import DescriptionStore

logger = structlog.get_logger()


class SyncState(StrEnum):
    IDLE = "idle"
    RESOLVING = "resolving"
    ANNOTATING = "annotating"
    PUBLISHED = "published"
    DISABLED = "disabled"


@dataclass(frozen=True, slots=True)
class FileContext:
    """The active document and its directory chain."""

    absolute_path: Path
    chain: tuple[str, ...]

    @property
    def identity(self) -> str:
        return self.chain[-1]


class SyncController:
    """Owns the cache and the file context; the only writer of either.

    A controller built without a session (store not configured, product
    unresolvable) is disabled: it tells the user once why and then ignores
    every event.
    """

    def __init__(
        self,
        session: SessionContext | None,
        store: DescriptionStore | None,
        host: Host,
        surface: Surface,
        cache: ContextTreeCache | None = None,
        disabled_reason: WitError | None = None,
    ) -> None:
        self._session = session
        self._store = store
        self._host = host
        self._surface = surface
        self._cache = cache or ContextTreeCache()
        self._disabled_reason = disabled_reason
        self._disabled_announced = False

        self._seq = itertools.count(1)
        self._published_seq = 0
        # Cycle whose loading indicator is showing
        self._loading_seq = 0
        self._file: FileContext | None = None
        self._state = SyncState.IDLE if self.enabled else SyncState.DISABLED

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def enabled(self) -> bool:
        return self._session is not None and self._store is not None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def cache(self) -> ContextTreeCache:
        return self._cache

    @property
    def file_context(self) -> FileContext | None:
        return self._file

    @property
    def disabled_reason(self) -> WitError | None:
        return self._disabled_reason

    @property
    def default_description(self) -> str:
        if self._session is None:
            return DEFAULT_DESCRIPTION
        return self._session.default_description

    def status(self) -> dict[str, Any]:
        """Snapshot of controller state for diagnostics."""
        result: dict[str, Any] = {
            "state": self._state.value,
            "enabled": self.enabled,
            "published_seq": self._published_seq,
            "nodes": len(self._cache.snapshot()),
            "file": self._file.identity if self._file else None,
        }
        if self._session is not None:
            result["product"] = {
                "id": self._session.product.id,
                "name": self._session.product.name,
            }
        if self._disabled_reason is not None:
            result["disabled_reason"] = self._disabled_reason.to_dict()
        return result

    # =========================================================================
    # Host events
    # =========================================================================

    async def on_file_changed(self, path: str | Path) -> None:
        """Active editor switched to ``path``: publish its directory chain."""
        if not self._check_enabled():
            return
        seq = self._begin_cycle()
        with bound_contextvars(cycle=seq):
            try:
                file_ctx = self._set_file_context(Path(path))
                self._loading_seq = seq
                await self._surface.post(SetLoading(is_loading=True))
                try:
                    tree = await self._annotate(file_ctx, [], reuse_cache=False)
                    await self._finish_cycle(seq, tree)
                finally:
                    # A newer loading cycle owns the indicator now
                    if self._loading_seq == seq:
                        await self._surface.post(SetLoading(is_loading=False))
            except Exception:
                logger.exception("file_changed_failed", path=str(path))

    async def on_cursor_changed(
        self,
        path: str | Path,
        position: Position | None,
    ) -> None:
        """Selection moved: extend the tree with the symbols around ``position``.

        A cursor in another document switches the file context first.
        """
        if not self._check_enabled():
            return
        if self._file is None:
            logger.debug("cursor_ignored_no_file_context")
            return
        seq = self._begin_cycle()
        with bound_contextvars(cycle=seq):
            try:
                await self._cursor_cycle(seq, Path(path), position)
            except Exception:
                logger.exception("cursor_changed_failed", path=str(path))

    async def _cursor_cycle(
        self,
        seq: int,
        path: Path,
        position: Position | None,
    ) -> None:
        file_ctx = self._file
        if file_ctx is None or file_ctx.absolute_path != path:
            file_ctx = self._set_file_context(path)

        chain: list[DocumentSymbol] = []
        if position is not None:
            forest = await self._document_symbols(path)
            chain = resolve_symbol_chain(forest, position)

        wanted = self._shape(file_ctx, chain)
        current = self._cache.snapshot()
        focused_path = wanted[-1].path if chain else None
        current_focused = current.focused.path if current.focused else None
        if current.paths == tuple(n.path for n in wanted) and current_focused == focused_path:
            # Same context as what is shown: nothing to fetch or push
            self._published_seq = max(self._published_seq, seq)
            self._state = SyncState.PUBLISHED
            logger.debug("cycle_unchanged", seq=seq)
            return

        tree = await self._annotate(file_ctx, chain, reuse_cache=True)
        await self._finish_cycle(seq, tree)

    # =========================================================================
    # Surface events
    # =========================================================================

    async def on_surface_message(self, raw: Any) -> None:
        """Dispatch one inbound surface message; invalid ones are dropped."""
        try:
            message = parse_inbound(raw)
        except MessageError as e:
            logger.warning("surface_message_rejected", code=e.error_name, reason=e.message)
            return
        try:
            match message:
                case UpdateDescription(path=path, description=description):
                    await self.on_edit(path, description)
                case Ready():
                    await self.repaint()
        except Exception:
            logger.exception("surface_message_failed", command=message.command)

    async def on_edit(self, path: str, description: str) -> bool:
        """Persist a user edit for a node currently in context.

        On success the cache is patched without a re-push; the surface
        already shows the edited text. On failure the user is notified and
        the unpatched snapshot is pushed back.
        """
        if not self._check_enabled():
            return False
        assert self._session is not None and self._store is not None

        node = self._cache.get(path)
        if node is None:
            error = MessageError.path_not_in_context(path)
            logger.warning("edit_rejected", code=error.error_name, path=path)
            return False

        outcome = await self._store.upsert(
            self._session.product.id, node.with_description(description)
        )
        if not outcome.ok:
            reason = outcome.error.message if outcome.error else "unknown error"
            logger.error("edit_failed", path=path, error=reason)
            self._host.notify("error", f"Could not save description for {node.name}: {reason}")
            await self._publish()
            return False

        patched = self._cache.patch_description(
            path, resolve_description(description, self.default_description)
        )
        logger.info("edit_saved", path=path, patched=patched)
        return True

    async def repaint(self) -> None:
        """Push the cached tree again (panel re-shown)."""
        if not self.enabled:
            self._announce_disabled()
            return
        await self._publish()

    # =========================================================================
    # Cycle internals
    # =========================================================================

    def _check_enabled(self) -> bool:
        if self.enabled:
            return True
        self._announce_disabled()
        return False

    def _announce_disabled(self) -> None:
        if self._disabled_announced:
            return
        self._disabled_announced = True
        reason = self._disabled_reason
        message = reason.message if reason else "Description sync is disabled."
        logger.warning("sync_disabled", reason=reason.error_name if reason else None)
        self._host.notify("error", message)

    def _begin_cycle(self) -> int:
        seq = next(self._seq)
        self._state = SyncState.RESOLVING
        return seq

    def _set_file_context(self, path: Path) -> FileContext:
        assert self._session is not None
        chain = resolve_path_chain(path, self._session.workspace_root)
        self._file = FileContext(absolute_path=path, chain=tuple(chain))
        logger.debug("file_context_set", file=chain[-1], depth=len(chain))
        return self._file

    async def _document_symbols(self, path: Path) -> list[DocumentSymbol] | None:
        try:
            return await self._host.document_symbols(path)
        except Exception as e:
            logger.warning("document_symbols_failed", path=str(path), error=str(e))
            return None

    def _shape(self, file_ctx: FileContext, chain: list[DocumentSymbol]) -> list[Node]:
        """Undescribed nodes for the file chain plus the symbol chain."""
        placeholder = self.default_description
        nodes = [
            Node(name=name_of(p), path=p, type=type_of(p), description=placeholder)
            for p in file_ctx.chain
        ]
        paths = symbol_chain_paths(file_ctx.identity, [s.name for s in chain])
        for symbol, p in zip(chain, paths, strict=True):
            node_type = symbol.node_type
            if node_type is NodeType.UNKNOWN:
                node_type = type_of(p)
            nodes.append(Node(name=symbol.name, path=p, type=node_type, description=placeholder))
        return nodes

    async def _annotate(
        self,
        file_ctx: FileContext,
        chain: list[DocumentSymbol],
        *,
        reuse_cache: bool,
    ) -> ContextTree:
        """Attach stored descriptions to the shaped tree.

        With ``reuse_cache`` only paths missing from the cache are fetched.
        A failed fetch leaves the default description in place. Edits saved
        while the lookup was suspended win over both cached and fetched text.
        """
        assert self._session is not None and self._store is not None
        self._state = SyncState.ANNOTATING

        nodes = self._shape(file_ctx, chain)
        before = self._cache.descriptions()
        known = before if reuse_cache else {}
        missing = [n.path for n in nodes if n.path not in known]

        fetched: dict[str, str | None] = {}
        if missing:
            outcome = await self._store.get_many(self._session.product.id, missing)
            if outcome.ok and outcome.value is not None:
                fetched = outcome.value
            else:
                reason = outcome.error.message if outcome.error else None
                logger.warning("descriptions_unavailable", missing=len(missing), error=reason)

        # Only on_edit patches the cache between commits
        edited = {
            path: description
            for path, description in self._cache.descriptions().items()
            if before.get(path) != description
        }
        if edited:
            logger.debug("edits_during_cycle", paths=sorted(edited))

        default = self.default_description
        annotated: list[Node] = []
        for node in nodes:
            if node.path in edited:
                description = edited[node.path]
            elif node.path in known:
                description = known[node.path]
            else:
                description = resolve_description(fetched.get(node.path), default)
            annotated.append(node.with_description(description))

        focused = annotated[-1] if chain else None
        return ContextTree(nodes=tuple(annotated), focused=focused)

    async def _finish_cycle(self, seq: int, tree: ContextTree) -> None:
        if seq < self._published_seq:
            logger.info("stale_cycle_discarded", seq=seq, published_seq=self._published_seq)
            return
        self._commit(tree)
        self._published_seq = seq
        await self._publish()
        self._state = SyncState.PUBLISHED
        logger.info("cycle_published", seq=seq, nodes=len(tree))

    def _commit(self, tree: ContextTree) -> None:
        self._cache.replace(tree)

    async def _publish(self) -> None:
        await self._surface.post(UpdateTree.from_tree(self._cache.snapshot()))

