"""Session context: everything resolved once at startup.

The session is an explicit value handed to the controller instead of
process-wide globals. ``open_session`` performs the startup sequence and
reports why the engine must stay disabled when any step fails.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

import structlog

from wit.config.models import WitConfig
from wit.core.errors import ProductError, StoreError, WitError
from wit.git.identity import resolve_product_name
from wit.store.database import Database
from wit.store.descriptions import DescriptionStore

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ProductRef:
    """Product id/name pair. The id never changes within a session."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Immutable per-session state threaded through the engine."""

    workspace_root: Path
    product: ProductRef
    default_description: str


@dataclass(frozen=True, slots=True)
class SessionResult:
    """Outcome of startup: a ready session + store, or the reason it is disabled."""

    session: SessionContext | None = None
    store: DescriptionStore | None = None
    error: WitError | None = None

    @property
    def ok(self) -> bool:
        return self.session is not None and self.store is not None


async def open_session(config: WitConfig, workspace_root: Path) -> SessionResult:
    """Connect the store, resolve the product, and build the session.

    Never raises; failures come back as ``SessionResult.error``:
    STORE_NOT_CONFIGURED / STORE_UNAVAILABLE when the database cannot be
    used, PRODUCT_NOT_FOUND when no product name can be determined.
    """
    workspace_root = workspace_root.resolve()

    try:
        db = Database.from_config(config.database)
    except StoreError as e:
        logger.error("store_not_configured")
        return SessionResult(error=e)

    try:
        await asyncio.to_thread(db.prepare)
    except StoreError as e:
        logger.error("store_unavailable", error=e.message)
        db.dispose()
        return SessionResult(error=e)

    name = config.product.name or await asyncio.to_thread(resolve_product_name, workspace_root)
    if not name:
        db.dispose()
        return SessionResult(error=ProductError.not_found(str(workspace_root)))

    store = DescriptionStore(db)
    outcome = await store.ensure_product(name)
    if not outcome.ok or outcome.value is None:
        store.close()
        error = outcome.error or StoreError.query_failed("ensure_product", "no product id")
        return SessionResult(error=error)

    session = SessionContext(
        workspace_root=workspace_root,
        product=ProductRef(id=outcome.value, name=name),
        default_description=config.descriptions.default_text,
    )
    logger.info(
        "session_opened",
        product=name,
        product_id=outcome.value,
        workspace_root=str(workspace_root),
    )
    return SessionResult(session=session, store=store)
