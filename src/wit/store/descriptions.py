"""Description store: the persistence gateway for the context engine.

All public operations are coroutines that return an ``Outcome`` and never
raise. Blocking SQLAlchemy work runs on a single worker thread owned by the
store, so database access is serialized and no caller holds a connection
across an ``await``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Collection
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from wit.context.models import Node, Outcome
from wit.context.paths import parent_of
from wit.core.errors import StoreError
from wit.store.models import FsItem, Product

if TYPE_CHECKING:
    from wit.store.database import Database

logger = structlog.get_logger()

_UPSERT_SQL = text(
    """
    INSERT INTO fs_items (product_id, item_path, item_type, item_name, description, parent_path)
    VALUES (:product_id, :item_path, :item_type, :item_name, :description, :parent_path)
    ON CONFLICT (product_id, item_path)
    DO UPDATE SET
        description = excluded.description,
        updated_at = CURRENT_TIMESTAMP
    """
)

_INSERT_PRODUCT_SQL = text(
    """
    INSERT INTO products (product_name)
    VALUES (:product_name)
    ON CONFLICT (product_name) DO NOTHING
    """
)


class DescriptionStore:
    """Bulk lookup and single-item upsert of descriptions by (product, path)."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="wit-store")

    @property
    def database(self) -> Database:
        return self._db

    async def _run[T](self, operation: str, fn: Callable[[], T]) -> Outcome[T]:
        loop = asyncio.get_running_loop()
        try:
            value = await loop.run_in_executor(self._executor, fn)
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation=operation, error=str(e))
            return Outcome.failure(StoreError.query_failed(operation, str(e)))
        return Outcome.success(value)

    # =========================================================================
    # Products
    # =========================================================================

    async def ensure_product(self, name: str) -> Outcome[int]:
        """Return the id of ``name``, creating the product on first sight."""

        def _ensure() -> int:
            self._db.run_write(
                lambda session: session.execute(_INSERT_PRODUCT_SQL, {"product_name": name})
            )
            with self._db.session() as session:
                product_id = session.exec(
                    select(Product.product_id).where(Product.product_name == name)
                ).one()
            return int(product_id)  # type: ignore[arg-type]

        outcome = await self._run("ensure_product", _ensure)
        if outcome.ok:
            logger.info("product_resolved", product=name, product_id=outcome.value)
        return outcome

    # =========================================================================
    # Descriptions
    # =========================================================================

    async def get_many(
        self, product_id: int, paths: Collection[str]
    ) -> Outcome[dict[str, str | None]]:
        """Look up descriptions for ``paths``.

        Paths without a row are simply missing from the mapping; a row with
        a NULL description maps to None. An empty request never reaches the
        database.
        """
        wanted = sorted(set(paths))
        if not wanted:
            return Outcome.success({})

        def _query() -> dict[str, str | None]:
            with self._db.session() as session:
                rows = session.exec(
                    select(FsItem.item_path, FsItem.description).where(
                        FsItem.product_id == product_id,
                        col(FsItem.item_path).in_(wanted),
                    )
                ).all()
            return {item_path: description for item_path, description in rows}

        outcome = await self._run("get_many", _query)
        if outcome.ok and outcome.value is not None:
            logger.debug(
                "descriptions_fetched",
                product_id=product_id,
                requested=len(wanted),
                found=len(outcome.value),
            )
        return outcome

    async def upsert(self, product_id: int, node: Node) -> Outcome[None]:
        """Insert the node or overwrite only its description.

        Type and name of an existing row are never changed. ``parent_path``
        is derived from the path identity.
        """
        params = {
            "product_id": product_id,
            "item_path": node.path,
            "item_type": node.type.value,
            "item_name": node.name,
            "description": node.description,
            "parent_path": parent_of(node.path),
        }

        def _write() -> None:
            self._db.run_write(lambda session: session.execute(_UPSERT_SQL, params))

        outcome = await self._run("upsert", _write)
        if outcome.ok:
            logger.info("description_upserted", product_id=product_id, path=node.path)
        return outcome

    async def children_of(self, product_id: int, parent_path: str | None) -> Outcome[list[FsItem]]:
        """Stored items directly below ``parent_path`` (None for top level)."""

        def _query() -> list[FsItem]:
            with self._db.session() as session:
                condition = (
                    col(FsItem.parent_path).is_(None)
                    if parent_path is None
                    else FsItem.parent_path == parent_path
                )
                statement = (
                    select(FsItem)
                    .where(FsItem.product_id == product_id, condition)
                    .order_by(col(FsItem.item_path))
                )
                return list(session.exec(statement).all())

        return await self._run("children_of", _query)

    def close(self) -> None:
        """Stop the worker thread and release pooled connections."""
        self._executor.shutdown(wait=True)
        self._db.dispose()
