"""SQLModel definitions for the description store.

Single source of truth for the persisted schema:

- ``products``: one row per repository namespace.
- ``fs_items``: one row per annotated path identity within a product.
  ``parent_path`` links a row to its enclosing folder, file or symbol so the
  tree can be queried hierarchically, although lookups are by exact path.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Product(SQLModel, table=True):
    """Repository-scoped namespace for descriptions."""

    __tablename__ = "products"

    product_id: int | None = Field(default=None, primary_key=True)
    product_name: str = Field(unique=True, index=True, nullable=False)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )


class FsItem(SQLModel, table=True):
    """Description attached to a folder, file or symbol path."""

    __tablename__ = "fs_items"
    __table_args__ = (
        UniqueConstraint("product_id", "item_path", name="uq_fs_items_product_path"),
        Index("ix_fs_items_product_parent", "product_id", "parent_path"),
    )

    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("products.product_id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    item_path: str = Field(nullable=False)
    item_type: str = Field(nullable=False)
    item_name: str = Field(nullable=False)
    description: str | None = None
    parent_path: str | None = None
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )
