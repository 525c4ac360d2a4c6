"""Description store: schema, engine and persistence gateway."""

from wit.store.database import Database, sanitize_schema_name
from wit.store.descriptions import DescriptionStore
from wit.store.models import FsItem, Product

__all__ = [
    "Database",
    "DescriptionStore",
    "FsItem",
    "Product",
    "sanitize_schema_name",
]
