"""Fixtures for store tests: temporary SQLite databases."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from wit.store.database import Database
from wit.store.descriptions import DescriptionStore


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    database = Database(f"sqlite:///{tmp_path / 'wit.db'}")
    database.prepare()
    yield database
    database.dispose()


@pytest.fixture
def store(db: Database) -> Generator[DescriptionStore, None, None]:
    description_store = DescriptionStore(db)
    yield description_store
    description_store.close()
