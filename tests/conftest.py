"""Shared pytest fixtures for fluentQL unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from fluentql import ConnectionConfig, Database, QueryBuilder
from tests.fixtures import AUTHORS, POSTS, load_ddl


@pytest.fixture()
def qb() -> QueryBuilder:
    """A fresh MySQL-dialect builder."""
    return QueryBuilder()


@pytest.fixture()
def db() -> Iterator[Database]:
    """A Database over a seeded in-memory SQLite schema."""
    database = Database(ConnectionConfig(driver="sqlite", database=":memory:"))
    database.connection.get_connection().executescript(load_ddl("sqlite"))
    database.create_batch("author", AUTHORS)
    database.create_batch("post", POSTS)
    yield database
    database.close()
