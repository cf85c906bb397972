"""Test fixtures: sample schema DDL and seed rows."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

_FIXTURES_DIR = Path(__file__).parent

AUTHORS = [
    {"name": "Alice", "email": "alice@example.com", "tags": "python,sql"},
    {"name": "Bob", "email": "bob@example.com", "tags": "go"},
    {"name": "Robert", "email": "robert@example.com", "tags": None},
]

POSTS = [
    {"author_id": 1, "title": "Intro to SQL", "content": "SELECT basics", "type_id": 1, "status": 1, "views": 10},
    {"author_id": 1, "title": "Advanced SQL", "content": "Window functions", "type_id": 2, "status": 1, "views": 50},
    {"author_id": 2, "title": "Go routines", "content": None, "type_id": 1, "status": 0, "views": 5},
    {"author_id": 3, "title": "Draft", "content": "todo", "type_id": 3, "status": 0, "views": 0},
]


def load_ddl(target: Literal["sqlite", "postgres"] = "sqlite") -> str:
    """Return the sample DDL SQL string for the given backend.

    Args:
        target: ``'sqlite'`` (default) or ``'postgres'``.

    Returns:
        DDL string ready to execute against the target backend.
    """
    filename = f"ddl_{target}.sql"
    return (_FIXTURES_DIR / filename).read_text()
