"""SQLite dialect."""

from __future__ import annotations

from fluentql.compile.base import Dialect


class SQLiteDialect(Dialect):
    """Renders SQLite-flavoured LIMIT clauses.

    Parameter style: ``:name`` – the builder's own style, which the standard
    library ``sqlite3`` driver binds natively from a dict.

    An offset without a limit is written ``LIMIT -1 OFFSET n``; SQLite does
    not accept a bare OFFSET.
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    def param_placeholder(self, name: str) -> str:
        return f":{name}"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        if limit is None and not offset:
            return ""
        sql = f"LIMIT {limit if limit is not None else -1}"
        if offset:
            sql += f" OFFSET {offset}"
        return sql
