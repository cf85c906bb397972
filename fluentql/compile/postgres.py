"""PostgreSQL dialect."""

from __future__ import annotations

from fluentql.compile.base import Dialect


class PostgresDialect(Dialect):
    """Renders PostgreSQL-flavoured LIMIT clauses.

    Parameter style: ``%(name)s`` – compatible with ``psycopg`` named
    parameters.  Literal ``%`` characters are doubled before execution.

    MySQL-only predicates (``FIND_IN_SET``, ``REGEXP``, ``SOUNDEX``) are
    rendered as written; the server reports them if unsupported.
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def param_placeholder(self, name: str) -> str:
        return f"%({name})s"

    def escape_literal_percent(self) -> bool:
        return True

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
