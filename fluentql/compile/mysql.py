"""MySQL / MariaDB dialect."""

from __future__ import annotations

from fluentql.compile.base import Dialect

#: Largest row count MySQL accepts; used when only an offset is given.
MYSQL_MAX_ROWS = 18446744073709551615


class MySQLDialect(Dialect):
    """Renders MySQL-flavoured LIMIT clauses.

    Parameter style: ``%(name)s`` – compatible with ``PyMySQL`` and
    ``mysql-connector-python`` named-parameter execution.  Literal ``%``
    characters (e.g. in ``CONCAT('%', ...)``) are doubled before execution.

    LIMIT uses the ``LIMIT offset, count`` form.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def param_placeholder(self, name: str) -> str:
        return f"%({name})s"

    def escape_literal_percent(self) -> bool:
        return True

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        if limit is None and not offset:
            return ""
        if limit is None:
            return f"LIMIT {offset}, {MYSQL_MAX_ROWS}"
        if offset:
            return f"LIMIT {offset}, {limit}"
        return f"LIMIT {limit}"
