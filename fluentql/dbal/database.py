"""Query builder bound to a live connection.

``Database`` *is* a :class:`~fluentql.compile.builder.QueryBuilder`: the
fluent surface is inherited, not forwarded, so every method is statically
visible.  On top it executes statement text through the connection's
dialect, wraps cursors in :class:`~fluentql.dbal.result.Result`, keeps an
optional query log and runs callbacks inside transactions.

Example::

    db = Database({"driver": "sqlite", "database": "app.db"})
    db.create("post", {"title": "Hello", "status": True})
    rows = db.select("id", "title").from_("post").where("status", True).get().rows()
"""
from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from fluentql.compile.base import NAMED_PLACEHOLDER_RE
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.parameters import normalize_key
from fluentql.dbal.config import ConnectionConfig, QueryOptions
from fluentql.dbal.connection import Connection, Connector
from fluentql.dbal.crud import CRUDMixin
from fluentql.dbal.result import Result
from fluentql.errors import SQLQueryExecuteError
from fluentql.logging_config import get_logger
from fluentql.schema.raw import Raw

logger = get_logger(__name__)


def interpolate(sql: str, parameters: Mapping[str, Any]) -> str:
    """Return ``sql`` with placeholders replaced by literal values.

    For diagnostics only; the result is never executed.
    """
    values = {key.lstrip(":"): value for key, value in parameters.items()}

    def _literal(match: Any) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        value = values[name]
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (int, float)):
            return str(value)
        escaped = str(value).replace("'", "''")
        return f"'{escaped}'"

    return NAMED_PLACEHOLDER_RE.sub(_literal, sql)


class Database(CRUDMixin, QueryBuilder):
    """A query builder that can execute what it builds.

    Args:
        connection: A :class:`Connection`, or settings to open one with.
        allowed_fields: Column whitelist for ``set`` (see QueryBuilder).
        connector: Driver connect callable when ``connection`` is settings.
    """

    def __init__(
        self,
        connection: Connection | ConnectionConfig | Mapping[str, Any] | None = None,
        allowed_fields: Iterable[str] | None = None,
        connector: Connector | None = None,
    ) -> None:
        if not isinstance(connection, Connection):
            connection = Connection(connection, connector)
        self._connection = connection
        super().__init__(connection.dialect, allowed_fields)
        self._options: QueryOptions = connection.config.options.model_copy()
        self._query_logs: list[dict[str, Any]] = []
        self._errors: list[str] = []
        self._last_result: Result | None = None

    @property
    def connection(self) -> Connection:
        return self._connection

    def builder(self) -> QueryBuilder:
        """Return a fresh, unbound builder with this database's dialect."""
        return self.new_builder()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def query(
        self,
        sql: str | Raw,
        arguments: Mapping[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Result:
        """Execute ``sql`` with the registry's bindings plus ``arguments``.

        Args:
            sql: Statement text with ``:name`` placeholders.
            arguments: Extra bindings; keys with or without the colon.
            options: Per-call :class:`QueryOptions` overrides, e.g.
                ``{"parameter_reset": False}``.

        Returns:
            The :class:`Result` of the statement.

        Raises:
            SQLQueryExecuteError: If the driver rejects the statement.
        """
        bindings = self._params.all()
        for key, value in (arguments or {}).items():
            bindings[normalize_key(key)] = value
        return self._execute(str(sql), bindings, self._options.override(options))

    def _execute(self, sql: str, bindings: dict[str, Any], options: QueryOptions) -> Result:
        compiled = self._dialect.prepare(sql, bindings)
        started = time.perf_counter()
        try:
            cursor = self._connection.get_connection().cursor()
            cursor.execute(compiled.sql, compiled.params)
        except Exception as exc:
            interpolated = interpolate(sql, bindings)
            self._errors.append(str(exc))
            logger.error("Query failed: %s | SQL: %s", exc, interpolated)
            if options.parameter_reset:
                self._params.reset()
            message = str(exc)
            if options.debug:
                message += f" SQL : {interpolated}"
            raise SQLQueryExecuteError(message, sql=sql, parameters=bindings) from exc
        elapsed = time.perf_counter() - started

        if options.parameter_reset:
            self._params.reset()
        if options.query_log:
            self._query_logs.append(
                {"query": sql, "time": round(elapsed, 5), "args": dict(bindings)}
            )
        logger.debug("Executed in %.5fs: %s", elapsed, sql)
        self._last_result = Result(cursor, sql, fetch_mode=options.fetch_mode)
        return self._last_result

    def get(
        self,
        table: str | None = None,
        selection: Iterable[str | Raw] | None = None,
        conditions: Mapping[str, Any] | Iterable[str | Raw] | None = None,
    ) -> Result:
        """Execute the recorded SELECT and reset the structure."""
        try:
            if table:
                self.add_from(table)
            return self.query(self.generate_select_query(selection, conditions))
        finally:
            self.reset_structure()

    def count(self) -> int:
        """Count rows matched by the recorded query without consuming it.

        The select list, ordering and paging are replaced by
        ``COUNT(*) AS row_count``; the recorded structure and the parameter
        registry are left untouched for a following ``get()``.
        """
        counter = self.clone()
        counter.reset_structure(["select", "order_by", "limit", "offset"], is_ignore_list=False)
        counter.select_count("*", "row_count")
        options = self._options.override({"parameter_reset": False})
        result = self._execute(counter.generate_select_query(), self._params.all(), options)
        first = result.as_assoc().row()
        return int(first["row_count"]) if first else 0

    def insert_id(self) -> int:
        """Return the id generated by the last INSERT, or 0."""
        if self._last_result is None or self._last_result.last_insert_id is None:
            return 0
        return int(self._last_result.last_insert_id)

    # ------------------------------------------------------------------
    # Query log and errors
    # ------------------------------------------------------------------

    def enable_query_log(self) -> Database:
        self._options = self._options.override({"query_log": True})
        return self

    def disable_query_log(self) -> Database:
        self._options = self._options.override({"query_log": False})
        return self

    def get_query_logs(self) -> list[dict[str, Any]]:
        return list(self._query_logs)

    def get_errors(self) -> list[str]:
        return list(self._errors)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transaction(
        self,
        fn: Callable[[Database], Any],
        attempt: int = 1,
        test_mode: bool = False,
    ) -> bool:
        """Run ``fn(self)`` inside a transaction.

        Any exception raised by ``fn`` rolls the transaction back; the
        callback is retried up to ``attempt`` times.  With ``test_mode`` the
        transaction is rolled back even on success.

        Returns:
            True if an attempt completed, False if every attempt failed
            (failures are logged and listed by :meth:`get_errors`).
        """
        attempts = max(attempt, 1)
        for number in range(1, attempts + 1):
            try:
                self._connection.begin_transaction()
                fn(self)
                if test_mode:
                    self._connection.rollback()
                else:
                    self._connection.commit()
                return True
            except Exception as exc:
                self._connection.rollback()
                self.reset_structure()
                self._params.reset()
                self._errors.append(str(exc))
                logger.warning(
                    "Transaction rolled back (attempt %d of %d): %s", number, attempts, exc
                )
        return False

    def close(self) -> None:
        self._connection.close()
