"""DB-API 2.0 connection wrapper.

``Connection`` opens its driver connection lazily, on first use, and exposes
explicit transaction control.  SQLite is served by the standard library
``sqlite3`` module; MySQL and PostgreSQL use PyMySQL and psycopg when they
are installed, and any other driver can be plugged in by passing a
``connector`` callable.
"""
from __future__ import annotations

import importlib
import sqlite3
from collections.abc import Callable, Mapping
from typing import Any

from fluentql.compile.base import Dialect
from fluentql.compile.registry import DialectFactory
from fluentql.dbal.config import ConnectionConfig
from fluentql.errors import DatabaseConnectionError
from fluentql.logging_config import get_logger

logger = get_logger(__name__)

#: Dialect name -> (module, connect attribute) of the default driver.
DEFAULT_DRIVERS: dict[str, tuple[str, str]] = {
    "mysql": ("pymysql", "connect"),
    "postgres": ("psycopg", "connect"),
}

Connector = Callable[..., Any]


def _sqlite_connect(database: str, autocommit: bool = True) -> sqlite3.Connection:
    # Autocommit mode; transactions are opened explicitly with BEGIN.
    return sqlite3.connect(database, isolation_level=None if autocommit else "")


class Connection:
    """A lazily opened DB-API connection plus transaction helpers.

    Args:
        config: Connection settings, as a model or a plain mapping.
        connector: Callable returning a DB-API connection; receives
            :meth:`ConnectionConfig.connect_kwargs`.  Overrides the default
            driver for the configured dialect.

    Example::

        with Connection({"driver": "sqlite", "database": ":memory:"}) as conn:
            conn.get_connection().execute("SELECT 1")
    """

    def __init__(
        self,
        config: ConnectionConfig | Mapping[str, Any] | None = None,
        connector: Connector | None = None,
    ) -> None:
        if config is None:
            config = ConnectionConfig()
        elif not isinstance(config, ConnectionConfig):
            config = ConnectionConfig.model_validate(dict(config))
        self.config = config
        self._connector = connector
        self._dialect = DialectFactory.create(config.dialect_name())
        self._connection: Any = None
        self._in_transaction = False

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def get_connection(self) -> Any:
        """Return the driver connection, opening it on first call.

        Raises:
            DatabaseConnectionError: If the driver is missing or refuses the
                connection.
        """
        if self._connection is None:
            self._connection = self._open()
        return self._connection

    def _open(self) -> Any:
        connector = self._connector or self._default_connector()
        kwargs = self.config.connect_kwargs()
        if connector is _sqlite_connect:
            kwargs["autocommit"] = self.config.autocommit
        try:
            connection = connector(**kwargs)
        except Exception as exc:
            raise DatabaseConnectionError(
                f"Could not connect to {self.config.driver} database "
                f"'{self.config.database}': {exc}",
                driver=self.config.driver,
            ) from exc
        logger.debug(
            "Opened %s connection to %s", self._dialect.dialect_name, self.config.database
        )
        return connection

    def _default_connector(self) -> Connector:
        dialect = self._dialect.dialect_name
        if dialect == "sqlite":
            return _sqlite_connect
        if dialect not in DEFAULT_DRIVERS:
            raise DatabaseConnectionError(
                f"No default driver for dialect '{dialect}'; pass a connector.",
                driver=self.config.driver,
            )
        module_name, attribute = DEFAULT_DRIVERS[dialect]
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise DatabaseConnectionError(
                f"Driver package '{module_name}' is required for {dialect} connections.",
                driver=self.config.driver,
            ) from exc
        return getattr(module, attribute)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._in_transaction = False
            logger.debug("Closed %s connection", self._dialect.dialect_name)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self) -> None:
        keyword = "START TRANSACTION" if self._dialect.dialect_name == "mysql" else "BEGIN"
        self._run(keyword)
        self._in_transaction = True

    def commit(self) -> None:
        if self._in_transaction:
            self._run("COMMIT")
            self._in_transaction = False
        elif self._connection is not None:
            self._connection.commit()

    def rollback(self) -> None:
        if self._in_transaction:
            self._in_transaction = False
            self._run("ROLLBACK")
        elif self._connection is not None:
            self._connection.rollback()

    def _run(self, statement: str) -> None:
        cursor = self.get_connection().cursor()
        try:
            cursor.execute(statement)
        finally:
            cursor.close()
