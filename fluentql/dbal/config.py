"""Connection and execution settings for the database layer."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FetchMode = Literal["assoc", "array", "object"]

#: Driver name -> dialect name used when ``dialect`` is not given.
DRIVER_DIALECTS: dict[str, str] = {
    "sqlite": "sqlite",
    "sqlite3": "sqlite",
    "mysql": "mysql",
    "mariadb": "mysql",
    "pymysql": "mysql",
    "postgres": "postgres",
    "postgresql": "postgres",
    "pgsql": "postgres",
    "psycopg": "postgres",
}


class QueryOptions(BaseModel):
    """Per-statement execution behaviour.

    Attributes:
        parameter_reset: Clear the builder's parameter registry after each
            statement.
        query_log: Record each statement, its bindings and timing.
        debug: Append the parameter-interpolated SQL to error messages.
        fetch_mode: Default row shape of returned results.
    """

    model_config = ConfigDict(extra="forbid")

    parameter_reset: bool = True
    query_log: bool = False
    debug: bool = False
    fetch_mode: FetchMode = "assoc"

    def override(self, options: dict[str, Any] | None) -> QueryOptions:
        """Return a validated copy with ``options`` applied."""
        if not options:
            return self
        return QueryOptions.model_validate({**self.model_dump(), **options})


class ConnectionConfig(BaseModel):
    """Settings for one database connection.

    Attributes:
        driver: ``sqlite``, ``mysql`` or ``postgres`` (aliases accepted).
        database: Database name, or file path / ``:memory:`` for SQLite.
        host: Server host.
        port: Server port; the driver default when ``None``.
        user: Login user.
        password: Login password.
        charset: Connection character set (MySQL).
        dialect: Registered dialect name; derived from ``driver`` if unset.
        autocommit: Commit each statement outside explicit transactions.
        options: Default :class:`QueryOptions` for statements.
    """

    model_config = ConfigDict(extra="forbid")

    driver: str = "sqlite"
    database: str = ":memory:"
    host: str = "localhost"
    port: int | None = None
    user: str | None = None
    password: str | None = Field(default=None, repr=False)
    charset: str = "utf8mb4"
    dialect: str | None = None
    autocommit: bool = True
    options: QueryOptions = Field(default_factory=QueryOptions)

    def dialect_name(self) -> str:
        """Return the configured dialect, falling back to the driver's."""
        return self.dialect or DRIVER_DIALECTS.get(self.driver.lower(), self.driver.lower())

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the driver's ``connect`` function."""
        dialect = self.dialect_name()
        if dialect == "sqlite":
            return {"database": self.database}
        kwargs: dict[str, Any] = {
            "host": self.host,
            "user": self.user,
            "password": self.password,
            "autocommit": self.autocommit,
        }
        if self.port is not None:
            kwargs["port"] = self.port
        if dialect == "mysql":
            kwargs["database"] = self.database
            kwargs["charset"] = self.charset
        else:
            kwargs["dbname"] = self.database
        return {key: value for key, value in kwargs.items() if value is not None}
