"""fluentQL database layer: execute built statements over DB-API drivers."""
from fluentql.dbal.config import ConnectionConfig, QueryOptions
from fluentql.dbal.connection import Connection
from fluentql.dbal.database import Database
from fluentql.dbal.result import Result

__all__ = [
    "Connection",
    "ConnectionConfig",
    "Database",
    "QueryOptions",
    "Result",
]
